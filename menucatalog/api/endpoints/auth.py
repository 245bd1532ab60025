import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Request

from menucatalog.core.exceptions import UnauthorizedError
from menucatalog.core.security import Authenticator
from menucatalog.models.user import UserRole
from menucatalog.schemas.auth import LoginRequest, Token, SessionStatus

logger = logging.getLogger(__name__)

router = APIRouter()

SESSION_TOKEN_KEY = "access_token"


def get_authenticator(request: Request) -> Authenticator:
    """Return the authenticator configured on the application."""
    return request.app.state.authenticator


def _extract_token(request: Request) -> Optional[str]:
    # A bearer header wins over the cookie session
    authorization = request.headers.get("Authorization")
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
        return None
    return request.session.get(SESSION_TOKEN_KEY)


def get_current_role(
    request: Request,
    authenticator: Authenticator = Depends(get_authenticator),
) -> Optional[str]:
    """Role of the caller's session, or None for anonymous callers."""
    token = _extract_token(request)
    if not token:
        return None
    return authenticator.validate(token)


def check_user_role(allowed_roles: List[UserRole]):
    """Dependency factory that rejects callers without one of the allowed roles."""
    allowed = {role.value for role in allowed_roles}

    def role_checker(role: Optional[str] = Depends(get_current_role)) -> str:
        if role is None or role not in allowed:
            raise UnauthorizedError()
        return role

    return role_checker


@router.post("/login", response_model=Token)
def login(
    credentials: LoginRequest,
    request: Request,
    authenticator: Authenticator = Depends(get_authenticator),
):
    """Exchange administrator credentials for a session token."""
    token = authenticator.authenticate(credentials.username, credentials.password)
    if token is None:
        logger.warning("Failed sign-in attempt")
        raise UnauthorizedError("Invalid credentials")

    role = authenticator.validate(token)
    request.session[SESSION_TOKEN_KEY] = token
    logger.info("Administrator signed in")

    return Token(
        access_token=token,
        role=role,
        expires_in=int(authenticator.token_lifetime.total_seconds()),
    )


@router.post("/logout")
async def logout(request: Request):
    """Drop the cookie session. Bearer tokens simply expire."""
    request.session.clear()
    return {"message": "Signed out"}


@router.get("/session", response_model=SessionStatus)
async def get_session(role: Optional[str] = Depends(get_current_role)):
    """Report whether the caller holds a valid session."""
    return SessionStatus(authenticated=role is not None, role=role)
