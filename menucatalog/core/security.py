import hashlib
import hmac
import logging
import secrets
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from menucatalog.core.config import Settings
from menucatalog.models.user import UserRole

logger = logging.getLogger(__name__)

PBKDF2_ALGORITHM = "pbkdf2_sha256"
PBKDF2_ITERATIONS = 260000


def hash_password(password: str, salt: Optional[str] = None, iterations: int = PBKDF2_ITERATIONS) -> str:
    """
    Hash a password with PBKDF2-SHA256.

    Returns a string of the form ``pbkdf2_sha256$<iterations>$<salt>$<hash>``
    that can be stored in ADMIN_PASSWORD_HASH.
    """
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
    return f"{PBKDF2_ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    """Check a password against a hash produced by hash_password."""
    try:
        algorithm, iterations, salt, expected = encoded.split("$", 3)
        iterations = int(iterations)
    except ValueError:
        logger.error("Malformed password hash")
        return False

    if algorithm != PBKDF2_ALGORITHM:
        logger.error(f"Unsupported password hash algorithm: {algorithm}")
        return False

    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
    return hmac.compare_digest(digest.hex(), expected)


class Authenticator(ABC):
    """Interface for issuing and checking administrator session tokens."""

    @abstractmethod
    def authenticate(self, username: str, password: str) -> Optional[str]:
        """Return a session token for valid credentials, None otherwise."""
        pass

    @abstractmethod
    def validate(self, token: str) -> Optional[str]:
        """Return the role claim of a valid token, None otherwise."""
        pass

    @property
    @abstractmethod
    def token_lifetime(self) -> timedelta:
        pass


class StaticCredentialAuthenticator(Authenticator):
    """
    Authenticator backed by a single configured administrator identity.

    Tokens are HMAC-signed JWTs carrying the role claim and an expiry, so
    nothing about a session is kept on the server.
    """

    def __init__(
        self,
        username: str,
        password_hash: str,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
        role: UserRole = UserRole.ADMIN,
    ):
        self.username = username
        self.password_hash = password_hash
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self.role = role

    @classmethod
    def from_settings(cls, settings: Settings) -> "StaticCredentialAuthenticator":
        password_hash = settings.ADMIN_PASSWORD_HASH or hash_password(settings.ADMIN_PASSWORD)
        return cls(
            username=settings.ADMIN_USERNAME,
            password_hash=password_hash,
            secret_key=settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
            expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        )

    @property
    def token_lifetime(self) -> timedelta:
        return timedelta(minutes=self.expire_minutes)

    def authenticate(self, username: str, password: str) -> Optional[str]:
        # Both checks always run so a wrong username costs the same as a wrong password
        username_ok = hmac.compare_digest(
            hashlib.sha256(username.encode()).digest(),
            hashlib.sha256(self.username.encode()).digest(),
        )
        password_ok = verify_password(password, self.password_hash)
        if not (username_ok and password_ok):
            return None
        return self.issue_token(self.username)

    def issue_token(self, subject: str, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        claims: Dict[str, Any] = {
            "sub": subject,
            "role": self.role.value,
            "iat": now,
            "exp": now + self.token_lifetime,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def validate(self, token: str) -> Optional[str]:
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired session token")
            return None
        except jwt.InvalidTokenError as e:
            logger.info(f"Rejected invalid session token: {str(e)}")
            return None

        role = claims.get("role")
        if not isinstance(role, str):
            return None
        return role
