import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware

from menucatalog.api.api import api_router
from menucatalog.core.config import Settings, settings as default_settings
from menucatalog.core.exceptions import CatalogError, StoreError, ValidationError
from menucatalog.core.security import Authenticator, StaticCredentialAuthenticator
from menucatalog.database.session import Database

# Configure logging
logging.basicConfig(
    level=default_settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)


async def catalog_error_handler(request: Request, exc: CatalogError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.kind}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.kind}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Render FastAPI's parsing errors in the catalog's error shape, naming the first field."""
    errors = exc.errors()
    field = "body"
    message = "Invalid request"
    if errors:
        loc = [str(part) for part in errors[0].get("loc", ()) if part not in ("body", "query", "path")]
        if loc:
            field = loc[-1]
        if errors[0].get("type") == "missing":
            message = f"{field} is required"
        else:
            message = f"{field}: {errors[0].get('msg', 'invalid value')}"
    return await catalog_error_handler(request, ValidationError(field, message))


async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Store failure on {request.method} {request.url.path}: {str(exc)}")
    return await catalog_error_handler(request, StoreError())


def create_app(
    app_settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    authenticator: Optional[Authenticator] = None,
) -> FastAPI:
    """Build the application with its store handle and authenticator."""
    app_settings = app_settings or default_settings
    database = database or Database(app_settings.DATABASE_URL, echo=app_settings.DEBUG)
    authenticator = authenticator or StaticCredentialAuthenticator.from_settings(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.db.create_all()
        logger.info(f"{app_settings.PROJECT_NAME} started ({app_settings.ENVIRONMENT})")
        yield
        app.state.db.dispose()

    # Create FastAPI app
    app = FastAPI(
        title=app_settings.PROJECT_NAME,
        description="Digital menu catalog with a public storefront API and admin-only writes",
        version="1.0.0",
        openapi_url=f"{app_settings.API_PREFIX}/openapi.json",
        docs_url="/docs",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.db = database
    app.state.authenticator = authenticator

    # Set up CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Signed cookie session carrying the admin token
    app.add_middleware(
        SessionMiddleware,
        secret_key=app_settings.SECRET_KEY,
        max_age=app_settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )

    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)

    # Include API router
    app.include_router(api_router, prefix=app_settings.API_PREFIX)

    @app.get("/")
    async def root():
        """Root endpoint that returns a welcome message and API status."""
        return {
            "message": f"Welcome to {app_settings.PROJECT_NAME} API",
            "status": "running",
            "version": "1.0.0",
            "docs_url": "/docs"
        }

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint for monitoring and load balancers."""
        return {
            "status": "healthy",
            "api": "running",
            "database": "connected" if request.app.state.db.ping() else "unavailable"
        }

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("menucatalog.main:app", host="0.0.0.0", port=8000)
