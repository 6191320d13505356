import os
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
from starlette.staticfiles import StaticFiles

# Load environment variables as early as possible
load_dotenv()

from .core.config import settings
from .database import create_db_and_tables, engine
from .exceptions import PicBedError, http_exception_handler, picbed_exception_handler
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from .middleware import ErrorHandlingMiddleware, LoggingMiddleware, RequestSizeLimitMiddleware, SecurityMiddleware
from .routers import auth_router, images_router, users_router
from .routers.dependencies import (
    get_audit_logger,
    get_password_hasher,
    get_storage_backend,
    get_token_codec,
)
from .application.services.auth_service import AuthService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


def seed_admin_user() -> None:
    with Session(engine) as session:
        auth_service = AuthService(
            user_repo=SqlUserRepository(session),
            password_hasher=get_password_hasher(),
            token_codec=get_token_codec(),
            audit_logger=get_audit_logger(),
        )
        auth_service.ensure_admin_user(settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD, settings.ADMIN_EMAIL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME}...")
    settings.check_production_secrets()
    if not settings.secrets_configured:
        logger.warning("TOKEN_SECRET/PASSWORD_PEPPER are unset or shared; do not run this configuration in production")

    storage = get_storage_backend()
    app.state.storage_backend = storage.name

    try:
        create_db_and_tables()
        seed_admin_user()
        logger.info("Database initialized successfully")
    except Exception:
        logger.exception("Error initializing database")
        raise
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")


# Initialize FastAPI
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    docs_url=("/docs" if settings.DOCS_ENABLED else None),
    redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
    openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None)
)

# Add custom exception handlers
app.add_exception_handler(PicBedError, picbed_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)

# Add middleware
app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_methods=settings.allowed_methods_list,
    allow_headers=settings.allowed_headers_list,
)

# Local backend blobs are served from here; url_for points at this mount
app.mount(settings.UPLOAD_URL_PATH, StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")

app.include_router(auth_router.router, prefix=settings.API_PREFIX)
app.include_router(images_router.router, prefix=settings.API_PREFIX)
app.include_router(users_router.router, prefix=settings.API_PREFIX)


# Health check endpoint
@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENVIRONMENT,
        "storage_backend": get_storage_backend().name,
        "auth": {
            "secrets_configured": settings.secrets_configured,
            "token_lifetime_days": settings.TOKEN_LIFETIME_DAYS,
        },
    }


# ------------------------
# Run with correct PORT in local/production
# ------------------------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "picbed.main:app",
        host=settings.HOST,
        port=int(os.environ.get("PORT", settings.PORT)),
        workers=1,
        log_level=settings.LOG_LEVEL.lower()
    )
