import logging
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from ..application.ports.storage_repo import StorageBackend
from ..application.ports.user_repo import UserDto
from ..application.services.auth_service import AuthService
from ..application.services.image_service import ImageService, UploadPolicy
from ..application.services.user_service import UserService
from ..core.config import settings
from ..database import get_session
from ..exceptions import AuthError
from ..infrastructure.audit.std_logger import StdAuditLogger
from ..infrastructure.imaging.thumbnail_generator import ThumbnailGenerator
from ..infrastructure.persistence.sqlalchemy.repositories.image_repository_sql import SqlImageRepository
from ..infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from ..infrastructure.security.password_hasher import PasswordHasher
from ..infrastructure.security.token_codec import TokenCodec
from ..infrastructure.storage import build_storage_backend

logger = logging.getLogger(__name__)

# Auth scheme
oauth2_scheme = HTTPBearer(auto_error=False)

_storage_instance: Optional[StorageBackend] = None


def get_storage_backend() -> StorageBackend:
    global _storage_instance
    if _storage_instance is None:
        _storage_instance = build_storage_backend(settings)
    return _storage_instance


@lru_cache()
def get_thumbnail_generator() -> ThumbnailGenerator:
    return ThumbnailGenerator(size=settings.THUMBNAIL_SIZE)


@lru_cache()
def get_token_codec() -> TokenCodec:
    return TokenCodec(settings.TOKEN_SECRET, lifetime=timedelta(days=settings.TOKEN_LIFETIME_DAYS))


@lru_cache()
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(settings.PASSWORD_PEPPER, rounds=settings.PASSWORD_HASH_ROUNDS)


@lru_cache()
def get_audit_logger() -> StdAuditLogger:
    return StdAuditLogger()


def get_upload_policy() -> UploadPolicy:
    return UploadPolicy(
        max_file_size=settings.MAX_FILE_SIZE,
        allowed_extensions=settings.allowed_extensions_list,
        admin_username=settings.ADMIN_USERNAME,
        per_user_limit=settings.USER_UPLOAD_LIMIT,
        support_contact=settings.SUPPORT_CONTACT,
        thumbnail_prefix=settings.THUMBNAIL_PREFIX,
    )


def get_image_service(
    session: Session = Depends(get_session),
    storage: StorageBackend = Depends(get_storage_backend),
    thumbnails: ThumbnailGenerator = Depends(get_thumbnail_generator),
    policy: UploadPolicy = Depends(get_upload_policy),
) -> ImageService:
    return ImageService(
        image_repo=SqlImageRepository(session),
        storage=storage,
        thumbnails=thumbnails,
        policy=policy,
    )


def get_auth_service(
    session: Session = Depends(get_session),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
    token_codec: TokenCodec = Depends(get_token_codec),
    audit_logger: StdAuditLogger = Depends(get_audit_logger),
) -> AuthService:
    return AuthService(
        user_repo=SqlUserRepository(session),
        password_hasher=password_hasher,
        token_codec=token_codec,
        audit_logger=audit_logger,
    )


def get_user_service(
    session: Session = Depends(get_session),
    image_service: ImageService = Depends(get_image_service),
    audit_logger: StdAuditLogger = Depends(get_audit_logger),
) -> UserService:
    return UserService(
        user_repo=SqlUserRepository(session),
        image_service=image_service,
        delete_policy=settings.USER_DELETE_POLICY,
        audit_logger=audit_logger,
    )


# Dependency to resolve the current user from the bearer token
def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(oauth2_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserDto:
    if not credentials or not credentials.credentials:
        raise AuthError("Authentication required")
    user = auth_service.get_user_by_token(credentials.credentials)
    if user is None:
        logger.warning("Bearer token rejected")
        raise AuthError()
    return user
