import logging

from ...application.ports.storage_repo import StorageBackend
from ...core.config import Settings
from .local_storage import LocalStorageBackend
from .s3_storage import S3StorageBackend, create_s3_client

logger = logging.getLogger(__name__)


def build_storage_backend(settings: Settings) -> StorageBackend:
    """Pick the backend once from configuration; it is fixed for the process lifetime."""
    if settings.has_remote_credentials:
        logger.info(f"Using AWS S3 storage (bucket {settings.S3_BUCKET_NAME})")
        client = create_s3_client(
            settings.AWS_ACCESS_KEY,
            settings.AWS_SECRET_KEY,
            settings.AWS_REGION,
            settings.S3_ENDPOINT_URL,
        )
        return S3StorageBackend(settings.S3_BUCKET_NAME, client, url_expiry=settings.PRESIGNED_URL_EXPIRY)

    logger.info(f"Using local file storage under {settings.UPLOAD_DIR}")
    return LocalStorageBackend(settings.UPLOAD_DIR, base_url=settings.UPLOAD_URL_PATH)


__all__ = [
    "StorageBackend",
    "LocalStorageBackend",
    "S3StorageBackend",
    "build_storage_backend",
    "create_s3_client",
]
