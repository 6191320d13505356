# picbed/core/config.py
import os
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict
from typing import Optional, List
from functools import lru_cache

PLACEHOLDER_SECRET = "change-me-in-prod"
PLACEHOLDER_AWS_KEYS = ("test-access-key", "test-secret-key")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Application Settings
    APP_NAME: str = "PicBed API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 8080))

    # Database Settings
    DATABASE_URL: str = "sqlite:///./picbed.db"

    API_PREFIX: str = "/api"

    # Security Settings (token signing and password hashing use separate secrets)
    TOKEN_SECRET: str = PLACEHOLDER_SECRET
    PASSWORD_PEPPER: str = PLACEHOLDER_SECRET
    TOKEN_LIFETIME_DAYS: int = 7
    PASSWORD_HASH_ROUNDS: int = 12  # bcrypt cost

    # CORS Settings
    ALLOWED_ORIGINS: str = "*"
    ALLOWED_METHODS: str = "GET,POST,PUT,DELETE,OPTIONS"
    ALLOWED_HEADERS: str = "*"

    # Image Settings
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10MB
    REQUEST_SIZE_SLACK: int = 1024 * 1024  # multipart overhead
    ALLOWED_EXTENSIONS: str = "jpg,jpeg,png,gif,webp"
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PATH: str = "/uploads"
    THUMBNAIL_PREFIX: str = "thumb_"
    THUMBNAIL_SIZE: int = 200

    # Object storage; S3 is used only when real credentials are present
    AWS_ACCESS_KEY: Optional[str] = None
    AWS_SECRET_KEY: Optional[str] = None
    AWS_REGION: str = "us-east-1"
    S3_BUCKET_NAME: str = "local-storage"
    S3_ENDPOINT_URL: Optional[str] = None
    PRESIGNED_URL_EXPIRY: int = 3600

    # Accounts and quota
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: Optional[str] = None
    ADMIN_EMAIL: Optional[str] = "admin@picbed.com"
    USER_UPLOAD_LIMIT: int = 1
    SUPPORT_CONTACT: str = "the site administrator"
    USER_DELETE_POLICY: str = "retain"  # retain | cascade

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Helper methods for list envs
    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

    @property
    def allowed_methods_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_METHODS)

    @property
    def allowed_headers_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_HEADERS)

    @property
    def allowed_extensions_list(self) -> List[str]:
        """Lower-case extensions without the leading dot."""
        return [ext.lower().lstrip(".") for ext in self._split_csv(self.ALLOWED_EXTENSIONS) if ext]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def secrets_configured(self) -> bool:
        return (
            bool(self.TOKEN_SECRET)
            and bool(self.PASSWORD_PEPPER)
            and PLACEHOLDER_SECRET not in (self.TOKEN_SECRET, self.PASSWORD_PEPPER)
            and self.TOKEN_SECRET != self.PASSWORD_PEPPER
        )

    @property
    def has_remote_credentials(self) -> bool:
        for value in (self.AWS_ACCESS_KEY, self.AWS_SECRET_KEY):
            if not value or value in PLACEHOLDER_AWS_KEYS:
                return False
        return True

    def check_production_secrets(self) -> None:
        """Refuse to start a production process on placeholder or shared secrets."""
        if self.is_production and not self.secrets_configured:
            raise ValueError(
                "TOKEN_SECRET and PASSWORD_PEPPER must be set to distinct, non-default values in production"
            )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings: Settings = get_settings()
