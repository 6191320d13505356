import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..ports.audit_logger import AuditLogger
from ..ports.user_repo import UserRepository, UserDto
from ...exceptions import AuthError, ValidationError
from ...infrastructure.security.password_hasher import PasswordHasher
from ...infrastructure.security.token_codec import TokenCodec

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


@dataclass
class LoginResult:
    token: str
    user: UserDto
    expires_at: datetime


@dataclass
class AuthService:
    user_repo: UserRepository
    password_hasher: PasswordHasher
    token_codec: TokenCodec
    audit_logger: Optional[AuditLogger] = None

    def _audit(self, action: str, username: str, user_id: Optional[int] = None, success: bool = True, **details) -> None:
        if self.audit_logger is not None:
            self.audit_logger.log(action, username, user_id=user_id, success=success, details=details)

    def _issue(self, user: UserDto) -> LoginResult:
        token = self.token_codec.mint(user)
        claims = self.token_codec.decode(token)
        return LoginResult(token=token, user=user, expires_at=claims.expires_at)

    def login(self, username: str, password: str) -> LoginResult:
        user = self.user_repo.get_by_username(username)
        if user is None or not user.is_active:
            # Same hashing work as the wrong-password path
            self.password_hasher.verify(password, self.password_hasher.dummy_hash)
            self._audit("login", username, success=False)
            raise AuthError(INVALID_CREDENTIALS)

        if not self.password_hasher.verify(password, user.password_hash):
            self._audit("login", username, user_id=user.id, success=False)
            raise AuthError(INVALID_CREDENTIALS)

        self.user_repo.touch_last_login(user.id)
        self._audit("login", username, user_id=user.id)
        return self._issue(user)

    def register(self, username: str, password: str, email: Optional[str] = None) -> LoginResult:
        if not username or not password:
            raise ValidationError("Username and password are required")
        if self.user_repo.get_by_username(username) is not None:
            raise ValidationError("Username already exists")
        if email and self.user_repo.get_by_email(email) is not None:
            raise ValidationError("Email already exists")

        user = self.user_repo.create(username, self.password_hasher.hash(password), email)
        self._audit("register", username, user_id=user.id)
        return self._issue(user)

    def get_user_by_token(self, token: str) -> Optional[UserDto]:
        user_id = self.token_codec.verify(token)
        if user_id is None:
            return None
        user = self.user_repo.get_by_id(user_id)
        if user is None or not user.is_active:
            return None
        return user

    def validate_token(self, token: str) -> bool:
        return self.get_user_by_token(token) is not None

    def ensure_admin_user(self, username: str, password: Optional[str], email: Optional[str] = None) -> Optional[UserDto]:
        """Seed the admin account into an empty user table."""
        if self.user_repo.count() > 0:
            return None
        if not password:
            logger.warning("No users exist and ADMIN_PASSWORD is not set; skipping admin seeding")
            return None
        user = self.user_repo.create(username, self.password_hasher.hash(password), email)
        logger.info(f"Seeded admin user {username}")
        return user
