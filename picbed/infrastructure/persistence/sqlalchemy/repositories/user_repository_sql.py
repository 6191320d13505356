from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import func
from sqlmodel import Session, select

from .....db.models import User
from .....application.ports.user_repo import UserRepository, UserDto


class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, user: User) -> UserDto:
        return UserDto(
            id=user.id,
            username=user.username,
            password_hash=user.password_hash,
            email=user.email,
            is_active=user.is_active,
            created_at=user.created_at,
            last_login_at=user.last_login_at,
        )

    def get_by_username(self, username: str) -> Optional[UserDto]:
        user = self.session.exec(select(User).where(User.username == username)).first()
        return self._to_dto(user) if user else None

    def get_by_email(self, email: str) -> Optional[UserDto]:
        user = self.session.exec(select(User).where(User.email == email)).first()
        return self._to_dto(user) if user else None

    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        user = self.session.get(User, user_id)
        return self._to_dto(user) if user else None

    def create(self, username: str, password_hash: str, email: Optional[str]) -> UserDto:
        user = User(username=username, password_hash=password_hash, email=email)
        self.session.add(user)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(user)
        return self._to_dto(user)

    def touch_last_login(self, user_id: int) -> None:
        user = self.session.get(User, user_id)
        if not user:
            return
        user.last_login_at = datetime.now(timezone.utc)
        self.session.add(user)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def count(self) -> int:
        return self.session.exec(select(func.count()).select_from(User)).one()

    def delete(self, user_id: int) -> bool:
        user = self.session.get(User, user_id)
        if not user:
            return False
        self.session.delete(user)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return True
