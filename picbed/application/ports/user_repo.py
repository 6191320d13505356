from typing import Protocol, Optional
from datetime import datetime


class UserDto:
    def __init__(self, id: int, username: str, password_hash: str, email: Optional[str],
                 is_active: bool, created_at: datetime, last_login_at: datetime):
        self.id = id
        self.username = username
        self.password_hash = password_hash
        self.email = email
        self.is_active = is_active
        self.created_at = created_at
        self.last_login_at = last_login_at


class UserRepository(Protocol):
    def get_by_username(self, username: str) -> Optional[UserDto]:
        ...

    def get_by_email(self, email: str) -> Optional[UserDto]:
        ...

    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        ...

    def create(self, username: str, password_hash: str, email: Optional[str]) -> UserDto:
        ...

    def touch_last_login(self, user_id: int) -> None:
        ...

    def count(self) -> int:
        ...

    def delete(self, user_id: int) -> bool:
        ...
