"""In-memory repositories and collaborators shared by the service tests."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from picbed.application.ports.image_repo import StoredImage
from picbed.application.ports.user_repo import UserRepository, UserDto


class FakeUserRepo(UserRepository):
    def __init__(self):
        self.users = {}
        self.logins = []
        self._id = 1

    def get_by_username(self, username: str) -> Optional[UserDto]:
        return next((u for u in self.users.values() if u.username == username), None)

    def get_by_email(self, email: str) -> Optional[UserDto]:
        return next((u for u in self.users.values() if u.email == email), None)

    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        return self.users.get(user_id)

    def create(self, username: str, password_hash: str, email: Optional[str]) -> UserDto:
        now = datetime.now(timezone.utc)
        user = UserDto(self._id, username, password_hash, email, True, now, now)
        self.users[user.id] = user
        self._id += 1
        return user

    def touch_last_login(self, user_id: int) -> None:
        self.logins.append(user_id)

    def count(self) -> int:
        return len(self.users)

    def delete(self, user_id: int) -> bool:
        return self.users.pop(user_id, None) is not None


class FakeAudit:
    def __init__(self):
        self.entries = []

    def log(self, action, username, user_id=None, success=True, details=None):
        self.entries.append((action, username, user_id, success))


class FakeImageRepo:
    def __init__(self):
        self.items = {}
        self.next_id = 1
        self.fail_create = False
        self.deleted = []

    def create(self, **kwargs):
        if self.fail_create:
            raise RuntimeError("database unavailable")
        record = StoredImage(
            id=self.next_id,
            upload_time=datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=self.next_id),
            is_public=True,
            description=kwargs.pop("description", None),
            category=kwargs.pop("category", None),
            **kwargs,
        )
        self.items[record.id] = record
        self.next_id += 1
        return record

    def get_by_id(self, image_id):
        return self.items.get(image_id)

    def get_by_file_name(self, file_name):
        return next((r for r in self.items.values() if r.file_name == file_name), None)

    def list_page(self, offset, limit, category=None):
        records = [r for r in self.items.values() if category is None or r.category == category]
        records.sort(key=lambda r: r.upload_time, reverse=True)
        self.last_page_args = (offset, limit, category)
        return records[offset:offset + limit]

    def list_for_owner(self, owner_id):
        return [r for r in self.items.values() if r.owner_id == owner_id]

    def count_for_owner(self, owner_id):
        return len(self.list_for_owner(owner_id))

    def delete(self, image_id):
        self.deleted.append(image_id)
        return self.items.pop(image_id, None) is not None
