from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from picbed.db import models  # noqa: F401
from picbed.infrastructure.persistence.sqlalchemy.repositories.image_repository_sql import SqlImageRepository
from picbed.infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository


@pytest.fixture
def session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


def _create_image(repo, name, owner_id=1, category=None):
    return repo.create(
        file_name=name,
        original_file_name=f"orig-{name}",
        file_extension=".jpg",
        file_size=123,
        width=10,
        height=20,
        mime_type="image/jpeg",
        owner_id=owner_id,
        category=category,
    )


def test_image_create_and_lookup(session):
    repo = SqlImageRepository(session)
    record = _create_image(repo, "a.jpg", category="cats")

    assert record.id is not None
    assert record.is_public is True
    assert record.upload_time is not None
    assert repo.get_by_id(record.id).file_name == "a.jpg"
    assert repo.get_by_file_name("a.jpg").original_file_name == "orig-a.jpg"
    assert repo.get_by_file_name("missing.jpg") is None
    assert repo.get_by_id(999) is None


def test_list_page_is_newest_first(session):
    repo = SqlImageRepository(session)
    first = _create_image(repo, "1.jpg")
    second = _create_image(repo, "2.jpg")
    third = _create_image(repo, "3.jpg")

    assert [r.id for r in repo.list_page(0, 20)] == [third.id, second.id, first.id]
    assert [r.id for r in repo.list_page(1, 1)] == [second.id]
    assert repo.list_page(3, 20) == []


def test_list_page_filters_by_category(session):
    repo = SqlImageRepository(session)
    _create_image(repo, "1.jpg", category="cats")
    _create_image(repo, "2.jpg", category="dogs")
    cat = _create_image(repo, "3.jpg", category="cats")

    records = repo.list_page(0, 20, "cats")
    assert len(records) == 2
    assert records[0].id == cat.id
    assert all(r.category == "cats" for r in records)


def test_count_and_list_for_owner(session):
    repo = SqlImageRepository(session)
    _create_image(repo, "1.jpg", owner_id=1)
    _create_image(repo, "2.jpg", owner_id=2)
    _create_image(repo, "3.jpg", owner_id=2)

    assert repo.count_for_owner(1) == 1
    assert repo.count_for_owner(2) == 2
    assert repo.count_for_owner(3) == 0
    assert {r.file_name for r in repo.list_for_owner(2)} == {"2.jpg", "3.jpg"}


def test_image_delete(session):
    repo = SqlImageRepository(session)
    record = _create_image(repo, "a.jpg")

    assert repo.delete(record.id) is True
    assert repo.get_by_id(record.id) is None
    assert repo.delete(record.id) is False


def test_user_repository_roundtrip(session):
    repo = SqlUserRepository(session)
    assert repo.count() == 0

    user = repo.create("alice", "hash", "alice@example.com")

    assert user.id is not None
    assert user.is_active is True
    assert repo.get_by_username("alice").id == user.id
    assert repo.get_by_email("alice@example.com").id == user.id
    assert repo.get_by_id(user.id).password_hash == "hash"
    assert repo.count() == 1


def test_user_touch_last_login_and_delete(session):
    repo = SqlUserRepository(session)
    user = repo.create("alice", "hash", None)

    repo.touch_last_login(user.id)
    assert repo.get_by_id(user.id).last_login_at >= user.last_login_at

    assert repo.delete(user.id) is True
    assert repo.get_by_username("alice") is None
    assert repo.delete(user.id) is False


def test_timestamps_are_stored_and_read_as_utc(session):
    before = datetime.now(timezone.utc)
    user = SqlUserRepository(session).create("alice", "hash", None)
    image = _create_image(SqlImageRepository(session), "a.jpg", owner_id=user.id)

    for value in (user.created_at, user.last_login_at, image.upload_time):
        assert value.utcoffset() == timedelta(0)
        assert before - timedelta(seconds=5) <= value <= datetime.now(timezone.utc)


def _failing_commit():
    raise OperationalError("COMMIT", {}, Exception("database is locked"))


@pytest.mark.parametrize("operation", ["touch_last_login", "delete"])
def test_user_writes_roll_back_when_commit_fails(session, monkeypatch, operation):
    repo = SqlUserRepository(session)
    user = repo.create("alice", "hash", None)
    rollbacks = []
    original_rollback = session.rollback

    def recording_rollback():
        rollbacks.append(True)
        original_rollback()

    monkeypatch.setattr(session, "commit", _failing_commit)
    monkeypatch.setattr(session, "rollback", recording_rollback)

    with pytest.raises(OperationalError):
        getattr(repo, operation)(user.id)

    assert rollbacks == [True]
    monkeypatch.undo()
    assert repo.get_by_id(user.id) is not None
