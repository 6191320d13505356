from datetime import datetime, timedelta, timezone

import pytest

from picbed.application.services.auth_service import AuthService
from picbed.exceptions import AuthError, ValidationError
from picbed.infrastructure.security.password_hasher import PasswordHasher
from picbed.infrastructure.security.token_codec import TokenCodec

from fakes import FakeAudit, FakeUserRepo


class CountingHasher(PasswordHasher):
    def __init__(self, pepper: str):
        super().__init__(pepper, rounds=4)
        self.verifications = 0

    def verify(self, password: str, password_hash: str) -> bool:
        self.verifications += 1
        return super().verify(password, password_hash)


@pytest.fixture
def repo():
    return FakeUserRepo()


@pytest.fixture
def hasher():
    return CountingHasher("pepper")


@pytest.fixture
def audit():
    return FakeAudit()


@pytest.fixture
def svc(repo, hasher, audit):
    return AuthService(user_repo=repo, password_hasher=hasher, token_codec=TokenCodec("secret"), audit_logger=audit)


def test_login_issues_seven_day_token(svc, repo, hasher):
    admin = repo.create("admin", hasher.hash("correct-horse"), None)

    result = svc.login("admin", "correct-horse")

    assert result.user.id == admin.id
    assert svc.token_codec.verify(result.token) == admin.id
    remaining = result.expires_at - datetime.now(timezone.utc)
    assert timedelta(days=6, hours=23) < remaining <= timedelta(days=7)
    assert repo.logins == [admin.id]


def test_wrong_password_and_unknown_user_look_the_same(svc, repo, hasher):
    repo.create("admin", hasher.hash("correct-horse"), None)

    hasher.verifications = 0
    with pytest.raises(AuthError) as wrong_password:
        svc.login("admin", "nope")
    wrong_password_checks = hasher.verifications

    hasher.verifications = 0
    with pytest.raises(AuthError) as unknown_user:
        svc.login("nobody", "nope")

    assert str(wrong_password.value) == str(unknown_user.value) == "Invalid username or password"
    assert hasher.verifications == wrong_password_checks == 1
    assert repo.logins == []


def test_inactive_user_cannot_log_in(svc, repo, hasher):
    user = repo.create("bob", hasher.hash("pw123456"), None)
    user.is_active = False
    with pytest.raises(AuthError):
        svc.login("bob", "pw123456")


def test_login_attempts_are_audited(svc, repo, hasher, audit):
    repo.create("admin", hasher.hash("correct-horse"), None)
    svc.login("admin", "correct-horse")
    with pytest.raises(AuthError):
        svc.login("admin", "bad")
    assert [(a, s) for a, _, _, s in audit.entries] == [("login", True), ("login", False)]


def test_register_creates_user_and_token(svc, repo):
    result = svc.register("carol", "pw123456", "carol@example.com")
    assert repo.get_by_username("carol") is not None
    assert svc.get_user_by_token(result.token).username == "carol"


def test_register_rejects_duplicates(svc):
    svc.register("carol", "pw123456", "carol@example.com")
    with pytest.raises(ValidationError, match="Username already exists"):
        svc.register("carol", "other-pw", None)
    with pytest.raises(ValidationError, match="Email already exists"):
        svc.register("dave", "other-pw", "carol@example.com")


def test_token_for_deactivated_or_deleted_user_is_invalid(svc, repo):
    result = svc.register("erin", "pw123456")
    assert svc.validate_token(result.token) is True

    result.user.is_active = False
    assert svc.get_user_by_token(result.token) is None

    repo.delete(result.user.id)
    assert svc.validate_token(result.token) is False


def test_validate_garbage_token(svc):
    assert svc.validate_token("garbage") is False


def test_ensure_admin_user_seeds_empty_table(svc, repo):
    user = svc.ensure_admin_user("admin", "bootstrap-pw", "admin@picbed.com")
    assert user is not None
    assert svc.login("admin", "bootstrap-pw").user.username == "admin"


def test_ensure_admin_user_skips_when_users_exist_or_no_password(svc, repo):
    assert svc.ensure_admin_user("admin", None) is None
    assert repo.count() == 0
    repo.create("someone", "x", None)
    assert svc.ensure_admin_user("admin", "bootstrap-pw") is None
    assert repo.get_by_username("admin") is None
