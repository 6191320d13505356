import pytest

from picbed.infrastructure.security.password_hasher import PasswordHasher


@pytest.fixture
def hasher():
    # Minimum bcrypt cost keeps the suite fast
    return PasswordHasher("pepper", rounds=4)


def test_hash_verifies_and_rejects_wrong_password(hasher):
    hashed = hasher.hash("s3cret")
    assert hashed.startswith("$2b$04$")
    assert hasher.verify("s3cret", hashed) is True
    assert hasher.verify("wrong", hashed) is False


def test_each_hash_is_salted(hasher):
    first, second = hasher.hash("s3cret"), hasher.hash("s3cret")
    assert first != second
    assert hasher.verify("s3cret", first) and hasher.verify("s3cret", second)


def test_pepper_takes_part_in_the_hash():
    hashed = PasswordHasher("one", rounds=4).hash("s3cret")
    assert PasswordHasher("two", rounds=4).verify("s3cret", hashed) is False


def test_passwords_longer_than_bcrypt_limit_are_distinguished(hasher):
    prefix = "a" * 80
    hashed = hasher.hash(prefix + "x")
    assert hasher.verify(prefix + "x", hashed) is True
    assert hasher.verify(prefix + "y", hashed) is False


@pytest.mark.parametrize("bad_hash", ["not-a-hash-é", "", "$2b$04$short"])
def test_verify_against_malformed_hash_is_false(hasher, bad_hash):
    assert hasher.verify("s3cret", bad_hash) is False


def test_dummy_hash_is_stable_and_never_matches_a_real_password(hasher):
    assert hasher.dummy_hash is hasher.dummy_hash
    assert hasher.verify("s3cret", hasher.dummy_hash) is False
