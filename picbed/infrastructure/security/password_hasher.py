import base64
import hashlib
import hmac

from passlib.context import CryptContext


class PasswordHasher:
    """bcrypt password hashes keyed by an application-wide pepper.

    The password is first HMAC-SHA256'd with the pepper, so the pepper always
    takes part in the hash and long passwords are not cut at bcrypt's 72-byte
    limit. bcrypt adds a per-hash salt on top. The pepper must not be the
    token signing secret.
    """

    def __init__(self, pepper: str, rounds: int = 12):
        self._pepper = pepper.encode("utf-8")
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)
        self._dummy_hash = self.hash("")

    def _peppered(self, password: str) -> str:
        digest = hmac.new(self._pepper, password.encode("utf-8"), hashlib.sha256).digest()
        return base64.b64encode(digest).decode("ascii")

    def hash(self, password: str) -> str:
        return self._context.hash(self._peppered(password))

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return self._context.verify(self._peppered(password), password_hash)
        except (ValueError, TypeError):
            return False

    @property
    def dummy_hash(self) -> str:
        """A valid hash to verify against when there is no real one to check."""
        return self._dummy_hash
