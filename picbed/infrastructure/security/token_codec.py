"""
Self-issued bearer tokens.

Wire format: ``base64(payload-json) + "." + base64(hmac-sha256(encoded))``.
The payload carries ``userId``, ``username``, ``issuedAt`` and ``expiresAt``
(Unix seconds). Tokens are not stored and cannot be revoked before expiry.
"""

import base64
import binascii
import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    username: str
    issued_at: datetime
    expires_at: datetime


class TokenCodec:
    SEPARATOR = "."

    def __init__(self, secret: str, lifetime: timedelta = timedelta(days=7),
                 clock: Optional[Callable[[], datetime]] = None):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret.encode("utf-8")
        self.lifetime = lifetime
        self._clock = clock or _utc_now

    def mint(self, user) -> str:
        """Issue a token for any object exposing ``id`` and ``username``."""
        issued_at = int(self._clock().timestamp())
        payload = {
            "userId": user.id,
            "username": user.username,
            "issuedAt": issued_at,
            "expiresAt": issued_at + int(self.lifetime.total_seconds()),
        }
        raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        encoded = base64.b64encode(raw).decode("ascii")
        return f"{encoded}{self.SEPARATOR}{self._sign(encoded)}"

    def decode(self, token: str) -> Optional[TokenClaims]:
        """Return the claims of a well-formed, correctly signed, unexpired token, else None."""
        if not token:
            return None
        parts = token.split(self.SEPARATOR)
        if len(parts) != 2:
            return None
        encoded, signature = parts

        expected = self._sign(encoded)
        if not hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8")):
            return None

        try:
            payload = json.loads(base64.b64decode(encoded, validate=True).decode("utf-8"))
            user_id = int(payload["userId"])
            username = str(payload["username"])
            issued_at = int(payload["issuedAt"])
            expires_at = int(payload["expiresAt"])
        except (binascii.Error, ValueError, UnicodeDecodeError, KeyError, TypeError):
            logger.warning("Signed token carried an unreadable payload")
            return None

        if self._clock().timestamp() >= expires_at:
            return None

        return TokenClaims(
            user_id=user_id,
            username=username,
            issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
        )

    def verify(self, token: str) -> Optional[int]:
        claims = self.decode(token)
        return claims.user_id if claims else None

    def _sign(self, encoded: str) -> str:
        digest = hmac.new(self._secret, encoded.encode("utf-8"), hashlib.sha256).digest()
        return base64.b64encode(digest).decode("ascii")
