"""
Trust tokens - stateless proof of a completed SMS verification.

Token format: "<issued_at_ms>.<hex hmac-sha256>" where the HMAC covers
"full.<issued_at_ms>" and is keyed by the server's cookie secret.

Nothing is stored server-side. A token stays valid until it ages out;
the only way to revoke all tokens early is to rotate the secret.
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass

from .exceptions import ConfigurationError

_MESSAGE_PREFIX = "full."

# Epoch milliseconds fit in 13 digits until the year 2286
_MAX_TIMESTAMP_DIGITS = 15


@dataclass(frozen=True)
class TrustTokenService:
    """Issues and validates trust tokens with a server-held secret."""

    secret: str

    def issue(self, now_ms: int) -> str:
        """
        Mint a token stamped with now_ms.

        Raises:
            ConfigurationError: If no cookie secret is configured
        """
        if not self.secret:
            raise ConfigurationError("COOKIE_SECRET")
        timestamp = str(int(now_ms))
        return f"{timestamp}.{self._sign(timestamp)}"

    def validate(self, token: str | None, max_age_seconds: int, now_ms: int) -> bool:
        """
        Check a token's signature and age.

        Never raises: malformed input of any kind is simply invalid.
        The signature comparison is constant-time.
        """
        if not token or not self.secret:
            return False

        parts = token.split(".")
        if len(parts) != 2:
            return False
        timestamp, signature = parts
        if len(timestamp) > _MAX_TIMESTAMP_DIGITS or not signature:
            return False
        if not (timestamp.isascii() and timestamp.isdigit()):
            return False

        if now_ms - int(timestamp) > max_age_seconds * 1000:
            return False

        expected = self._sign(timestamp)
        return secrets.compare_digest(signature.encode(), expected.encode())

    def _sign(self, timestamp: str) -> str:
        message = f"{_MESSAGE_PREFIX}{timestamp}".encode()
        return hmac.new(self.secret.encode(), message, hashlib.sha256).hexdigest()
