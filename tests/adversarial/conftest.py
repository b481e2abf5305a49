"""
Shared fixtures for adversarial tests.

Provides an opened session and a helper for forging tokens; the gate
service, store, clock and scripted verification API come from the
top-level conftest.
"""

import hashlib
import hmac

import pytest

from src.domain.gate import GateService


@pytest.fixture
async def sid(service: GateService) -> str:
    """A live session opened with the correct passphrase."""
    transition = await service.start("abc", "203.0.113.7")
    return transition.grants[0].value


def _forge(timestamp: str, secret: str, prefix: str = "full.") -> str:
    """Build a token the way the server would, with an arbitrary secret."""
    signature = hmac.new(
        secret.encode(), f"{prefix}{timestamp}".encode(), hashlib.sha256
    ).hexdigest()
    return f"{timestamp}.{signature}"


@pytest.fixture
def forge():
    return _forge
