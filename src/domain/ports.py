"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, plus the small value types that cross them.
Adapters implement these protocols.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

# Cookie names shared by the gate and the HTTP layer
SID_COOKIE = "cf_sid"
AUTH_COOKIE = "cf_auth"
MODE_COOKIE = "cf_mode"

PUBLIC_MODE = "public"


class GateDecision(str, Enum):
    """
    Routing decision for an ordinary inbound request.

    A valid trust token wins over the mode cookie; without either
    the visitor sees the gate.
    """

    PASSTHROUGH = "passthrough"
    PLACEHOLDER = "placeholder"
    GATE = "gate"


@dataclass(frozen=True)
class Success:
    """Remote call succeeded at transport level (Code=OK, Success=true)."""

    payload: dict[str, Any]


@dataclass(frozen=True)
class Failure:
    """Remote call failed; message is safe to show an operator."""

    message: str


Outcome = Success | Failure


@dataclass(frozen=True)
class CookieGrant:
    """A cookie the HTTP layer must set."""

    name: str
    value: str
    max_age: int


@dataclass(frozen=True)
class Transition:
    """
    Framework-agnostic result of a gate operation.

    The HTTP layer turns this into a response: a JSON message or a
    redirect, plus Set-Cookie headers for grants and clears.
    """

    message: str = ""
    grants: tuple[CookieGrant, ...] = ()
    clears: tuple[str, ...] = ()
    redirect: str | None = None


class KeyValueStore(Protocol):
    """Port interface for the expiring key-value store."""

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Store value under key, replacing any previous value.

        Args:
            key: Namespaced key (e.g. "sid:<uuid>", "rl:pw:<ip>")
            value: Opaque string value
            ttl_seconds: Seconds until the entry disappears
        """
        ...

    async def get(self, key: str) -> str | None:
        """Return the live value for key, or None when absent or expired."""
        ...

    async def delete(self, key: str) -> None:
        """Remove key; deleting an absent key is not an error."""
        ...


class VerificationApi(Protocol):
    """Port interface for the remote SMS verification service."""

    async def dispatch_code(
        self,
        phone: str,
        country_code: str,
        sign_name: str,
        template_code: str,
        code_length: int,
        valid_time_seconds: int,
        interval_seconds: int,
        code_type: int,
    ) -> Outcome:
        """
        Ask the remote service to generate and send a code by SMS.

        The remote service generates the code itself; callers never
        supply one, since the service can only check codes it generated.
        """
        ...

    async def check_code(self, phone: str, country_code: str, submitted_code: str) -> Outcome:
        """
        Ask the remote service whether submitted_code is the live code.

        A Success here only means the call went through. The verdict is
        in the payload (see verification_passed).
        """
        ...


def verification_passed(outcome: Outcome) -> bool:
    """True only for a transport success whose Model.VerifyResult is PASS."""
    if not isinstance(outcome, Success):
        return False
    model = outcome.payload.get("Model")
    if not isinstance(model, dict):
        return False
    return model.get("VerifyResult") == "PASS"
