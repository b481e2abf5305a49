"""
Domain layer - Pure gate logic with zero framework imports.

This package contains the passphrase + SMS code state machine, the rate
limiter and the trust token service. It defines its own port interfaces
for infrastructure abstraction, ensuring true hexagonal architecture
decoupling.
"""

from .exceptions import (
    AuthenticationMismatch,
    ConfigurationError,
    GateError,
    InvalidCodeFormat,
    RateLimited,
    RemoteServiceError,
    SessionExpired,
    SessionMissing,
    StoreUnavailable,
)
from .gate import GatePolicy, GateService
from .ports import (
    CookieGrant,
    Failure,
    GateDecision,
    KeyValueStore,
    Outcome,
    Success,
    Transition,
    VerificationApi,
    verification_passed,
)
from .rate_limit import RateLimiter
from .trust_token import TrustTokenService

__all__ = [
    "AuthenticationMismatch",
    "ConfigurationError",
    "CookieGrant",
    "Failure",
    "GateDecision",
    "GateError",
    "GatePolicy",
    "GateService",
    "InvalidCodeFormat",
    "KeyValueStore",
    "Outcome",
    "RateLimited",
    "RateLimiter",
    "RemoteServiceError",
    "SessionExpired",
    "SessionMissing",
    "StoreUnavailable",
    "Success",
    "Transition",
    "TrustTokenService",
    "VerificationApi",
    "verification_passed",
]
