"""
Gate domain service - passphrase + SMS code state machine.

States
======

- GATE: no proof yet; the visitor must supply the passphrase
- AWAITING_CODE: passphrase accepted, code dispatched, session open
- AUTHENTICATED: a valid trust token cookie is present
- PUBLIC (orthogonal): placeholder view chosen; cleared once a passphrase
  attempt succeeds or the gate page is opened

Transitions
===========

    GATE -> AWAITING_CODE           start(): passphrase ok, SMS dispatched
    AWAITING_CODE -> AUTHENTICATED  verify(): remote VerifyResult == PASS
    AWAITING_CODE -> AWAITING_CODE  verify(): code rejected, session kept
    any -> PUBLIC                   enter_public_mode()
    any -> GATE                     logout()

Sessions are single-use: a successful verify() deletes the session record,
so replaying the same sid fails with SessionExpired.
"""

import json
import logging
import re
import secrets
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field

from .exceptions import (
    AuthenticationMismatch,
    ConfigurationError,
    InvalidCodeFormat,
    RateLimited,
    RemoteServiceError,
    SessionExpired,
    SessionMissing,
)
from .ports import (
    AUTH_COOKIE,
    MODE_COOKIE,
    PUBLIC_MODE,
    SID_COOKIE,
    CookieGrant,
    Failure,
    GateDecision,
    KeyValueStore,
    Transition,
    VerificationApi,
    verification_passed,
)
from .rate_limit import RateLimiter, dispatch_scope, passphrase_scope
from .trust_token import TrustTokenService

logger = logging.getLogger(__name__)

GATE_PATH = "/__gate"

# Minimum lifetime of the dispatch cooldown marker
_COOLDOWN_MARKER_TTL_SECONDS = 600

_CODE_PATTERN = re.compile(r"[0-9A-Za-z]{4,8}")


def session_key(sid: str) -> str:
    return f"sid:{sid}"


@dataclass(frozen=True)
class GatePolicy:
    """Plain configuration values the gate needs, built once per process."""

    passphrase: str
    target_phone: str
    sign_name: str
    template_code: str
    country_code: str = "86"
    code_length: int = 6
    code_type: int = 1
    valid_time_seconds: int = 300
    interval_seconds: int = 60
    sid_ttl_seconds: int = 900
    auth_ttl_seconds: int = 30 * 24 * 3600
    public_mode_ttl_seconds: int = 7 * 24 * 3600
    sms_cooldown_seconds: int = 60
    passphrase_window_seconds: int = 600
    passphrase_max_attempts: int = 20


@dataclass
class GateService:
    """
    Domain service for the access gate.

    Orchestrates the rate limiter, session records, the remote
    verification API and trust tokens. Returns Transition values and
    raises GateError subclasses; it knows nothing about HTTP.
    """

    policy: GatePolicy
    store: KeyValueStore
    verifier: VerificationApi
    tokens: TrustTokenService
    clock: Callable[[], float] = time.time
    limiter: RateLimiter = field(init=False)

    def __post_init__(self) -> None:
        self.limiter = RateLimiter(store=self.store, clock=self.clock)

    async def start(self, phrase: str, client_ip: str) -> Transition:
        """
        Check the passphrase and dispatch an SMS code.

        Args:
            phrase: Passphrase as typed by the visitor
            client_ip: Rate-limit identity

        Returns:
            Transition setting the session cookie and clearing public mode

        Raises:
            RateLimited: Attempt cap or dispatch cooldown tripped
            ConfigurationError: No passphrase configured
            AuthenticationMismatch: Wrong passphrase
            RemoteServiceError: The verification API refused the dispatch
        """
        attempts = await self.limiter.bump_and_check(
            passphrase_scope(client_ip), self.policy.passphrase_window_seconds
        )
        if attempts > self.policy.passphrase_max_attempts:
            logger.warning("Passphrase attempt cap reached for %s (%d)", client_ip, attempts)
            raise RateLimited()

        if not self.policy.passphrase:
            raise ConfigurationError("PASSPHRASE")
        if not secrets.compare_digest(phrase.encode(), self.policy.passphrase.encode()):
            logger.info("Passphrase rejected for %s", client_ip)
            raise AuthenticationMismatch("That is not the passphrase.")

        cooldown_key = dispatch_scope(client_ip)
        if not await self.limiter.check_cooldown(cooldown_key, self.policy.sms_cooldown_seconds):
            logger.info("Dispatch cooldown active for %s", client_ip)
            raise RateLimited()

        sid = str(uuid.uuid4())
        record = json.dumps({"ok": True, "ts": self._now_ms()})
        await self.store.put(session_key(sid), record, self.policy.sid_ttl_seconds)

        outcome = await self.verifier.dispatch_code(
            phone=self.policy.target_phone,
            country_code=self.policy.country_code,
            sign_name=self.policy.sign_name,
            template_code=self.policy.template_code,
            code_length=self.policy.code_length,
            valid_time_seconds=self.policy.valid_time_seconds,
            interval_seconds=self.policy.interval_seconds,
            code_type=self.policy.code_type,
        )
        if isinstance(outcome, Failure):
            # The session row is left to expire on its own
            raise RemoteServiceError(f"SMS dispatch failed: {outcome.message}")

        await self.limiter.record_event(
            cooldown_key, max(self.policy.sms_cooldown_seconds, _COOLDOWN_MARKER_TTL_SECONDS)
        )
        logger.info("Code dispatched for %s", client_ip)

        return Transition(
            message="Code sent, please check your SMS.",
            grants=(CookieGrant(SID_COOKIE, sid, self.policy.sid_ttl_seconds),),
            clears=(MODE_COOKIE,),
        )

    async def verify(self, code: str, sid: str | None) -> Transition:
        """
        Check a submitted code against the remote service.

        A rejected code leaves the session in place so the visitor can
        retry within its TTL; the remote service's own attempt limits
        bound brute force.

        Raises:
            SessionMissing: No sid cookie
            SessionExpired: sid unknown, expired or already consumed
            InvalidCodeFormat: Code is not 4-8 alphanumerics
            RemoteServiceError: The check call itself failed
            AuthenticationMismatch: Remote verdict was not PASS
        """
        if not sid:
            raise SessionMissing()
        if await self.store.get(session_key(sid)) is None:
            raise SessionExpired()

        code = (code or "").strip()
        if not _CODE_PATTERN.fullmatch(code):
            raise InvalidCodeFormat()

        outcome = await self.verifier.check_code(
            phone=self.policy.target_phone,
            country_code=self.policy.country_code,
            submitted_code=code,
        )
        if isinstance(outcome, Failure):
            raise RemoteServiceError(f"Verification failed: {outcome.message}")
        if not verification_passed(outcome):
            logger.info("Code rejected by verification service")
            raise AuthenticationMismatch("Wrong or expired code, please try again.")

        token = self.tokens.issue(self._now_ms())
        await self.store.delete(session_key(sid))
        logger.info("Verification passed, trust token issued")

        return Transition(
            message="Verified, welcome!",
            grants=(CookieGrant(AUTH_COOKIE, token, self.policy.auth_ttl_seconds),),
            clears=(SID_COOKIE,),
        )

    def enter_public_mode(self) -> Transition:
        """Switch to the placeholder view and drop any auth state."""
        return Transition(
            grants=(CookieGrant(MODE_COOKIE, PUBLIC_MODE, self.policy.public_mode_ttl_seconds),),
            clears=(SID_COOKIE, AUTH_COOKIE),
            redirect="/",
        )

    def logout(self) -> Transition:
        """Clear every gate cookie and go back to the gate."""
        return Transition(clears=(AUTH_COOKIE, SID_COOKIE, MODE_COOKIE), redirect=GATE_PATH)

    def show_gate(self) -> Transition:
        """Opening the gate page leaves public mode."""
        return Transition(clears=(MODE_COOKIE,))

    def decide(self, auth_token: str | None, mode: str | None) -> GateDecision:
        """Route an ordinary request: trust token, then public mode, then gate."""
        if self.tokens.validate(auth_token, self.policy.auth_ttl_seconds, self._now_ms()):
            return GateDecision.PASSTHROUGH
        if mode == PUBLIC_MODE:
            return GateDecision.PLACEHOLDER
        return GateDecision.GATE

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)
