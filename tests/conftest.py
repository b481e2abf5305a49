"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock
- In-memory store and a scripted verification API double
- Gate policy, settings and service wired for tests
"""

import pytest

from src.adapters.store.memory import InMemoryKeyValueStore
from src.config.settings import Settings
from src.domain.gate import GatePolicy, GateService
from src.domain.ports import Outcome, Success
from src.domain.trust_token import TrustTokenService

PASSPHRASE = "abc"
COOKIE_SECRET = "test-cookie-secret-0123456789abcdef"
TARGET_PHONE = "13800138000"

SENT = Success({"Code": "OK", "Success": True, "Message": "OK"})
PASSED = Success({"Code": "OK", "Success": True, "Model": {"VerifyResult": "PASS"}})


class FakeClock:
    """Manually advanced epoch-seconds clock."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedVerificationApi:
    """Records calls and answers with preset outcomes."""

    def __init__(self) -> None:
        self.dispatch_outcome: Outcome = SENT
        self.check_outcome: Outcome = PASSED
        self.dispatch_calls: list[dict] = []
        self.check_calls: list[dict] = []

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
        self.dispatch_calls.append(
            {
                "phone": phone,
                "country_code": country_code,
                "sign_name": sign_name,
                "template_code": template_code,
                "code_length": code_length,
                "valid_time_seconds": valid_time_seconds,
                "interval_seconds": interval_seconds,
                "code_type": code_type,
            }
        )
        return self.dispatch_outcome

    async def check_code(self, phone: str, country_code: str, submitted_code: str) -> Outcome:
        self.check_calls.append(
            {"phone": phone, "country_code": country_code, "submitted_code": submitted_code}
        )
        return self.check_outcome


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore(clock=clock)


@pytest.fixture
def verifier() -> ScriptedVerificationApi:
    return ScriptedVerificationApi()


@pytest.fixture
def policy() -> GatePolicy:
    return GatePolicy(
        passphrase=PASSPHRASE,
        target_phone=TARGET_PHONE,
        sign_name="TestSign",
        template_code="SMS_000001",
    )


@pytest.fixture
def tokens() -> TrustTokenService:
    return TrustTokenService(secret=COOKIE_SECRET)


@pytest.fixture
def service(
    policy: GatePolicy,
    store: InMemoryKeyValueStore,
    verifier: ScriptedVerificationApi,
    tokens: TrustTokenService,
    clock: FakeClock,
) -> GateService:
    return GateService(policy=policy, store=store, verifier=verifier, tokens=tokens, clock=clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        passphrase=PASSPHRASE,
        cookie_secret=COOKIE_SECRET,
        cookie_domain="example.com",
        target_phone=TARGET_PHONE,
        aliyun_access_key_id="test-key-id",
        aliyun_access_key_secret="test-key-secret",
        aliyun_sign_name="TestSign",
        aliyun_template_code="SMS_000001",
        upstream_url="https://upstream.test",
    )
