"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting the gate service
and infrastructure adapters into routes. Shared resources (store, HTTP
clients) are created during the app lifespan and stored in app.state.
"""

from fastapi import Depends, Request

from src.adapters.aliyun.client import AliyunVerificationClient
from src.adapters.upstream.proxy import UpstreamProxy
from src.config.settings import Settings, get_settings
from src.domain.gate import GatePolicy, GateService
from src.domain.ports import KeyValueStore, VerificationApi
from src.domain.trust_token import TrustTokenService

UNKNOWN_CLIENT_IP = "0.0.0.0"


def build_policy(settings: Settings) -> GatePolicy:
    """Copy the values the gate needs out of the settings."""
    return GatePolicy(
        passphrase=settings.passphrase,
        target_phone=settings.target_phone,
        sign_name=settings.aliyun_sign_name,
        template_code=settings.aliyun_template_code,
        country_code=settings.country_code,
        code_length=settings.code_length,
        code_type=settings.code_type,
        valid_time_seconds=settings.valid_time_seconds,
        interval_seconds=settings.interval_seconds,
        sid_ttl_seconds=settings.sid_ttl_seconds,
        auth_ttl_seconds=settings.auth_ttl_seconds,
        public_mode_ttl_seconds=settings.public_mode_ttl_seconds,
        sms_cooldown_seconds=settings.sms_cooldown_seconds,
        passphrase_window_seconds=settings.passphrase_window_seconds,
        passphrase_max_attempts=settings.passphrase_max_attempts,
    )


def get_store(request: Request) -> KeyValueStore:
    """
    Get the key-value store from app state.

    The store is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.store


def get_verifier(
    request: Request, settings: Settings = Depends(get_settings)
) -> VerificationApi:
    """Create the signed Dypnsapi client on the shared HTTP client."""
    return AliyunVerificationClient(
        http=request.app.state.api_http,
        access_key_id=settings.aliyun_access_key_id,
        access_key_secret=settings.aliyun_access_key_secret,
        endpoint=settings.aliyun_endpoint,
        api_version=settings.aliyun_api_version,
    )


def get_upstream_proxy(
    request: Request, settings: Settings = Depends(get_settings)
) -> UpstreamProxy:
    return UpstreamProxy(http=request.app.state.upstream_http, upstream_url=settings.upstream_url)


def get_gate_service(
    settings: Settings = Depends(get_settings),
    store: KeyValueStore = Depends(get_store),
    verifier: VerificationApi = Depends(get_verifier),
) -> GateService:
    """
    Create gate service with injected dependencies.

    Wires together the store, the verification client and the token
    service for the domain service.
    """
    return GateService(
        policy=build_policy(settings),
        store=store,
        verifier=verifier,
        tokens=TrustTokenService(secret=settings.cookie_secret),
    )


def get_client_ip(request: Request, settings: Settings = Depends(get_settings)) -> str:
    """
    Resolve the rate-limit identity for a request.

    Prefers the configured edge header (CF-Connecting-IP by default),
    then the socket peer.
    """
    forwarded = request.headers.get(settings.client_ip_header, "").strip()
    if forwarded:
        return forwarded
    if request.client is not None and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT_IP
