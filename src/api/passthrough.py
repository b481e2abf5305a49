"""
Catch-all routes - ACME passthrough and the per-request routing decision.

Must be included after every other router: it matches any path.
"""

import logging

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from starlette.responses import Response

from src.adapters.upstream.proxy import UpstreamProxy, forwardable
from src.api.cookies import NO_STORE
from src.api.dependencies import get_gate_service, get_upstream_proxy
from src.api.pages import render_gate, render_placeholder
from src.domain.exceptions import RemoteServiceError
from src.domain.gate import GateService
from src.domain.ports import AUTH_COOKIE, MODE_COOKIE, GateDecision

logger = logging.getLogger(__name__)

router = APIRouter()

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


async def proxy_request(request: Request, proxy: UpstreamProxy) -> Response:
    try:
        upstream = await proxy.forward(
            method=request.method,
            path=request.url.path,
            query=request.url.query,
            headers=request.headers.items(),
            body=await request.body(),
        )
    except httpx.HTTPError as exc:
        logger.warning("Upstream unreachable: %s", exc.__class__.__name__)
        raise RemoteServiceError("Upstream unavailable.") from exc
    response = Response(content=upstream.content, status_code=upstream.status_code)
    # Raw list keeps repeated headers such as Set-Cookie
    response.raw_headers.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in forwardable(upstream.headers.multi_items())
    )
    return response


@router.api_route(
    "/.well-known/acme-challenge/{token:path}",
    methods=ALL_METHODS,
    include_in_schema=False,
)
async def acme_challenge(
    request: Request, proxy: UpstreamProxy = Depends(get_upstream_proxy)
) -> Response:
    """Certificate challenges always reach the upstream untouched."""
    return await proxy_request(request, proxy)


@router.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
async def gated(
    request: Request,
    service: GateService = Depends(get_gate_service),
    proxy: UpstreamProxy = Depends(get_upstream_proxy),
) -> Response:
    """Trust token -> upstream; public mode -> placeholder; otherwise the gate."""
    decision = service.decide(request.cookies.get(AUTH_COOKIE), request.cookies.get(MODE_COOKIE))
    if decision is GateDecision.PASSTHROUGH:
        return await proxy_request(request, proxy)
    if decision is GateDecision.PLACEHOLDER:
        return HTMLResponse(render_placeholder(request.url.hostname or ""), headers=NO_STORE)
    return HTMLResponse(render_gate(), headers=NO_STORE)
