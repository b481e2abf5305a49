"""
API routes - Gate pages, mode switches and the two-step unlock API.

This module defines the HTTP endpoints:
- GET /__gate     - Render the gate, leave public mode
- GET /__public   - Enter public mode, redirect to /
- GET /__logout   - Clear every gate cookie, redirect to the gate
- POST /api/start  - Passphrase check + SMS dispatch
- POST /api/verify - SMS code check + trust cookie

Failures are raised as domain errors and rendered by the handlers in
src.api.errors.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from starlette.responses import Response

from src.api.cookies import NO_STORE, apply_transition
from src.api.dependencies import get_client_ip, get_gate_service
from src.api.models import GateResponse, StartRequest, VerifyRequest
from src.api.pages import render_gate
from src.config.settings import Settings, get_settings
from src.domain.gate import GateService
from src.domain.ports import SID_COOKIE, Transition

router = APIRouter(tags=["gate"])


def json_transition(transition: Transition, settings: Settings) -> JSONResponse:
    response = JSONResponse(
        content=GateResponse(ok=True, message=transition.message).model_dump(),
        headers=NO_STORE,
    )
    apply_transition(response, transition, settings)
    return response


def redirect_transition(transition: Transition, settings: Settings) -> RedirectResponse:
    response = RedirectResponse(
        url=transition.redirect or "/",
        status_code=status.HTTP_302_FOUND,
        headers=NO_STORE,
    )
    apply_transition(response, transition, settings)
    return response


@router.get("/__gate", response_class=HTMLResponse, include_in_schema=False)
async def gate_page(
    service: GateService = Depends(get_gate_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    response = HTMLResponse(render_gate(), headers=NO_STORE)
    apply_transition(response, service.show_gate(), settings)
    return response


@router.get("/__public", include_in_schema=False)
async def public_mode(
    service: GateService = Depends(get_gate_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    return redirect_transition(service.enter_public_mode(), settings)


@router.get("/__logout", include_in_schema=False)
async def logout(
    service: GateService = Depends(get_gate_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    return redirect_transition(service.logout(), settings)


@router.post(
    "/api/start",
    response_model=GateResponse,
    responses={
        401: {"model": GateResponse, "description": "Wrong passphrase"},
        429: {"model": GateResponse, "description": "Too many attempts"},
        502: {"model": GateResponse, "description": "Configuration or SMS service error"},
    },
    summary="Check passphrase and send SMS code",
)
async def start(
    request_data: StartRequest,
    client_ip: str = Depends(get_client_ip),
    service: GateService = Depends(get_gate_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Check the passphrase and have the verification service text a code.

    - **phrase**: the shared passphrase

    Sets the short-lived session cookie on success.
    """
    transition = await service.start(request_data.phrase, client_ip)
    return json_transition(transition, settings)


@router.post(
    "/api/verify",
    response_model=GateResponse,
    responses={
        400: {"model": GateResponse, "description": "Session missing or malformed code"},
        401: {"model": GateResponse, "description": "Wrong or expired code"},
        410: {"model": GateResponse, "description": "Session expired"},
        502: {"model": GateResponse, "description": "Configuration or SMS service error"},
    },
    summary="Verify SMS code",
)
async def verify(
    request_data: VerifyRequest,
    request: Request,
    service: GateService = Depends(get_gate_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Verify the SMS code for the session in the session cookie.

    - **code**: 4-8 alphanumeric characters

    Sets the trust cookie and clears the session cookie on success.
    """
    transition = await service.verify(request_data.code, request.cookies.get(SID_COOKIE))
    return json_transition(transition, settings)
