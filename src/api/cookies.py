"""
Cookie handling - applies domain transitions to HTTP responses.

Every gate cookie is HttpOnly, Secure, SameSite=Lax, Path=/ and scoped to
the configured cookie domain so sibling subdomains share state. Clearing a
cookie uses the same attributes with Max-Age=0.
"""

from starlette.responses import Response

from src.config.settings import Settings
from src.domain.ports import Transition

NO_STORE = {"Cache-Control": "no-store"}


def apply_transition(response: Response, transition: Transition, settings: Settings) -> None:
    """Write Set-Cookie headers for the transition's clears and grants."""
    domain = settings.cookie_domain or None
    for name in transition.clears:
        response.delete_cookie(
            name,
            path="/",
            domain=domain,
            secure=True,
            httponly=True,
            samesite="lax",
        )
    for grant in transition.grants:
        response.set_cookie(
            grant.name,
            grant.value,
            max_age=grant.max_age,
            path="/",
            domain=domain,
            secure=True,
            httponly=True,
            samesite="lax",
        )
