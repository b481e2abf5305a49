"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Shape checks on the code happen in the domain, after the session checks,
so the models only coerce values to strings.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


class StartRequest(BaseModel):
    """Request model for the passphrase step."""

    phrase: str = Field(default="", description="Shared passphrase")

    @field_validator("phrase", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return _as_text(value)


class VerifyRequest(BaseModel):
    """Request model for the SMS code step."""

    code: str = Field(default="", description="4-8 character code received by SMS")

    @field_validator("code", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return _as_text(value)


class GateResponse(BaseModel):
    """Response model for every gate API call, success or failure."""

    ok: bool
    message: str
