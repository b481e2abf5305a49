"""
Unit tests for API request/response models.

Tests Pydantic model validation for the start and verify endpoints.
"""

import pytest
from pydantic import ValidationError

from src.api.models import GateResponse, StartRequest, VerifyRequest


class TestStartRequest:
    """Tests for StartRequest model."""

    def test_phrase_kept_verbatim(self) -> None:
        """Whitespace is part of the passphrase."""
        assert StartRequest(phrase=" abc ").phrase == " abc "

    def test_missing_phrase_defaults_to_empty(self) -> None:
        assert StartRequest().phrase == ""

    def test_null_phrase_becomes_empty(self) -> None:
        assert StartRequest(phrase=None).phrase == ""

    def test_number_coerced_to_string(self) -> None:
        assert StartRequest.model_validate({"phrase": 1234}).phrase == "1234"


class TestVerifyRequest:
    """Tests for VerifyRequest model."""

    def test_numeric_code_coerced(self) -> None:
        assert VerifyRequest.model_validate({"code": 123456}).code == "123456"

    def test_shape_not_checked_here(self) -> None:
        """Format errors are reported by the gate after session checks."""
        assert VerifyRequest(code="!!").code == "!!"

    def test_missing_code_defaults_to_empty(self) -> None:
        assert VerifyRequest().code == ""


class TestGateResponse:
    """Tests for GateResponse model."""

    def test_serializes(self) -> None:
        assert GateResponse(ok=True, message="Verified, welcome!").model_dump() == {
            "ok": True,
            "message": "Verified, welcome!",
        }

    def test_requires_fields(self) -> None:
        with pytest.raises(ValidationError):
            GateResponse()  # type: ignore[call-arg]
