"""
Domain exceptions - Semantic error types for the access gate.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
The API layer maps each type to an HTTP status.
"""


class GateError(Exception):
    """Base class for gate domain errors."""

    message = "Request failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class ConfigurationError(GateError):
    """A required setting is missing."""

    def __init__(self, setting: str) -> None:
        self.setting = setting
        super().__init__(f"Missing configuration: {setting}")


class RateLimited(GateError):
    """Passphrase attempt cap or SMS cooldown tripped."""

    message = "Too many attempts, please try again later."


class AuthenticationMismatch(GateError):
    """Wrong passphrase, or a code the remote service did not accept."""

    message = "That did not work, please try again."


class SessionMissing(GateError):
    """No session cookie was presented."""

    message = "Session missing, please unlock again."


class SessionExpired(GateError):
    """Session cookie does not match a live session record."""

    message = "Session expired, please unlock again."


class InvalidCodeFormat(GateError):
    """Submitted code is not 4-8 alphanumeric characters."""

    message = "Please enter a valid code (4-8 characters)."


class RemoteServiceError(GateError):
    """Verification API transport failure or non-success status."""

    pass


class StoreUnavailable(GateError):
    """Key-value store could not be reached."""

    message = "Service temporarily unavailable."
