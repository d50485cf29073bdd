"""Exception types shared by the data, auth and service layers.

Pages catch these and show ``str(exc)`` in an error banner, so messages are
written for the person using the dashboard.
"""
from __future__ import annotations

from typing import Optional

# Postgres unique_violation, reported by PostgREST and mirrored by the CSV backend
UNIQUE_VIOLATION = "23505"


class SteelOpsError(Exception):
    """Base class for all application errors."""


class DataAccessError(SteelOpsError):
    """A read or write against the data service failed."""

    def __init__(self, message: str, code: Optional[str] = None, constraint: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.constraint = constraint


class DuplicateKeyError(DataAccessError):
    """An insert violated a unique constraint."""

    def __init__(self, message: str, constraint: Optional[str] = None) -> None:
        super().__init__(message, code=UNIQUE_VIOLATION, constraint=constraint)


class AuthenticationError(SteelOpsError):
    """The identity provider rejected a sign up / sign in request."""


class NotAuthenticatedError(SteelOpsError):
    """A write was attempted without a signed-in user."""


class FormError(SteelOpsError):
    """User supplied form input failed validation."""


class CheckoutError(SteelOpsError):
    """A checkout step could not be completed."""


class PaymentValidationError(CheckoutError):
    """Card details failed validation."""


class InvalidOtpError(CheckoutError):
    def __init__(self, remaining_attempts: int) -> None:
        super().__init__(f"Invalid OTP. {remaining_attempts} attempts remaining.")
        self.remaining_attempts = remaining_attempts


class OtpAttemptsExceededError(CheckoutError):
    def __init__(self) -> None:
        super().__init__("Maximum OTP attempts exceeded. Please restart the payment process.")


class PaymentGatewayError(SteelOpsError):
    """The payment gateway could not authorize, confirm or void a payment."""


class ChatError(SteelOpsError):
    """The chat completion API did not return a reply."""
