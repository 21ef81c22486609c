"""Storefront error taxonomy.

Every error here is recoverable. The checkout orchestrator handles them at
its boundary and turns them into user-facing messages or navigation.
"""

from enum import Enum


class StorefrontError(Exception):
    """Base class for all storefront errors."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "")
        self.message = message


class ValidationError(StorefrontError):
    """Local input error, e.g. a missing shipping address field.

    ``messages`` maps a field name to a list of messages for that field.
    """

    def __init__(self, message: str, messages: dict[str, list[str]] | None = None) -> None:
        super().__init__(message)
        self.messages = messages or {}


class AuthRequiredError(StorefrontError):
    """Checkout was attempted without an authenticated user."""

    def __init__(self, intent: str = "checkout") -> None:
        super().__init__("Authentication required")
        self.intent = intent


class SubmissionErrorKind(Enum):
    REJECTED = "Rejected"
    NETWORK = "Network"
    TIMEOUT = "Timeout"
    INVALID_RESPONSE = "InvalidResponse"


class SubmissionError(StorefrontError):
    """The backend rejected the order or could not be reached.

    ``message`` is shown verbatim to the user when present.
    """

    def __init__(
        self,
        message: str | None = None,
        kind: SubmissionErrorKind = SubmissionErrorKind.REJECTED,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
