"""
Failure Envelope: Unified Response Classification.

Every error the engine raises on purpose is a KnownError subclass carrying
a FailureKind, a user-facing message and an HTTP status code. The API layer
turns them into an ApiResponse envelope; anything else becomes a fixed
"unknown failure" envelope.

INVARIANT: No raw 500 errors may reach the storefront.

Response types:
- Success: Operation completed successfully
- KnownFailure: System knows why it failed (bad configuration, tampered
  pricing, storage outage, ...)
- UnknownFailure: System does not know why it failed
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, PrivateAttr


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    INVALID_CONFIGURATION = "invalid_configuration"
    INVALID_QUANTITY = "invalid_quantity"
    VALIDATION_FAILED = "validation_failed"
    PRICING_MISMATCH = "pricing_mismatch"

    # Resource failures
    NOT_FOUND = "not_found"

    # Lifecycle violations
    INVALID_TRANSITION = "invalid_transition"

    # Collaborator failures
    STORAGE_ERROR = "storage_error"
    NOTIFICATION_FAILED = "notification_failed"
    EXTERNAL_API_ERROR = "external_api_error"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel, Generic[T]):
    """
    Response envelope for failures and classified successes.

    Every failure is classified into one of the outcome types so the
    storefront can show the specific reason instead of a raw error page.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    # Set only by finalize_response(); never serialized
    _finalized: bool = PrivateAttr(default=False)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """
        Create a known failure response.

        Use when the system knows exactly why the operation failed.
        Example: unknown material, tampered total, order not found.
        """
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )

    @classmethod
    def unknown_failure(
        cls,
        detail: str | None = None,
    ) -> "ApiResponse[Any]":
        """
        Create an unknown failure response.

        NOTE: Prefer create_unknown_failure() which auto-finalizes.
        """
        return cls(
            outcome=OutcomeType.UNKNOWN_FAILURE,
            failure=FailureDetail(
                kind=FailureKind.UNKNOWN,
                message=STANDARD_MESSAGES[OutcomeType.UNKNOWN_FAILURE],
                detail=detail,
                suggestion=STANDARD_SUGGESTIONS[OutcomeType.UNKNOWN_FAILURE],
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================
#
# Exception handlers in main.py are the only place error envelopes leave
# the service. They all pass through finalize_response().
#
# =============================================================================


# Standard messages: fixed, boring, predictable

STANDARD_MESSAGES: dict[OutcomeType, str] = {
    OutcomeType.UNKNOWN_FAILURE: (
        "Something went wrong and we don't know why. Please try again."
    ),
}

STANDARD_SUGGESTIONS: dict[OutcomeType, str] = {
    OutcomeType.UNKNOWN_FAILURE: "If this persists, please contact support.",
}


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the authority boundary.

    Raises:
        ValueError: If response structure is invalid
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    else:
        if response.failure is None:
            raise ValueError(f"{response.outcome.value} response must have failure details")

    response._finalized = True

    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    """Check if a response has passed through the authority boundary."""
    return response._finalized


def create_unknown_failure(
    exception: Exception,
    include_type: bool = True,
) -> ApiResponse[Any]:
    """
    Create an unknown failure response from an exception.

    The message is fixed and cannot be customized; only the exception
    type name is exposed as detail.
    """
    detail = None
    if include_type:
        detail = f"{type(exception).__name__}"

    return finalize_response(ApiResponse.unknown_failure(detail=detail))


def create_known_failure(error: KnownError) -> ApiResponse[Any]:
    """Create a finalized known failure response from a KnownError."""
    return finalize_response(error.to_response())

