"""
Failure Envelope: unified response classification.

Every API endpoint answers with an ApiResponse whose outcome is one of:
- Success: the operation completed
- Refusal: the deck rules declined the operation (expected, explainable)
- KnownFailure: the operation failed for a known reason (busy, catalog down)
- UnknownFailure: anything else

INVARIANT: No raw 500 errors reach the client.

All user-visible responses pass through `finalize_response()`, the single
exit point that guarantees classification.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from ygodeck.models.legality_context import AdmissionResult, RejectionReason


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"

    # Deck rule refusals
    CARD_FORBIDDEN = "card_forbidden"
    CARD_LIMITED = "card_limited"
    CARD_SEMI_LIMITED = "card_semi_limited"
    COPY_LIMIT = "copy_limit"
    DECK_FULL = "deck_full"
    ZONE_NOT_ALLOWED = "zone_not_allowed"

    # Service failures
    REFRESH_BUSY = "refresh_busy"
    CATALOG_UNAVAILABLE = "catalog_unavailable"
    EXTERNAL_API_ERROR = "external_api_error"

    UNKNOWN = "unknown"


REJECTION_KINDS: dict[RejectionReason, FailureKind] = {
    RejectionReason.FORBIDDEN: FailureKind.CARD_FORBIDDEN,
    RejectionReason.LIMITED: FailureKind.CARD_LIMITED,
    RejectionReason.SEMI_LIMITED: FailureKind.CARD_SEMI_LIMITED,
    RejectionReason.COPY_LIMIT: FailureKind.COPY_LIMIT,
    RejectionReason.DECK_FULL: FailureKind.DECK_FULL,
    RejectionReason.ZONE_NOT_ALLOWED: FailureKind.ZONE_NOT_ALLOWED,
}


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    REFUSAL = "refusal"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(..., description="Classification of the failure")
    message: str = Field(..., description="User-appropriate explanation")
    detail: str | None = Field(default=None, description="Additional technical detail")


class ApiResponse(BaseModel, Generic[T]):
    """Universal response envelope for all API endpoints."""

    outcome: OutcomeType
    data: T | None = None
    failure: FailureDetail | None = None


class KnownError(Exception):
    """
    Base class for failures the system can explain.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.status_code = status_code
        super().__init__(message)


class RefusalError(Exception):
    """A deck rule declined the requested change."""

    def __init__(self, kind: FailureKind, message: str, detail: str | None = None):
        self.kind = kind
        self.message = message
        self.detail = detail
        super().__init__(message)


def rejection_error(result: AdmissionResult) -> RefusalError:
    """
    RefusalError describing a rejected admission.

    Raises:
        ValueError: If the result was admitted
    """
    if result.reason is None:
        raise ValueError("Admitted results have no rejection to report")
    return RefusalError(
        REJECTION_KINDS[result.reason],
        result.message,
        detail=f"status={result.status.value or 'unrestricted'} copies={result.same_count}",
    )


class RefreshBusyError(KnownError):
    """Raised when a reference data refresh is requested while one is running."""

    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.REFRESH_BUSY,
            message="A reference data refresh is already in progress.",
            detail="busy",
            status_code=409,
        )


class CatalogUnavailableError(KnownError):
    """Raised when the card catalog could not be reached or answered garbage."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(
            kind=FailureKind.CATALOG_UNAVAILABLE,
            message="Card lookup failed. Try again later.",
            detail=detail,
            status_code=502,
        )


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================

STANDARD_MESSAGES: dict[OutcomeType, str] = {
    OutcomeType.UNKNOWN_FAILURE: "Something went wrong. Try again.",
}

_finalized_responses: set[int] = set()


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the authority boundary.

    Raises:
        ValueError: If success carries failure details or a failure carries none
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    elif response.failure is None:
        raise ValueError(f"{response.outcome.value} response must have failure details")

    _finalized_responses.add(id(response))
    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    """True if the response passed through finalize_response (used by tests)."""
    return id(response) in _finalized_responses


def create_success(data: T) -> ApiResponse[T]:
    response = ApiResponse[T](outcome=OutcomeType.SUCCESS, data=data)
    return finalize_response(response)


def create_refusal(kind: FailureKind, message: str, detail: str | None = None) -> ApiResponse[Any]:
    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.REFUSAL,
        failure=FailureDetail(kind=kind, message=message, detail=detail),
    )
    return finalize_response(response)


def create_known_failure(error: KnownError) -> ApiResponse[Any]:
    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.KNOWN_FAILURE,
        failure=FailureDetail(kind=error.kind, message=error.message, detail=error.detail),
    )
    return finalize_response(response)


def create_unknown_failure(exception: Exception) -> ApiResponse[Any]:
    """Unknown failure envelope. The message is fixed; only the exception type is exposed."""
    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            message=STANDARD_MESSAGES[OutcomeType.UNKNOWN_FAILURE],
            detail=type(exception).__name__,
        ),
    )
    return finalize_response(response)
