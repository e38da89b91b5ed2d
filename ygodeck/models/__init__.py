from ygodeck.models.card import Card
from ygodeck.models.deck import MAX_COPIES, ZONE_CAPACITY, Deck, DeckSnapshot, DeckZone
from ygodeck.models.failure import (
    ApiResponse,
    CatalogUnavailableError,
    FailureDetail,
    FailureKind,
    KnownError,
    OutcomeType,
    RefreshBusyError,
    RefusalError,
    create_known_failure,
    create_refusal,
    create_success,
    create_unknown_failure,
    finalize_response,
    is_finalized,
    rejection_error,
)
from ygodeck.models.formats import DeckFormat, RestrictionStatus, normalize_status
from ygodeck.models.legality_context import (
    REJECTION_MESSAGES,
    AdmissionResult,
    LegalityContext,
    RejectionReason,
)

__all__ = [
    "AdmissionResult",
    "ApiResponse",
    "Card",
    "CatalogUnavailableError",
    "Deck",
    "DeckFormat",
    "DeckSnapshot",
    "DeckZone",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "LegalityContext",
    "MAX_COPIES",
    "OutcomeType",
    "REJECTION_MESSAGES",
    "RefreshBusyError",
    "RefusalError",
    "RejectionReason",
    "RestrictionStatus",
    "ZONE_CAPACITY",
    "create_known_failure",
    "create_refusal",
    "create_success",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
    "normalize_status",
    "rejection_error",
]
