"""
Legality Context: explicit format for every admission check.

INVARIANT: Admission checks never read a global "current format".
The caller passes a LegalityContext, which makes format switches testable
and keeps the decision auditable.

A LegalityContext captures:
1. The active format (OCG, TCG, CN, AE, GENESYS, NO_FORBIDDEN)
2. Whether restriction lookups may fall back to substring name matching
"""

from dataclasses import dataclass
from enum import Enum

from ygodeck.models.deck import DeckZone
from ygodeck.models.formats import DeckFormat, RestrictionStatus


class RejectionReason(str, Enum):
    """Why a card was not admitted."""

    FORBIDDEN = "forbidden"
    LIMITED = "limited"
    SEMI_LIMITED = "semi_limited"
    COPY_LIMIT = "copy_limit"
    DECK_FULL = "deck_full"
    ZONE_NOT_ALLOWED = "zone_not_allowed"


REJECTION_MESSAGES: dict[RejectionReason, str] = {
    RejectionReason.FORBIDDEN: "forbidden in this format",
    RejectionReason.LIMITED: "limited to 1 copy",
    RejectionReason.SEMI_LIMITED: "semi-limited to 2 copies",
    RejectionReason.COPY_LIMIT: "maximum 3 copies of a named card",
    RejectionReason.DECK_FULL: "deck full",
    RejectionReason.ZONE_NOT_ALLOWED: "not allowed in this deck zone",
}


@dataclass(frozen=True, slots=True)
class LegalityContext:
    """
    Explicit context for an admission decision.

    Attributes:
        format: The format whose restriction list applies
        strict_matching: Disable the substring name fallback in restriction lookups
    """

    format: DeckFormat
    strict_matching: bool = False

    @property
    def uses_restriction_list(self) -> bool:
        return self.format.has_restriction_list


@dataclass(frozen=True, slots=True)
class AdmissionResult:
    """
    Outcome of an admission check.

    Rejections are ordinary results, never exceptions.
    """

    admitted: bool
    zone: DeckZone
    context: LegalityContext
    status: RestrictionStatus = RestrictionStatus.UNRESTRICTED
    same_count: int = 0
    reason: RejectionReason | None = None

    @property
    def message(self) -> str:
        if self.reason is None:
            return ""
        return REJECTION_MESSAGES[self.reason]

    @classmethod
    def admit(
        cls,
        zone: DeckZone,
        context: LegalityContext,
        status: RestrictionStatus,
        same_count: int,
    ) -> "AdmissionResult":
        return cls(
            admitted=True, zone=zone, context=context, status=status, same_count=same_count
        )

    @classmethod
    def reject(
        cls,
        reason: RejectionReason,
        zone: DeckZone,
        context: LegalityContext,
        status: RestrictionStatus,
        same_count: int,
    ) -> "AdmissionResult":
        return cls(
            admitted=False,
            zone=zone,
            context=context,
            status=status,
            same_count=same_count,
            reason=reason,
        )
