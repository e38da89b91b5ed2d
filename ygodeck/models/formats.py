"""
Deck formats and restriction statuses.

The restriction vocabulary differs by source list (Japanese for OCG, English
for TCG/AE, Chinese for CN). Everything is normalized into the four
RestrictionStatus values before the legality engine sees it.
"""

from enum import Enum


class DeckFormat(str, Enum):
    """Supported deck building formats."""

    OCG = "OCG"
    TCG = "TCG"
    CN = "CN"
    AE = "AE"
    GENESYS = "GENESYS"
    NO_FORBIDDEN = "NO_FORBIDDEN"

    @property
    def has_restriction_list(self) -> bool:
        """True for formats governed by a forbidden/limited list."""
        return self in RESTRICTED_FORMATS


RESTRICTED_FORMATS = frozenset({DeckFormat.OCG, DeckFormat.TCG, DeckFormat.CN, DeckFormat.AE})


class RestrictionStatus(str, Enum):
    """Normalized forbidden/limited status of a card."""

    FORBIDDEN = "禁止"
    LIMITED = "限制"
    SEMI_LIMITED = "准限制"
    UNRESTRICTED = ""

    @property
    def max_copies(self) -> int | None:
        """Copy allowance implied by the status, None when only the universal cap applies."""
        return _STATUS_ALLOWANCE.get(self)


_STATUS_ALLOWANCE = {
    RestrictionStatus.FORBIDDEN: 0,
    RestrictionStatus.LIMITED: 1,
    RestrictionStatus.SEMI_LIMITED: 2,
}


def normalize_status(raw: object, source: DeckFormat | None = None) -> RestrictionStatus:
    """
    Collapse a source-specific status label into a RestrictionStatus.

    Args:
        raw: Label as found in the source list (e.g. "準制限", "Semi-Limited", "半限制")
        source: Format the list belongs to; None applies the generic rules

    Returns:
        Normalized status. Unknown labels are treated as unrestricted.
    """
    s = str(raw or "").strip()
    if not s:
        return RestrictionStatus.UNRESTRICTED
    lower = s.lower()

    if source == DeckFormat.CN:
        if "禁止" in s:
            return RestrictionStatus.FORBIDDEN
        # 准限制 must be checked before 限制
        if "准" in s:
            return RestrictionStatus.SEMI_LIMITED
        if "半" in s and "限" in s:
            return RestrictionStatus.SEMI_LIMITED
        if "限制" in s:
            return RestrictionStatus.LIMITED
    elif source == DeckFormat.OCG:
        if "禁止" in s:
            return RestrictionStatus.FORBIDDEN
        if "準" in s or "准" in s:
            return RestrictionStatus.SEMI_LIMITED
        if "制限" in s:
            return RestrictionStatus.LIMITED
    elif source in (DeckFormat.TCG, DeckFormat.AE):
        if "forbid" in lower:
            return RestrictionStatus.FORBIDDEN
        if "semi" in lower:
            return RestrictionStatus.SEMI_LIMITED
        if "limit" in lower:
            return RestrictionStatus.LIMITED
    else:
        if "forbid" in lower or "禁止" in s:
            return RestrictionStatus.FORBIDDEN
        if "semi" in lower or "半" in s or "准" in s or "準" in s:
            return RestrictionStatus.SEMI_LIMITED
        if "limit" in lower or "限制" in s or "制限" in s:
            return RestrictionStatus.LIMITED

    # Lists that already carry normalized labels
    try:
        return RestrictionStatus(s)
    except ValueError:
        return RestrictionStatus.UNRESTRICTED
