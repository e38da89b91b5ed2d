"""
Legality engine.

Gates every "add card to deck" mutation. Checks run in a fixed order and the
first failing check decides the rejection:

1. restriction status of the card in the active format
2. forbidden → reject
3. limited and already 1 copy → reject
4. semi-limited and already 2 copies → reject
5. already 3 copies → reject (every format)
6. target zone at capacity → reject

Copies are counted across main + extra + side by exact card id.
"""

import logging
import re

from ygodeck.models.card import Card
from ygodeck.models.deck import MAX_COPIES, Deck, DeckZone
from ygodeck.models.formats import RestrictionStatus
from ygodeck.models.legality_context import AdmissionResult, LegalityContext, RejectionReason
from ygodeck.services.reference_data import RestrictionMap

logger = logging.getLogger(__name__)

_EXTRA_DECK_TYPES = re.compile(r"融合|同调|超量|连接")

MAIN_GROUPS = frozenset({DeckZone.MAIN, DeckZone.SIDE})
EXTRA_GROUPS = frozenset({DeckZone.EXTRA, DeckZone.SIDE})


def card_groups(card: Card) -> frozenset[DeckZone]:
    """
    Zones a card may be placed in.

    Fusion, synchro, xyz and link monsters go to extra or side. Everything
    else, including cards whose category cannot be determined, goes to main
    or side.
    """
    if _EXTRA_DECK_TYPES.search(card.type_tags or ""):
        return EXTRA_GROUPS
    return MAIN_GROUPS


def resolve_restriction_status(
    card: Card,
    restriction_map: RestrictionMap,
    strict: bool = False,
) -> RestrictionStatus:
    """
    Look up a card's status in one restriction map.

    Precedence:
        1. str(cid) key
        2. str(id) key
        3. exact name key, trying jp_name, name, cn_name
        4. substring containment either way between a key and a name
           (skipped when strict); the first key in map order wins

    Steps 1-3 only count as a hit when the stored status is restrictive.
    """
    if not restriction_map:
        return RestrictionStatus.UNRESTRICTED

    for key in (card.cid, card.id):
        if key is None:
            continue
        status = restriction_map.get(str(key))
        if status:
            return status

    names = card.candidate_names
    for name in names:
        status = restriction_map.get(name)
        if status:
            return status

    if strict:
        return RestrictionStatus.UNRESTRICTED

    for key, status in restriction_map.items():
        if not key:
            continue
        for name in names:
            if key in name or name in key:
                return status

    return RestrictionStatus.UNRESTRICTED


def check_admission(
    card: Card,
    target: DeckZone,
    deck: Deck,
    context: LegalityContext,
    restriction_map: RestrictionMap,
) -> AdmissionResult:
    """
    Decide whether a card may be added to a zone. Does not mutate the deck.

    Args:
        card: Candidate card
        target: Zone the card would be appended to
        deck: Current deck contents
        context: Active format and matching mode
        restriction_map: The restriction map for context.format (ignored for
            formats without a list)

    Returns:
        AdmissionResult. Rejections are results, never exceptions.
    """
    same_count = deck.count_copies(card.id)

    status = RestrictionStatus.UNRESTRICTED
    if context.uses_restriction_list:
        try:
            status = resolve_restriction_status(card, restriction_map, context.strict_matching)
        except Exception:
            # The universal copy cap below still applies
            logger.exception("Restriction lookup failed for card %s", card.id)
            status = RestrictionStatus.UNRESTRICTED

    reason: RejectionReason | None = None
    if status == RestrictionStatus.FORBIDDEN:
        reason = RejectionReason.FORBIDDEN
    elif status == RestrictionStatus.LIMITED and same_count >= 1:
        reason = RejectionReason.LIMITED
    elif status == RestrictionStatus.SEMI_LIMITED and same_count >= 2:
        reason = RejectionReason.SEMI_LIMITED
    elif same_count >= MAX_COPIES:
        reason = RejectionReason.COPY_LIMIT
    elif deck.is_full(target):
        reason = RejectionReason.DECK_FULL

    if reason is not None:
        logger.debug(
            "Rejected card %s for %s in %s: %s",
            card.id,
            target.value,
            context.format.value,
            reason.value,
        )
        return AdmissionResult.reject(reason, target, context, status, same_count)

    return AdmissionResult.admit(target, context, status, same_count)


def add_card(
    card: Card,
    target: DeckZone,
    deck: Deck,
    context: LegalityContext,
    restriction_map: RestrictionMap,
) -> AdmissionResult:
    """Run the admission check and append the card to the target zone on success."""
    result = check_admission(card, target, deck, context, restriction_map)
    if result.admitted:
        deck.zone(target).append(card)
    return result
