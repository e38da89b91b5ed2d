"""
Deck session.

The session owns one deck and the active format, and is the only place deck
contents change. Every change goes through the legality engine (for
additions) or a zone check (for moves). After each change the session
notifies its listeners with a DeckSnapshot, so presentation code can
re-render and show the GENESYS total without the core rendering anything.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from ygodeck.models.card import Card
from ygodeck.models.deck import ZONE_CAPACITY, Deck, DeckSnapshot, DeckZone
from ygodeck.models.failure import CatalogUnavailableError, FailureKind, KnownError, RefusalError
from ygodeck.models.formats import DeckFormat
from ygodeck.models.legality_context import AdmissionResult, LegalityContext, RejectionReason
from ygodeck.parsers.ydk import format_ydk, parse_ydk
from ygodeck.services.card_catalog import CardCatalog
from ygodeck.services.deck_order import sort_deck
from ygodeck.services.genesys import deck_points
from ygodeck.services.legality import add_card, card_groups
from ygodeck.services.reference_data import ReferenceDataStore

logger = logging.getLogger(__name__)

DeckListener = Callable[[DeckSnapshot], None]


@dataclass
class ImportResult:
    """Outcome of a .ydk import."""

    added: int = 0
    missing_ids: list[str] = field(default_factory=list)
    rejected: list[tuple[str, DeckZone, RejectionReason]] = field(default_factory=list)


class DeckSession:
    """
    Deck state for one user session.

    Created empty at session start, reset by clear(), discarded at the end
    of the session.
    """

    def __init__(
        self,
        reference: ReferenceDataStore,
        deck_format: DeckFormat = DeckFormat.OCG,
        strict_matching: bool = False,
        ydk_comment: str = "#created by ygodeck",
    ) -> None:
        self._reference = reference
        self._format = deck_format
        self._strict_matching = strict_matching
        self._ydk_comment = ydk_comment
        self._deck = Deck()
        self._listeners: list[DeckListener] = []

    @property
    def deck(self) -> Deck:
        return self._deck

    @property
    def format(self) -> DeckFormat:
        return self._format

    @property
    def context(self) -> LegalityContext:
        return LegalityContext(format=self._format, strict_matching=self._strict_matching)

    # -- listeners -----------------------------------------------------------

    def subscribe(self, listener: DeckListener) -> Callable[[], None]:
        """Register a deck-changed listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> DeckSnapshot:
        show_total = self._format == DeckFormat.GENESYS
        total = deck_points(self._deck, self._reference.genesys_index()) if show_total else 0
        return DeckSnapshot(
            main=tuple(self._deck.main),
            extra=tuple(self._deck.extra),
            side=tuple(self._deck.side),
            format=self._format.value,
            genesys_total=total,
            show_genesys_total=show_total,
        )

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                # Deck state is already updated at this point
                logger.exception("Deck listener %r failed", listener)

    # -- mutations -----------------------------------------------------------

    def add_card(self, card: Card, zone: DeckZone) -> AdmissionResult:
        """
        Add a card through the legality gate.

        The caller is responsible for only offering zones in card_groups(card).
        """
        result = add_card(
            card,
            zone,
            self._deck,
            self.context,
            self._reference.restriction_map(self._format),
        )
        if result.admitted:
            self._notify()
        return result

    def remove_card(self, zone: DeckZone, index: int) -> Card:
        """
        Remove the card at index from a zone.

        Raises:
            KnownError: If the index is out of range
        """
        cards = self._deck.zone(zone)
        if not 0 <= index < len(cards):
            raise KnownError(
                kind=FailureKind.NOT_FOUND,
                message=f"No card at position {index} in the {zone.value} deck.",
                status_code=404,
            )
        card = cards.pop(index)
        self._notify()
        return card

    def move_card(self, zone: DeckZone, from_index: int, to_index: int) -> None:
        """Reorder a card within one zone (drag and drop)."""
        cards = self._deck.zone(zone)
        if not 0 <= from_index < len(cards) or not 0 <= to_index < len(cards):
            raise KnownError(
                kind=FailureKind.INVALID_INPUT,
                message=f"Invalid move in the {zone.value} deck.",
                detail=f"from={from_index} to={to_index} size={len(cards)}",
            )
        if from_index == to_index:
            return
        card = cards.pop(from_index)
        cards.insert(to_index, card)
        self._notify()

    def transfer_card(
        self,
        source: DeckZone,
        index: int,
        target: DeckZone,
        insert_at: int | None = None,
    ) -> None:
        """
        Move a card between zones (main ↔ side, extra ↔ side).

        The copy count does not change, so only zone membership and the
        target's capacity are checked.

        Raises:
            KnownError: If the index is out of range
            RefusalError: If the card may not go to the target zone or it is full
        """
        if source == target:
            if insert_at is None:
                insert_at = len(self._deck.zone(source)) - 1
            self.move_card(source, index, insert_at)
            return

        cards = self._deck.zone(source)
        if not 0 <= index < len(cards):
            raise KnownError(
                kind=FailureKind.NOT_FOUND,
                message=f"No card at position {index} in the {source.value} deck.",
                status_code=404,
            )
        card = cards[index]
        if target not in card_groups(card):
            raise RefusalError(
                FailureKind.ZONE_NOT_ALLOWED,
                f"This card cannot be placed in the {target.value} deck.",
            )
        if self._deck.is_full(target):
            raise RefusalError(FailureKind.DECK_FULL, "deck full")

        destination = self._deck.zone(target)
        position = len(destination)
        if insert_at is not None:
            position = max(0, min(insert_at, len(destination)))
        cards.pop(index)
        destination.insert(position, card)
        self._notify()

    def sort(self) -> None:
        sort_deck(self._deck)
        self._notify()

    def clear(self) -> None:
        self._deck.clear()
        self._notify()

    def set_format(self, deck_format: DeckFormat) -> None:
        """Switch format. Deck contents are left as they are."""
        self._format = deck_format
        self._notify()

    # -- import / export -----------------------------------------------------

    def export_ydk(self) -> str:
        """
        Render the deck as .ydk text.

        Raises:
            KnownError: If the extra or side deck is over capacity
        """
        for zone in (DeckZone.EXTRA, DeckZone.SIDE):
            if len(self._deck.zone(zone)) > ZONE_CAPACITY[zone]:
                raise KnownError(
                    kind=FailureKind.INVALID_INPUT,
                    message=(
                        f"The {zone.value} deck cannot have more than {ZONE_CAPACITY[zone]} cards."
                    ),
                )
        return format_ydk(self._deck, self._ydk_comment)

    async def import_ydk(self, text: str, catalog: CardCatalog) -> ImportResult:
        """
        Replace the deck with the contents of a .ydk file.

        Cards are resolved through the catalog and re-added in file order
        through the legality gate. Ids the catalog does not know are skipped,
        and cards listed under a zone they may not occupy are rejected.

        Raises:
            CatalogUnavailableError: If card lookup failed (the deck is left unchanged)
        """
        ids = parse_ydk(text)
        id_to_card = await catalog.fetch_by_ids(ids.unique_ids())
        if id_to_card is None:
            raise CatalogUnavailableError("ydk import lookup failed")

        self._deck.clear()
        result = ImportResult()
        context = self.context
        restriction_map = self._reference.restriction_map(self._format)

        for zone in DeckZone:
            for card_id in ids.section(zone):
                card = id_to_card.get(card_id)
                if card is None:
                    result.missing_ids.append(card_id)
                    continue
                if zone not in card_groups(card):
                    result.rejected.append((card_id, zone, RejectionReason.ZONE_NOT_ALLOWED))
                    continue
                admission = add_card(card, zone, self._deck, context, restriction_map)
                if admission.admitted:
                    result.added += 1
                elif admission.reason is not None:
                    result.rejected.append((card_id, zone, admission.reason))

        logger.info(
            "Imported ydk: %d added, %d unknown ids, %d rejected",
            result.added,
            len(result.missing_ids),
            len(result.rejected),
        )
        self._notify()
        return result
