"""
Deck containers.

A deck is three independent ordered zones. Order is display order and is
changed by insertion, removal, drag-reorder and sorting.
"""

from dataclasses import dataclass, field
from enum import Enum

from ygodeck.models.card import Card


class DeckZone(str, Enum):
    """The three deck zones."""

    MAIN = "main"
    EXTRA = "extra"
    SIDE = "side"


ZONE_CAPACITY: dict[DeckZone, int] = {
    DeckZone.MAIN: 60,
    DeckZone.EXTRA: 15,
    DeckZone.SIDE: 15,
}

# Universal cap on copies of one card across main + extra + side
MAX_COPIES = 3


@dataclass
class Deck:
    """Mutable main/extra/side card lists."""

    main: list[Card] = field(default_factory=list)
    extra: list[Card] = field(default_factory=list)
    side: list[Card] = field(default_factory=list)

    def zone(self, zone: DeckZone) -> list[Card]:
        """The list backing a zone (mutations affect the deck)."""
        if zone == DeckZone.MAIN:
            return self.main
        if zone == DeckZone.EXTRA:
            return self.extra
        return self.side

    def all_cards(self) -> list[Card]:
        """Main + extra + side, in that order."""
        return [*self.main, *self.extra, *self.side]

    def count_copies(self, card_id: int) -> int:
        """Number of cards across all zones with exactly this id (cid is ignored)."""
        return sum(1 for card in self.all_cards() if card.id == card_id)

    def is_full(self, zone: DeckZone) -> bool:
        return len(self.zone(zone)) >= ZONE_CAPACITY[zone]

    def clear(self) -> None:
        self.main.clear()
        self.extra.clear()
        self.side.clear()

    def ids(self, zone: DeckZone) -> list[int]:
        return [card.id for card in self.zone(zone)]


@dataclass(frozen=True)
class DeckSnapshot:
    """
    Immutable view of a deck handed to deck-changed listeners.

    Attributes:
        main: Main deck cards in display order
        extra: Extra deck cards in display order
        side: Side deck cards in display order
        format: Active format name
        genesys_total: Point total (0 unless the format is GENESYS)
        show_genesys_total: True only in GENESYS
    """

    main: tuple[Card, ...] = ()
    extra: tuple[Card, ...] = ()
    side: tuple[Card, ...] = ()
    format: str = ""
    genesys_total: int = 0
    show_genesys_total: bool = False

    def zone(self, zone: DeckZone) -> tuple[Card, ...]:
        return {DeckZone.MAIN: self.main, DeckZone.EXTRA: self.extra, DeckZone.SIDE: self.side}[
            zone
        ]
