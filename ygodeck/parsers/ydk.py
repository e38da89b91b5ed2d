"""
Parser for the .ydk deck list format.

Format:
    #created by ...
    #main
    <card id>
    ...
    #extra
    <card id>
    ...
    !side
    <card id>
    ...

Digit-only lines belong to the section of the last header seen. Comments,
blank lines and anything else are ignored, as are ids before the first header.
"""

import re
from dataclasses import dataclass, field

from ygodeck.models.deck import Deck, DeckZone

SECTION_HEADERS: dict[str, DeckZone] = {
    "#main": DeckZone.MAIN,
    "#extra": DeckZone.EXTRA,
    "!side": DeckZone.SIDE,
}

ID_PATTERN = re.compile(r"^\d+$")


@dataclass
class YdkDeckIds:
    """Card ids per section, in file order. Ids are normalized (no leading zeros)."""

    main: list[str] = field(default_factory=list)
    extra: list[str] = field(default_factory=list)
    side: list[str] = field(default_factory=list)

    def section(self, zone: DeckZone) -> list[str]:
        return {DeckZone.MAIN: self.main, DeckZone.EXTRA: self.extra, DeckZone.SIDE: self.side}[
            zone
        ]

    def unique_ids(self) -> list[str]:
        """Distinct ids in first-seen order across main, extra, side."""
        return list(dict.fromkeys([*self.main, *self.extra, *self.side]))


def parse_ydk(text: str) -> YdkDeckIds:
    """
    Parse .ydk text into per-section id lists.

    Args:
        text: File contents (LF or CRLF line endings)

    Returns:
        YdkDeckIds. Empty if the input is empty.
    """
    deck = YdkDeckIds()
    section: DeckZone | None = None

    for line in text.splitlines():
        line = line.strip()
        if line in SECTION_HEADERS:
            section = SECTION_HEADERS[line]
            continue
        if section is not None and ID_PATTERN.match(line):
            deck.section(section).append(str(int(line)))

    return deck


def format_ydk(deck: Deck, comment: str = "#created by ygodeck") -> str:
    """Render a deck as .ydk text."""
    lines = [comment if comment.startswith("#") else f"#{comment}"]
    for header, zone in SECTION_HEADERS.items():
        lines.append(header)
        lines.extend(str(card_id) for card_id in deck.ids(zone))
    return "\n".join(lines) + "\n"
