"""
Deck ordering engine.

Main and side decks are ordered monster → spell → trap, extra decks
fusion → synchro → xyz → link. Within a category cards are grouped by
sub-category, then by level (descending), then by id. Spells and traps have
no id tie-break; the sort is stable so their relative order is kept.
"""

import math
import re
from collections.abc import Iterable
from functools import cmp_to_key

from ygodeck.models.card import Card
from ygodeck.models.deck import Deck, DeckZone

OTHER = 9

_STAR_LEVEL = re.compile(r"[★☆]\s*(\d{1,2})")
_LEVEL_TEXT = re.compile(r"等级\s*(\d{1,2})")
_RANK_TEXT = re.compile(r"阶\s*(\d{1,2})")
_LINK_DASH = re.compile(r"LINK[-\s]?(\d+)", re.IGNORECASE)
_LINK_TEXT = re.compile(r"连接\s*(\d{1,2})")

_SPECIAL_SPELL = re.compile(r"仪式|速攻|永续|场地")


def _has(card: Card, keyword: str) -> bool:
    return keyword in (card.type_tags or "")


def main_side_category(card: Card) -> int:
    """Monster 0, spell 1, trap 2, other 9."""
    if _has(card, "怪兽"):
        return 0
    if _has(card, "魔法"):
        return 1
    if _has(card, "陷阱"):
        return 2
    return OTHER


def extra_category(card: Card) -> int:
    """Fusion 0, synchro 1, xyz 2, link 3, other 9."""
    for rank, keyword in enumerate(("融合", "同调", "超量", "连接")):
        if _has(card, keyword):
            return rank
    return OTHER


def monster_sub_category(card: Card) -> int:
    """Normal 0, effect 1, ritual 2, pendulum 3, other 9."""
    if _has(card, "通常"):
        return 0
    # Ritual and pendulum effect monsters sort with their own group
    if _has(card, "效果") and not (_has(card, "仪式") or _has(card, "灵摆")):
        return 1
    if _has(card, "仪式"):
        return 2
    if _has(card, "灵摆"):
        return 3
    return OTHER


def spell_sub_category(card: Card) -> int:
    """Normal 0, ritual 1, quick-play 2, continuous 3, field 4, other 9."""
    for rank, keyword in enumerate(("仪式", "速攻", "永续", "场地"), start=1):
        if _has(card, keyword):
            return rank
    if _has(card, "魔法") and not _SPECIAL_SPELL.search(card.type_tags or ""):
        return 0
    return OTHER


def trap_sub_category(card: Card) -> int:
    """Normal 0, continuous 1, counter 2, other 9."""
    if _has(card, "永续"):
        return 1
    if _has(card, "反击"):
        return 2
    if _has(card, "通常") or _has(card, "陷阱"):
        return 0
    return OTHER


def get_monster_level(card: Card) -> int:
    """
    Level, rank or link rating used for ordering.

    Explicit catalog value first, then the description (★n / ☆n, 等级n, 阶n,
    first pattern that matches), else 0.
    """
    if card.level is not None:
        return card.level
    desc = card.description or ""
    for pattern in (_STAR_LEVEL, _LEVEL_TEXT, _RANK_TEXT):
        match = pattern.search(desc)
        if match:
            return int(match.group(1))
    return 0


def get_link_markers(card: Card) -> float:
    """
    Link marker count.

    Explicit link value first. Non-link cards and link cards whose text
    has no LINK-n / 连接n marker return infinity so they sort last ascending.
    Extra deck ordering does not use this; it orders link monsters by
    get_monster_level like every other extra deck monster.
    """
    if card.link_rating is not None:
        return card.link_rating
    if not _has(card, "连接"):
        return math.inf
    desc = card.description or ""
    for pattern in (_LINK_DASH, _LINK_TEXT):
        match = pattern.search(desc)
        if match:
            return int(match.group(1))
    return math.inf


def sort_id(card: Card) -> int:
    return card.id or card.cid or 0


def _cmp(x: int, y: int) -> int:
    return (x > y) - (x < y)


def compare_main_side(a: Card, b: Card) -> int:
    """Comparator for main and side decks."""
    pa, pb = main_side_category(a), main_side_category(b)
    if pa != pb:
        return _cmp(pa, pb)

    if pa == 0:
        result = _cmp(monster_sub_category(a), monster_sub_category(b))
        if result:
            return result
        result = _cmp(get_monster_level(b), get_monster_level(a))
        if result:
            return result
        return _cmp(sort_id(a), sort_id(b))
    if pa == 1:
        return _cmp(spell_sub_category(a), spell_sub_category(b))
    if pa == 2:
        return _cmp(trap_sub_category(a), trap_sub_category(b))
    return 0


def compare_extra(a: Card, b: Card) -> int:
    """Comparator for the extra deck."""
    result = _cmp(extra_category(a), extra_category(b))
    if result:
        return result
    result = _cmp(get_monster_level(b), get_monster_level(a))
    if result:
        return result
    return _cmp(sort_id(a), sort_id(b))


def sort_zone(cards: Iterable[Card], zone: DeckZone) -> list[Card]:
    """Stable sort of one zone with the comparator that zone uses."""
    comparator = compare_extra if zone == DeckZone.EXTRA else compare_main_side
    return sorted(cards, key=cmp_to_key(comparator))


def sort_deck(deck: Deck) -> None:
    """Sort all three zones in place."""
    for zone in DeckZone:
        cards = deck.zone(zone)
        cards[:] = sort_zone(cards, zone)
