"""
GENESYS point scoring.

GENESYS replaces the forbidden/limited list with a point budget: each card
costs a number of points and the deck carries a total. Score tables are keyed
by English card name, so cards are matched through a name→id resolution
table first and through a normalized-name index second.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ygodeck.models.card import TYPE_LINK, TYPE_PENDULUM, Card
from ygodeck.models.deck import Deck
from ygodeck.models.formats import DeckFormat

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: object) -> str:
    """
    Normalize a card name for score lookup.

    "Pot of Greed" and "POT-OF-GREED" both normalize to "pot of greed".
    Names without any ASCII letters or digits normalize to "".
    """
    s = str(name or "").lower().replace("&amp;", "and")
    s = _NON_ALNUM.sub(" ", s)
    return _WHITESPACE.sub(" ", s).strip()


@dataclass(frozen=True)
class GenesysIndex:
    """
    Lookup structures for GENESYS points.

    Attributes:
        by_id: str(id) / str(cid) → points, built from the name→id table
        idx: normalized name → points
    """

    by_id: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    idx: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))


def _as_points(value: Any) -> int | None:
    try:
        points = int(value)
    except (TypeError, ValueError):
        return None
    return points if points >= 0 else None


def build_genesys_index(
    scores: Mapping[str, Any],
    name_id_map: Mapping[str, Any],
) -> GenesysIndex:
    """
    Join the score table with the name→id resolution table.

    Args:
        scores: Card name → points, as published
        name_id_map: Source name → {"id": ..., "cid": ..., "name": ...}

    Returns:
        GenesysIndex with read-only mappings. Entries with unusable points are skipped.
    """
    clean_scores: dict[str, int] = {}
    for name, value in scores.items():
        points = _as_points(value)
        if points is not None:
            clean_scores[name] = points

    idx: dict[str, int] = {}
    for name, points in clean_scores.items():
        key = normalize_name(name)
        if key:
            idx[key] = points

    by_id: dict[str, int] = {}
    for source_name, entry in name_id_map.items():
        if not isinstance(entry, dict):
            continue
        candidates = [n for n in (source_name, entry.get("name")) if n]
        score: int | None = None
        for candidate in candidates:
            if candidate in clean_scores:
                score = clean_scores[candidate]
                break
            key = normalize_name(candidate)
            if key in idx:
                score = idx[key]
                break
        if score is None:
            continue
        if entry.get("id"):
            by_id[str(entry["id"])] = score
        if entry.get("cid"):
            by_id[str(entry["cid"])] = score

    return GenesysIndex(by_id=MappingProxyType(by_id), idx=MappingProxyType(idx))


def card_points(card: Card, index: GenesysIndex) -> int:
    """
    Resolve a card's GENESYS points.

    Order: by_id[cid], by_id[id], then the normalized-name index against
    cn_name, name, jp_name. Unknown cards cost 0.
    """
    for key in (card.cid, card.id):
        if key is not None and str(key) in index.by_id:
            return index.by_id[str(key)]

    for name in (card.cn_name, card.name, card.jp_name):
        if not name:
            continue
        key = normalize_name(name)
        if key and key in index.idx:
            return index.idx[key]

    return 0


def deck_points(deck: Deck, index: GenesysIndex) -> int:
    """Total points over main + extra + side."""
    return sum(card_points(card, index) for card in deck.all_cards())


def is_genesys_excluded(card: Card) -> bool:
    """True for pendulum and link cards, which GENESYS does not allow."""
    if "灵摆" in card.type_tags or "连接" in card.type_tags:
        return True
    if card.type_code is not None and card.type_code & (TYPE_PENDULUM | TYPE_LINK):
        return True
    return False


def filter_for_format(cards: Iterable[Card], deck_format: DeckFormat) -> list[Card]:
    """
    Drop cards a format hides from listings.

    Only GENESYS filters anything. This applies to search results and
    "show all" listings, never to deck admission.
    """
    if deck_format != DeckFormat.GENESYS:
        return list(cards)
    return [card for card in cards if not is_genesys_excluded(card)]
