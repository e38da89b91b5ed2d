from dataclasses import dataclass
from typing import Any

# Type bits in the catalog's numeric type field
TYPE_PENDULUM = 0x1000000
TYPE_LINK = 0x4000000

_LEVEL_FIELDS = ("level", "lvl", "rank", "rk")
_LINK_FIELDS = ("linkval", "link", "linkvalCount")


def _as_int(value: Any) -> int | None:
    """Coerce a numeric or numeric-string field, None when not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(float(str(value).strip()))
    except (ValueError, OverflowError):
        return None


def _first_int(source: dict[str, Any], fields: tuple[str, ...]) -> int | None:
    for name in fields:
        if source.get(name) is not None:
            return _as_int(source[name])
    return None


@dataclass(frozen=True, slots=True)
class Card:
    """
    A card record as returned by the catalog.

    Cards are immutable for the whole session. Decks hold references to
    them, so the same Card object may appear several times in a deck.

    Attributes:
        id: Primary numeric card id (the one written to .ydk files)
        cid: Alternate catalog id, preferred for restriction lookups
        name: English/display name
        cn_name: Simplified Chinese name
        jp_name: Japanese name
        type_tags: Free-text type line, e.g. "怪兽|效果|同调"
        level: Explicit level / rank / link rating when the catalog provides one
        link_rating: Explicit link marker count
        description: Card text, used as a fallback for level parsing
        type_code: Catalog type bitmask
        pic: Image URL (pre-release cards carry their own)
        source: "pre" for pre-release cards, None for catalog cards
    """

    id: int
    cid: int | None = None
    name: str | None = None
    cn_name: str | None = None
    jp_name: str | None = None
    type_tags: str = ""
    level: int | None = None
    link_rating: int | None = None
    description: str = ""
    type_code: int | None = None
    pic: str | None = None
    source: str | None = None

    @property
    def candidate_names(self) -> list[str]:
        """Non-empty names in restriction lookup order (jp, name, cn)."""
        return [n for n in (self.jp_name, self.name, self.cn_name) if n]

    @property
    def display_name(self) -> str:
        return self.cn_name or self.name or self.jp_name or str(self.id)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Card":
        """
        Build a Card from a catalog record.

        Level resolution order: data.level/lvl/rank/rk, then the same
        fields at the top level. Numeric strings are accepted.

        Raises:
            ValueError: If the record has no usable numeric id
        """
        card_id = _as_int(record.get("id"))
        cid = _as_int(record.get("cid"))
        if card_id is None:
            if cid is None:
                raise ValueError(f"Card record has no numeric id: {record!r}")
            card_id = cid

        text = record.get("text") or {}
        data = record.get("data") or {}

        level = _first_int(data, _LEVEL_FIELDS)
        if level is None:
            level = _first_int(record, _LEVEL_FIELDS)

        return cls(
            id=card_id,
            cid=cid,
            name=record.get("name") or record.get("en_name"),
            cn_name=record.get("cn_name"),
            jp_name=record.get("jp_name"),
            type_tags=str(text.get("types") or record.get("types") or ""),
            level=level,
            link_rating=_first_int(record, _LINK_FIELDS),
            description=str(text.get("desc") or record.get("desc") or ""),
            type_code=_as_int(data.get("type")),
            pic=record.get("pic"),
            source=record.get("source"),
        )
