"""Response models shared by the API routers."""

from pydantic import BaseModel, Field

from ygodeck.models.card import Card
from ygodeck.models.deck import DeckSnapshot, DeckZone
from ygodeck.models.formats import DeckFormat
from ygodeck.services.genesys import card_points
from ygodeck.services.legality import card_groups, resolve_restriction_status
from ygodeck.services.reference_data import ReferenceSnapshot


class CardResponse(BaseModel):
    """A card with the derived data the deck editor shows."""

    id: int
    cid: int | None = None
    name: str | None = None
    cn_name: str | None = None
    jp_name: str | None = None
    types: str = ""
    level: int | None = None
    pic: str | None = None
    source: str | None = None
    groups: list[DeckZone] = Field(default_factory=list)
    restriction: str = Field(
        default="",
        description="Restriction status in the active format (禁止 / 限制 / 准限制 / empty)",
    )
    genesys_points: int | None = Field(
        default=None,
        description="Point cost, present only when the active format is GENESYS",
    )


class DeckStateResponse(BaseModel):
    """Current deck contents in display order."""

    format: DeckFormat
    main: list[CardResponse] = Field(default_factory=list)
    extra: list[CardResponse] = Field(default_factory=list)
    side: list[CardResponse] = Field(default_factory=list)
    main_count: int = 0
    extra_count: int = 0
    side_count: int = 0
    genesys_total: int = 0
    show_genesys_total: bool = False


def card_to_response(
    card: Card,
    deck_format: DeckFormat,
    reference: ReferenceSnapshot,
    strict_matching: bool = False,
) -> CardResponse:
    restriction = ""
    if deck_format.has_restriction_list:
        restriction = resolve_restriction_status(
            card, reference.restriction_map(deck_format), strict_matching
        ).value

    points: int | None = None
    if deck_format == DeckFormat.GENESYS:
        points = card_points(card, reference.genesys)

    return CardResponse(
        id=card.id,
        cid=card.cid,
        name=card.name,
        cn_name=card.cn_name,
        jp_name=card.jp_name,
        types=card.type_tags,
        level=card.level,
        pic=card.pic,
        source=card.source,
        groups=sorted(card_groups(card), key=list(DeckZone).index),
        restriction=restriction,
        genesys_points=points,
    )


def snapshot_to_response(
    snapshot: DeckSnapshot,
    reference: ReferenceSnapshot,
    strict_matching: bool = False,
) -> DeckStateResponse:
    deck_format = DeckFormat(snapshot.format)

    def convert(cards: tuple[Card, ...]) -> list[CardResponse]:
        return [card_to_response(c, deck_format, reference, strict_matching) for c in cards]

    return DeckStateResponse(
        format=deck_format,
        main=convert(snapshot.main),
        extra=convert(snapshot.extra),
        side=convert(snapshot.side),
        main_count=len(snapshot.main),
        extra_count=len(snapshot.extra),
        side_count=len(snapshot.side),
        genesys_total=snapshot.genesys_total,
        show_genesys_total=snapshot.show_genesys_total,
    )

