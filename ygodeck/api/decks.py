"""
Deck API endpoints.

Every mutation goes through the DeckSession. Successful calls return the
new deck state; rule violations are raised as RefusalError and turned into
refusal envelopes by the application's exception handlers.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from ygodeck.api.dependencies import get_card_catalog, get_deck_session, get_reference_store
from ygodeck.api.schemas import DeckStateResponse, snapshot_to_response
from ygodeck.models.card import Card
from ygodeck.models.deck import DeckZone
from ygodeck.models.failure import (
    ApiResponse,
    FailureKind,
    KnownError,
    RefusalError,
    create_success,
    rejection_error,
)
from ygodeck.models.formats import DeckFormat
from ygodeck.services.card_catalog import CardCatalog
from ygodeck.services.deck_session import DeckSession
from ygodeck.services.legality import card_groups
from ygodeck.services.reference_data import ReferenceDataStore

router = APIRouter(prefix="/deck", tags=["deck"])

SessionDep = Annotated[DeckSession, Depends(get_deck_session)]
ReferenceDep = Annotated[ReferenceDataStore, Depends(get_reference_store)]


class AddCardRequest(BaseModel):
    """A catalog record to add, exactly as returned by search."""

    card: dict[str, Any] = Field(..., examples=[{"id": 89631139, "cn_name": "青眼白龙"}])


class MoveCardRequest(BaseModel):
    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)


class TransferCardRequest(BaseModel):
    source: DeckZone
    index: int = Field(..., ge=0)
    target: DeckZone
    insert_at: int | None = Field(default=None, ge=0)


class FormatRequest(BaseModel):
    format: DeckFormat


class ImportRequest(BaseModel):
    text: str = Field(..., description="Contents of a .ydk file")


class ImportResponse(BaseModel):
    deck: DeckStateResponse
    added: int
    missing_ids: list[str] = Field(default_factory=list)
    rejected: list[dict[str, str]] = Field(default_factory=list)


def _state(session: DeckSession, store: ReferenceDataStore) -> DeckStateResponse:
    return snapshot_to_response(
        session.snapshot(), store.snapshot(), session.context.strict_matching
    )


@router.get("", response_model=ApiResponse[DeckStateResponse])
async def get_deck(session: SessionDep, store: ReferenceDep) -> ApiResponse[Any]:
    """Current deck contents and GENESYS total."""
    return create_success(_state(session, store))


@router.post("/{zone}/cards", response_model=ApiResponse[DeckStateResponse])
async def add_card(
    zone: DeckZone,
    request: AddCardRequest,
    session: SessionDep,
    store: ReferenceDep,
) -> ApiResponse[Any]:
    """
    Add a card to a zone.

    Refused when the zone does not take this kind of card or the legality
    engine rejects it.
    """
    try:
        card = Card.from_record(request.card)
    except ValueError as e:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="The card record has no usable id.",
            detail=str(e),
        ) from e

    if zone not in card_groups(card):
        raise RefusalError(
            FailureKind.ZONE_NOT_ALLOWED,
            f"This card cannot be placed in the {zone.value} deck.",
        )

    result = session.add_card(card, zone)
    if not result.admitted:
        raise rejection_error(result)
    return create_success(_state(session, store))


@router.delete("/{zone}/cards/{index}", response_model=ApiResponse[DeckStateResponse])
async def remove_card(
    zone: DeckZone,
    index: int,
    session: SessionDep,
    store: ReferenceDep,
) -> ApiResponse[Any]:
    session.remove_card(zone, index)
    return create_success(_state(session, store))


@router.post("/{zone}/move", response_model=ApiResponse[DeckStateResponse])
async def move_card(
    zone: DeckZone,
    request: MoveCardRequest,
    session: SessionDep,
    store: ReferenceDep,
) -> ApiResponse[Any]:
    """Reorder a card within a zone."""
    session.move_card(zone, request.from_index, request.to_index)
    return create_success(_state(session, store))


@router.post("/transfer", response_model=ApiResponse[DeckStateResponse])
async def transfer_card(
    request: TransferCardRequest,
    session: SessionDep,
    store: ReferenceDep,
) -> ApiResponse[Any]:
    """Move a card between main/extra and side."""
    session.transfer_card(request.source, request.index, request.target, request.insert_at)
    return create_success(_state(session, store))


@router.post("/sort", response_model=ApiResponse[DeckStateResponse])
async def sort_deck(session: SessionDep, store: ReferenceDep) -> ApiResponse[Any]:
    session.sort()
    return create_success(_state(session, store))


@router.post("/clear", response_model=ApiResponse[DeckStateResponse])
async def clear_deck(session: SessionDep, store: ReferenceDep) -> ApiResponse[Any]:
    session.clear()
    return create_success(_state(session, store))


@router.put("/format", response_model=ApiResponse[DeckStateResponse])
async def set_format(
    request: FormatRequest,
    session: SessionDep,
    store: ReferenceDep,
) -> ApiResponse[Any]:
    """Switch the active format. The deck itself is not changed."""
    session.set_format(request.format)
    return create_success(_state(session, store))


@router.get("/export", response_class=PlainTextResponse)
async def export_deck(session: SessionDep) -> PlainTextResponse:
    """Download the deck as a .ydk file."""
    return PlainTextResponse(
        session.export_ydk(),
        headers={"Content-Disposition": 'attachment; filename="deck.ydk"'},
    )


@router.post("/import", response_model=ApiResponse[ImportResponse])
async def import_deck(
    request: ImportRequest,
    session: SessionDep,
    store: ReferenceDep,
    catalog: Annotated[CardCatalog, Depends(get_card_catalog)],
) -> ApiResponse[Any]:
    """Replace the deck with a .ydk file's contents."""
    result = await session.import_ydk(request.text, catalog)
    return create_success(
        ImportResponse(
            deck=_state(session, store),
            added=result.added,
            missing_ids=result.missing_ids,
            rejected=[
                {"id": card_id, "zone": zone.value, "reason": reason.value}
                for card_id, zone, reason in result.rejected
            ],
        )
    )
