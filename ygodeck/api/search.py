"""
Card search endpoint.

Pre-release matches are listed first, then catalog results. In GENESYS,
pendulum and link cards are hidden from the results.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from ygodeck.api.dependencies import get_card_catalog, get_deck_session, get_reference_store
from ygodeck.api.schemas import CardResponse, card_to_response
from ygodeck.models.failure import (
    ApiResponse,
    CatalogUnavailableError,
    FailureKind,
    KnownError,
    create_success,
)
from ygodeck.services.card_catalog import CardCatalog, match_prerelease
from ygodeck.services.deck_session import DeckSession
from ygodeck.services.genesys import filter_for_format
from ygodeck.services.reference_data import ReferenceDataStore

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=ApiResponse[list[CardResponse]])
async def search_cards(
    q: Annotated[str, Query(min_length=1, description="Card name, text or id")],
    catalog: Annotated[CardCatalog, Depends(get_card_catalog)],
    store: Annotated[ReferenceDataStore, Depends(get_reference_store)],
    session: Annotated[DeckSession, Depends(get_deck_session)],
) -> ApiResponse[Any]:
    q = q.strip()
    if not q:
        raise KnownError(kind=FailureKind.INVALID_INPUT, message="Enter a card name or id.")

    results = await catalog.search(q)
    if results is None:
        raise CatalogUnavailableError(f"search failed for {q!r}")

    reference = store.snapshot()
    cards = [*match_prerelease(q, reference.prerelease), *results]
    cards = filter_for_format(cards, session.format)

    strict = session.context.strict_matching
    return create_success(
        [card_to_response(card, session.format, reference, strict) for card in cards]
    )
