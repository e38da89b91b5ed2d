"""
Shared FastAPI dependencies.

The application keeps one reference store, one catalog client and one deck
session on app.state (created in the lifespan handler). Tests replace them
through app.dependency_overrides.
"""

from fastapi import Request

from ygodeck.services.card_catalog import CardCatalog
from ygodeck.services.deck_session import DeckSession
from ygodeck.services.reference_data import ReferenceDataStore


def get_reference_store(request: Request) -> ReferenceDataStore:
    store: ReferenceDataStore = request.app.state.reference_store
    return store


def get_card_catalog(request: Request) -> CardCatalog:
    catalog: CardCatalog = request.app.state.card_catalog
    return catalog


def get_deck_session(request: Request) -> DeckSession:
    session: DeckSession = request.app.state.deck_session
    return session
