from ygodeck.api.decks import router as decks_router
from ygodeck.api.health import router as health_router
from ygodeck.api.reference import router as reference_router
from ygodeck.api.search import router as search_router

__all__ = [
    "decks_router",
    "health_router",
    "reference_router",
    "search_router",
]
