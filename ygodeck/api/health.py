"""
Health check endpoints.

Liveness only reports that the process is up. Readiness also reports
whether reference data could be loaded.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ygodeck.api.dependencies import get_reference_store
from ygodeck.services.reference_data import ReferenceDataStore

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    reference_data: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe. Does not check dependencies."""
    return HealthResponse(status="healthy")


@router.get("/ready", response_model=HealthResponse)
async def ready(
    store: Annotated[ReferenceDataStore, Depends(get_reference_store)],
) -> HealthResponse:
    """
    Readiness probe.

    Missing reference files are not fatal (no restrictions are enforced
    beyond the copy cap), so this reports "empty" rather than failing.
    """
    snapshot = store.snapshot()
    loaded = any(snapshot.restrictions.values()) or bool(snapshot.genesys.idx)
    return HealthResponse(status="ready", reference_data="loaded" if loaded else "empty")
