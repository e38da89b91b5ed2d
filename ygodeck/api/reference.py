"""
Reference data endpoints.

Refresh reloads forbidden/limited lists, GENESYS scores and the pre-release
index. Only one refresh runs at a time; a concurrent request gets a
known failure with kind "refresh_busy".
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ygodeck.api.dependencies import get_reference_store
from ygodeck.models.failure import ApiResponse, create_success
from ygodeck.services.reference_data import ReferenceDataStore

router = APIRouter(prefix="/reference", tags=["reference"])

ReferenceDep = Annotated[ReferenceDataStore, Depends(get_reference_store)]


class ReferenceStatusResponse(BaseModel):
    refreshing: bool
    restriction_entries: dict[str, int] = Field(default_factory=dict)
    genesys_names: int = 0
    genesys_ids: int = 0
    prerelease_cards: int = 0


class RefreshResponse(BaseModel):
    status: ReferenceStatusResponse
    downloaded: list[str] = Field(default_factory=list)
    download_failed: bool = False


def _status(store: ReferenceDataStore) -> ReferenceStatusResponse:
    snapshot = store.snapshot()
    return ReferenceStatusResponse(
        refreshing=store.is_refreshing,
        restriction_entries={fmt.value: len(m) for fmt, m in snapshot.restrictions.items()},
        genesys_names=len(snapshot.genesys.idx),
        genesys_ids=len(snapshot.genesys.by_id),
        prerelease_cards=len(snapshot.prerelease),
    )


@router.get("", response_model=ApiResponse[ReferenceStatusResponse])
async def reference_status(store: ReferenceDep) -> ApiResponse[Any]:
    return create_success(_status(store))


@router.post("/refresh", response_model=ApiResponse[RefreshResponse])
async def refresh_reference(store: ReferenceDep) -> ApiResponse[Any]:
    """Reload reference data, downloading first when a source URL is configured."""
    report = await store.refresh()
    return create_success(
        RefreshResponse(
            status=_status(store),
            downloaded=list(report.downloaded),
            download_failed=report.download_failed,
        )
    )
