"""
Reference data store.

Loads and caches the locally stored reference files:
- four forbidden/limited lists (OCG, TCG, CN, AE)
- the GENESYS score table and the name→id resolution table
- the pre-release card index

Readers always see a complete ReferenceSnapshot. A refresh builds a new
snapshot and swaps it in with one assignment, so a check that started before
the swap keeps using the old maps.
"""

import asyncio
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import httpx

from ygodeck.models.failure import RefreshBusyError
from ygodeck.models.formats import DeckFormat, RestrictionStatus, normalize_status
from ygodeck.services.genesys import GenesysIndex, build_genesys_index

logger = logging.getLogger(__name__)

RESTRICTION_FILES: dict[DeckFormat, str] = {
    DeckFormat.OCG: "ocg_forbidden.json",
    DeckFormat.TCG: "tcg_forbidden.json",
    DeckFormat.CN: "cn_forbidden.json",
    DeckFormat.AE: "ae_forbidden.json",
}
GENESYS_SCORES_FILE = "genesys_scores.json"
NAME_ID_MAP_FILE = "name_id_map.json"
PRERELEASE_INDEX_FILE = "pre-release/index.json"

REFERENCE_FILES = (
    *RESTRICTION_FILES.values(),
    GENESYS_SCORES_FILE,
    NAME_ID_MAP_FILE,
    PRERELEASE_INDEX_FILE,
)

RestrictionMap = Mapping[str, RestrictionStatus]

_EMPTY_MAP: RestrictionMap = MappingProxyType({})
_EMPTY_INDEX: Mapping[str, dict[str, Any]] = MappingProxyType({})


def read_json(path: Path) -> Any:
    """
    Read a JSON file, returning None if it is missing or unparseable.

    Malformed reference data is not fatal; callers treat None as empty.
    """
    if not path.exists():
        logger.debug("Reference file %s not found", path)
        return None
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable reference file %s: %s", path, e)
        return None


def read_json_object(path: Path) -> dict[str, Any]:
    data = read_json(path)
    if not isinstance(data, dict):
        if data is not None:
            logger.warning("Expected a JSON object in %s, got %s", path, type(data).__name__)
        return {}
    return data


def load_restriction_map(path: Path, source: DeckFormat) -> RestrictionMap:
    """
    Load one forbidden/limited list and normalize its statuses.

    Args:
        path: JSON object file {card key: raw status label}
        source: Format whose label vocabulary the file uses

    Returns:
        Read-only map of key → RestrictionStatus. Empty if the file is
        missing or malformed.
    """
    raw = read_json_object(path)
    return MappingProxyType({str(k): normalize_status(v, source) for k, v in raw.items()})


def load_prerelease_index(path: Path) -> Mapping[str, dict[str, Any]]:
    """
    Load the pre-release card index, keyed by str(id).

    Each entry is tagged with source="pre". Entries without an id are dropped.
    """
    data = read_json(path)
    if not isinstance(data, list):
        return _EMPTY_INDEX
    index: dict[str, dict[str, Any]] = {}
    for item in data:
        if not isinstance(item, dict) or not item.get("id"):
            continue
        index[str(item["id"])] = {"source": "pre", **item}
    return MappingProxyType(index)


@dataclass(frozen=True)
class ReferenceSnapshot:
    """One complete, immutable generation of reference data."""

    restrictions: Mapping[DeckFormat, RestrictionMap] = field(
        default_factory=lambda: MappingProxyType({})
    )
    genesys: GenesysIndex = field(default_factory=GenesysIndex)
    prerelease: Mapping[str, dict[str, Any]] = field(default_factory=lambda: _EMPTY_INDEX)

    def restriction_map(self, deck_format: DeckFormat) -> RestrictionMap:
        return self.restrictions.get(deck_format, _EMPTY_MAP)


def load_reference_snapshot(data_dir: Path) -> ReferenceSnapshot:
    """Load every reference file under data_dir into a new snapshot."""
    restrictions = {
        fmt: load_restriction_map(data_dir / filename, fmt)
        for fmt, filename in RESTRICTION_FILES.items()
    }
    genesys = build_genesys_index(
        read_json_object(data_dir / GENESYS_SCORES_FILE),
        read_json_object(data_dir / NAME_ID_MAP_FILE),
    )
    prerelease = load_prerelease_index(data_dir / PRERELEASE_INDEX_FILE)

    logger.info(
        "Loaded reference data from %s: %s; genesys %d names / %d ids; %d pre-release cards",
        data_dir,
        ", ".join(f"{fmt.value} {len(m)}" for fmt, m in restrictions.items()),
        len(genesys.idx),
        len(genesys.by_id),
        len(prerelease),
    )

    return ReferenceSnapshot(
        restrictions=MappingProxyType(restrictions),
        genesys=genesys,
        prerelease=prerelease,
    )


async def download_reference_files(
    base_url: str,
    data_dir: Path,
    client: httpx.AsyncClient | None = None,
) -> list[str]:
    """
    Download reference JSON files from base_url into data_dir.

    Files that fail to download or are not valid JSON are skipped and the
    existing local copy is kept.

    Returns:
        Relative names of the files that were replaced.
    """
    base = base_url.rstrip("/") + "/"
    updated: list[str] = []

    own_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=30.0, follow_redirects=True)
    try:
        for name in REFERENCE_FILES:
            try:
                response = await client.get(base + name)
                response.raise_for_status()
                payload = response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.warning("Skipping %s: %s", name, e)
                continue

            target = data_dir / name
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp = target.with_suffix(target.suffix + ".tmp")
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            tmp.replace(target)
            updated.append(name)
    finally:
        if own_client:
            await client.aclose()

    return updated


@dataclass(frozen=True)
class RefreshReport:
    """What a refresh did."""

    downloaded: tuple[str, ...] = ()
    download_failed: bool = False


class ReferenceDataStore:
    """
    Lazily loaded, explicitly refreshable reference data.

    The first reader loads the files synchronously. `refresh()` reloads
    everything (optionally downloading first) and replaces the snapshot
    wholesale. Only one refresh may run at a time; a second request is
    rejected with RefreshBusyError rather than queued.
    """

    def __init__(self, data_dir: Path, source_url: str = "") -> None:
        self._data_dir = data_dir
        self._source_url = source_url
        self._snapshot: ReferenceSnapshot | None = None
        self._refreshing = False

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def is_refreshing(self) -> bool:
        return self._refreshing

    def snapshot(self) -> ReferenceSnapshot:
        if self._snapshot is None:
            self._snapshot = load_reference_snapshot(self._data_dir)
        return self._snapshot

    def restriction_map(self, deck_format: DeckFormat) -> RestrictionMap:
        return self.snapshot().restriction_map(deck_format)

    def genesys_index(self) -> GenesysIndex:
        return self.snapshot().genesys

    def prerelease_index(self) -> Mapping[str, dict[str, Any]]:
        return self.snapshot().prerelease

    async def refresh(self) -> RefreshReport:
        """
        Reload all reference data.

        Raises:
            RefreshBusyError: If another refresh is still running
        """
        if self._refreshing:
            raise RefreshBusyError()
        self._refreshing = True
        try:
            downloaded: list[str] = []
            download_failed = False
            if self._source_url:
                try:
                    downloaded = await download_reference_files(self._source_url, self._data_dir)
                except (httpx.HTTPError, OSError) as e:
                    # Stale local files are still usable
                    logger.error("Reference download failed, reloading local files: %s", e)
                    download_failed = True

            snapshot = await asyncio.to_thread(load_reference_snapshot, self._data_dir)
            self._snapshot = snapshot
            return RefreshReport(downloaded=tuple(downloaded), download_failed=download_failed)
        finally:
            self._refreshing = False
