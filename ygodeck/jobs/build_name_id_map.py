"""
Build the GENESYS name→id resolution table.

GENESYS scores are published by English card name. This job looks every
scored name up in the card catalog and writes name_id_map.json:

    {"<score name>": {"id": 123, "cid": 456, "name": "<catalog name>"}}

Names the catalog does not know are written with null ids. Names whose
lookups kept failing are left out, so the next run tries them again.
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import httpx

from ygodeck.config import settings
from ygodeck.services.reference_data import GENESYS_SCORES_FILE, NAME_ID_MAP_FILE, read_json_object

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
RETRY_DELAY = 0.3
REQUEST_DELAY = 0.12


def pick_best_result(name: str, results: list[dict[str, Any]]) -> dict[str, Any] | None:
    """
    Choose the catalog record for a name.

    A case-insensitive exact match on name, jp_name or cn_name wins;
    otherwise the first result.
    """
    if not results:
        return None
    wanted = name.lower()
    for record in results:
        for field in ("name", "jp_name", "cn_name"):
            value = record.get(field)
            if value and str(value).lower() == wanted:
                return record
    return results[0]


def to_entry(name: str, record: dict[str, Any] | None) -> dict[str, Any]:
    if record is None:
        return {"id": None, "cid": None, "name": name}
    return {
        "id": record.get("id") or record.get("cid"),
        "cid": record.get("cid"),
        "name": record.get("name") or record.get("jp_name") or record.get("cn_name") or name,
    }


async def resolve_name(
    client: httpx.AsyncClient,
    api_url: str,
    name: str,
    retry_delay: float = RETRY_DELAY,
) -> dict[str, Any] | None:
    """
    Look up one name, retrying transient failures.

    Returns:
        The entry to store, or None if every attempt failed.
    """
    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            response = await client.get(api_url, params={"search": name})
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("Attempt %d for %r failed: %s", attempt, name, e)
            await asyncio.sleep(retry_delay * attempt)
            continue
        results = payload.get("result") if isinstance(payload, dict) else payload
        if not isinstance(results, list):
            results = []
        return to_entry(name, pick_best_result(name, results))
    return None


async def build_name_id_map(
    data_dir: Path,
    api_url: str,
    client: httpx.AsyncClient | None = None,
    request_delay: float = REQUEST_DELAY,
    retry_delay: float = RETRY_DELAY,
) -> dict[str, dict[str, Any]]:
    """
    Resolve every name in genesys_scores.json and write name_id_map.json.

    Returns:
        The map that was written.
    """
    names = sorted(k for k in read_json_object(data_dir / GENESYS_SCORES_FILE) if k)
    logger.info("Found %d unique candidate names to resolve", len(names))

    out: dict[str, dict[str, Any]] = {}
    own_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=settings.card_api_timeout)
    try:
        for position, name in enumerate(names, start=1):
            entry = await resolve_name(client, api_url, name, retry_delay=retry_delay)
            if entry is None:
                logger.warning("(%d/%d) Could not resolve %r", position, len(names), name)
            else:
                out[name] = entry
            await asyncio.sleep(request_delay)
    finally:
        if own_client:
            await client.aclose()

    data_dir.mkdir(parents=True, exist_ok=True)
    target = data_dir / NAME_ID_MAP_FILE
    with open(target, "w", encoding="utf-8") as f:
        json.dump(out, f, ensure_ascii=False, indent=2)
    logger.info("Wrote %s with %d entries", target, len(out))
    return out


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[0])
    parser.add_argument("--data-dir", type=Path, default=settings.data_dir)
    parser.add_argument("--api-url", default=settings.card_api_url)
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(build_name_id_map(args.data_dir, args.api_url))


if __name__ == "__main__":
    main()
