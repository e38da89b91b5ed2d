"""
Card catalog client.

Searches the remote card database (ygocdb-compatible API) and merges in
locally stored pre-release cards. Failures never raise past this module's
search functions: they are reported as None so callers can show
"lookup failed" instead of "no results".
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from ygodeck.models.card import Card

logger = logging.getLogger(__name__)


def parse_search_response(payload: Any) -> list[Card]:
    """
    Convert a search response body into Cards.

    Records without a numeric id are skipped.
    """
    records = payload.get("result") if isinstance(payload, dict) else None
    if not isinstance(records, list):
        return []

    cards: list[Card] = []
    for record in records:
        if not isinstance(record, dict):
            continue
        try:
            cards.append(Card.from_record(record))
        except ValueError as e:
            logger.debug("Skipping catalog record: %s", e)
    return cards


def match_prerelease(query: str, index: Mapping[str, dict[str, Any]]) -> list[Card]:
    """
    Pre-release cards matching a query.

    A numeric query matches the id exactly. Any other query matches a
    case-insensitive substring of cn_name (or name when cn_name is absent).
    Entries without an image are never returned.
    """
    q = query.strip()
    if not q:
        return []

    matches: list[Card] = []
    seen: set[str] = set()
    for key, item in index.items():
        if not item.get("pic"):
            continue
        if q.isdigit():
            hit = str(item.get("id")) == q
        else:
            label = str(item.get("cn_name") or item.get("name") or "").lower()
            hit = bool(label) and q.lower() in label
        if not hit or key in seen:
            continue
        seen.add(key)
        try:
            matches.append(Card.from_record({"source": "pre", **item}))
        except ValueError as e:
            logger.debug("Skipping pre-release entry %s: %s", key, e)
    return matches


class CardCatalog:
    """
    Async client for the remote card database.

    Pass an httpx.AsyncClient to share connections (and to mock in tests);
    otherwise one is created per call.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._client = client

    async def _get(self, query: str) -> Any:
        params = {"search": query}
        if self._client is not None:
            response = await self._client.get(self._base_url, params=params)
            response.raise_for_status()
            return response.json()

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.get(self._base_url, params=params)
            response.raise_for_status()
            return response.json()

    async def search(self, query: str) -> list[Card] | None:
        """
        Search the catalog.

        Returns:
            Matching cards (possibly empty), or None if the query is blank or
            the request failed.
        """
        if not query or not query.strip():
            return None
        try:
            payload = await self._get(query)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Card search for %r failed: %s", query, e)
            return None
        return parse_search_response(payload)

    async def fetch_by_ids(self, card_ids: Iterable[str | int]) -> dict[str, Card] | None:
        """
        Resolve card ids to Cards, one request per id.

        Returns:
            str(id) → Card for every id the catalog knows, or None if any
            request failed.
        """
        id_to_card: dict[str, Card] = {}
        for card_id in dict.fromkeys(str(i) for i in card_ids):
            try:
                payload = await self._get(card_id)
            except (httpx.HTTPError, ValueError) as e:
                logger.error("Card lookup for id %s failed: %s", card_id, e)
                return None
            for card in parse_search_response(payload):
                id_to_card[str(card.id)] = card
        return id_to_card
