import json
from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from ygodeck.api.dependencies import get_card_catalog, get_deck_session, get_reference_store
from ygodeck.main import app
from ygodeck.models import failure as failure_module
from ygodeck.models.card import Card
from ygodeck.models.formats import DeckFormat
from ygodeck.services.card_catalog import CardCatalog
from ygodeck.services.deck_session import DeckSession
from ygodeck.services.reference_data import ReferenceDataStore


@pytest.fixture(autouse=True)
def clear_finalized_responses():
    """Clear the finalized responses set between tests.

    Python reuses memory addresses for new objects, so stale ids from
    earlier tests could make is_finalized() report false positives.
    """
    failure_module._finalized_responses.clear()
    yield
    failure_module._finalized_responses.clear()


@pytest.fixture
def reference_dir(tmp_path: Path) -> Path:
    """A data directory with one entry per status in every list."""
    files = {
        "ocg_forbidden.json": {
            "55144522": "禁止",
            "12580477": "制限",
            "14558127": "準制限",
        },
        "tcg_forbidden.json": {
            "55144522": "Forbidden",
            "12580477": "Limited",
            "14558127": "Semi-Limited",
        },
        "cn_forbidden.json": {
            "55144522": "禁止卡",
            "12580477": "限制卡",
            "14558127": "半限制卡",
        },
        "ae_forbidden.json": {"Pot of Greed": "Forbidden"},
        "genesys_scores.json": {
            "Pot of Greed": 100,
            "Raigeki": 30,
            "Monster Reborn": 25,
        },
        "name_id_map.json": {
            "Pot of Greed": {"id": 55144522, "cid": 4844, "name": "Pot of Greed"},
            "Raigeki": {"id": 12580477, "cid": None, "name": "Raigeki"},
        },
    }
    for name, content in files.items():
        (tmp_path / name).write_text(json.dumps(content, ensure_ascii=False), encoding="utf-8")

    pre = tmp_path / "pre-release"
    pre.mkdir()
    (pre / "index.json").write_text(
        json.dumps(
            [
                {
                    "id": 100200301,
                    "cn_name": "先行龙",
                    "pic": "https://example.test/100200301.jpg",
                    "text": {"types": "[怪兽|效果] 龙/暗", "desc": "★8"},
                },
                {"id": 100200302, "cn_name": "无图先行卡"},
            ],
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )
    return tmp_path


@pytest.fixture
def reference_store(reference_dir: Path) -> ReferenceDataStore:
    return ReferenceDataStore(reference_dir)


@pytest.fixture
def empty_store(tmp_path: Path) -> ReferenceDataStore:
    """Store pointed at a directory with no reference files."""
    return ReferenceDataStore(tmp_path / "missing")


@pytest.fixture
def session(reference_store: ReferenceDataStore) -> DeckSession:
    return DeckSession(reference_store, deck_format=DeckFormat.OCG)


@pytest.fixture
def pot_of_greed() -> Card:
    """Forbidden in every restricted format."""
    return Card(
        id=55144522,
        cid=4844,
        name="Pot of Greed",
        cn_name="强欲之壶",
        jp_name="強欲な壺",
        type_tags="[魔法]",
    )


@pytest.fixture
def raigeki() -> Card:
    """Limited in OCG/TCG/CN."""
    return Card(id=12580477, name="Raigeki", cn_name="雷击", type_tags="[魔法]")


@pytest.fixture
def semi_limited_card() -> Card:
    """Semi-limited in OCG/TCG/CN."""
    return Card(
        id=14558127,
        name="Ash Blossom",
        cn_name="灰流丽",
        type_tags="[怪兽|效果|调整]",
        level=3,
    )


CARD_API_URL = "https://ygocdb.com/api/v0/"


@pytest.fixture
async def client(
    reference_store: ReferenceDataStore, session: DeckSession
) -> AsyncIterator[AsyncClient]:
    """API client with the app's shared state replaced by test instances."""
    app.dependency_overrides[get_reference_store] = lambda: reference_store
    app.dependency_overrides[get_deck_session] = lambda: session
    app.dependency_overrides[get_card_catalog] = lambda: CardCatalog(CARD_API_URL, timeout=5.0)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
