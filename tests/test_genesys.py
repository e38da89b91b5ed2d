"""Tests for GENESYS point scoring and listing filters."""

import pytest

from ygodeck.models.card import TYPE_LINK, TYPE_PENDULUM, Card
from ygodeck.models.deck import Deck
from ygodeck.models.formats import DeckFormat
from ygodeck.services.genesys import (
    GenesysIndex,
    build_genesys_index,
    card_points,
    deck_points,
    filter_for_format,
    is_genesys_excluded,
    normalize_name,
)


class TestNormalizeName:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Pot of Greed", "pot of greed"),
            ("POT-OF-GREED", "pot of greed"),
            ("  Pot   of\tGreed!! ", "pot of greed"),
            ("Dragon &amp; Knight", "dragon and knight"),
            ("强欲之壶", ""),
            (None, ""),
        ],
    )
    def test_normalize(self, raw: object, expected: str) -> None:
        assert normalize_name(raw) == expected


class TestBuildIndex:
    def test_joins_scores_with_name_id_map(self) -> None:
        """Ids from the name→id table inherit the score of their name."""
        index = build_genesys_index(
            {"Pot of Greed": 100},
            {"Pot of Greed": {"id": 55144522, "cid": 4844, "name": "Pot of Greed"}},
        )

        assert index.by_id == {"55144522": 100, "4844": 100}
        assert index.idx == {"pot of greed": 100}

    def test_matches_by_normalized_name(self) -> None:
        """Table entries whose spelling differs still resolve."""
        index = build_genesys_index(
            {"Pot of Greed": 100},
            {"POT OF GREED": {"id": 55144522, "name": "pot-of-greed"}},
        )

        assert index.by_id == {"55144522": 100}

    def test_falls_back_to_entry_name(self) -> None:
        """The resolved catalog name is tried after the source name."""
        index = build_genesys_index(
            {"Raigeki": 30},
            {"雷击": {"id": 12580477, "name": "Raigeki"}},
        )

        assert index.by_id == {"12580477": 30}

    def test_skips_unusable_points(self) -> None:
        """Negative and non-numeric scores are dropped."""
        index = build_genesys_index(
            {"A": -5, "B": "lots", "C": None, "D": "7"},
            {},
        )

        assert index.idx == {"d": 7}

    def test_skips_entries_without_ids_or_score(self) -> None:
        index = build_genesys_index(
            {"Raigeki": 30},
            {
                "Raigeki": {"id": None, "cid": None},
                "Unknown Card": {"id": 1, "cid": 2},
                "Broken": "not an object",
            },
        )

        assert dict(index.by_id) == {}

    def test_index_is_read_only(self) -> None:
        index = build_genesys_index({"Raigeki": 30}, {})

        with pytest.raises(TypeError):
            index.idx["raigeki"] = 0  # type: ignore[index]


class TestCardPoints:
    @pytest.fixture
    def index(self) -> GenesysIndex:
        return GenesysIndex(
            by_id={"4844": 100, "12580477": 30},
            idx={"pot of greed": 1, "monster reborn": 25},
        )

    def test_cid_before_id(self, index: GenesysIndex) -> None:
        card = Card(id=12580477, cid=4844)

        assert card_points(card, index) == 100

    def test_id_before_name(self, index: GenesysIndex) -> None:
        """A by-id hit wins even when the name is also in the index."""
        card = Card(id=12580477, name="Pot of Greed")

        assert card_points(card, index) == 30

    def test_name_fallback(self, index: GenesysIndex) -> None:
        card = Card(id=83764718, name="Monster  Reborn")

        assert card_points(card, index) == 25

    def test_unknown_card_costs_nothing(self, index: GenesysIndex) -> None:
        card = Card(id=1, cn_name="强欲之壶")

        assert card_points(card, index) == 0

    def test_deck_total_counts_every_zone(self, index: GenesysIndex) -> None:
        reborn = Card(id=83764718, name="Monster Reborn")
        raigeki = Card(id=12580477)
        deck = Deck(main=[reborn, reborn], extra=[raigeki], side=[Card(id=5)])

        assert deck_points(deck, index) == 80

    def test_empty_deck_is_zero(self, index: GenesysIndex) -> None:
        assert deck_points(Deck(), index) == 0


class TestListingFilter:
    @pytest.mark.parametrize(
        "card",
        [
            Card(id=1, type_tags="[怪兽|效果|灵摆]"),
            Card(id=2, type_tags="[怪兽|效果|连接]"),
            Card(id=3, type_code=0x21 | TYPE_PENDULUM),
            Card(id=4, type_code=0x21 | TYPE_LINK),
        ],
    )
    def test_pendulum_and_link_excluded(self, card: Card) -> None:
        assert is_genesys_excluded(card)

    def test_regular_monster_allowed(self) -> None:
        assert not is_genesys_excluded(Card(id=1, type_tags="[怪兽|效果]", type_code=0x21))

    def test_only_genesys_filters(self) -> None:
        """Other formats list everything."""
        cards = [Card(id=1, type_tags="[怪兽|连接]"), Card(id=2, type_tags="[魔法]")]

        assert filter_for_format(cards, DeckFormat.OCG) == cards
        assert filter_for_format(cards, DeckFormat.GENESYS) == [cards[1]]
