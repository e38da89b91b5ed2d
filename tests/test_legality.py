"""
Tests for the legality engine.

INVARIANT: Checks run in a fixed order and the first failure decides.
forbidden → limited → semi-limited → 3-copy cap → zone capacity.
"""

from types import MappingProxyType

import pytest

from ygodeck.models.card import Card
from ygodeck.models.deck import Deck, DeckZone
from ygodeck.models.failure import FailureKind, rejection_error
from ygodeck.models.formats import DeckFormat, RestrictionStatus
from ygodeck.models.legality_context import LegalityContext, RejectionReason
from ygodeck.services.legality import (
    add_card,
    card_groups,
    check_admission,
    resolve_restriction_status,
)
from ygodeck.services.reference_data import ReferenceDataStore

OCG = LegalityContext(format=DeckFormat.OCG)


def monster(card_id: int, cid: int | None = None) -> Card:
    return Card(
        id=card_id, cid=cid, cn_name=f"怪兽{card_id}", type_tags="[怪兽|效果]", level=4
    )


def fusion(card_id: int) -> Card:
    return Card(
        id=card_id, cn_name=f"融合{card_id}", type_tags="[怪兽|效果|融合]", level=8
    )


@pytest.fixture
def ocg_map(reference_store: ReferenceDataStore):
    return reference_store.restriction_map(DeckFormat.OCG)


class TestRestrictionStatuses:
    def test_forbidden_rejected_before_any_copy(self, pot_of_greed: Card, ocg_map) -> None:
        """A forbidden card is rejected with no copies in the deck."""
        deck = Deck()

        result = add_card(pot_of_greed, DeckZone.MAIN, deck, OCG, ocg_map)

        assert not result.admitted
        assert result.reason == RejectionReason.FORBIDDEN
        assert result.message == "forbidden in this format"
        assert result.same_count == 0
        assert deck.main == []

    def test_limited_allows_one_copy(self, raigeki: Card, ocg_map) -> None:
        """First copy of a limited card is admitted, the second rejected."""
        deck = Deck()

        first = add_card(raigeki, DeckZone.MAIN, deck, OCG, ocg_map)
        second = add_card(raigeki, DeckZone.SIDE, deck, OCG, ocg_map)

        assert first.admitted
        assert first.status == RestrictionStatus.LIMITED
        assert not second.admitted
        assert second.reason == RejectionReason.LIMITED
        assert second.message == "limited to 1 copy"
        assert len(deck.main) == 1
        assert deck.side == []

    def test_semi_limited_allows_two_copies(self, semi_limited_card: Card, ocg_map) -> None:
        """Semi-limited: copies one and two are admitted, the third is rejected."""
        deck = Deck()

        results = [
            add_card(semi_limited_card, DeckZone.MAIN, deck, OCG, ocg_map) for _ in range(3)
        ]

        assert [r.admitted for r in results] == [True, True, False]
        assert results[2].reason == RejectionReason.SEMI_LIMITED
        assert results[2].message == "semi-limited to 2 copies"
        assert len(deck.main) == 2

    @pytest.mark.parametrize("deck_format", list(DeckFormat))
    def test_fourth_copy_always_rejected(
        self, deck_format: DeckFormat, reference_store: ReferenceDataStore
    ) -> None:
        """The 3-copy cap applies in every format."""
        deck = Deck()
        context = LegalityContext(format=deck_format)
        restriction_map = reference_store.restriction_map(deck_format)
        card = monster(1001)

        results = [
            add_card(card, DeckZone.MAIN, deck, context, restriction_map) for _ in range(4)
        ]

        assert [r.admitted for r in results] == [True, True, True, False]
        assert results[3].reason == RejectionReason.COPY_LIMIT
        assert results[3].message == "maximum 3 copies of a named card"

    def test_copies_counted_across_all_zones(self, ocg_map) -> None:
        """Copies in main, extra and side all count toward the cap."""
        deck = Deck(main=[monster(1001)], side=[monster(1001), monster(1001)])

        result = check_admission(monster(1001), DeckZone.MAIN, deck, OCG, ocg_map)

        assert not result.admitted
        assert result.same_count == 3

    def test_copies_counted_by_id_not_cid(self, ocg_map) -> None:
        """Different ids sharing a cid are different cards for the count."""
        deck = Deck(main=[monster(1001, cid=77)] * 3)

        result = check_admission(monster(1002, cid=77), DeckZone.MAIN, deck, OCG, ocg_map)

        assert result.admitted
        assert result.same_count == 0

    @pytest.mark.parametrize("deck_format", [DeckFormat.GENESYS, DeckFormat.NO_FORBIDDEN])
    def test_unlisted_formats_ignore_restrictions(
        self, deck_format: DeckFormat, pot_of_greed: Card, ocg_map
    ) -> None:
        """GENESYS and NO_FORBIDDEN never consult a restriction map."""
        deck = Deck()
        context = LegalityContext(format=deck_format)

        result = add_card(pot_of_greed, DeckZone.MAIN, deck, context, ocg_map)

        assert result.admitted
        assert result.status == RestrictionStatus.UNRESTRICTED

    def test_lookup_failure_still_enforces_copy_cap(self) -> None:
        """If the restriction lookup raises, the 3-copy cap is still applied."""

        class ExplodingMap(dict):
            def get(self, *args, **kwargs):
                raise RuntimeError("corrupt map")

        broken = ExplodingMap({"1001": RestrictionStatus.FORBIDDEN})
        deck = Deck(main=[monster(1001)] * 3)

        first = check_admission(monster(2002), DeckZone.MAIN, deck, OCG, broken)
        capped = check_admission(monster(1001), DeckZone.MAIN, deck, OCG, broken)

        assert first.admitted
        assert not capped.admitted
        assert capped.reason == RejectionReason.COPY_LIMIT


class TestCapacity:
    def test_sixty_first_main_card_rejected(self, ocg_map) -> None:
        """The main deck holds at most 60 cards."""
        deck = Deck(main=[monster(i) for i in range(60)])

        result = add_card(monster(999), DeckZone.MAIN, deck, OCG, ocg_map)

        assert not result.admitted
        assert result.reason == RejectionReason.DECK_FULL
        assert result.message == "deck full"
        assert len(deck.main) == 60

    @pytest.mark.parametrize("zone", [DeckZone.EXTRA, DeckZone.SIDE])
    def test_sixteenth_extra_or_side_card_rejected(self, zone: DeckZone, ocg_map) -> None:
        """Extra and side decks hold at most 15 cards."""
        deck = Deck()
        results = [add_card(fusion(i), zone, deck, OCG, ocg_map) for i in range(16)]

        assert all(r.admitted for r in results[:15])
        assert results[15].reason == RejectionReason.DECK_FULL
        assert len(deck.zone(zone)) == 15

    def test_restriction_checked_before_capacity(self, pot_of_greed: Card, ocg_map) -> None:
        """A forbidden card reports forbidden even when the deck is also full."""
        deck = Deck(main=[monster(i) for i in range(60)])

        result = check_admission(pot_of_greed, DeckZone.MAIN, deck, OCG, ocg_map)

        assert result.reason == RejectionReason.FORBIDDEN

    def test_full_main_does_not_block_side(self, ocg_map) -> None:
        """Capacity is per zone."""
        deck = Deck(main=[monster(i) for i in range(60)])

        result = add_card(monster(999), DeckZone.SIDE, deck, OCG, ocg_map)

        assert result.admitted
        assert len(deck.side) == 1


class TestResolveRestrictionStatus:
    def test_cid_takes_precedence_over_id(self, pot_of_greed: Card) -> None:
        """A cid key wins over an id key."""
        restriction_map = {
            "4844": RestrictionStatus.FORBIDDEN,
            "55144522": RestrictionStatus.LIMITED,
        }

        assert resolve_restriction_status(pot_of_greed, restriction_map) == (
            RestrictionStatus.FORBIDDEN
        )

    def test_unrestricted_key_does_not_stop_lookup(self, pot_of_greed: Card) -> None:
        """An empty status on the cid key falls through to the id key."""
        restriction_map = {
            "4844": RestrictionStatus.UNRESTRICTED,
            "55144522": RestrictionStatus.LIMITED,
        }

        assert resolve_restriction_status(pot_of_greed, restriction_map) == (
            RestrictionStatus.LIMITED
        )

    def test_exact_name_order_jp_name_cn(self, pot_of_greed: Card) -> None:
        """Exact names are tried as jp_name, name, cn_name."""
        restriction_map = {
            "强欲之壶": RestrictionStatus.SEMI_LIMITED,
            "強欲な壺": RestrictionStatus.LIMITED,
        }

        assert resolve_restriction_status(pot_of_greed, restriction_map) == (
            RestrictionStatus.LIMITED
        )

    def test_substring_fallback(self, pot_of_greed: Card) -> None:
        """A key containing a card name matches when nothing exact does."""
        restriction_map = {"Pot of Greed (Reprint)": RestrictionStatus.FORBIDDEN}

        assert resolve_restriction_status(pot_of_greed, restriction_map) == (
            RestrictionStatus.FORBIDDEN
        )

    def test_name_containing_key_matches(self) -> None:
        """Containment works in both directions."""
        card = Card(id=1, name="Pot of Greed Alt Art", type_tags="[魔法]")
        restriction_map = {"Pot of Greed": RestrictionStatus.FORBIDDEN}

        assert resolve_restriction_status(card, restriction_map) == RestrictionStatus.FORBIDDEN

    def test_strict_mode_disables_substring_fallback(self, pot_of_greed: Card) -> None:
        """Strict matching only accepts exact keys."""
        restriction_map = {"Pot of Greed (Reprint)": RestrictionStatus.FORBIDDEN}

        status = resolve_restriction_status(pot_of_greed, restriction_map, strict=True)

        assert status == RestrictionStatus.UNRESTRICTED

    def test_empty_keys_never_match(self) -> None:
        """An empty key is not a substring match for every name."""
        card = Card(id=1, name="Raigeki", type_tags="[魔法]")

        status = resolve_restriction_status(card, {"": RestrictionStatus.FORBIDDEN})

        assert status == RestrictionStatus.UNRESTRICTED

    def test_empty_map_is_unrestricted(self, pot_of_greed: Card) -> None:
        """No list loaded means nothing is restricted."""
        assert resolve_restriction_status(pot_of_greed, MappingProxyType({})) == (
            RestrictionStatus.UNRESTRICTED
        )


class TestCardGroups:
    @pytest.mark.parametrize("tag", ["融合", "同调", "超量", "连接"])
    def test_extra_deck_monsters(self, tag: str) -> None:
        """Fusion, synchro, xyz and link go to extra or side."""
        card = Card(id=1, type_tags=f"[怪兽|效果|{tag}]")

        assert card_groups(card) == {DeckZone.EXTRA, DeckZone.SIDE}

    @pytest.mark.parametrize("types", ["[怪兽|通常]", "[魔法|速攻]", "[陷阱|反击]"])
    def test_main_deck_cards(self, types: str) -> None:
        """Main deck monsters, spells and traps go to main or side."""
        assert card_groups(Card(id=1, type_tags=types)) == {DeckZone.MAIN, DeckZone.SIDE}

    def test_unknown_category_is_permissive(self) -> None:
        """A card without recognizable tags defaults to main or side."""
        assert card_groups(Card(id=1)) == {DeckZone.MAIN, DeckZone.SIDE}


class TestRejectionError:
    def test_describes_rejection(self, raigeki: Card, ocg_map) -> None:
        deck = Deck(main=[raigeki])

        error = rejection_error(add_card(raigeki, DeckZone.SIDE, deck, OCG, ocg_map))

        assert error.kind == FailureKind.CARD_LIMITED
        assert error.message == "limited to 1 copy"
        assert error.detail == "status=限制 copies=1"

    def test_admitted_result_has_nothing_to_report(self, raigeki: Card, ocg_map) -> None:
        result = add_card(raigeki, DeckZone.MAIN, Deck(), OCG, ocg_map)

        with pytest.raises(ValueError):
            rejection_error(result)
