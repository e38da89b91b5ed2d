"""
ygodeck services.

Legality, ordering and scoring for deck building, plus the reference data
and card catalog collaborators they read from.
"""

from ygodeck.services.card_catalog import CardCatalog, match_prerelease, parse_search_response
from ygodeck.services.deck_order import (
    compare_extra,
    compare_main_side,
    get_link_markers,
    get_monster_level,
    sort_deck,
    sort_zone,
)
from ygodeck.services.deck_session import DeckListener, DeckSession, ImportResult
from ygodeck.services.genesys import (
    GenesysIndex,
    build_genesys_index,
    card_points,
    deck_points,
    filter_for_format,
    is_genesys_excluded,
    normalize_name,
)
from ygodeck.services.legality import (
    add_card,
    card_groups,
    check_admission,
    resolve_restriction_status,
)
from ygodeck.services.reference_data import (
    ReferenceDataStore,
    ReferenceSnapshot,
    RefreshReport,
    download_reference_files,
    load_reference_snapshot,
    load_restriction_map,
)

__all__ = [
    "CardCatalog",
    "DeckListener",
    "DeckSession",
    "GenesysIndex",
    "ImportResult",
    "ReferenceDataStore",
    "ReferenceSnapshot",
    "RefreshReport",
    "add_card",
    "build_genesys_index",
    "card_groups",
    "card_points",
    "check_admission",
    "compare_extra",
    "compare_main_side",
    "deck_points",
    "download_reference_files",
    "filter_for_format",
    "get_link_markers",
    "get_monster_level",
    "is_genesys_excluded",
    "load_reference_snapshot",
    "load_restriction_map",
    "match_prerelease",
    "normalize_name",
    "parse_search_response",
    "resolve_restriction_status",
    "sort_deck",
    "sort_zone",
]
