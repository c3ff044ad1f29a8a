from __future__ import annotations

from typing import Sequence

from fakes import menu_item, sample_menu
from foh.domain.menu.entities import MenuItem
from foh.domain.upsell.suggestions import CategoryPairingPolicy, suggest


def _by_id(item_id: str) -> MenuItem:
    return next(item for item in sample_menu() if item.item_id == item_id)


def test_suggestions_exclude_cart_items_and_unavailable_items() -> None:
    catalog = sample_menu()
    cart_items = [_by_id("itm_butter_chicken"), _by_id("itm_naan")]

    suggestions = suggest(catalog, cart_items, limit=10)
    suggested_ids = {str(suggestion.item.item_id) for suggestion in suggestions}

    assert suggestions
    assert suggested_ids.isdisjoint({"itm_butter_chicken", "itm_naan"})
    assert "itm_kulfi" not in suggested_ids


def test_suggestions_ordered_by_confidence_then_catalog_position() -> None:
    catalog = sample_menu()
    suggestions = suggest(catalog, [_by_id("itm_butter_chicken")], limit=10)

    positions = {str(item.item_id): index for index, item in enumerate(catalog)}
    keys = [(-s.confidence, positions[str(s.item.item_id)]) for s in suggestions]
    assert keys == sorted(keys)
    assert all(0 <= s.confidence <= 100 for s in suggestions)


def test_full_score_tie_keeps_catalog_order() -> None:
    suggestions = suggest(sample_menu(), [_by_id("itm_butter_chicken")], limit=2)

    assert [str(s.item.item_id) for s in suggestions] == ["itm_paneer", "itm_naan"]
    assert [s.confidence for s in suggestions] == [100, 100]
    assert suggestions[0].reason == "Pairs well with Butter Chicken"


def test_empty_inputs_return_no_suggestions() -> None:
    assert suggest([], [_by_id("itm_dal")]) == []
    assert suggest(sample_menu(), []) == []
    assert suggest(sample_menu(), [_by_id("itm_dal")], limit=0) == []


def test_nothing_eligible_returns_empty() -> None:
    only = menu_item("itm_only", "Only Dish", 1000, "Main Course")

    assert suggest([only], [only]) == []


def test_custom_policy_is_used() -> None:
    class PreferCheapest:
        def score(
            self, candidate: MenuItem, cart_items: Sequence[MenuItem]
        ) -> tuple[int, str] | None:
            return 100 - min(candidate.price_money.amount_cents // 1000, 100), "cheap"

    suggestions = suggest(sample_menu(), [_by_id("itm_dal")], policy=PreferCheapest(), limit=2)

    assert [str(s.item.item_id) for s in suggestions] == ["itm_naan", "itm_lassi"]
    assert {s.reason for s in suggestions} == {"cheap"}


def test_policy_drops_low_confidence_candidates() -> None:
    policy = CategoryPairingPolicy(min_confidence=101)

    assert suggest(sample_menu(), [_by_id("itm_dal")], policy=policy) == []
