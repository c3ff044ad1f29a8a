"""Upsell suggestions for a cart in progress.

``suggest`` owns the hard rules: items already in the cart and unavailable
items are never offered, and results are ordered by confidence with catalog
order as the tie-breaker. How a candidate is scored is up to the
``ScoringPolicy``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from foh.domain.menu.entities import MenuItem


@dataclass(frozen=True)
class Suggestion:
    item: MenuItem
    reason: str
    confidence: int

    def __post_init__(self) -> None:
        if not 0 <= self.confidence <= 100:
            raise ValueError("confidence must be between 0 and 100")


class ScoringPolicy(Protocol):
    def score(
        self, candidate: MenuItem, cart_items: Sequence[MenuItem]
    ) -> tuple[int, str] | None: ...


_COMPLEMENTS: dict[str, tuple[str, ...]] = {
    "main course": ("breads", "starters", "beverages", "desserts", "sides"),
    "mains": ("breads", "starters", "beverages", "desserts", "sides"),
    "starters": ("main course", "mains", "beverages"),
    "breads": ("main course", "mains", "sides"),
    "sides": ("main course", "mains", "breads"),
    "desserts": ("beverages",),
    "beverages": ("desserts", "starters"),
}


def _category(item: MenuItem) -> str:
    return (item.category or "").strip().lower()


class CategoryPairingPolicy:
    """Scores candidates by how well their category rounds out the cart."""

    def __init__(
        self,
        pairing_weight: int = 50,
        new_course_weight: int = 15,
        popularity_weight: int = 25,
        add_on_weight: int = 10,
        min_confidence: int = 30,
    ) -> None:
        self._pairing_weight = pairing_weight
        self._new_course_weight = new_course_weight
        self._popularity_weight = popularity_weight
        self._add_on_weight = add_on_weight
        self._min_confidence = min_confidence

    def score(
        self, candidate: MenuItem, cart_items: Sequence[MenuItem]
    ) -> tuple[int, str] | None:
        if not cart_items:
            return None

        cart_categories = [_category(item) for item in cart_items]
        candidate_category = _category(candidate)
        weighted_reasons: list[tuple[int, str]] = []

        paired_with = next(
            (
                item
                for item, category in zip(cart_items, cart_categories)
                if candidate_category and candidate_category in _COMPLEMENTS.get(category, ())
            ),
            None,
        )
        if paired_with is not None:
            weighted_reasons.append((self._pairing_weight, f"Pairs well with {paired_with.name}"))
        if candidate_category and candidate_category not in cart_categories:
            weighted_reasons.append(
                (self._new_course_weight, f"Adds {candidate.category} to the order")
            )
        if candidate.is_popular:
            weighted_reasons.append((self._popularity_weight, "Popular with guests"))

        average_cents = sum(item.price_money.amount_cents for item in cart_items) / len(cart_items)
        if candidate.price_money.amount_cents <= average_cents:
            weighted_reasons.append((self._add_on_weight, "Light add-on"))

        confidence = min(sum(weight for weight, _ in weighted_reasons), 100)
        if confidence < self._min_confidence:
            return None

        # sort() is stable, so equal weights keep the order they were added in
        weighted_reasons.sort(key=lambda pair: pair[0], reverse=True)
        return confidence, weighted_reasons[0][1]


DEFAULT_POLICY = CategoryPairingPolicy()


def suggest(
    catalog: Sequence[MenuItem],
    cart_items: Sequence[MenuItem],
    policy: ScoringPolicy = DEFAULT_POLICY,
    limit: int = 3,
) -> list[Suggestion]:
    if not catalog or not cart_items or limit < 1:
        return []

    in_cart = {str(item.item_id) for item in cart_items}
    scored: list[tuple[int, int, Suggestion]] = []
    for position, candidate in enumerate(catalog):
        if not candidate.is_available or str(candidate.item_id) in in_cart:
            continue
        result = policy.score(candidate, cart_items)
        if result is None:
            continue
        confidence, reason = result
        confidence = max(0, min(confidence, 100))
        scored.append(
            (-confidence, position, Suggestion(item=candidate, reason=reason, confidence=confidence))
        )

    scored.sort(key=lambda row: (row[0], row[1]))
    return [suggestion for _, _, suggestion in scored[:limit]]
