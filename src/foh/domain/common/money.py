from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal


@dataclass(frozen=True)
class Money:
    amount_cents: int
    currency: str

    def __post_init__(self) -> None:
        if self.amount_cents < 0:
            raise ValueError("amount_cents must be >= 0")
        if len(self.currency) != 3 or not self.currency.isalpha() or not self.currency.isupper():
            raise ValueError("currency must be a 3-letter uppercase code")

    @classmethod
    def zero(cls, currency: str) -> Money:
        return cls(amount_cents=0, currency=currency)

    def __add__(self, other: Money) -> Money:
        self._ensure_same_currency(other)
        return Money(amount_cents=self.amount_cents + other.amount_cents, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        self._ensure_same_currency(other)
        return Money(amount_cents=self.amount_cents - other.amount_cents, currency=self.currency)

    def times(self, quantity: int) -> Money:
        return Money(amount_cents=self.amount_cents * quantity, currency=self.currency)

    def percent(self, percent: Decimal) -> Money:
        """Return ``percent`` % of this amount, rounded half-up to the minor unit."""
        raw = Decimal(self.amount_cents) * Decimal(percent) / Decimal(100)
        return Money(
            amount_cents=int(raw.quantize(Decimal(1), rounding=ROUND_HALF_UP)),
            currency=self.currency,
        )

    def divided_by(self, count: int) -> Money:
        if count <= 0:
            return Money.zero(self.currency)
        raw = Decimal(self.amount_cents) / Decimal(count)
        return Money(
            amount_cents=int(raw.quantize(Decimal(1), rounding=ROUND_HALF_UP)),
            currency=self.currency,
        )

    def _ensure_same_currency(self, other: Money) -> None:
        if other.currency != self.currency:
            raise ValueError(f"currency mismatch: {self.currency} vs {other.currency}")


def sum_money(amounts: list[Money], currency: str) -> Money:
    total = Money.zero(currency)
    for amount in amounts:
        total = total + amount
    return total
