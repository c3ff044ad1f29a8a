from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from foh.domain.common.ids import BillId, OrderId
from foh.domain.common.money import Money

DEFAULT_TAX_PERCENT = Decimal("5")
PERCENT_STEP = Decimal("0.01")


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


_ALLOWED_PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PAID, PaymentStatus.FAILED}),
    PaymentStatus.FAILED: frozenset({PaymentStatus.PAID}),
    PaymentStatus.PAID: frozenset(),
}


@dataclass(frozen=True)
class BillAmounts:
    tax_amount: Money
    discount_amount: Money
    final_total: Money


def compute_amounts(subtotal: Money, tax_percent: Decimal, discount_percent: Decimal) -> BillAmounts:
    _check_percent("tax_percent", tax_percent)
    _check_percent("discount_percent", discount_percent)
    tax_amount = subtotal.percent(tax_percent)
    discount_amount = subtotal.percent(discount_percent)
    return BillAmounts(
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        final_total=subtotal + tax_amount - discount_amount,
    )


@dataclass(frozen=True)
class Bill:
    bill_id: BillId
    order_id: OrderId
    subtotal: Money
    tax_percent: Decimal
    tax_amount: Money
    discount_percent: Decimal
    discount_amount: Money
    final_total: Money
    payment_status: PaymentStatus
    created_at: datetime
    payment_method: str | None = None
    paid_at: datetime | None = None

    def __post_init__(self) -> None:
        expected = compute_amounts(self.subtotal, self.tax_percent, self.discount_percent)
        if (
            self.tax_amount != expected.tax_amount
            or self.discount_amount != expected.discount_amount
            or self.final_total != expected.final_total
        ):
            raise ValueError("bill amounts must be derived from subtotal and percentages")
        if self.payment_status == PaymentStatus.PAID and self.paid_at is None:
            raise ValueError("paid_at must be set when payment_status is paid")

    @property
    def is_active(self) -> bool:
        return self.payment_status != PaymentStatus.FAILED

    def settle(self, payment_method: str, now: datetime) -> Bill:
        if not payment_method.strip():
            raise ValueError("payment_method must be non-empty")
        self._ensure_transition(PaymentStatus.PAID)
        return replace(
            self,
            payment_status=PaymentStatus.PAID,
            payment_method=payment_method.strip(),
            paid_at=now,
        )

    def fail(self) -> Bill:
        self._ensure_transition(PaymentStatus.FAILED)
        return replace(self, payment_status=PaymentStatus.FAILED)

    def _ensure_transition(self, new_status: PaymentStatus) -> None:
        if new_status not in _ALLOWED_PAYMENT_TRANSITIONS[self.payment_status]:
            raise PaymentTransitionError(
                f"cannot move bill {self.bill_id} from "
                f"payment_status={self.payment_status.value} to {new_status.value}"
            )


def create_pending_bill(
    bill_id: BillId,
    order_id: OrderId,
    subtotal: Money,
    now: datetime,
    tax_percent: Decimal = DEFAULT_TAX_PERCENT,
    discount_percent: Decimal = Decimal("0"),
) -> Bill:
    # stored as NUMERIC(5,2), so amounts must come from the rounded value
    tax_percent = tax_percent.quantize(PERCENT_STEP, rounding=ROUND_HALF_UP)
    discount_percent = discount_percent.quantize(PERCENT_STEP, rounding=ROUND_HALF_UP)
    amounts = compute_amounts(subtotal, tax_percent, discount_percent)
    return Bill(
        bill_id=bill_id,
        order_id=order_id,
        subtotal=subtotal,
        tax_percent=tax_percent,
        tax_amount=amounts.tax_amount,
        discount_percent=discount_percent,
        discount_amount=amounts.discount_amount,
        final_total=amounts.final_total,
        payment_status=PaymentStatus.PENDING,
        created_at=now,
    )


def _check_percent(name: str, value: Decimal) -> None:
    if value < 0 or value > 100:
        raise ValueError(f"{name} must be between 0 and 100")


class PaymentTransitionError(Exception):
    pass
