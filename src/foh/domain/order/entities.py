from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from foh.domain.common.ids import MenuItemId, OrderId, OrderLineId, StaffId, TableId
from foh.domain.common.money import Money


class OrderType(str, Enum):
    DINE_IN = "dine-in"
    TAKEAWAY = "takeaway"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    SERVED = "served"


_NEXT_STATUS: dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.SERVED,
}


@dataclass(frozen=True)
class OrderLine:
    line_id: OrderLineId
    item_id: MenuItemId
    name: str
    quantity: int
    price_at_order: Money
    line_total: Money

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        if self.price_at_order.currency != self.line_total.currency:
            raise ValueError("line_total currency must match price_at_order currency")
        if self.line_total != self.price_at_order.times(self.quantity):
            raise ValueError("line_total must equal price_at_order * quantity")


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    table_id: TableId | None
    customer_name: str | None
    order_type: OrderType
    status: OrderStatus
    lines: list[OrderLine]
    total: Money
    created_at: datetime
    staff_id: StaffId | None = None
    version: int = 1

    def __post_init__(self) -> None:
        if not self.lines:
            raise ValueError("order must contain at least one line")
        line_currency = self.lines[0].line_total.currency
        if self.total.currency != line_currency:
            raise ValueError("order total currency must match line currency")
        expected_total = sum(line.line_total.amount_cents for line in self.lines)
        if self.total.amount_cents != expected_total:
            raise ValueError("order total must equal sum of line totals")
        if self.order_type == OrderType.DINE_IN and self.table_id is None:
            raise ValueError("dine-in order must reference a table")
        if self.order_type == OrderType.TAKEAWAY and self.table_id is not None:
            raise ValueError("takeaway order must not reference a table")

    def transition_to(self, new_status: OrderStatus) -> Order:
        if new_status == self.status:
            return self
        if _NEXT_STATUS.get(self.status) != new_status:
            raise OrderTransitionError(
                f"cannot move order from status={self.status.value} to {new_status.value}"
            )
        return replace(self, status=new_status)


def create_pending_order(
    order_id: OrderId,
    order_type: OrderType,
    table_id: TableId | None,
    customer_name: str | None,
    lines: list[OrderLine],
    now: datetime,
    staff_id: StaffId | None = None,
) -> Order:
    if not lines:
        raise ValueError("order must contain at least one line")

    currency = lines[0].line_total.currency
    total = Money(
        amount_cents=sum(line.line_total.amount_cents for line in lines),
        currency=currency,
    )
    if order_type == OrderType.DINE_IN:
        customer_name = None
    elif customer_name is not None:
        customer_name = customer_name.strip() or None

    return Order(
        order_id=order_id,
        table_id=table_id,
        customer_name=customer_name,
        order_type=order_type,
        status=OrderStatus.PENDING,
        lines=lines,
        total=total,
        created_at=now,
        staff_id=staff_id,
    )


class OrderTransitionError(Exception):
    pass
