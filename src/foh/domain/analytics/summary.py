from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from foh.domain.billing.entities import Bill, PaymentStatus
from foh.domain.common.money import Money
from foh.domain.order.entities import Order, OrderType
from foh.domain.table.entities import Table, TableStatus


@dataclass(frozen=True)
class DailySummary:
    since: datetime
    revenue: Money
    order_count: int
    average_order_value: Money
    customers_served: int
    active_tables: int


def summarize(
    *,
    since: datetime,
    bills: list[Bill],
    orders: list[Order],
    tables: list[Table],
    currency: str,
) -> DailySummary:
    """Derive the day's figures from the rows as they are right now.

    Inputs may be broader than the window; everything is filtered here so the
    result depends only on current state.
    """
    revenue = Money.zero(currency)
    for bill in bills:
        if bill.payment_status == PaymentStatus.PAID and bill.created_at >= since:
            revenue = revenue + bill.final_total

    todays_orders = [order for order in orders if order.created_at >= since]
    order_count = len(todays_orders)

    table_ids = {str(order.table_id) for order in todays_orders if order.table_id is not None}
    named_takeaways = sum(
        1
        for order in todays_orders
        if order.order_type == OrderType.TAKEAWAY and (order.customer_name or "").strip()
    )

    return DailySummary(
        since=since,
        revenue=revenue,
        order_count=order_count,
        average_order_value=revenue.divided_by(order_count),
        customers_served=len(table_ids) + named_takeaways,
        active_tables=sum(1 for table in tables if table.status == TableStatus.OCCUPIED),
    )
