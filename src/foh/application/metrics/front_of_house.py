from __future__ import annotations

from datetime import datetime, timezone

from prometheus_client import Counter, Histogram

from foh.domain.order.entities import Order, OrderStatus

ORDERS_CREATED_TOTAL = Counter(
    "foh_orders_created_total",
    "Total number of orders created by order type.",
    ["order_type"],
)

ORDER_TRANSITION_TOTAL = Counter(
    "foh_order_transition_total",
    "Total number of order lifecycle transitions.",
    ["from", "to"],
)

TABLE_CONFLICTS_TOTAL = Counter(
    "foh_table_conflicts_total",
    "Total number of rejected table occupancy changes.",
    ["operation"],
)

TABLE_TRANSITIONS_TOTAL = Counter(
    "foh_table_transitions_total",
    "Total number of persisted table occupancy changes.",
    ["transition"],
)

BILLS_TOTAL = Counter(
    "foh_bills_total",
    "Total number of bills observed by payment status.",
    ["payment_status"],
)

ORDER_TO_PAYMENT_SECONDS = Histogram(
    "foh_order_to_payment_seconds",
    "Time between order creation and bill settlement.",
    buckets=(60, 300, 600, 1200, 1800, 2700, 3600, 5400, 7200, 14400),
)


def record_order_created(order: Order) -> None:
    ORDERS_CREATED_TOTAL.labels(order_type=order.order_type.value).inc()


def record_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_table_conflict(operation: str) -> None:
    TABLE_CONFLICTS_TOTAL.labels(operation=operation).inc()


def record_table_transition(transition: str) -> None:
    TABLE_TRANSITIONS_TOTAL.labels(transition=transition).inc()


def record_bill_status(payment_status: str) -> None:
    BILLS_TOTAL.labels(payment_status=payment_status).inc()


def record_order_to_payment(order: Order, now: datetime | None = None) -> None:
    current = now or datetime.now(timezone.utc)
    ORDER_TO_PAYMENT_SECONDS.observe(max((current - order.created_at).total_seconds(), 0.0))
