from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from foh.application.use_cases.get_daily_summary import GetDailySummary, start_of_local_day
from foh.domain.billing.entities import create_pending_bill
from foh.domain.common.ids import BillId, MenuItemId, OrderId, OrderLineId, TableId
from foh.domain.common.money import Money
from foh.domain.order.entities import OrderLine, OrderType, create_pending_order
from foh.domain.table.entities import TableStatus

UTC = ZoneInfo("UTC")
NOW = datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)


def _order(order_id: str, created_at: datetime, *, table_id=None, customer_name=None, cents=20000):
    price = Money(amount_cents=cents, currency="INR")
    return create_pending_order(
        order_id=OrderId(order_id),
        order_type=OrderType.DINE_IN if table_id else OrderType.TAKEAWAY,
        table_id=TableId(table_id) if table_id else None,
        customer_name=customer_name,
        lines=[
            OrderLine(
                line_id=OrderLineId(f"{order_id}_l1"),
                item_id=MenuItemId("itm_dal"),
                name="Dal Makhani",
                quantity=1,
                price_at_order=price,
                line_total=price,
            )
        ],
        now=created_at,
    )


def _paid_bill(order, created_at: datetime):
    bill = create_pending_bill(
        bill_id=BillId(f"bil_{order.order_id}"),
        order_id=order.order_id,
        subtotal=order.total,
        now=created_at,
    )
    return bill.settle("cash", created_at)


@pytest.fixture
def summary(order_repository, table_repository, bill_repository):
    def _summary(tz: ZoneInfo = UTC):
        return GetDailySummary(order_repository, table_repository, bill_repository, "INR", tz)

    return _summary


def test_empty_day_reports_zero_without_dividing(summary) -> None:
    result = summary().execute(now=NOW)

    assert result.revenue.amountCents == 0
    assert result.revenue.currency == "INR"
    assert result.orderCount == 0
    assert result.averageOrderValue.amountCents == 0
    assert result.customersServed == 0
    assert result.activeTables == 0


def test_unnamed_takeaway_is_not_a_customer(summary, store) -> None:
    order = _order("ord_1", NOW, customer_name="  ")
    store.orders[str(order.order_id)] = order

    result = summary().execute(now=NOW)

    assert result.orderCount == 1
    assert result.customersServed == 0
    assert result.revenue.amountCents == 0


def test_figures_from_todays_rows(summary, store) -> None:
    morning = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)
    yesterday = datetime(2026, 10, 18, 21, 0, tzinfo=timezone.utc)
    first = _order("ord_1", morning, table_id="tbl_001", cents=20000)
    second = _order("ord_2", morning, table_id="tbl_001", cents=10000)
    takeaway = _order("ord_3", morning, customer_name="Asha", cents=30000)
    old = _order("ord_4", yesterday, table_id="tbl_002", cents=50000)
    for order in (first, second, takeaway, old):
        store.orders[str(order.order_id)] = order
    for order in (first, takeaway, old):
        bill = _paid_bill(order, order.created_at)
        store.bills[str(bill.bill_id)] = bill
    pending = create_pending_bill(BillId("bil_pending"), second.order_id, second.total, morning)
    store.bills[str(pending.bill_id)] = pending
    store.tables[0] = replace(
        store.tables[0],
        status=TableStatus.OCCUPIED,
        current_order_id=second.order_id,
    )

    result = summary().execute(now=NOW)

    # 5% default tax on 20000 and 30000
    assert result.revenue.amountCents == 21000 + 31500
    assert result.orderCount == 3
    assert result.averageOrderValue.amountCents == 17500
    assert result.customersServed == 2
    assert result.activeTables == 1


def test_window_starts_at_local_midnight(summary, store) -> None:
    kolkata = ZoneInfo("Asia/Kolkata")
    now = datetime(2026, 10, 19, 20, 0, tzinfo=timezone.utc)
    before = _order("ord_before", datetime(2026, 10, 19, 18, 0, tzinfo=timezone.utc))
    after = _order("ord_after", datetime(2026, 10, 19, 19, 0, tzinfo=timezone.utc))
    for order in (before, after):
        store.orders[str(order.order_id)] = order

    result = summary(kolkata).execute(now=now)

    assert start_of_local_day(now, kolkata) == datetime(2026, 10, 19, 18, 30, tzinfo=timezone.utc)
    assert result.since == datetime(2026, 10, 19, 18, 30, tzinfo=timezone.utc)
    assert result.orderCount == 1


def test_recomputing_gives_same_answer(summary, store) -> None:
    order = _order("ord_1", NOW, table_id="tbl_003")
    store.orders[str(order.order_id)] = order
    use_case = summary()

    assert use_case.execute(now=NOW) == use_case.execute(now=NOW)
