from __future__ import annotations

import threading

import pytest

from fakes import FailingPublisher
from foh.application.dto.requests import CreateOrderLineRequest, CreateOrderRequest
from foh.application.services.change_feed import ChangeFeed
from foh.application.use_cases.context import TraceContext
from foh.application.use_cases.create_order import (
    CreateOrder,
    InvalidOrderError,
    MenuItemUnavailableError,
)
from foh.application.use_cases.tables import TableNotFoundError, TableUnavailableError
from foh.domain.common.ids import StaffId, TableId
from foh.domain.table.entities import TableStatus

TRACE = TraceContext(trace_id=None, request_id="req-order")


def _request(
    order_type: str = "dine-in",
    table_id: str | None = "tbl_001",
    customer_name: str | None = None,
    lines: list[tuple[str, int]] | None = None,
) -> CreateOrderRequest:
    return CreateOrderRequest(
        order_type=order_type,
        table_id=table_id,
        customer_name=customer_name,
        lines=[
            CreateOrderLineRequest(item_id=item_id, quantity=quantity)
            for item_id, quantity in (lines or [("itm_butter_chicken", 2), ("itm_naan", 3)])
        ],
    )


@pytest.fixture
def use_case(menu_repository, table_repository, order_repository, change_feed) -> CreateOrder:
    return CreateOrder(menu_repository, table_repository, order_repository, change_feed)


def test_dine_in_order_occupies_table(use_case, table_repository, publisher) -> None:
    response = use_case.execute(_request(), trace_ctx=TRACE, staff_id=StaffId("stf_7"))

    assert response.status == "pending"
    assert response.orderType == "dine-in"
    assert response.staffId == "stf_7"
    assert response.total.amountCents == 35000 * 2 + 6000 * 3
    assert [line.priceAtOrder.amountCents for line in response.lines] == [35000, 6000]

    table = table_repository.get(TableId("tbl_001"))
    assert table.status == TableStatus.OCCUPIED
    assert table.current_order_id == response.orderId
    assert publisher.channels == [
        "changes:orders",
        "changes:order_items",
        "changes:restaurant_tables",
    ]


def test_takeaway_keeps_customer_and_touches_no_table(use_case, table_repository, publisher) -> None:
    response = use_case.execute(
        _request(order_type="takeaway", table_id=None, customer_name="Asha"),
        trace_ctx=TRACE,
    )

    assert response.tableId is None
    assert response.customerName == "Asha"
    assert all(table.status == TableStatus.AVAILABLE for table in table_repository.list())
    assert "changes:restaurant_tables" not in publisher.channels


def test_dine_in_drops_customer_name(use_case) -> None:
    response = use_case.execute(_request(customer_name="Asha"), trace_ctx=TRACE)

    assert response.customerName is None


def test_dine_in_requires_table(use_case) -> None:
    with pytest.raises(InvalidOrderError):
        use_case.execute(_request(table_id=None), trace_ctx=TRACE)


def test_takeaway_rejects_table(use_case) -> None:
    with pytest.raises(InvalidOrderError):
        use_case.execute(_request(order_type="takeaway"), trace_ctx=TRACE)


@pytest.mark.parametrize("quantity", [0, 1000])
def test_out_of_range_quantity_is_rejected_before_any_write(
    use_case, order_repository, quantity: int
) -> None:
    with pytest.raises(InvalidOrderError):
        use_case.execute(_request(lines=[("itm_naan", quantity)]), trace_ctx=TRACE)
    assert order_repository.list_recent(None, 10, None) == ([], None)


@pytest.mark.parametrize("item_id", ["itm_missing", "itm_kulfi"])
def test_unknown_or_unavailable_item_is_rejected(use_case, table_repository, item_id: str) -> None:
    with pytest.raises(MenuItemUnavailableError):
        use_case.execute(_request(lines=[(item_id, 1)]), trace_ctx=TRACE)
    assert table_repository.get(TableId("tbl_001")).status == TableStatus.AVAILABLE


def test_unknown_table_is_not_found(use_case) -> None:
    with pytest.raises(TableNotFoundError):
        use_case.execute(_request(table_id="tbl_missing"), trace_ctx=TRACE)


def test_occupied_table_is_unavailable(use_case, table_repository) -> None:
    first = use_case.execute(_request(), trace_ctx=TRACE)

    with pytest.raises(TableUnavailableError):
        use_case.execute(_request(), trace_ctx=TRACE)
    assert table_repository.get(TableId("tbl_001")).current_order_id == first.orderId


def test_publish_failure_does_not_fail_committed_order(
    menu_repository, table_repository, order_repository
) -> None:
    use_case = CreateOrder(
        menu_repository,
        table_repository,
        order_repository,
        ChangeFeed(publisher=FailingPublisher()),
    )

    response = use_case.execute(_request(), trace_ctx=TRACE)

    assert order_repository.get(response.orderId) is not None


def test_concurrent_orders_for_one_table_have_one_winner(
    menu_repository, table_repository, order_repository, change_feed
) -> None:
    use_case = CreateOrder(menu_repository, table_repository, order_repository, change_feed)
    barrier = threading.Barrier(2)
    winners: list[str] = []
    conflicts: list[Exception] = []

    # both threads pass the read-side availability check before either writes
    original_get = table_repository.get

    def get_then_wait(table_id):
        table = original_get(table_id)
        barrier.wait(timeout=5)
        return table

    table_repository.get = get_then_wait

    def place() -> None:
        try:
            winners.append(use_case.execute(_request(), trace_ctx=TRACE).orderId)
        except TableUnavailableError as exc:
            conflicts.append(exc)

    threads = [threading.Thread(target=place) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert len(winners) == 1
    assert len(conflicts) == 1
    table = original_get(TableId("tbl_001"))
    assert table.status == TableStatus.OCCUPIED
    assert table.current_order_id == winners[0]
    assert len(order_repository.list_recent(None, 10, None)[0]) == 1
