from __future__ import annotations

import concurrent.futures
import threading

from foh.application.dto.requests import CreateOrderLineRequest, CreateOrderRequest
from foh.application.services.change_feed import ChangeFeed
from foh.application.use_cases.context import TraceContext
from foh.application.use_cases.create_order import CreateOrder
from foh.application.use_cases.tables import TableUnavailableError
from foh.domain.common.ids import TableId
from foh.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from foh.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from foh.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from foh.infrastructure.messaging.redis_publisher import RedisEventPublisher


def test_one_of_two_orders_gets_the_table() -> None:
    table_repository = SqlAlchemyTableRepository()
    barrier = threading.Barrier(2)
    original_get = table_repository.get

    def get_then_wait(table_id: TableId):
        table = original_get(table_id)
        barrier.wait(timeout=5)
        return table

    table_repository.get = get_then_wait
    use_case = CreateOrder(
        menu_repository=SqlAlchemyMenuRepository(),
        table_repository=table_repository,
        order_repository=SqlAlchemyOrderRepository(),
        change_feed=ChangeFeed(publisher=RedisEventPublisher()),
    )
    request = CreateOrderRequest(
        order_type="dine-in",
        table_id="tbl_004",
        lines=[CreateOrderLineRequest(item_id="itm_dal_makhani", quantity=1)],
    )

    def _attempt() -> str:
        try:
            return use_case.execute(request, trace_ctx=TraceContext(None, None)).orderId
        except TableUnavailableError:
            return "CONFLICT"

    with concurrent.futures.ThreadPoolExecutor(max_workers=2) as executor:
        results = list(executor.map(lambda _: _attempt(), [0, 1]))

    winners = [result for result in results if result != "CONFLICT"]
    assert len(winners) == 1
    assert results.count("CONFLICT") == 1

    table = SqlAlchemyTableRepository().get(TableId("tbl_004"))
    assert table is not None
    assert table.current_order_id == winners[0]
