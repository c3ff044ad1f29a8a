from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

from foh.application.dto.requests import CreateOrderRequest
from foh.application.dto.responses import OrderResponse
from foh.application.mappers.event_envelope import ORDER_ITEMS, ORDERS, TABLES
from foh.application.mappers.order_mapper import to_order_response
from foh.application.metrics.front_of_house import (
    record_order_created,
    record_table_conflict,
    record_table_transition,
)
from foh.application.ports.repositories import (
    MenuRepository,
    OrderRepository,
    StaleTableStateError,
    TableRepository,
)
from foh.application.services.change_feed import ChangeFeed
from foh.application.use_cases.context import TraceContext
from foh.application.use_cases.tables import TableNotFoundError, TableUnavailableError
from foh.domain.common.ids import MenuItemId, OrderId, OrderLineId, StaffId, TableId
from foh.domain.order.entities import Order, OrderLine, OrderType, create_pending_order
from foh.domain.table.entities import Occupy
from foh.domain.table.entities import TableUnavailableError as DomainTableUnavailableError

logger = logging.getLogger("foh.orders")

MAX_LINE_QUANTITY = 999


class InvalidOrderError(Exception):
    pass


class MenuItemUnavailableError(Exception):
    pass


class CreateOrder:
    def __init__(
        self,
        menu_repository: MenuRepository,
        table_repository: TableRepository,
        order_repository: OrderRepository,
        change_feed: ChangeFeed,
    ) -> None:
        self._menu_repository = menu_repository
        self._table_repository = table_repository
        self._order_repository = order_repository
        self._change_feed = change_feed

    def execute(
        self,
        request_dto: CreateOrderRequest,
        trace_ctx: TraceContext,
        staff_id: StaffId | None = None,
    ) -> OrderResponse:
        order_type = OrderType(request_dto.order_type)
        table_id = TableId(request_dto.table_id) if request_dto.table_id else None
        if order_type == OrderType.DINE_IN and table_id is None:
            raise InvalidOrderError("dine-in order requires table_id")
        if order_type == OrderType.TAKEAWAY and table_id is not None:
            raise InvalidOrderError("takeaway order must not reference a table")

        order_lines = self._build_lines(request_dto)
        order_id = OrderId(f"ord_{uuid4().hex[:12]}")

        if table_id is not None:
            table = self._table_repository.get(table_id)
            if table is None:
                raise TableNotFoundError(f"table {table_id} not found")
            try:
                table.apply(Occupy(order_id=order_id))
            except DomainTableUnavailableError as exc:
                record_table_conflict("occupy")
                raise TableUnavailableError(str(exc)) from exc

        order = create_pending_order(
            order_id=order_id,
            order_type=order_type,
            table_id=table_id,
            customer_name=request_dto.customer_name,
            lines=order_lines,
            now=datetime.now(timezone.utc),
            staff_id=staff_id,
        )

        try:
            persisted_order = self._order_repository.add_and_occupy_table(order)
        except StaleTableStateError as exc:
            record_table_conflict("occupy")
            raise TableUnavailableError(
                f"table {table_id} was taken by another order"
            ) from exc

        record_order_created(persisted_order)
        if table_id is not None:
            record_table_transition("occupy")
        logger.info(
            "order_created",
            extra={"order_id": str(persisted_order.order_id), "table_id": table_id},
        )
        self._announce(persisted_order, trace_ctx)
        return to_order_response(persisted_order)

    def _build_lines(self, request_dto: CreateOrderRequest) -> list[OrderLine]:
        for request_line in request_dto.lines:
            if not 1 <= request_line.quantity <= MAX_LINE_QUANTITY:
                raise InvalidOrderError(f"quantity must be between 1 and {MAX_LINE_QUANTITY}")

        requested_ids = [MenuItemId(line.item_id) for line in request_dto.lines]
        menu_items = {
            str(item.item_id): item
            for item in self._menu_repository.get_items(list(dict.fromkeys(requested_ids)))
        }

        order_lines: list[OrderLine] = []
        for request_line in request_dto.lines:
            menu_item = menu_items.get(request_line.item_id)
            if menu_item is None:
                raise MenuItemUnavailableError(f"menu item {request_line.item_id} does not exist")
            if not menu_item.is_available:
                raise MenuItemUnavailableError(f"menu item {request_line.item_id} is unavailable")

            price_at_order = menu_item.price_money
            if order_lines and price_at_order.currency != order_lines[0].price_at_order.currency:
                raise InvalidOrderError("all order lines must share one currency")
            order_lines.append(
                OrderLine(
                    line_id=OrderLineId(f"orl_{uuid4().hex[:12]}"),
                    item_id=menu_item.item_id,
                    name=menu_item.name,
                    quantity=request_line.quantity,
                    price_at_order=price_at_order,
                    line_total=price_at_order.times(request_line.quantity),
                )
            )
        return order_lines

    def _announce(self, order: Order, trace_ctx: TraceContext) -> None:
        response = to_order_response(order)
        self._change_feed.announce(
            collection=ORDERS,
            action="created",
            record_id=str(order.order_id),
            payload=response.model_dump(mode="json", exclude={"lines"}),
            trace_ctx=trace_ctx,
            occurred_at=order.created_at,
        )
        self._change_feed.announce(
            collection=ORDER_ITEMS,
            action="created",
            record_id=str(order.order_id),
            payload={"lines": [line.model_dump(mode="json") for line in response.lines]},
            trace_ctx=trace_ctx,
            occurred_at=order.created_at,
        )
        if order.table_id is not None:
            self._change_feed.announce(
                collection=TABLES,
                action="updated",
                record_id=str(order.table_id),
                payload={
                    "tableId": str(order.table_id),
                    "status": "occupied",
                    "currentOrderId": str(order.order_id),
                },
                trace_ctx=trace_ctx,
                occurred_at=order.created_at,
            )
