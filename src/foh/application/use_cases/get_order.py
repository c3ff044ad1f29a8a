from __future__ import annotations

from foh.application.dto.responses import OrderListResponse, OrderResponse
from foh.application.mappers.order_mapper import to_order_response
from foh.application.ports.repositories import InvalidCursorError, OrderRepository
from foh.domain.common.ids import OrderId
from foh.domain.order.entities import OrderStatus

_STATUS_MAP: dict[str, OrderStatus | None] = {
    "ALL": None,
    "PENDING": OrderStatus.PENDING,
    "PREPARING": OrderStatus.PREPARING,
    "SERVED": OrderStatus.SERVED,
}


class OrderNotFoundError(Exception):
    pass


class InvalidOrderQueryError(Exception):
    pass


class GetOrder:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, order_id: OrderId) -> OrderResponse:
        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        return to_order_response(order)


class ListOrders:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(
        self,
        *,
        status: str = "ALL",
        limit: int = 50,
        cursor: str | None = None,
    ) -> OrderListResponse:
        normalized_status = status.upper()
        if normalized_status not in _STATUS_MAP:
            raise InvalidOrderQueryError(f"invalid order status filter: {status}")
        if limit < 1 or limit > 200:
            raise InvalidOrderQueryError("limit must be between 1 and 200")

        try:
            orders, next_cursor = self._order_repository.list_recent(
                status=_STATUS_MAP[normalized_status],
                limit=limit,
                cursor=cursor,
            )
        except InvalidCursorError as exc:
            raise InvalidOrderQueryError("invalid cursor") from exc

        return OrderListResponse(
            orders=[to_order_response(order) for order in orders],
            nextCursor=next_cursor,
        )
