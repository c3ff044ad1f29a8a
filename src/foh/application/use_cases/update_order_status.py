from __future__ import annotations

import logging

from foh.application.dto.responses import OrderResponse
from foh.application.mappers.event_envelope import ORDERS
from foh.application.mappers.order_mapper import to_order_response
from foh.application.metrics.front_of_house import record_transition
from foh.application.ports.repositories import OptimisticConcurrencyError, OrderRepository
from foh.application.services.change_feed import ChangeFeed
from foh.application.use_cases.context import TraceContext
from foh.application.use_cases.get_order import OrderNotFoundError
from foh.domain.common.ids import OrderId
from foh.domain.order.entities import OrderStatus, OrderTransitionError

logger = logging.getLogger("foh.orders")


class InvalidOrderTransitionError(Exception):
    pass


class InvalidOrderStatusError(Exception):
    pass


class OrderConflictError(Exception):
    pass


def parse_order_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value.strip().lower())
    except ValueError as exc:
        raise InvalidOrderStatusError(f"invalid order status: {value}") from exc


class UpdateOrderStatus:
    def __init__(self, order_repository: OrderRepository, change_feed: ChangeFeed) -> None:
        self._order_repository = order_repository
        self._change_feed = change_feed

    def execute(
        self,
        order_id: OrderId,
        new_status: OrderStatus,
        trace_ctx: TraceContext,
    ) -> OrderResponse:
        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")

        try:
            updated = order.transition_to(new_status)
        except OrderTransitionError as exc:
            raise InvalidOrderTransitionError(str(exc)) from exc
        if updated is order:
            return to_order_response(order)

        try:
            persisted_order = self._order_repository.update_status_with_version(
                order_id=order_id,
                new_status=new_status,
                expected_version=order.version,
            )
        except OptimisticConcurrencyError:
            current = self._order_repository.get(order_id)
            if current is None:
                raise OrderNotFoundError(f"order {order_id} not found")
            if current.status == new_status:
                return to_order_response(current)
            raise OrderConflictError(f"order {order_id} status update conflict")

        record_transition(from_status=order.status, to_status=new_status)
        logger.info(
            "order_status_changed",
            extra={
                "order_id": str(order_id),
                "from_status": order.status.value,
                "to_status": new_status.value,
            },
        )
        response = to_order_response(persisted_order)
        self._change_feed.announce(
            collection=ORDERS,
            action="updated",
            record_id=str(order_id),
            payload=response.model_dump(mode="json", exclude={"lines"}),
            trace_ctx=trace_ctx,
        )
        return response
