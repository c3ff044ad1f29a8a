from __future__ import annotations

from foh.application.dto.responses import OrderLineResponse, OrderResponse
from foh.application.mappers.money_mapper import to_money_response
from foh.domain.order.entities import Order


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        orderId=str(order.order_id),
        tableId=str(order.table_id) if order.table_id else None,
        customerName=order.customer_name,
        orderType=order.order_type.value,
        status=order.status.value,
        lines=[
            OrderLineResponse(
                lineId=str(line.line_id),
                itemId=str(line.item_id),
                name=line.name,
                quantity=line.quantity,
                priceAtOrder=to_money_response(line.price_at_order),
                lineTotal=to_money_response(line.line_total),
            )
            for line in order.lines
        ],
        total=to_money_response(order.total),
        createdAt=order.created_at,
        staffId=str(order.staff_id) if order.staff_id else None,
    )
