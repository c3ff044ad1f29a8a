from __future__ import annotations

from foh.application.dto.responses import TableResponse
from foh.domain.table.entities import Table


def to_table_response(table: Table) -> TableResponse:
    return TableResponse(
        tableId=str(table.table_id),
        name=table.name,
        tableNumber=table.table_number,
        capacity=table.capacity,
        status=table.status.value,
        currentOrderId=str(table.current_order_id) if table.current_order_id else None,
    )
