from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from foh.application.use_cases.context import TraceContext

TABLES = "restaurant_tables"
ORDERS = "orders"
ORDER_ITEMS = "order_items"
MENU_ITEMS = "menu_items"
BILLS = "bills"


def change_channel(collection: str) -> str:
    return f"changes:{collection}"


def serialize_change_event(
    *,
    collection: str,
    action: str,
    record_id: str,
    occurred_at: datetime,
    payload: dict[str, Any],
    trace_ctx: TraceContext,
) -> str:
    envelope = {
        "event_id": str(uuid4()),
        "event_type": f"{collection}.{action}",
        "occurred_at": occurred_at.isoformat(),
        "request_id": trace_ctx.request_id,
        "trace_id": trace_ctx.trace_id,
        "collection": collection,
        "record_id": record_id,
        "payload": payload,
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False, default=str)


def serialize_view_message(view: str, payload: dict[str, Any]) -> str:
    return json.dumps(
        {"event_type": f"view.{view}", "payload": payload},
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
