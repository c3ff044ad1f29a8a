from __future__ import annotations

import json
import queue
import threading
import time

from fastapi.testclient import TestClient

from foh.api.main import app
from foh.infrastructure.cache.redis_client import get_redis_client


def _pull_event_types(pubsub, count: int, timeout_seconds: float = 2.0) -> list[str]:
    deadline = time.time() + timeout_seconds
    event_types: list[str] = []
    while time.time() < deadline and len(event_types) < count:
        message = pubsub.get_message(ignore_subscribe_messages=True, timeout=0.2)
        if not message or message.get("type") != "pmessage":
            time.sleep(0.05)
            continue
        payload = message.get("data")
        raw = payload.decode("utf-8") if isinstance(payload, bytes) else str(payload)
        event_types.append(json.loads(raw)["event_type"])
    return event_types


def _dine_in(table_id: str) -> dict:
    return {
        "orderType": "dine-in",
        "tableId": table_id,
        "lines": [{"itemId": "itm_paneer_tikka", "quantity": 1}],
    }


def test_order_creation_announces_each_collection() -> None:
    pubsub = get_redis_client().pubsub()
    pubsub.psubscribe("changes:*")
    pubsub.get_message(timeout=0.5)

    with TestClient(app) as client:
        response = client.post("/v1/orders", json=_dine_in("tbl_005"))
        assert response.status_code == 201

    event_types = _pull_event_types(pubsub, count=3)
    assert event_types == [
        "orders.created",
        "order_items.created",
        "restaurant_tables.updated",
    ]


def test_terminal_receives_change_and_refreshed_views() -> None:
    messages: "queue.Queue[str]" = queue.Queue()
    errors: "queue.Queue[Exception]" = queue.Queue()

    with TestClient(app) as client:
        with client.websocket_connect("/ws?terminal=counter") as websocket:

            def _reader() -> None:
                try:
                    while True:
                        messages.put(websocket.receive_text())
                except Exception as exc:
                    errors.put(exc)

            threading.Thread(target=_reader, daemon=True).start()
            # give the listener time to subscribe
            time.sleep(0.5)

            response = client.post("/v1/tables/tbl_006/reserve")
            assert response.status_code == 200

            deadline = time.time() + 3.0
            event_types: list[str] = []
            while time.time() < deadline and "view.floor" not in event_types:
                try:
                    raw = messages.get(timeout=0.2)
                except queue.Empty:
                    continue
                event_types.append(json.loads(raw)["event_type"])

    assert "restaurant_tables.updated" in event_types
    assert event_types.index("restaurant_tables.updated") < event_types.index("view.floor")
