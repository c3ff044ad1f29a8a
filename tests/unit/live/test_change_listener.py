from __future__ import annotations

import asyncio
import json

from foh.infrastructure.messaging.redis_change_listener import handle_change


class RecordingBroadcast:
    def __init__(self) -> None:
        self.messages: list[str] = []

    async def __call__(self, message: str) -> None:
        self.messages.append(message)


class StubLiveViews:
    def __init__(self, messages: list[str] | None = None, error: Exception | None = None) -> None:
        self.collections: list[str] = []
        self._messages = messages or []
        self._error = error

    def refresh(self, collection: str) -> list[str]:
        self.collections.append(collection)
        if self._error is not None:
            raise self._error
        return self._messages


def test_change_is_forwarded_then_views_follow() -> None:
    broadcast = RecordingBroadcast()
    view = json.dumps({"event_type": "view.floor", "payload": {"tables": []}})
    live_views = StubLiveViews(messages=[view])

    asyncio.run(handle_change("changes:restaurant_tables", '{"x":1}', live_views, broadcast))

    assert live_views.collections == ["restaurant_tables"]
    assert broadcast.messages == ['{"x":1}', view]


def test_channel_without_collection_is_dropped() -> None:
    broadcast = RecordingBroadcast()
    live_views = StubLiveViews()

    asyncio.run(handle_change("changes", "{}", live_views, broadcast))

    assert broadcast.messages == []
    assert live_views.collections == []


def test_refresh_failure_still_forwards_change() -> None:
    broadcast = RecordingBroadcast()
    live_views = StubLiveViews(error=RuntimeError("database down"))

    asyncio.run(handle_change("changes:orders", "{}", live_views, broadcast))

    assert broadcast.messages == ["{}"]
