from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from foh.application.mappers.event_envelope import change_channel, serialize_change_event
from foh.application.ports.publisher import EventPublisher
from foh.application.use_cases.context import TraceContext

logger = logging.getLogger("foh.change_feed")


class ChangeFeed:
    """Announces committed writes on ``changes:<collection>``.

    Publishing runs after the database commit, so a broker failure is logged
    and the caller still gets its result.
    """

    def __init__(self, publisher: EventPublisher) -> None:
        self._publisher = publisher

    def announce(
        self,
        *,
        collection: str,
        action: str,
        record_id: str,
        payload: dict[str, Any],
        trace_ctx: TraceContext,
        occurred_at: datetime | None = None,
    ) -> None:
        message = serialize_change_event(
            collection=collection,
            action=action,
            record_id=record_id,
            occurred_at=occurred_at or datetime.now(timezone.utc),
            payload=payload,
            trace_ctx=trace_ctx,
        )
        try:
            self._publisher.publish(channel=change_channel(collection), message=message)
        except Exception:
            logger.warning(
                "change_publish_failed",
                exc_info=True,
                extra={"collection": collection, "record_id": record_id},
            )
