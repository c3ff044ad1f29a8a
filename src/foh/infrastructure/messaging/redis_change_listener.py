from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from redis import asyncio as redis_asyncio

from foh.application.services.live_views import LiveViews
from foh.infrastructure.cache.redis_client import redis_url

logger = logging.getLogger(__name__)

CHANGE_PATTERN = "changes:*"

Broadcast = Callable[[str], Awaitable[None]]


def _decode_value(value: bytes | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


async def handle_change(
    channel: str,
    payload: str,
    live_views: LiveViews,
    broadcast: Broadcast,
) -> None:
    _, _, collection = channel.partition(":")
    if not collection:
        logger.warning("change_listener_invalid_channel", extra={"channel": channel})
        return

    await broadcast(payload)
    try:
        messages = await asyncio.to_thread(live_views.refresh, collection)
    except Exception:
        logger.exception("live_views_refresh_failed", extra={"collection": collection})
        return
    for message in messages:
        await broadcast(message)


async def listen_for_changes(live_views: LiveViews, broadcast: Broadcast) -> None:
    """Runs until cancelled, reconnecting with capped exponential backoff."""
    try:
        url = redis_url()
    except RuntimeError:
        logger.warning("change_listener_not_started", extra={"reason": "REDIS_URL missing"})
        return

    backoff_seconds = 1.0
    while True:
        client: redis_asyncio.Redis | None = None
        pubsub: redis_asyncio.client.PubSub | None = None
        try:
            client = redis_asyncio.from_url(url)
            pubsub = client.pubsub()
            await pubsub.psubscribe(CHANGE_PATTERN)
            logger.info("change_listener_subscribed", extra={"pattern": CHANGE_PATTERN})
            backoff_seconds = 1.0

            while True:
                message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                if message is None:
                    await asyncio.sleep(0.05)
                    continue

                channel = _decode_value(message.get("channel"))
                payload = _decode_value(message.get("data"))
                if not channel or not payload:
                    continue

                await handle_change(channel, payload, live_views, broadcast)
        except asyncio.CancelledError:
            logger.info("change_listener_cancelled")
            raise
        except Exception:
            logger.exception(
                "change_listener_error",
                extra={"backoff_seconds": backoff_seconds},
            )
            await asyncio.sleep(backoff_seconds)
            backoff_seconds = min(backoff_seconds * 2, 5.0)
        finally:
            if pubsub is not None:
                await pubsub.aclose()
            if client is not None:
                await client.aclose()
