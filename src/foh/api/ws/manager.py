from __future__ import annotations

import asyncio
import logging

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def register(self, websocket: WebSocket, terminal: str) -> None:
        await websocket.accept()
        async with self._lock:
            self._connections.add(websocket)
        logger.info("ws_client_connected", extra={"terminal": terminal})

    async def unregister(self, websocket: WebSocket) -> None:
        async with self._lock:
            if websocket not in self._connections:
                return
            self._connections.discard(websocket)
        logger.info("ws_client_disconnected")

    async def broadcast(self, message_json_str: str) -> None:
        async with self._lock:
            targets = list(self._connections)

        stale: list[WebSocket] = []
        for websocket in targets:
            try:
                await websocket.send_text(message_json_str)
            except Exception:
                stale.append(websocket)

        for websocket in stale:
            logger.info("ws_client_dropped")
            await self.unregister(websocket)
