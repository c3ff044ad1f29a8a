from __future__ import annotations

import logging
from collections.abc import Callable

from pydantic import BaseModel

from foh.application.mappers.event_envelope import (
    BILLS,
    MENU_ITEMS,
    ORDER_ITEMS,
    ORDERS,
    TABLES,
    serialize_view_message,
)
from foh.application.ports.cache import CacheStore
from foh.application.use_cases.get_daily_summary import GetDailySummary
from foh.application.use_cases.get_menu import GetMenu, invalidate_menu_cache
from foh.application.use_cases.get_order import ListOrders
from foh.application.use_cases.tables import ListTables

logger = logging.getLogger("foh.live_views")

FLOOR = "floor"
ORDER_BOARD = "orders"
DAILY_SUMMARY = "summary"
MENU = "menu"

VIEWS_BY_COLLECTION: dict[str, tuple[str, ...]] = {
    TABLES: (FLOOR, DAILY_SUMMARY),
    ORDERS: (ORDER_BOARD, DAILY_SUMMARY),
    ORDER_ITEMS: (ORDER_BOARD,),
    BILLS: (DAILY_SUMMARY,),
    MENU_ITEMS: (MENU,),
}


class LiveViews:
    """Re-derives the views a change touches, from scratch.

    Views are never patched from the change payload; every refresh reads the
    repositories again, so a missed or duplicated notification only costs a
    redundant read.
    """

    def __init__(
        self,
        list_tables: ListTables,
        list_orders: ListOrders,
        get_daily_summary: GetDailySummary,
        get_menu: GetMenu,
        cache: CacheStore,
        order_page_size: int = 50,
    ) -> None:
        self._cache = cache
        self._builders: dict[str, Callable[[], BaseModel]] = {
            FLOOR: list_tables.execute,
            ORDER_BOARD: lambda: list_orders.execute(limit=order_page_size),
            DAILY_SUMMARY: get_daily_summary.execute,
            MENU: get_menu.execute,
        }

    def views_for(self, collection: str) -> tuple[str, ...]:
        return VIEWS_BY_COLLECTION.get(collection, ())

    def refresh(self, collection: str) -> list[str]:
        views = self.views_for(collection)
        if not views:
            logger.info("live_views_unknown_collection", extra={"collection": collection})
            return []

        if collection == MENU_ITEMS:
            try:
                invalidate_menu_cache(self._cache)
            except Exception:
                logger.warning("menu_cache_invalidate_failed", exc_info=True)

        messages = [
            serialize_view_message(view, self._builders[view]().model_dump(mode="json"))
            for view in views
        ]
        logger.debug(
            "live_views_refreshed",
            extra={"collection": collection, "views": list(views)},
        )
        return messages
