from __future__ import annotations

import logging

from pydantic import ValidationError

from foh.application.dto.responses import MenuResponse
from foh.application.mappers.menu_mapper import to_menu_response
from foh.application.ports.cache import CacheStore
from foh.application.ports.repositories import MenuRepository
from foh.domain.menu.entities import MenuItem

MENU_CACHE_KEY = "menu:catalog"

logger = logging.getLogger("foh.menu")


def _sort_key(item: MenuItem) -> tuple[str, str]:
    return (item.category or "", item.name.casefold())


class GetMenu:
    def __init__(
        self,
        repository: MenuRepository,
        cache: CacheStore,
        ttl_seconds: int = 300,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    def _cache_get(self, key: str) -> str | None:
        try:
            return self._cache.get(key)
        except Exception:
            logger.warning("menu_cache_read_failed", exc_info=True)
            return None

    def _cache_set(self, key: str, value: str) -> None:
        try:
            self._cache.set(key, value, ttl_seconds=self._ttl_seconds)
        except Exception:
            logger.warning("menu_cache_write_failed", exc_info=True)

    def execute(self) -> MenuResponse:
        payload = self._cache_get(MENU_CACHE_KEY)
        if payload:
            try:
                return MenuResponse.model_validate_json(payload)
            except ValidationError:
                logger.info("menu_cache_payload_invalid")

        items = sorted(self._repository.list_items(), key=_sort_key)
        response = to_menu_response(items)
        self._cache_set(MENU_CACHE_KEY, response.model_dump_json())
        return response


def invalidate_menu_cache(cache: CacheStore) -> None:
    cache.delete(MENU_CACHE_KEY)
