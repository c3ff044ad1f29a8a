from __future__ import annotations

import hashlib

from fastapi import APIRouter, Header, Response

from foh.application.dto.responses import MenuResponse
from foh.application.use_cases.get_menu import GetMenu
from foh.infrastructure.cache.cache_store import RedisCacheStore
from foh.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository

router = APIRouter()


def _get_menu_use_case() -> GetMenu:
    return GetMenu(
        repository=SqlAlchemyMenuRepository(),
        cache=RedisCacheStore(),
        ttl_seconds=300,
    )


@router.get("/v1/menu", response_model=MenuResponse)
def get_menu(
    response: Response,
    if_none_match: str | None = Header(default=None, alias="If-None-Match"),
) -> MenuResponse | Response:
    payload = _get_menu_use_case().execute()

    digest = hashlib.sha256(payload.model_dump_json().encode("utf-8")).hexdigest()[:16]
    etag = f'"menu-{digest}"'
    if if_none_match == etag:
        return Response(status_code=304, headers={"ETag": etag})

    response.headers["ETag"] = etag
    return payload
