from __future__ import annotations

from fastapi import APIRouter, Query, status

from foh.api.tracing import current_trace_context
from foh.application.dto.requests import AddTableRequest
from foh.application.dto.responses import TableListResponse, TableResponse
from foh.application.services.change_feed import ChangeFeed
from foh.application.use_cases.tables import (
    AddTable,
    CancelReservation,
    GetTable,
    ListTables,
    ReserveTable,
)
from foh.domain.common.ids import TableId
from foh.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from foh.infrastructure.messaging.redis_publisher import RedisEventPublisher

router = APIRouter()


def _change_feed() -> ChangeFeed:
    return ChangeFeed(publisher=RedisEventPublisher())


def _list_tables_use_case() -> ListTables:
    return ListTables(table_repository=SqlAlchemyTableRepository())


def _get_table_use_case() -> GetTable:
    return GetTable(table_repository=SqlAlchemyTableRepository())


def _add_table_use_case() -> AddTable:
    return AddTable(table_repository=SqlAlchemyTableRepository(), change_feed=_change_feed())


def _reserve_table_use_case() -> ReserveTable:
    return ReserveTable(table_repository=SqlAlchemyTableRepository(), change_feed=_change_feed())


def _cancel_reservation_use_case() -> CancelReservation:
    return CancelReservation(
        table_repository=SqlAlchemyTableRepository(),
        change_feed=_change_feed(),
    )


@router.get("/v1/tables", response_model=TableListResponse)
def list_tables(status_filter: str = Query(default="ALL", alias="status")) -> TableListResponse:
    return _list_tables_use_case().execute(status=status_filter)


@router.post("/v1/tables", response_model=TableResponse, status_code=status.HTTP_201_CREATED)
def add_table(request_dto: AddTableRequest) -> TableResponse:
    return _add_table_use_case().execute(
        name=request_dto.name,
        capacity=request_dto.capacity,
        table_number=request_dto.table_number,
        trace_ctx=current_trace_context(),
    )


@router.get("/v1/tables/{table_id}", response_model=TableResponse)
def get_table(table_id: str) -> TableResponse:
    return _get_table_use_case().execute(TableId(table_id))


@router.post("/v1/tables/{table_id}/reserve", response_model=TableResponse)
def reserve_table(table_id: str) -> TableResponse:
    return _reserve_table_use_case().execute(TableId(table_id), trace_ctx=current_trace_context())


@router.post("/v1/tables/{table_id}/cancel-reservation", response_model=TableResponse)
def cancel_reservation(table_id: str) -> TableResponse:
    return _cancel_reservation_use_case().execute(
        TableId(table_id),
        trace_ctx=current_trace_context(),
    )
