from __future__ import annotations

import logging
from uuid import uuid4

from foh.application.dto.responses import TableListResponse, TableResponse
from foh.application.mappers.event_envelope import TABLES
from foh.application.mappers.table_mapper import to_table_response
from foh.application.metrics.front_of_house import record_table_conflict, record_table_transition
from foh.application.ports.repositories import StaleTableStateError, TableRepository
from foh.application.services.change_feed import ChangeFeed
from foh.application.use_cases.context import TraceContext
from foh.domain.common.ids import TableId
from foh.domain.table.entities import (
    Release,
    Reserve,
    Table,
    TableStatus,
    TableTransition,
    TableTransitionError,
)
from foh.domain.table.entities import TableUnavailableError as DomainTableUnavailableError

logger = logging.getLogger("foh.tables")

_STATUS_MAP: dict[str, TableStatus | None] = {
    "ALL": None,
    "AVAILABLE": TableStatus.AVAILABLE,
    "OCCUPIED": TableStatus.OCCUPIED,
    "RESERVED": TableStatus.RESERVED,
}


class TableNotFoundError(Exception):
    pass


class InvalidTableError(Exception):
    pass


class TableUnavailableError(Exception):
    """Table state changed between read and write; retrying may succeed."""


class InvalidTableTransitionError(Exception):
    pass


class ListTables:
    def __init__(self, table_repository: TableRepository) -> None:
        self._table_repository = table_repository

    def execute(self, status: str = "ALL") -> TableListResponse:
        normalized_status = status.upper()
        if normalized_status not in _STATUS_MAP:
            raise InvalidTableError(f"invalid table status filter: {status}")
        tables = self._table_repository.list(status=_STATUS_MAP[normalized_status])
        return TableListResponse(tables=[to_table_response(table) for table in tables])


class GetTable:
    def __init__(self, table_repository: TableRepository) -> None:
        self._table_repository = table_repository

    def execute(self, table_id: TableId) -> TableResponse:
        table = self._table_repository.get(table_id)
        if table is None:
            raise TableNotFoundError(f"table {table_id} not found")
        return to_table_response(table)


class AddTable:
    def __init__(self, table_repository: TableRepository, change_feed: ChangeFeed) -> None:
        self._table_repository = table_repository
        self._change_feed = change_feed

    def execute(
        self,
        name: str,
        capacity: int,
        trace_ctx: TraceContext,
        table_number: int | None = None,
    ) -> TableResponse:
        try:
            table = Table(
                table_id=TableId(f"tbl_{uuid4().hex[:12]}"),
                name=name.strip(),
                capacity=capacity,
                table_number=table_number,
            )
        except ValueError as exc:
            raise InvalidTableError(str(exc)) from exc

        self._table_repository.add(table)
        logger.info("table_added", extra={"table_id": str(table.table_id)})
        response = to_table_response(table)
        self._change_feed.announce(
            collection=TABLES,
            action="created",
            record_id=str(table.table_id),
            payload=response.model_dump(mode="json"),
            trace_ctx=trace_ctx,
        )
        return response


class _ApplyTableTransition:
    operation = "transition"

    def __init__(self, table_repository: TableRepository, change_feed: ChangeFeed) -> None:
        self._table_repository = table_repository
        self._change_feed = change_feed

    def _transition(self) -> TableTransition:
        raise NotImplementedError

    def execute(self, table_id: TableId, trace_ctx: TraceContext) -> TableResponse:
        table = self._table_repository.get(table_id)
        if table is None:
            raise TableNotFoundError(f"table {table_id} not found")

        try:
            updated = table.apply(self._transition())
        except DomainTableUnavailableError as exc:
            record_table_conflict(self.operation)
            raise TableUnavailableError(str(exc)) from exc
        except TableTransitionError as exc:
            raise InvalidTableTransitionError(str(exc)) from exc

        try:
            persisted = self._table_repository.replace_if_unchanged(table, updated)
        except StaleTableStateError as exc:
            record_table_conflict(self.operation)
            raise TableUnavailableError(f"table {table_id} changed concurrently") from exc

        record_table_transition(self.operation)
        logger.info(
            "table_transition_applied",
            extra={"table_id": str(table_id), "transition": self.operation},
        )
        response = to_table_response(persisted)
        self._change_feed.announce(
            collection=TABLES,
            action="updated",
            record_id=str(table_id),
            payload=response.model_dump(mode="json"),
            trace_ctx=trace_ctx,
        )
        return response


class ReserveTable(_ApplyTableTransition):
    operation = "reserve"

    def _transition(self) -> TableTransition:
        return Reserve()


class CancelReservation(_ApplyTableTransition):
    operation = "cancel_reservation"

    def _transition(self) -> TableTransition:
        return Release()
