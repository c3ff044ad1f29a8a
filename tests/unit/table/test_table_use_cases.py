from __future__ import annotations

import pytest

from foh.application.ports.repositories import StaleTableStateError
from foh.application.use_cases.context import TraceContext
from foh.application.use_cases.tables import (
    AddTable,
    CancelReservation,
    GetTable,
    InvalidTableError,
    InvalidTableTransitionError,
    ListTables,
    ReserveTable,
    TableNotFoundError,
    TableUnavailableError,
)
from foh.domain.common.ids import TableId
from foh.domain.table.entities import TableStatus

TRACE = TraceContext(trace_id="trace-1", request_id="req-1")


def test_list_tables_filters_by_status(table_repository, change_feed) -> None:
    ReserveTable(table_repository, change_feed).execute(TableId("tbl_002"), trace_ctx=TRACE)

    everything = ListTables(table_repository).execute()
    reserved = ListTables(table_repository).execute(status="reserved")

    assert [table.tableId for table in everything.tables] == ["tbl_001", "tbl_002", "tbl_003"]
    assert [table.tableId for table in reserved.tables] == ["tbl_002"]


def test_list_tables_rejects_unknown_status(table_repository) -> None:
    with pytest.raises(InvalidTableError):
        ListTables(table_repository).execute(status="dirty")


def test_add_table_starts_available_and_announces(table_repository, change_feed, publisher) -> None:
    response = AddTable(table_repository, change_feed).execute(
        name=" Patio ",
        capacity=4,
        table_number=9,
        trace_ctx=TRACE,
    )

    assert response.status == "available"
    assert response.currentOrderId is None
    assert response.name == "Patio"
    assert table_repository.get(TableId(response.tableId)) is not None
    assert publisher.channels == ["changes:restaurant_tables"]
    envelope = publisher.calls[0].envelope
    assert envelope["event_type"] == "restaurant_tables.created"
    assert envelope["record_id"] == response.tableId
    assert envelope["request_id"] == "req-1"


@pytest.mark.parametrize(("name", "capacity"), [("", 2), ("Bar", 0), ("Bar", -3)])
def test_add_table_validates_input(table_repository, change_feed, name: str, capacity: int) -> None:
    with pytest.raises(InvalidTableError):
        AddTable(table_repository, change_feed).execute(
            name=name,
            capacity=capacity,
            trace_ctx=TRACE,
        )


def test_get_table_not_found(table_repository) -> None:
    with pytest.raises(TableNotFoundError):
        GetTable(table_repository).execute(TableId("tbl_missing"))


def test_reserve_then_cancel(table_repository, change_feed, publisher) -> None:
    reserved = ReserveTable(table_repository, change_feed).execute(
        TableId("tbl_001"),
        trace_ctx=TRACE,
    )
    cancelled = CancelReservation(table_repository, change_feed).execute(
        TableId("tbl_001"),
        trace_ctx=TRACE,
    )

    assert reserved.status == "reserved"
    assert cancelled.status == "available"
    assert table_repository.get(TableId("tbl_001")).status == TableStatus.AVAILABLE
    assert publisher.channels == ["changes:restaurant_tables", "changes:restaurant_tables"]


def test_reserving_reserved_table_is_a_conflict(table_repository, change_feed) -> None:
    use_case = ReserveTable(table_repository, change_feed)
    use_case.execute(TableId("tbl_001"), trace_ctx=TRACE)

    with pytest.raises(TableUnavailableError):
        use_case.execute(TableId("tbl_001"), trace_ctx=TRACE)


def test_cancel_without_reservation_is_invalid(table_repository, change_feed) -> None:
    with pytest.raises(InvalidTableTransitionError):
        CancelReservation(table_repository, change_feed).execute(
            TableId("tbl_001"),
            trace_ctx=TRACE,
        )


def test_lost_race_surfaces_as_conflict(table_repository, change_feed, publisher) -> None:
    def stale(current, updated):
        raise StaleTableStateError("changed")

    table_repository.replace_if_unchanged = stale

    with pytest.raises(TableUnavailableError):
        ReserveTable(table_repository, change_feed).execute(TableId("tbl_001"), trace_ctx=TRACE)
    assert publisher.calls == []
