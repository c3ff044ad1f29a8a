from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Union

from foh.domain.common.ids import OrderId, TableId


class TableStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"


@dataclass(frozen=True)
class Occupy:
    order_id: OrderId


@dataclass(frozen=True)
class Release:
    """Return a table to ``available``.

    With an ``order_id`` this settles an occupied table and only applies while
    that order is the occupant. Without one it cancels a reservation.
    """

    order_id: OrderId | None = None


@dataclass(frozen=True)
class Reserve:
    pass


TableTransition = Union[Occupy, Release, Reserve]


@dataclass(frozen=True)
class Table:
    table_id: TableId
    name: str
    capacity: int
    status: TableStatus = TableStatus.AVAILABLE
    table_number: int | None = None
    current_order_id: OrderId | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if self.capacity < 1:
            raise ValueError("capacity must be >= 1")
        if self.status == TableStatus.OCCUPIED and self.current_order_id is None:
            raise ValueError("occupied table must reference an order")
        if self.status != TableStatus.OCCUPIED and self.current_order_id is not None:
            raise ValueError(f"{self.status.value} table must not reference an order")

    def apply(self, transition: TableTransition) -> Table:
        if isinstance(transition, Occupy):
            if self.status != TableStatus.AVAILABLE:
                raise TableUnavailableError(
                    f"table {self.table_id} is {self.status.value}, not available"
                )
            return replace(self, status=TableStatus.OCCUPIED, current_order_id=transition.order_id)

        if isinstance(transition, Reserve):
            if self.status != TableStatus.AVAILABLE:
                raise TableUnavailableError(
                    f"table {self.table_id} is {self.status.value}, not available"
                )
            return replace(self, status=TableStatus.RESERVED, current_order_id=None)

        if isinstance(transition, Release):
            if transition.order_id is None:
                if self.status != TableStatus.RESERVED:
                    raise TableTransitionError(
                        f"table {self.table_id} is {self.status.value}, not reserved"
                    )
            elif (
                self.status != TableStatus.OCCUPIED
                or self.current_order_id != transition.order_id
            ):
                raise TableOccupantMismatchError(
                    f"table {self.table_id} is not occupied by order {transition.order_id}"
                )
            return replace(self, status=TableStatus.AVAILABLE, current_order_id=None)

        raise TableTransitionError(f"unknown table transition: {transition!r}")


class TableTransitionError(Exception):
    pass


class TableUnavailableError(TableTransitionError):
    pass


class TableOccupantMismatchError(TableTransitionError):
    pass
