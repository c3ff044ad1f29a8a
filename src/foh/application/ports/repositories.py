from __future__ import annotations

from datetime import datetime
from typing import Protocol

from foh.domain.billing.entities import Bill
from foh.domain.common.ids import BillId, MenuItemId, OrderId, TableId
from foh.domain.menu.entities import MenuItem
from foh.domain.order.entities import Order, OrderStatus
from foh.domain.table.entities import Table, TableStatus


class MenuRepository(Protocol):
    def list_items(self) -> list[MenuItem]: ...

    def get_items(self, item_ids: list[MenuItemId]) -> list[MenuItem]: ...


class TableRepository(Protocol):
    def get(self, table_id: TableId) -> Table | None: ...

    def list(self, status: TableStatus | None = None) -> list[Table]: ...

    def add(self, table: Table) -> None: ...

    def replace_if_unchanged(self, current: Table, updated: Table) -> Table:
        """Persist ``updated`` only while the stored row still matches ``current``.

        Raises ``StaleTableStateError`` when another writer got there first.
        """
        ...


class OrderRepository(Protocol):
    def get(self, order_id: OrderId) -> Order | None: ...

    def add_and_occupy_table(self, order: Order) -> Order:
        """Insert the order with its lines and, for dine-in, occupy its table.

        One transaction. The table must still be available at write time,
        otherwise nothing is written and ``StaleTableStateError`` is raised.
        """
        ...

    def update_status_with_version(
        self,
        order_id: OrderId,
        new_status: OrderStatus,
        expected_version: int,
    ) -> Order: ...

    def list_recent(
        self,
        status: OrderStatus | None,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Order], str | None]: ...

    def list_created_since(self, since: datetime) -> list[Order]: ...


class BillRepository(Protocol):
    def get(self, bill_id: BillId) -> Bill | None: ...

    def get_active_for_order(self, order_id: OrderId) -> Bill | None: ...

    def add(self, bill: Bill) -> Bill:
        """Insert a bill. Raises ``ActiveBillExistsError`` if the order already has one."""
        ...

    def save_payment(
        self,
        current: Bill,
        updated: Bill,
        release_table_id: TableId | None,
    ) -> Bill:
        """Persist a payment status change and, optionally, release the table.

        One transaction, conditional on ``current.payment_status`` and on the
        table still being occupied by ``updated.order_id``.
        """
        ...

    def list_paid_created_since(self, since: datetime) -> list[Bill]: ...


class OptimisticConcurrencyError(Exception):
    pass


class StaleTableStateError(OptimisticConcurrencyError):
    pass


class StaleBillStateError(OptimisticConcurrencyError):
    pass


class ActiveBillExistsError(Exception):
    pass


class InvalidCursorError(Exception):
    pass
