from __future__ import annotations

from sqlalchemy import Engine, select, update
from sqlalchemy.orm import Session

from foh.application.ports.repositories import StaleTableStateError, TableRepository
from foh.domain.common.ids import OrderId, TableId
from foh.domain.table.entities import Table, TableStatus
from foh.infrastructure.db.models.table import TableModel
from foh.infrastructure.db.session import get_engine


def apply_table_change(
    session: Session,
    table_id: TableId,
    *,
    expected_status: TableStatus,
    expected_order_id: OrderId | None,
    new_status: TableStatus,
    new_order_id: OrderId | None,
) -> None:
    """Compare-and-set a table row inside the caller's transaction.

    The row changes only while its status and occupant still match the
    expected values. Raises ``StaleTableStateError`` when no row matched; the
    caller owns the rollback.
    """
    statement = (
        update(TableModel)
        .where(
            TableModel.id == str(table_id),
            TableModel.status == expected_status.value,
            TableModel.current_order_id.is_not_distinct_from(
                str(expected_order_id) if expected_order_id else None
            ),
        )
        .values(
            status=new_status.value,
            current_order_id=str(new_order_id) if new_order_id else None,
        )
    )
    result = session.execute(statement)
    if result.rowcount != 1:
        raise StaleTableStateError(f"table {table_id} is no longer {expected_status.value}")


class SqlAlchemyTableRepository(TableRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self, table_id: TableId) -> Table | None:
        statement = select(TableModel).where(TableModel.id == str(table_id))
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()

        if model is None:
            return None

        return self._to_domain(model)

    def list(self, status: TableStatus | None = None) -> list[Table]:
        statement = select(TableModel)
        if status is not None:
            statement = statement.where(TableModel.status == status.value)
        statement = statement.order_by(TableModel.name.asc(), TableModel.id.asc())

        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def add(self, table: Table) -> None:
        with Session(self._engine) as session:
            session.add(
                TableModel(
                    id=str(table.table_id),
                    name=table.name,
                    table_number=table.table_number,
                    capacity=table.capacity,
                    status=table.status.value,
                    current_order_id=(
                        str(table.current_order_id) if table.current_order_id else None
                    ),
                )
            )
            session.commit()

    def replace_if_unchanged(self, current: Table, updated: Table) -> Table:
        with Session(self._engine) as session:
            try:
                apply_table_change(
                    session,
                    current.table_id,
                    expected_status=current.status,
                    expected_order_id=current.current_order_id,
                    new_status=updated.status,
                    new_order_id=updated.current_order_id,
                )
            except StaleTableStateError:
                session.rollback()
                raise
            session.commit()
        return updated

    def _to_domain(self, model: TableModel) -> Table:
        return Table(
            table_id=TableId(model.id),
            name=model.name,
            capacity=model.capacity,
            status=TableStatus(model.status),
            table_number=model.table_number,
            current_order_id=OrderId(model.current_order_id) if model.current_order_id else None,
        )
