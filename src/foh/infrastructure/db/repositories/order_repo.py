from __future__ import annotations

import base64
from datetime import datetime, timezone

from sqlalchemy import Engine, and_, or_, select, update
from sqlalchemy.orm import Session, joinedload

from foh.application.ports.repositories import (
    InvalidCursorError,
    OptimisticConcurrencyError,
    OrderRepository,
    StaleTableStateError,
)
from foh.domain.common.ids import MenuItemId, OrderId, OrderLineId, StaffId, TableId
from foh.domain.common.money import Money
from foh.domain.order.entities import Order, OrderLine, OrderStatus, OrderType
from foh.domain.table.entities import TableStatus
from foh.infrastructure.db.models.order import OrderLineModel, OrderModel
from foh.infrastructure.db.repositories.table_repo import apply_table_change
from foh.infrastructure.db.session import get_engine


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self, order_id: OrderId) -> Order | None:
        statement = (
            select(OrderModel)
            .options(joinedload(OrderModel.lines))
            .where(OrderModel.id == str(order_id))
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).unique().scalar_one_or_none()

        if model is None:
            return None

        return self._to_domain(model)

    def add_and_occupy_table(self, order: Order) -> Order:
        with Session(self._engine) as session:
            session.add(self._to_model(order))
            session.flush()
            if order.table_id is not None:
                try:
                    apply_table_change(
                        session,
                        order.table_id,
                        expected_status=TableStatus.AVAILABLE,
                        expected_order_id=None,
                        new_status=TableStatus.OCCUPIED,
                        new_order_id=order.order_id,
                    )
                except StaleTableStateError:
                    session.rollback()
                    raise
            session.commit()

        created = self.get(order.order_id)
        if created is None:
            raise RuntimeError("created order not found")
        return created

    def update_status_with_version(
        self,
        order_id: OrderId,
        new_status: OrderStatus,
        expected_version: int,
    ) -> Order:
        statement = (
            update(OrderModel)
            .where(
                OrderModel.id == str(order_id),
                OrderModel.version == expected_version,
            )
            .values(
                status=new_status.value,
                version=OrderModel.version + 1,
            )
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                raise OptimisticConcurrencyError(f"order {order_id} version conflict")
            session.commit()

        updated = self.get(order_id)
        if updated is None:
            raise RuntimeError(f"order {order_id} not found after status update")
        return updated

    def list_recent(
        self,
        status: OrderStatus | None,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Order], str | None]:
        statement = select(OrderModel).options(joinedload(OrderModel.lines))
        if status is not None:
            statement = statement.where(OrderModel.status == status.value)

        cursor_parts = _decode_cursor(cursor) if cursor else None
        if cursor_parts is not None:
            cursor_created_at, cursor_order_id = cursor_parts
            statement = statement.where(
                or_(
                    OrderModel.created_at < cursor_created_at,
                    and_(
                        OrderModel.created_at == cursor_created_at,
                        OrderModel.id < cursor_order_id,
                    ),
                )
            )

        statement = statement.order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).limit(
            limit + 1
        )

        with Session(self._engine) as session:
            models = list(session.execute(statement).unique().scalars().all())

        has_more = len(models) > limit
        page_models = models[:limit]
        orders = [self._to_domain(model) for model in page_models]
        next_cursor: str | None = None
        if has_more and page_models:
            last = page_models[-1]
            next_cursor = _encode_cursor(last.created_at, last.id)
        return orders, next_cursor

    def list_created_since(self, since: datetime) -> list[Order]:
        statement = (
            select(OrderModel)
            .options(joinedload(OrderModel.lines))
            .where(OrderModel.created_at >= since)
            .order_by(OrderModel.created_at.asc(), OrderModel.id.asc())
        )
        with Session(self._engine) as session:
            models = list(session.execute(statement).unique().scalars().all())
        return [self._to_domain(model) for model in models]

    def _to_model(self, order: Order) -> OrderModel:
        order_model = OrderModel(
            id=str(order.order_id),
            table_id=str(order.table_id) if order.table_id else None,
            customer_name=order.customer_name,
            order_type=order.order_type.value,
            status=order.status.value,
            version=order.version,
            staff_id=str(order.staff_id) if order.staff_id else None,
            created_at=order.created_at,
            total_cents=order.total.amount_cents,
            currency=order.total.currency,
        )
        order_model.lines = [
            OrderLineModel(
                id=str(line.line_id),
                order_id=str(order.order_id),
                menu_item_id=str(line.item_id),
                name=line.name,
                quantity=line.quantity,
                price_at_order_cents=line.price_at_order.amount_cents,
                currency=line.price_at_order.currency,
                line_total_cents=line.line_total.amount_cents,
                position=position,
            )
            for position, line in enumerate(order.lines)
        ]
        return order_model

    def _to_domain(self, model: OrderModel) -> Order:
        created_at = model.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        lines = [
            OrderLine(
                line_id=OrderLineId(line.id),
                item_id=MenuItemId(line.menu_item_id),
                name=line.name,
                quantity=line.quantity,
                price_at_order=Money(amount_cents=line.price_at_order_cents, currency=line.currency),
                line_total=Money(amount_cents=line.line_total_cents, currency=line.currency),
            )
            for line in model.lines
        ]
        return Order(
            order_id=OrderId(model.id),
            table_id=TableId(model.table_id) if model.table_id else None,
            customer_name=model.customer_name,
            order_type=OrderType(model.order_type),
            status=OrderStatus(model.status),
            lines=lines,
            total=Money(amount_cents=model.total_cents, currency=model.currency),
            created_at=created_at,
            staff_id=StaffId(model.staff_id) if model.staff_id else None,
            version=model.version,
        )


def _encode_cursor(created_at: datetime, order_id: str) -> str:
    payload = f"{created_at.isoformat()}|{order_id}"
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")


def _decode_cursor(cursor: str) -> tuple[datetime, str]:
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
        created_at_raw, order_id = raw.split("|", 1)
        created_at = datetime.fromisoformat(created_at_raw)
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return created_at, order_id
    except Exception as exc:
        raise InvalidCursorError("invalid cursor") from exc
