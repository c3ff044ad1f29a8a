from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from foh.application.ports.repositories import (
    ActiveBillExistsError,
    BillRepository,
    StaleBillStateError,
    StaleTableStateError,
)
from foh.domain.billing.entities import Bill, PaymentStatus
from foh.domain.common.ids import BillId, OrderId, TableId
from foh.domain.common.money import Money
from foh.domain.table.entities import TableStatus
from foh.infrastructure.db.models.bill import BillModel
from foh.infrastructure.db.repositories.table_repo import apply_table_change
from foh.infrastructure.db.session import get_engine

_ACTIVE_BILL_INDEX = "uq_bills_active_order"


class SqlAlchemyBillRepository(BillRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self, bill_id: BillId) -> Bill | None:
        statement = select(BillModel).where(BillModel.id == str(bill_id))
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model)

    def get_active_for_order(self, order_id: OrderId) -> Bill | None:
        statement = (
            select(BillModel)
            .where(
                BillModel.order_id == str(order_id),
                BillModel.payment_status != PaymentStatus.FAILED.value,
            )
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model)

    def add(self, bill: Bill) -> Bill:
        with Session(self._engine) as session:
            session.add(self._to_model(bill))
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                if _ACTIVE_BILL_INDEX in str(exc.orig):
                    raise ActiveBillExistsError(
                        f"order {bill.order_id} already has an active bill"
                    ) from exc
                raise
        return bill

    def save_payment(
        self,
        current: Bill,
        updated: Bill,
        release_table_id: TableId | None,
    ) -> Bill:
        statement = (
            update(BillModel)
            .where(
                BillModel.id == str(current.bill_id),
                BillModel.payment_status == current.payment_status.value,
            )
            .values(
                payment_status=updated.payment_status.value,
                payment_method=updated.payment_method,
                paid_at=updated.paid_at,
            )
        )
        with Session(self._engine) as session:
            try:
                result = session.execute(statement)
                if result.rowcount != 1:
                    raise StaleBillStateError(
                        f"bill {current.bill_id} is no longer {current.payment_status.value}"
                    )
                if release_table_id is not None:
                    apply_table_change(
                        session,
                        release_table_id,
                        expected_status=TableStatus.OCCUPIED,
                        expected_order_id=updated.order_id,
                        new_status=TableStatus.AVAILABLE,
                        new_order_id=None,
                    )
                session.commit()
            except (StaleBillStateError, StaleTableStateError):
                session.rollback()
                raise
            except IntegrityError as exc:
                session.rollback()
                if _ACTIVE_BILL_INDEX in str(exc.orig):
                    raise ActiveBillExistsError(
                        f"order {updated.order_id} already has an active bill"
                    ) from exc
                raise
        return updated

    def list_paid_created_since(self, since: datetime) -> list[Bill]:
        statement = (
            select(BillModel)
            .where(
                BillModel.payment_status == PaymentStatus.PAID.value,
                BillModel.created_at >= since,
            )
            .order_by(BillModel.created_at.asc(), BillModel.id.asc())
        )
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def _to_model(self, bill: Bill) -> BillModel:
        return BillModel(
            id=str(bill.bill_id),
            order_id=str(bill.order_id),
            subtotal_cents=bill.subtotal.amount_cents,
            tax_percent=bill.tax_percent,
            tax_amount_cents=bill.tax_amount.amount_cents,
            discount_percent=bill.discount_percent,
            discount_amount_cents=bill.discount_amount.amount_cents,
            final_total_cents=bill.final_total.amount_cents,
            currency=bill.subtotal.currency,
            payment_status=bill.payment_status.value,
            payment_method=bill.payment_method,
            created_at=bill.created_at,
            paid_at=bill.paid_at,
        )

    def _to_domain(self, model: BillModel) -> Bill:
        currency = model.currency
        return Bill(
            bill_id=BillId(model.id),
            order_id=OrderId(model.order_id),
            subtotal=Money(amount_cents=model.subtotal_cents, currency=currency),
            tax_percent=model.tax_percent,
            tax_amount=Money(amount_cents=model.tax_amount_cents, currency=currency),
            discount_percent=model.discount_percent,
            discount_amount=Money(amount_cents=model.discount_amount_cents, currency=currency),
            final_total=Money(amount_cents=model.final_total_cents, currency=currency),
            payment_status=PaymentStatus(model.payment_status),
            created_at=_aware(model.created_at),
            payment_method=model.payment_method,
            paid_at=_aware(model.paid_at) if model.paid_at else None,
        )


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
