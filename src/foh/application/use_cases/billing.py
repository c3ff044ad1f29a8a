from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from foh.application.dto.requests import CreateBillRequest, SettleBillRequest
from foh.application.dto.responses import BillResponse
from foh.application.mappers.bill_mapper import to_bill_response
from foh.application.mappers.event_envelope import BILLS, TABLES
from foh.application.metrics.front_of_house import (
    record_bill_status,
    record_order_to_payment,
    record_table_conflict,
    record_table_transition,
)
from foh.application.ports.repositories import (
    ActiveBillExistsError,
    BillRepository,
    OrderRepository,
    StaleBillStateError,
    StaleTableStateError,
    TableRepository,
)
from foh.application.services.change_feed import ChangeFeed
from foh.application.use_cases.context import TraceContext
from foh.application.use_cases.get_order import OrderNotFoundError
from foh.domain.billing.entities import (
    DEFAULT_TAX_PERCENT,
    Bill,
    PaymentStatus,
    PaymentTransitionError,
    create_pending_bill,
)
from foh.domain.common.ids import BillId, OrderId, TableId
from foh.domain.table.entities import Release, TableOccupantMismatchError

logger = logging.getLogger("foh.billing")


class BillNotFoundError(Exception):
    pass


class InvalidBillRequestError(Exception):
    pass


class BillAlreadyExistsError(Exception):
    pass


class InvalidPaymentTransitionError(Exception):
    pass


class BillConflictError(Exception):
    pass


class TableReleaseConflictError(Exception):
    pass


class CreateBill:
    def __init__(
        self,
        order_repository: OrderRepository,
        bill_repository: BillRepository,
        change_feed: ChangeFeed,
        default_tax_percent: Decimal = DEFAULT_TAX_PERCENT,
    ) -> None:
        self._order_repository = order_repository
        self._bill_repository = bill_repository
        self._change_feed = change_feed
        self._default_tax_percent = default_tax_percent

    def execute(self, request_dto: CreateBillRequest, trace_ctx: TraceContext) -> BillResponse:
        order_id = OrderId(request_dto.order_id)
        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")

        if self._bill_repository.get_active_for_order(order_id) is not None:
            raise BillAlreadyExistsError(f"order {order_id} already has an active bill")

        tax_percent = (
            request_dto.tax_percent
            if request_dto.tax_percent is not None
            else self._default_tax_percent
        )
        try:
            bill = create_pending_bill(
                bill_id=BillId(f"bil_{uuid4().hex[:12]}"),
                order_id=order_id,
                subtotal=order.total,
                now=datetime.now(timezone.utc),
                tax_percent=tax_percent,
                discount_percent=request_dto.discount_percent,
            )
        except ValueError as exc:
            raise InvalidBillRequestError(str(exc)) from exc

        try:
            persisted_bill = self._bill_repository.add(bill)
        except ActiveBillExistsError as exc:
            raise BillAlreadyExistsError(f"order {order_id} already has an active bill") from exc

        record_bill_status(persisted_bill.payment_status.value)
        logger.info(
            "bill_created",
            extra={"bill_id": str(persisted_bill.bill_id), "order_id": str(order_id)},
        )
        response = to_bill_response(persisted_bill)
        self._change_feed.announce(
            collection=BILLS,
            action="created",
            record_id=str(persisted_bill.bill_id),
            payload=response.model_dump(mode="json"),
            trace_ctx=trace_ctx,
            occurred_at=persisted_bill.created_at,
        )
        return response


class SettleBill:
    """Marks a bill paid and frees the order's table in the same transaction."""

    def __init__(
        self,
        order_repository: OrderRepository,
        table_repository: TableRepository,
        bill_repository: BillRepository,
        change_feed: ChangeFeed,
    ) -> None:
        self._order_repository = order_repository
        self._table_repository = table_repository
        self._bill_repository = bill_repository
        self._change_feed = change_feed

    def execute(
        self,
        bill_id: BillId,
        request_dto: SettleBillRequest,
        trace_ctx: TraceContext,
    ) -> BillResponse:
        bill = self._bill_repository.get(bill_id)
        if bill is None:
            raise BillNotFoundError(f"bill {bill_id} not found")
        order = self._order_repository.get(bill.order_id)
        if order is None:
            raise OrderNotFoundError(f"order {bill.order_id} not found")

        if request_dto.table_id is not None and request_dto.table_id != order.table_id:
            raise InvalidBillRequestError(
                f"table {request_dto.table_id} does not belong to order {order.order_id}"
            )

        now = datetime.now(timezone.utc)
        try:
            paid_bill = bill.settle(request_dto.payment_method, now)
        except PaymentTransitionError as exc:
            raise InvalidPaymentTransitionError(str(exc)) from exc
        except ValueError as exc:
            raise InvalidBillRequestError(str(exc)) from exc

        if bill.payment_status == PaymentStatus.FAILED:
            active = self._bill_repository.get_active_for_order(bill.order_id)
            if active is not None and active.bill_id != bill.bill_id:
                raise BillAlreadyExistsError(
                    f"order {bill.order_id} already has an active bill {active.bill_id}"
                )

        release_table_id = order.table_id
        if release_table_id is not None:
            self._check_release(release_table_id, bill)

        try:
            persisted_bill = self._bill_repository.save_payment(
                current=bill,
                updated=paid_bill,
                release_table_id=release_table_id,
            )
        except StaleTableStateError as exc:
            record_table_conflict("release")
            raise TableReleaseConflictError(
                f"table {release_table_id} is no longer occupied by order {bill.order_id}"
            ) from exc
        except StaleBillStateError as exc:
            raise BillConflictError(self._describe_conflict(bill_id)) from exc
        except ActiveBillExistsError as exc:
            raise BillAlreadyExistsError(
                f"order {bill.order_id} already has an active bill"
            ) from exc

        record_bill_status(persisted_bill.payment_status.value)
        record_order_to_payment(order, now=now)
        if release_table_id is not None:
            record_table_transition("release")
        logger.info(
            "bill_settled",
            extra={
                "bill_id": str(bill_id),
                "order_id": str(bill.order_id),
                "table_id": release_table_id,
            },
        )
        response = to_bill_response(persisted_bill)
        self._change_feed.announce(
            collection=BILLS,
            action="updated",
            record_id=str(bill_id),
            payload=response.model_dump(mode="json"),
            trace_ctx=trace_ctx,
            occurred_at=now,
        )
        if release_table_id is not None:
            self._change_feed.announce(
                collection=TABLES,
                action="updated",
                record_id=str(release_table_id),
                payload={
                    "tableId": str(release_table_id),
                    "status": "available",
                    "currentOrderId": None,
                },
                trace_ctx=trace_ctx,
                occurred_at=now,
            )
        return response

    def _check_release(self, table_id: TableId, bill: Bill) -> None:
        table = self._table_repository.get(table_id)
        if table is None:
            raise TableReleaseConflictError(f"table {table_id} no longer exists")
        try:
            table.apply(Release(order_id=bill.order_id))
        except TableOccupantMismatchError as exc:
            record_table_conflict("release")
            raise TableReleaseConflictError(str(exc)) from exc

    def _describe_conflict(self, bill_id: BillId) -> str:
        current = self._bill_repository.get(bill_id)
        if current is None:
            return f"bill {bill_id} disappeared during settlement"
        return f"bill {bill_id} changed concurrently to {current.payment_status.value}"


class MarkPaymentFailed:
    def __init__(self, bill_repository: BillRepository, change_feed: ChangeFeed) -> None:
        self._bill_repository = bill_repository
        self._change_feed = change_feed

    def execute(self, bill_id: BillId, trace_ctx: TraceContext) -> BillResponse:
        bill = self._bill_repository.get(bill_id)
        if bill is None:
            raise BillNotFoundError(f"bill {bill_id} not found")
        try:
            failed_bill = bill.fail()
        except PaymentTransitionError as exc:
            raise InvalidPaymentTransitionError(str(exc)) from exc

        try:
            persisted_bill = self._bill_repository.save_payment(
                current=bill,
                updated=failed_bill,
                release_table_id=None,
            )
        except StaleBillStateError as exc:
            raise BillConflictError(f"bill {bill_id} changed concurrently") from exc

        record_bill_status(persisted_bill.payment_status.value)
        logger.info("bill_payment_failed", extra={"bill_id": str(bill_id)})
        response = to_bill_response(persisted_bill)
        self._change_feed.announce(
            collection=BILLS,
            action="updated",
            record_id=str(bill_id),
            payload=response.model_dump(mode="json"),
            trace_ctx=trace_ctx,
        )
        return response


class GetBill:
    def __init__(self, bill_repository: BillRepository) -> None:
        self._bill_repository = bill_repository

    def execute(self, bill_id: BillId) -> BillResponse:
        bill = self._bill_repository.get(bill_id)
        if bill is None:
            raise BillNotFoundError(f"bill {bill_id} not found")
        return to_bill_response(bill)


class GetOrderBill:
    def __init__(self, order_repository: OrderRepository, bill_repository: BillRepository) -> None:
        self._order_repository = order_repository
        self._bill_repository = bill_repository

    def execute(self, order_id: OrderId) -> BillResponse:
        if self._order_repository.get(order_id) is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        bill = self._bill_repository.get_active_for_order(order_id)
        if bill is None:
            raise BillNotFoundError(f"order {order_id} has no active bill")
        return to_bill_response(bill)
