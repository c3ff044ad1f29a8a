from __future__ import annotations

from fastapi import APIRouter, status

from foh.api.settings import default_tax_percent
from foh.api.tracing import current_trace_context
from foh.application.dto.requests import CreateBillRequest, SettleBillRequest
from foh.application.dto.responses import BillResponse
from foh.application.services.change_feed import ChangeFeed
from foh.application.use_cases.billing import CreateBill, GetBill, MarkPaymentFailed, SettleBill
from foh.domain.common.ids import BillId
from foh.infrastructure.db.repositories.bill_repo import SqlAlchemyBillRepository
from foh.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from foh.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from foh.infrastructure.messaging.redis_publisher import RedisEventPublisher

router = APIRouter()


def _create_bill_use_case() -> CreateBill:
    return CreateBill(
        order_repository=SqlAlchemyOrderRepository(),
        bill_repository=SqlAlchemyBillRepository(),
        change_feed=ChangeFeed(publisher=RedisEventPublisher()),
        default_tax_percent=default_tax_percent(),
    )


def _settle_bill_use_case() -> SettleBill:
    return SettleBill(
        order_repository=SqlAlchemyOrderRepository(),
        table_repository=SqlAlchemyTableRepository(),
        bill_repository=SqlAlchemyBillRepository(),
        change_feed=ChangeFeed(publisher=RedisEventPublisher()),
    )


def _mark_payment_failed_use_case() -> MarkPaymentFailed:
    return MarkPaymentFailed(
        bill_repository=SqlAlchemyBillRepository(),
        change_feed=ChangeFeed(publisher=RedisEventPublisher()),
    )


def _get_bill_use_case() -> GetBill:
    return GetBill(bill_repository=SqlAlchemyBillRepository())


@router.post("/v1/bills", response_model=BillResponse, status_code=status.HTTP_201_CREATED)
def create_bill(request_dto: CreateBillRequest) -> BillResponse:
    return _create_bill_use_case().execute(request_dto, trace_ctx=current_trace_context())


@router.get("/v1/bills/{bill_id}", response_model=BillResponse)
def get_bill(bill_id: str) -> BillResponse:
    return _get_bill_use_case().execute(BillId(bill_id))


@router.post("/v1/bills/{bill_id}/settle", response_model=BillResponse)
def settle_bill(bill_id: str, request_dto: SettleBillRequest) -> BillResponse:
    return _settle_bill_use_case().execute(
        BillId(bill_id),
        request_dto,
        trace_ctx=current_trace_context(),
    )


@router.post("/v1/bills/{bill_id}/fail", response_model=BillResponse)
def mark_payment_failed(bill_id: str) -> BillResponse:
    return _mark_payment_failed_use_case().execute(
        BillId(bill_id),
        trace_ctx=current_trace_context(),
    )
