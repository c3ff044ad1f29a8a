from __future__ import annotations

from fastapi import APIRouter, Header, Query, status

from foh.api.tracing import current_trace_context
from foh.application.dto.requests import CreateOrderRequest, UpdateOrderStatusRequest
from foh.application.dto.responses import BillResponse, OrderListResponse, OrderResponse
from foh.application.services.change_feed import ChangeFeed
from foh.application.use_cases.billing import GetOrderBill
from foh.application.use_cases.create_order import CreateOrder
from foh.application.use_cases.get_order import GetOrder, ListOrders
from foh.application.use_cases.update_order_status import UpdateOrderStatus, parse_order_status
from foh.domain.common.ids import OrderId, StaffId
from foh.infrastructure.db.repositories.bill_repo import SqlAlchemyBillRepository
from foh.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from foh.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from foh.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from foh.infrastructure.messaging.redis_publisher import RedisEventPublisher

router = APIRouter()


def _create_order_use_case() -> CreateOrder:
    return CreateOrder(
        menu_repository=SqlAlchemyMenuRepository(),
        table_repository=SqlAlchemyTableRepository(),
        order_repository=SqlAlchemyOrderRepository(),
        change_feed=ChangeFeed(publisher=RedisEventPublisher()),
    )


def _update_order_status_use_case() -> UpdateOrderStatus:
    return UpdateOrderStatus(
        order_repository=SqlAlchemyOrderRepository(),
        change_feed=ChangeFeed(publisher=RedisEventPublisher()),
    )


def _get_order_use_case() -> GetOrder:
    return GetOrder(order_repository=SqlAlchemyOrderRepository())


def _list_orders_use_case() -> ListOrders:
    return ListOrders(order_repository=SqlAlchemyOrderRepository())


def _get_order_bill_use_case() -> GetOrderBill:
    return GetOrderBill(
        order_repository=SqlAlchemyOrderRepository(),
        bill_repository=SqlAlchemyBillRepository(),
    )


@router.post("/v1/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    request_dto: CreateOrderRequest,
    x_staff_id: str | None = Header(default=None, alias="X-Staff-Id"),
) -> OrderResponse:
    return _create_order_use_case().execute(
        request_dto=request_dto,
        trace_ctx=current_trace_context(),
        staff_id=StaffId(x_staff_id) if x_staff_id else None,
    )


@router.get("/v1/orders", response_model=OrderListResponse)
def list_orders(
    status_filter: str = Query(default="ALL", alias="status"),
    limit: int = Query(default=50),
    cursor: str | None = Query(default=None),
) -> OrderListResponse:
    return _list_orders_use_case().execute(status=status_filter, limit=limit, cursor=cursor)


@router.get("/v1/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: str) -> OrderResponse:
    return _get_order_use_case().execute(order_id=OrderId(order_id))


@router.post("/v1/orders/{order_id}/status", response_model=OrderResponse)
def update_order_status(order_id: str, request_dto: UpdateOrderStatusRequest) -> OrderResponse:
    return _update_order_status_use_case().execute(
        order_id=OrderId(order_id),
        new_status=parse_order_status(request_dto.status),
        trace_ctx=current_trace_context(),
    )


@router.get("/v1/orders/{order_id}/bill", response_model=BillResponse)
def get_order_bill(order_id: str) -> BillResponse:
    return _get_order_bill_use_case().execute(OrderId(order_id))
