from __future__ import annotations

from fastapi import APIRouter

from foh.api.settings import currency, restaurant_timezone
from foh.application.dto.responses import DailySummaryResponse
from foh.application.use_cases.get_daily_summary import GetDailySummary
from foh.infrastructure.db.repositories.bill_repo import SqlAlchemyBillRepository
from foh.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from foh.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository

router = APIRouter()


def _get_daily_summary_use_case() -> GetDailySummary:
    return GetDailySummary(
        order_repository=SqlAlchemyOrderRepository(),
        table_repository=SqlAlchemyTableRepository(),
        bill_repository=SqlAlchemyBillRepository(),
        currency=currency(),
        tz=restaurant_timezone(),
    )


@router.get("/v1/analytics/today", response_model=DailySummaryResponse)
def get_daily_summary() -> DailySummaryResponse:
    return _get_daily_summary_use_case().execute()
