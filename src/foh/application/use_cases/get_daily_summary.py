from __future__ import annotations

from datetime import datetime, time, timezone
from zoneinfo import ZoneInfo

from foh.application.dto.responses import DailySummaryResponse
from foh.application.mappers.summary_mapper import to_daily_summary_response
from foh.application.ports.repositories import BillRepository, OrderRepository, TableRepository
from foh.domain.analytics.summary import summarize


def start_of_local_day(now: datetime, tz: ZoneInfo) -> datetime:
    local_now = now.astimezone(tz)
    midnight = datetime.combine(local_now.date(), time.min, tzinfo=tz)
    return midnight.astimezone(timezone.utc)


class GetDailySummary:
    """Today's revenue, order and seating figures, derived from current rows."""

    def __init__(
        self,
        order_repository: OrderRepository,
        table_repository: TableRepository,
        bill_repository: BillRepository,
        currency: str,
        tz: ZoneInfo,
    ) -> None:
        self._order_repository = order_repository
        self._table_repository = table_repository
        self._bill_repository = bill_repository
        self._currency = currency
        self._tz = tz

    def execute(self, now: datetime | None = None) -> DailySummaryResponse:
        since = start_of_local_day(now or datetime.now(timezone.utc), self._tz)
        summary = summarize(
            since=since,
            bills=self._bill_repository.list_paid_created_since(since),
            orders=self._order_repository.list_created_since(since),
            tables=self._table_repository.list(),
            currency=self._currency,
        )
        return to_daily_summary_response(summary)
