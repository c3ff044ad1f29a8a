from __future__ import annotations

from foh.application.dto.responses import DailySummaryResponse
from foh.application.mappers.money_mapper import to_money_response
from foh.domain.analytics.summary import DailySummary


def to_daily_summary_response(summary: DailySummary) -> DailySummaryResponse:
    return DailySummaryResponse(
        since=summary.since,
        revenue=to_money_response(summary.revenue),
        orderCount=summary.order_count,
        averageOrderValue=to_money_response(summary.average_order_value),
        customersServed=summary.customers_served,
        activeTables=summary.active_tables,
    )
