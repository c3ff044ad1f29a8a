from __future__ import annotations

from foh.api.settings import currency, restaurant_timezone
from foh.application.services.live_views import LiveViews
from foh.application.use_cases.get_daily_summary import GetDailySummary
from foh.application.use_cases.get_menu import GetMenu
from foh.application.use_cases.get_order import ListOrders
from foh.application.use_cases.tables import ListTables
from foh.infrastructure.cache.cache_store import RedisCacheStore
from foh.infrastructure.db.repositories.bill_repo import SqlAlchemyBillRepository
from foh.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from foh.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from foh.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository


def build_live_views() -> LiveViews:
    table_repository = SqlAlchemyTableRepository()
    order_repository = SqlAlchemyOrderRepository()
    cache = RedisCacheStore()
    return LiveViews(
        list_tables=ListTables(table_repository=table_repository),
        list_orders=ListOrders(order_repository=order_repository),
        get_daily_summary=GetDailySummary(
            order_repository=order_repository,
            table_repository=table_repository,
            bill_repository=SqlAlchemyBillRepository(),
            currency=currency(),
            tz=restaurant_timezone(),
        ),
        get_menu=GetMenu(repository=SqlAlchemyMenuRepository(), cache=cache, ttl_seconds=300),
        cache=cache,
    )
