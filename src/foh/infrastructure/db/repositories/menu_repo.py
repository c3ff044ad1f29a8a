from __future__ import annotations

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from foh.application.ports.repositories import MenuRepository
from foh.domain.common.ids import MenuItemId
from foh.domain.common.money import Money
from foh.domain.menu.entities import MenuItem
from foh.infrastructure.db.models.menu import MenuItemModel
from foh.infrastructure.db.session import get_engine


class SqlAlchemyMenuRepository(MenuRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list_items(self) -> list[MenuItem]:
        statement = select(MenuItemModel).order_by(MenuItemModel.catalog_position.asc())
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def get_items(self, item_ids: list[MenuItemId]) -> list[MenuItem]:
        if not item_ids:
            return []
        statement = select(MenuItemModel).where(
            MenuItemModel.id.in_([str(item_id) for item_id in item_ids])
        )
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def _to_domain(self, model: MenuItemModel) -> MenuItem:
        return MenuItem(
            item_id=MenuItemId(model.id),
            name=model.name,
            description=model.description,
            price_money=Money(amount_cents=model.price_cents, currency=model.currency),
            is_available=model.is_available,
            category=model.category,
            is_popular=model.is_popular,
            preparation_minutes=model.preparation_minutes,
            image_url=model.image_url,
        )
