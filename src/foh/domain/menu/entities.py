from __future__ import annotations

from dataclasses import dataclass

from foh.domain.common.ids import MenuItemId
from foh.domain.common.money import Money


@dataclass(frozen=True)
class MenuItem:
    item_id: MenuItemId
    name: str
    description: str | None
    price_money: Money
    is_available: bool
    category: str | None = None
    is_popular: bool = False
    preparation_minutes: int | None = None
    image_url: str | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if self.preparation_minutes is not None and self.preparation_minutes < 0:
            raise ValueError("preparation_minutes must be >= 0")


@dataclass(frozen=True)
class MenuCatalog:
    items: list[MenuItem]

    def get(self, item_id: str) -> MenuItem | None:
        for item in self.items:
            if str(item.item_id) == item_id:
                return item
        return None

    def available(self) -> list[MenuItem]:
        return [item for item in self.items if item.is_available]
