from __future__ import annotations

from foh.application.dto.responses import MenuItemResponse, MenuResponse
from foh.application.mappers.money_mapper import to_money_response
from foh.domain.menu.entities import MenuItem


def to_menu_item_response(item: MenuItem) -> MenuItemResponse:
    return MenuItemResponse(
        itemId=str(item.item_id),
        name=item.name,
        description=item.description,
        priceMoney=to_money_response(item.price_money),
        isAvailable=item.is_available,
        category=item.category,
        isPopular=item.is_popular,
        preparationMinutes=item.preparation_minutes,
        imageUrl=item.image_url,
    )


def to_menu_response(items: list[MenuItem]) -> MenuResponse:
    categories: list[str] = []
    for item in items:
        if item.category and item.category not in categories:
            categories.append(item.category)
    return MenuResponse(
        categories=categories,
        items=[to_menu_item_response(item) for item in items],
    )
