from __future__ import annotations

from foh.application.dto.requests import QuoteCartRequest
from foh.application.dto.responses import CartLineResponse, CartQuoteResponse, SuggestionResponse
from foh.application.mappers.menu_mapper import to_menu_item_response
from foh.application.mappers.money_mapper import to_money_response
from foh.application.ports.repositories import MenuRepository
from foh.domain.cart.cart import Cart
from foh.domain.menu.entities import MenuCatalog
from foh.domain.upsell.suggestions import DEFAULT_POLICY, ScoringPolicy, suggest


class InvalidCartError(Exception):
    pass


class QuoteCart:
    """Replays cart events against the live catalog and prices the result."""

    def __init__(
        self,
        menu_repository: MenuRepository,
        currency: str,
        policy: ScoringPolicy = DEFAULT_POLICY,
    ) -> None:
        self._menu_repository = menu_repository
        self._currency = currency
        self._policy = policy

    def execute(self, request_dto: QuoteCartRequest) -> CartQuoteResponse:
        catalog = MenuCatalog(items=self._menu_repository.list_items())
        cart = Cart(currency=self._currency)

        for event in request_dto.events:
            item = catalog.get(event.item_id)
            if item is None:
                raise InvalidCartError(f"menu item {event.item_id} does not exist")
            if event.type == "add":
                if not item.is_available:
                    raise InvalidCartError(f"menu item {event.item_id} is unavailable")
                if item.price_money.currency != self._currency:
                    raise InvalidCartError(
                        f"menu item {event.item_id} is priced in {item.price_money.currency}"
                    )
                cart = cart.add_item(item)
            elif event.type == "change":
                cart = cart.change_quantity(event.item_id, event.delta)
            else:
                cart = cart.remove_item(event.item_id)

        suggestions = suggest(
            catalog.items,
            cart.items(),
            policy=self._policy,
            limit=request_dto.suggestion_limit,
        )
        return CartQuoteResponse(
            lines=[
                CartLineResponse(
                    itemId=str(entry.item.item_id),
                    name=entry.item.name,
                    quantity=entry.quantity,
                    unitPrice=to_money_response(entry.item.price_money),
                    lineTotal=to_money_response(entry.line_total),
                )
                for entry in cart.entries
            ],
            total=to_money_response(cart.total()),
            suggestions=[
                SuggestionResponse(
                    item=to_menu_item_response(suggestion.item),
                    reason=suggestion.reason,
                    confidence=suggestion.confidence,
                )
                for suggestion in suggestions
            ],
        )
