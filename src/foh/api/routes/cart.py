from __future__ import annotations

from fastapi import APIRouter

from foh.api.settings import currency
from foh.application.dto.requests import QuoteCartRequest
from foh.application.dto.responses import CartQuoteResponse
from foh.application.use_cases.quote_cart import QuoteCart
from foh.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository

router = APIRouter()


def _quote_cart_use_case() -> QuoteCart:
    return QuoteCart(menu_repository=SqlAlchemyMenuRepository(), currency=currency())


@router.post("/v1/cart/quote", response_model=CartQuoteResponse)
def quote_cart(request_dto: QuoteCartRequest) -> CartQuoteResponse:
    return _quote_cart_use_case().execute(request_dto)
