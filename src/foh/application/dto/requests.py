from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


Percent = Annotated[Decimal, Field(ge=0, le=100, decimal_places=2)]


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class AddTableRequest(CamelBaseModel):
    name: str = Field(min_length=1, max_length=100)
    table_number: int | None = None
    capacity: int


class CartEventRequest(CamelBaseModel):
    type: Literal["add", "change", "remove"]
    item_id: str
    delta: int = 0


class QuoteCartRequest(CamelBaseModel):
    events: list[CartEventRequest] = Field(default_factory=list)
    suggestion_limit: int = Field(default=3, ge=0, le=10)


class CreateOrderLineRequest(CamelBaseModel):
    item_id: str
    quantity: int


class CreateOrderRequest(CamelBaseModel):
    order_type: Literal["dine-in", "takeaway"]
    table_id: str | None = None
    customer_name: str | None = Field(default=None, max_length=255)
    lines: list[CreateOrderLineRequest] = Field(min_length=1)


class UpdateOrderStatusRequest(CamelBaseModel):
    status: str


class CreateBillRequest(CamelBaseModel):
    order_id: str
    tax_percent: Percent | None = None
    discount_percent: Percent = Decimal("0")


class SettleBillRequest(CamelBaseModel):
    payment_method: str = Field(min_length=1, max_length=50)
    table_id: str | None = None
