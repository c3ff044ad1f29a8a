from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class MoneyResponse(BaseModel):
    amountCents: int
    currency: str


class MenuItemResponse(BaseModel):
    itemId: str
    name: str
    description: str | None = None
    priceMoney: MoneyResponse
    isAvailable: bool
    category: str | None = None
    isPopular: bool = False
    preparationMinutes: int | None = None
    imageUrl: str | None = None


class MenuResponse(BaseModel):
    categories: list[str] = Field(default_factory=list)
    items: list[MenuItemResponse] = Field(default_factory=list)


class TableResponse(BaseModel):
    tableId: str
    name: str
    tableNumber: int | None = None
    capacity: int
    status: str
    currentOrderId: str | None = None


class TableListResponse(BaseModel):
    tables: list[TableResponse] = Field(default_factory=list)


class CartLineResponse(BaseModel):
    itemId: str
    name: str
    quantity: int
    unitPrice: MoneyResponse
    lineTotal: MoneyResponse


class SuggestionResponse(BaseModel):
    item: MenuItemResponse
    reason: str
    confidence: int


class CartQuoteResponse(BaseModel):
    lines: list[CartLineResponse] = Field(default_factory=list)
    total: MoneyResponse
    suggestions: list[SuggestionResponse] = Field(default_factory=list)


class OrderLineResponse(BaseModel):
    lineId: str
    itemId: str
    name: str
    quantity: int
    priceAtOrder: MoneyResponse
    lineTotal: MoneyResponse


class OrderResponse(BaseModel):
    orderId: str
    tableId: str | None = None
    customerName: str | None = None
    orderType: str
    status: str
    lines: list[OrderLineResponse] = Field(default_factory=list)
    total: MoneyResponse
    createdAt: datetime
    staffId: str | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)
    nextCursor: str | None = None


class BillResponse(BaseModel):
    billId: str
    orderId: str
    subtotal: MoneyResponse
    taxPercent: Decimal
    taxAmount: MoneyResponse
    discountPercent: Decimal
    discountAmount: MoneyResponse
    finalTotal: MoneyResponse
    paymentStatus: str
    paymentMethod: str | None = None
    createdAt: datetime
    paidAt: datetime | None = None


class DailySummaryResponse(BaseModel):
    since: datetime
    revenue: MoneyResponse
    orderCount: int
    averageOrderValue: MoneyResponse
    customersServed: int
    activeTables: int
