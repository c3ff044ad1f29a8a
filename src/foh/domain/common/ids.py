from __future__ import annotations

from typing import NewType

MenuItemId = NewType("MenuItemId", str)
TableId = NewType("TableId", str)
OrderId = NewType("OrderId", str)
OrderLineId = NewType("OrderLineId", str)
BillId = NewType("BillId", str)
StaffId = NewType("StaffId", str)
