from __future__ import annotations

from dataclasses import dataclass, field

from foh.domain.common.money import Money
from foh.domain.menu.entities import MenuItem


@dataclass(frozen=True)
class CartEntry:
    item: MenuItem
    quantity: int

    @property
    def line_total(self) -> Money:
        return self.item.price_money.times(self.quantity)


@dataclass(frozen=True)
class Cart:
    """Order being composed at a terminal.

    Every operation returns a new cart. Entries keep insertion order and never
    hold a quantity below one.
    """

    currency: str
    entries: tuple[CartEntry, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def add_item(self, item: MenuItem) -> Cart:
        if self._index_of(str(item.item_id)) is None:
            return Cart(currency=self.currency, entries=(*self.entries, CartEntry(item, 1)))
        return self.change_quantity(str(item.item_id), 1)

    def change_quantity(self, item_id: str, delta: int) -> Cart:
        entries: list[CartEntry] = []
        for entry in self.entries:
            if str(entry.item.item_id) != item_id:
                entries.append(entry)
                continue
            quantity = entry.quantity + delta
            if quantity > 0:
                entries.append(CartEntry(entry.item, quantity))
        return Cart(currency=self.currency, entries=tuple(entries))

    def remove_item(self, item_id: str) -> Cart:
        return Cart(
            currency=self.currency,
            entries=tuple(entry for entry in self.entries if str(entry.item.item_id) != item_id),
        )

    def quantity_of(self, item_id: str) -> int:
        index = self._index_of(item_id)
        return 0 if index is None else self.entries[index].quantity

    def items(self) -> list[MenuItem]:
        return [entry.item for entry in self.entries]

    def total(self) -> Money:
        total = Money.zero(self.currency)
        for entry in self.entries:
            total = total + entry.line_total
        return total

    def _index_of(self, item_id: str) -> int | None:
        for index, entry in enumerate(self.entries):
            if str(entry.item.item_id) == item_id:
                return index
        return None
