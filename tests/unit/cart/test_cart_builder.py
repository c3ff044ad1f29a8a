from __future__ import annotations

from fakes import menu_item
from foh.domain.cart.cart import Cart
from foh.domain.common.money import Money

ITEM_A = menu_item("itm_a", "Item A", 320, "Main Course")
ITEM_B = menu_item("itm_b", "Item B", 280, "Starters")


def _cart() -> Cart:
    return Cart(currency="INR").add_item(ITEM_A).add_item(ITEM_A).add_item(ITEM_B)


def test_cart_total_for_two_a_and_one_b() -> None:
    cart = _cart()

    assert cart.quantity_of("itm_a") == 2
    assert cart.quantity_of("itm_b") == 1
    assert cart.total() == Money(amount_cents=920, currency="INR")


def test_empty_cart_total_is_zero() -> None:
    cart = Cart(currency="INR")

    assert cart.is_empty
    assert cart.total() == Money.zero("INR")
    assert cart.items() == []


def test_add_then_remove_restores_previous_cart() -> None:
    before = Cart(currency="INR").add_item(ITEM_B)
    after = before.add_item(ITEM_A).remove_item("itm_a")

    assert after == before
    assert after.total() == before.total()


def test_change_by_minus_quantity_equals_remove() -> None:
    cart = _cart()

    assert cart.change_quantity("itm_a", -2) == cart.remove_item("itm_a")


def test_change_below_zero_removes_entry() -> None:
    cart = _cart().change_quantity("itm_b", -5)

    assert cart.quantity_of("itm_b") == 0
    assert [item.item_id for item in cart.items()] == ["itm_a"]


def test_change_on_unknown_item_is_a_no_op() -> None:
    cart = _cart()

    assert cart.change_quantity("itm_missing", 3) == cart
    assert cart.remove_item("itm_missing") == cart


def test_operations_return_new_carts() -> None:
    cart = Cart(currency="INR")
    grown = cart.add_item(ITEM_A)

    assert cart.is_empty
    assert not grown.is_empty
    assert grown.change_quantity("itm_a", 2).quantity_of("itm_a") == 3
    assert grown.quantity_of("itm_a") == 1
