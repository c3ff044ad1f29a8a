from __future__ import annotations

from datetime import datetime, timezone

import pytest

from foh.domain.common.ids import MenuItemId, OrderId, OrderLineId
from foh.domain.common.money import Money
from foh.domain.order.entities import OrderLine, OrderType, create_pending_order
from foh.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository


@pytest.fixture
def repository(sqlite_engine) -> SqlAlchemyOrderRepository:
    return SqlAlchemyOrderRepository(engine=sqlite_engine)


def _line(line_id: str, item_id: str, name: str, price_cents: int) -> OrderLine:
    price = Money(amount_cents=price_cents, currency="INR")
    return OrderLine(
        line_id=OrderLineId(line_id),
        item_id=MenuItemId(item_id),
        name=name,
        quantity=1,
        price_at_order=price,
        line_total=price,
    )


def test_lines_come_back_in_entry_order(repository) -> None:
    # ids sort as naan, lassi, dal
    lines = [
        _line("orl_f1", "itm_dal", "Dal Makhani", 22000),
        _line("orl_0a", "itm_naan", "Butter Naan", 6000),
        _line("orl_77", "itm_lassi", "Sweet Lassi", 8000),
    ]
    created = repository.add_and_occupy_table(
        create_pending_order(
            order_id=OrderId("ord_lines"),
            order_type=OrderType.TAKEAWAY,
            table_id=None,
            customer_name="Asha",
            lines=lines,
            now=datetime.now(timezone.utc),
        )
    )

    assert [line.name for line in created.lines] == ["Dal Makhani", "Butter Naan", "Sweet Lassi"]
    fetched = repository.get(OrderId("ord_lines"))
    assert fetched is not None
    assert [line.line_id for line in fetched.lines] == ["orl_f1", "orl_0a", "orl_77"]


def test_line_positions_follow_list_index(repository) -> None:
    model = repository._to_model(
        create_pending_order(
            order_id=OrderId("ord_pos"),
            order_type=OrderType.TAKEAWAY,
            table_id=None,
            customer_name="Ravi",
            lines=[
                _line("orl_c", "itm_dal", "Dal Makhani", 22000),
                _line("orl_b", "itm_naan", "Butter Naan", 6000),
                _line("orl_a", "itm_lassi", "Sweet Lassi", 8000),
            ],
            now=datetime.now(timezone.utc),
        )
    )

    assert [(line.id, line.position) for line in model.lines] == [
        ("orl_c", 0),
        ("orl_b", 1),
        ("orl_a", 2),
    ]
