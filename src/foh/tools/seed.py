from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from foh.api.settings import currency
from foh.infrastructure.db.models.menu import MenuItemModel
from foh.infrastructure.db.models.table import TableModel
from foh.infrastructure.db.session import get_engine
from foh.infrastructure.observability.logging_config import configure_logging

logger = logging.getLogger("foh.tools.seed")

MENU_ITEMS: list[dict[str, object]] = [
    {
        "id": "itm_paneer_tikka",
        "name": "Paneer Tikka",
        "description": "Char-grilled cottage cheese, mint chutney",
        "price_cents": 24000,
        "category": "Starters",
        "is_available": True,
        "is_popular": True,
        "preparation_minutes": 15,
    },
    {
        "id": "itm_veg_samosa",
        "name": "Veg Samosa",
        "description": "Two pastries, spiced potato and peas",
        "price_cents": 9000,
        "category": "Starters",
        "is_available": True,
        "is_popular": False,
        "preparation_minutes": 10,
    },
    {
        "id": "itm_butter_chicken",
        "name": "Butter Chicken",
        "description": "Tandoori chicken in tomato butter gravy",
        "price_cents": 35000,
        "category": "Main Course",
        "is_available": True,
        "is_popular": True,
        "preparation_minutes": 20,
    },
    {
        "id": "itm_dal_makhani",
        "name": "Dal Makhani",
        "description": "Slow-cooked black lentils",
        "price_cents": 22000,
        "category": "Main Course",
        "is_available": True,
        "is_popular": False,
        "preparation_minutes": 15,
    },
    {
        "id": "itm_butter_naan",
        "name": "Butter Naan",
        "description": None,
        "price_cents": 6000,
        "category": "Breads",
        "is_available": True,
        "is_popular": True,
        "preparation_minutes": 5,
    },
    {
        "id": "itm_garlic_naan",
        "name": "Garlic Naan",
        "description": None,
        "price_cents": 7000,
        "category": "Breads",
        "is_available": True,
        "is_popular": False,
        "preparation_minutes": 5,
    },
    {
        "id": "itm_sweet_lassi",
        "name": "Sweet Lassi",
        "description": "Chilled yoghurt drink",
        "price_cents": 8000,
        "category": "Beverages",
        "is_available": True,
        "is_popular": False,
        "preparation_minutes": 3,
    },
    {
        "id": "itm_gulab_jamun",
        "name": "Gulab Jamun",
        "description": "Milk dumplings in cardamom syrup",
        "price_cents": 9000,
        "category": "Desserts",
        "is_available": True,
        "is_popular": True,
        "preparation_minutes": 5,
    },
    {
        "id": "itm_kulfi",
        "name": "Pista Kulfi",
        "description": None,
        "price_cents": 11000,
        "category": "Desserts",
        "is_available": False,
        "is_popular": False,
        "preparation_minutes": 2,
    },
]

TABLES: list[dict[str, object]] = [
    {
        "id": f"tbl_{number:03d}",
        "name": f"Table {number}",
        "table_number": number,
        "capacity": seats,
    }
    for number, seats in ((1, 2), (2, 2), (3, 4), (4, 4), (5, 6), (6, 8))
]


def main() -> None:
    configure_logging()
    engine = get_engine(timeout_seconds=2.0)
    inspector = inspect(engine)
    required_tables = {"menu_items", "restaurant_tables"}
    if not required_tables.issubset(set(inspector.get_table_names(schema="public"))):
        logger.warning("seed_skipped", extra={"reason": "no schema yet"})
        return

    menu_currency = currency()
    with Session(engine) as session:
        for item in MENU_ITEMS:
            values = {**item, "currency": menu_currency}
            session.execute(
                insert(MenuItemModel)
                .values(**values)
                .on_conflict_do_update(
                    index_elements=[MenuItemModel.id],
                    set_={key: value for key, value in values.items() if key != "id"},
                )
            )

        for table in TABLES:
            # existing tables keep their occupancy
            session.execute(
                insert(TableModel)
                .values(**table)
                .on_conflict_do_update(
                    index_elements=[TableModel.id],
                    set_={key: value for key, value in table.items() if key != "id"},
                )
            )

        session.commit()
    logger.info("seed_complete")


if __name__ == "__main__":
    main()
