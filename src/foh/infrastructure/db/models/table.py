from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from foh.infrastructure.db.models.menu import Base


class TableModel(Base):
    __tablename__ = "restaurant_tables"
    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_restaurant_tables_capacity"),
        CheckConstraint(
            "(status = 'occupied') = (current_order_id IS NOT NULL)",
            name="ck_restaurant_tables_occupant",
        ),
    )

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    table_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, server_default="available")
    # no FK: the order row is inserted in the same transaction that occupies the table
    current_order_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
