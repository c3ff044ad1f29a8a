from __future__ import annotations

import sys
from pathlib import Path

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from fakes import (  # noqa: E402
    FakeBillRepository,
    FakeCache,
    FakeMenuRepository,
    FakeOrderRepository,
    FakePublisher,
    FakeTableRepository,
    InMemoryStore,
    sample_menu,
    sample_tables,
)
from foh.application.services.change_feed import ChangeFeed  # noqa: E402
from foh.infrastructure.db.models import bill, menu, order, table  # noqa: E402,F401
from foh.infrastructure.db.models.menu import Base  # noqa: E402


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore(menu_items=sample_menu(), tables=sample_tables())


@pytest.fixture
def menu_repository(store: InMemoryStore) -> FakeMenuRepository:
    return FakeMenuRepository(store)


@pytest.fixture
def table_repository(store: InMemoryStore) -> FakeTableRepository:
    return FakeTableRepository(store)


@pytest.fixture
def order_repository(store: InMemoryStore) -> FakeOrderRepository:
    return FakeOrderRepository(store)


@pytest.fixture
def bill_repository(store: InMemoryStore) -> FakeBillRepository:
    return FakeBillRepository(store)


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def change_feed(publisher: FakePublisher) -> ChangeFeed:
    return ChangeFeed(publisher=publisher)


@pytest.fixture
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def sqlite_engine() -> Engine:
    """In-memory schema for repository tests that only need portable SQL."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine
