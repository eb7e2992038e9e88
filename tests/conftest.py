"""
Test Suite Configuration
"""
import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, List, Optional, Sequence

import pytest
import structlog
from pydantic import SecretStr
from sqlalchemy import Table, insert, select
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from droguerie.config.settings import (
    AdminSettings,
    DestinationStoreSettings,
    Settings,
    SmokeTestSettings,
    SourceStoreSettings,
)
from droguerie.database.models import (
    Base,
    Category,
    Coupon,
    Order,
    OrderItem,
    Product,
    User,
    WishlistItem,
)


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


async def _make_store(path: Path, tables: Optional[Sequence[str]] = None) -> AsyncEngine:
    """Create a SQLite file store with all (or only the named) storefront tables."""
    engine = create_async_engine(sqlite_url(path), poolclass=NullPool)
    selected = None if tables is None else [Base.metadata.tables[name] for name in tables]
    async with engine.begin() as conn:
        await conn.run_sync(lambda sync_conn: Base.metadata.create_all(sync_conn, tables=selected))
    return engine


async def _insert_rows(engine: AsyncEngine, model: Any, rows: List[Dict[str, Any]]) -> None:
    async with engine.begin() as conn:
        for row in rows:
            await conn.execute(insert(model.__table__).values(**row))


async def _fetch_rows(engine: AsyncEngine, model: Any) -> List[Dict[str, Any]]:
    table: Table = model.__table__
    async with engine.connect() as conn:
        result = await conn.execute(select(table).order_by(table.c.id))
        return [dict(row) for row in result.mappings().all()]


@pytest.fixture
def source_path(tmp_path) -> Path:
    return tmp_path / "source.sqlite"


@pytest.fixture
def destination_path(tmp_path) -> Path:
    return tmp_path / "destination.sqlite"


@pytest.fixture
async def source_engine(source_path) -> AsyncGenerator[AsyncEngine, None]:
    """Source store holding every storefront table"""
    engine = await _make_store(source_path)
    yield engine
    await engine.dispose()


@pytest.fixture
async def destination_engine(destination_path) -> AsyncGenerator[AsyncEngine, None]:
    """Empty destination store with the declared schema"""
    engine = await _make_store(destination_path)
    yield engine
    await engine.dispose()


@pytest.fixture
def sample_catalog() -> Dict[Any, List[Dict[str, Any]]]:
    """Small storefront: two categories, three products, two users, one order"""
    created = datetime(2024, 1, 15, 10, 30, 0)
    return {
        Category: [
            {"id": 1, "name": "Cleaning Products", "name_fr": "Produits d'entretien", "is_active": True,
             "created_at": created, "updated_at": created},
            {"id": 4, "name": "Hardware & Tools", "name_ar": None, "is_active": True,
             "created_at": created, "updated_at": created},
        ],
        Product: [
            {"id": 1, "name": "Ariel Detergent Powder 3kg", "price": Decimal("89.90"), "category_id": 1,
             "stock_quantity": 40, "created_at": created, "updated_at": created},
            {"id": 2, "name": "Javex Bleach 2L", "price": Decimal("24.50"), "category_id": 1,
             "stock_quantity": 0, "created_at": created, "updated_at": created},
            {"id": 7, "name": "LED Flashlight", "price": Decimal("45.00"), "category_id": 4,
             "description": None, "created_at": created, "updated_at": created},
        ],
        User: [
            {"id": 1, "name": "Yasmine El Amrani", "email": "yasmine@example.ma", "password": "$2a$10$hash",
             "role": "user", "status": "active", "created_at": created, "updated_at": created},
            {"id": 3, "name": "Karim Benali", "email": "karim@example.ma", "password": "$2a$10$hash",
             "phone": "+212600000001", "role": "user", "status": "inactive",
             "created_at": created, "updated_at": created},
        ],
        Order: [
            {"id": 10, "user_id": 1, "customer_name": "Yasmine El Amrani", "shipping_city": "Casablanca",
             "payment_method": "cash_on_delivery", "payment_status": "pending",
             "total_amount": Decimal("114.40"), "status": "pending",
             "created_at": created, "updated_at": created},
        ],
        OrderItem: [
            {"id": 100, "order_id": 10, "product_id": 1, "product_name": "Ariel Detergent Powder 3kg",
             "quantity": 1, "price": Decimal("89.90"), "created_at": created},
            {"id": 101, "order_id": 10, "product_id": 2, "product_name": "Javex Bleach 2L",
             "quantity": 1, "price": Decimal("24.50"), "created_at": created},
        ],
        Coupon: [
            {"id": 1, "code": "RAMADAN10", "name": "Ramadan", "type": "percentage", "value": Decimal("10"),
             "start_date": datetime(2024, 3, 1), "end_date": datetime(2024, 4, 10),
             "created_at": created, "updated_at": created},
        ],
        WishlistItem: [
            {"id": 1, "user_id": 3, "product_id": 7, "created_at": created},
        ],
    }


@pytest.fixture
async def populated_source(source_engine, sample_catalog) -> AsyncEngine:
    """Source store loaded with the sample catalog"""
    for model, rows in sample_catalog.items():
        await _insert_rows(source_engine, model, rows)
    return source_engine


@pytest.fixture
def test_settings(source_path, destination_path) -> Settings:
    """Settings pointing both stores at temporary SQLite files"""
    return Settings(
        source=SourceStoreSettings(path=source_path),
        destination=DestinationStoreSettings(url=sqlite_url(destination_path)),
        admin=AdminSettings(
            email="admin@drogueriejamal.ma",
            password=SecretStr("Test-Admin-Pass-42"),
            bcrypt_rounds=4,
        ),
        smoke=SmokeTestSettings(api_base_url="http://testserver/api"),
    )


@pytest.fixture
def reset_logging():
    """Restore root handlers and structlog defaults after a test configures logging"""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def make_store():
    """Factory for extra SQLite stores: make_store(path, tables=None)"""
    return _make_store


@pytest.fixture
def insert_rows():
    """Insert helper: await insert_rows(engine, Model, rows)"""
    return _insert_rows


@pytest.fixture
def fetch_rows():
    """Read helper: await fetch_rows(engine, Model), ordered by id"""
    return _fetch_rows
