"""
Database Connection Management

Scoped async engines for the source (SQLite) and destination (MySQL) stores.
Each store is opened through an async context manager that verifies the
connection on entry and disposes the engine on every exit path, including
the error path. Nothing is held at module level.
"""

import time
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncGenerator, Tuple

import structlog
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from droguerie.config import Settings
from droguerie.database.models import Base

STORES = ("source", "destination")

logger = structlog.get_logger(__name__)


def create_store_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Build an async engine for one store. NullPool: one physical connection per checkout."""
    return create_async_engine(
        url,
        echo=echo,
        poolclass=NullPool,
        pool_pre_ping=True,
    )


@asynccontextmanager
async def open_store(url: str, name: str, echo: bool = False) -> AsyncGenerator[AsyncEngine, None]:
    """
    Open a store and guarantee its engine is disposed.

    Args:
        url: SQLAlchemy async URL
        name: Store label used in log events ("source", "destination")
        echo: Echo SQL statements

    Yields:
        AsyncEngine: The verified engine

    Example:
        async with open_store(settings.source.async_url, "source") as engine:
            ...
    """
    engine = create_store_engine(url, echo=echo)
    safe_url = make_url(url).render_as_string(hide_password=True)
    try:
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("❌ Failed to connect to store", store=name, url=safe_url, error=str(e))
            raise
        logger.info("🔌 Store connection established", store=name, url=safe_url)
        yield engine
    finally:
        await engine.dispose()
        logger.info("Store connection closed", store=name)


@asynccontextmanager
async def open_migration_stores(settings: Settings) -> AsyncGenerator[Tuple[AsyncEngine, AsyncEngine], None]:
    """
    Open the source (read-only) and destination stores together.

    Both engines are released together when the block exits, whatever the
    outcome of the work done inside it.
    """
    async with AsyncExitStack() as stack:
        source = await stack.enter_async_context(
            open_store(settings.source.read_only_url, "source", echo=settings.source.echo)
        )
        destination = await stack.enter_async_context(
            open_store(settings.destination.get_url(), "destination", echo=settings.destination.echo)
        )
        yield source, destination


def store_url(settings: Settings, store: str, read_only: bool = False) -> str:
    """
    Async URL of the named store ("source" or "destination").

    `read_only` applies to the source file only.
    """
    if store == "source":
        return settings.source.read_only_url if read_only else settings.source.async_url
    if store == "destination":
        return settings.destination.get_url()
    raise ValueError(f"Unknown store: {store}")


async def create_schema(engine: AsyncEngine) -> None:
    """Create the storefront tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    logger.info("🧱 Storefront schema ensured", tables=sorted(Base.metadata.tables))


async def check_database_health(engine: AsyncEngine) -> dict:
    """
    Check store health status.

    Returns:
        dict: Health status with latency information
    """
    try:
        start = time.perf_counter()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        latency_ms = (time.perf_counter() - start) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(latency_ms, 2),
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }
