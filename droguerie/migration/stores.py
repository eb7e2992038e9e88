"""
Store Reader and Writer

Thin wrappers around an open engine: the reader returns whole tables as
lists of dicts, the writer issues one insert-if-absent statement per row.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Mapping

import structlog
from sqlalchemy import insert, literal_column, select, table
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from droguerie.database.schemas import EntitySchema

logger = structlog.get_logger(__name__)


class SourceStoreReader:
    """Reads entire tables from the file-backed source store."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def fetch_all(self, table_name: str) -> List[Dict[str, Any]]:
        """
        Read every row of a table.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: The table cannot be read
        """
        stmt = select(literal_column("*")).select_from(table(table_name))
        async with self.engine.connect() as conn:
            result = await conn.execute(stmt)
            rows = [dict(row) for row in result.mappings().all()]
        logger.debug("Read source table", table=table_name, rows=len(rows))
        return rows


def insert_ignore(schema: EntitySchema, row: Mapping[str, Any]):
    """
    Build an insert that does nothing when the primary key already exists.

    Compiles to ``INSERT IGNORE`` on MySQL and ``INSERT OR IGNORE`` on SQLite.
    """
    return (
        insert(schema.as_clause())
        .values(schema.project(row))
        .prefix_with("IGNORE", dialect="mysql")
        .prefix_with("OR IGNORE", dialect="sqlite")
    )


class DestinationStoreWriter:
    """
    Writes rows into the network destination store.

    Every statement commits on its own: there is no transaction spanning
    rows or tables.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    @asynccontextmanager
    async def autocommit(self) -> AsyncGenerator[AsyncConnection, None]:
        """Yield a connection in autocommit mode."""
        async with self.engine.connect() as conn:
            yield await conn.execution_options(isolation_level="AUTOCOMMIT")

    async def insert_ignore(self, conn: AsyncConnection, schema: EntitySchema, row: Mapping[str, Any]) -> None:
        await conn.execute(insert_ignore(schema, row))
