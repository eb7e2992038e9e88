"""
Table Migrator

Copies the storefront tables from the SQLite source into MySQL, one table
at a time and one row at a time, preserving primary keys. Inserts ignore
rows whose primary key already exists, so a re-run adds nothing.

Mandatory tables abort the run on any failure. Optional tables (coupons,
wishlist) that cannot be read count as empty.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

import structlog
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

from droguerie.config import Settings
from droguerie.database.connection import create_schema, open_migration_stores
from droguerie.database.schemas import MIGRATION_PLAN, EntitySchema
from droguerie.migration.stores import DestinationStoreWriter, SourceStoreReader

logger = structlog.get_logger(__name__)


class SchemaDriftError(RuntimeError):
    """A source row does not carry every field the destination expects"""


class TableMigrationResult(BaseModel):
    """Outcome for one table"""
    table: str
    rows_read: int = 0
    rows_written: int = 0
    source_missing: bool = False


class MigrationReport(BaseModel):
    """Outcome of a whole run"""
    started_at: datetime
    completed_at: Optional[datetime] = None
    dry_run: bool = False
    tables: List[TableMigrationResult] = Field(default_factory=list)

    @property
    def counts(self) -> Dict[str, int]:
        return {t.table: t.rows_written for t in self.tables}


class TableMigrator:
    """
    Orchestrates the read-all-then-insert-each sequence per table.

    Example:
        async with open_migration_stores(settings) as (source, destination):
            migrator = TableMigrator(SourceStoreReader(source), DestinationStoreWriter(destination))
            report = await migrator.run()
    """

    def __init__(
        self,
        reader: SourceStoreReader,
        writer: DestinationStoreWriter,
        plan: Sequence[EntitySchema] = MIGRATION_PLAN,
        dry_run: bool = False,
    ):
        self.reader = reader
        self.writer = writer
        self.plan = tuple(plan)
        self.dry_run = dry_run

    async def run(self) -> MigrationReport:
        """Migrate every table in plan order."""
        report = MigrationReport(started_at=datetime.now(timezone.utc), dry_run=self.dry_run)
        logger.info("🚀 Starting SQLite to MySQL migration", tables=len(self.plan), dry_run=self.dry_run)

        for schema in self.plan:
            result = await self.migrate_table(schema)
            report.tables.append(result)

        report.completed_at = datetime.now(timezone.utc)
        logger.info("🎉 Migration completed successfully!", counts=report.counts)
        return report

    async def migrate_table(self, schema: EntitySchema) -> TableMigrationResult:
        logger.info(f"{schema.icon} Migrating {schema.label}...")
        result = TableMigrationResult(table=schema.name)

        try:
            rows = await self.reader.fetch_all(schema.name)
        except SQLAlchemyError as e:
            if not schema.optional:
                raise
            logger.warning(
                f"⚠️  No {schema.name} table found in source database",
                table=schema.name,
                error=str(e),
            )
            result.source_missing = True
            return result

        result.rows_read = len(rows)

        if self.dry_run:
            logger.info(f"🔍 [DRY RUN] Would migrate {len(rows)} {schema.label}")
            return result

        async with self.writer.autocommit() as conn:
            for row in rows:
                try:
                    await self.writer.insert_ignore(conn, schema, row)
                except KeyError as e:
                    raise SchemaDriftError(
                        f"Source row in '{schema.name}' is missing field {e}; "
                        f"{result.rows_written} row(s) were written before the failure"
                    ) from e
                result.rows_written += 1

        logger.info(f"✅ Migrated {result.rows_written} {schema.label}")
        return result


async def migrate(
    settings: Settings,
    create_tables: bool = False,
    dry_run: bool = False,
) -> MigrationReport:
    """
    Run the full migration with both stores scoped to this call.

    Both connections are closed before this returns or raises.
    """
    async with open_migration_stores(settings) as (source, destination):
        if create_tables and not dry_run:
            await create_schema(destination)

        migrator = TableMigrator(
            reader=SourceStoreReader(source),
            writer=DestinationStoreWriter(destination),
            dry_run=dry_run,
        )
        try:
            return await migrator.run()
        except Exception as e:
            logger.error("❌ Migration failed", error=str(e), error_type=type(e).__name__)
            raise
