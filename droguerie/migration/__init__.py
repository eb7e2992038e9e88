"""
Data Migration Module
"""
from .migrator import MigrationReport, SchemaDriftError, TableMigrator, migrate
from .stores import DestinationStoreWriter, SourceStoreReader

__all__ = [
    "TableMigrator",
    "MigrationReport",
    "SchemaDriftError",
    "migrate",
    "SourceStoreReader",
    "DestinationStoreWriter",
]
