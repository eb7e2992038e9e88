"""
Database Module
"""
from .connection import STORES, check_database_health, create_schema, open_migration_stores, open_store, store_url
from .models import Base

__all__ = [
    "open_store",
    "open_migration_stores",
    "create_schema",
    "check_database_health",
    "store_url",
    "STORES",
    "Base",
]
