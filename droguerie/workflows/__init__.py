"""
Workflow Orchestration Module
"""
from .pipeline import storefront_migration_pipeline

__all__ = ["storefront_migration_pipeline"]
