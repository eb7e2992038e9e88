"""
Product Enrichment Module
"""
from .images import EnrichmentIncompleteError, EnrichmentReport, ImageEnricher

__all__ = ["ImageEnricher", "EnrichmentReport", "EnrichmentIncompleteError"]
