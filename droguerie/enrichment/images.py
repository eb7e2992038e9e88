"""
Product Image Enricher

Rewrites `products.image_url` in two passes:

1. Every product gets the image mapped to its exact name, or the fallback.
2. Category overrides are applied by exact product name and win over pass 1.

Each write runs in its own transaction. A failed write is logged and counted
and the remaining rows are still processed. The expected number of writes is
fixed by a row count taken before the rows are read; a run that issues fewer
writes raises EnrichmentIncompleteError.
"""

from typing import Any, Dict, List, Mapping, Sequence

import structlog
from pydantic import BaseModel
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from droguerie.database.models import Product
from droguerie.enrichment.catalog import (
    CATEGORY_OVERRIDES,
    FALLBACK_IMAGE_URL,
    PRODUCT_IMAGES,
    CategoryOverrides,
)

logger = structlog.get_logger(__name__)

products = Product.__table__


class EnrichmentIncompleteError(RuntimeError):
    """Not every expected write was attempted"""


class EnrichmentReport(BaseModel):
    """Counters for one enrichment run"""
    products: int = 0
    expected: int = 0
    attempted: int = 0
    updated: int = 0
    failed: int = 0
    fallback_used: int = 0

    @property
    def complete(self) -> bool:
        return self.attempted == self.expected


class ImageEnricher:
    """
    Two-pass image rewrite over the products table.

    Example:
        async with open_store(settings.source.async_url, "source") as engine:
            report = await ImageEnricher(engine).run()
    """

    def __init__(
        self,
        engine: AsyncEngine,
        images: Mapping[str, str] = PRODUCT_IMAGES,
        fallback_url: str = FALLBACK_IMAGE_URL,
        overrides: Sequence[CategoryOverrides] = CATEGORY_OVERRIDES,
    ):
        self.engine = engine
        self.images = dict(images)
        self.fallback_url = fallback_url
        self.overrides = tuple(overrides)

    def resolve(self, name: str) -> str:
        """Image for an exact product name, or the fallback."""
        return self.images.get(name, self.fallback_url)

    async def count_products(self) -> int:
        async with self.engine.connect() as conn:
            return (await conn.execute(select(func.count()).select_from(products))).scalar_one()

    async def fetch_products(self) -> List[Dict[str, Any]]:
        stmt = select(products.c.id, products.c.name, products.c.image_url).order_by(products.c.id)
        async with self.engine.connect() as conn:
            result = await conn.execute(stmt)
            return [dict(row) for row in result.mappings().all()]

    async def set_image_by_id(self, product_id: int, image_url: str) -> int:
        async with self.engine.begin() as conn:
            result = await conn.execute(
                update(products).where(products.c.id == product_id).values(image_url=image_url)
            )
            return result.rowcount

    async def set_image_by_name(self, name: str, image_url: str) -> int:
        async with self.engine.begin() as conn:
            result = await conn.execute(
                update(products).where(products.c.name == name).values(image_url=image_url)
            )
            return result.rowcount

    async def run(self) -> EnrichmentReport:
        logger.info("🔄 Starting product image updates...")

        product_count = await self.count_products()
        override_count = sum(len(group.images) for group in self.overrides)
        report = EnrichmentReport(products=product_count, expected=product_count + override_count)
        logger.info(f"📦 Found {product_count} products to update")

        rows = await self.fetch_products()

        for row in rows:
            image_url = self.resolve(row["name"])
            if row["name"] not in self.images:
                report.fallback_used += 1
            report.attempted += 1
            try:
                await self.set_image_by_id(row["id"], image_url)
                report.updated += 1
                logger.debug(f"✅ Updated: {row['name']}", product_id=row["id"])
            except SQLAlchemyError as e:
                report.failed += 1
                logger.error(f"❌ Error updating product {row['name']}", product_id=row["id"], error=str(e))

        logger.info("🔧 Adding category-specific product images...")
        for group in self.overrides:
            for name, image_url in group.images:
                report.attempted += 1
                try:
                    matched = await self.set_image_by_name(name, image_url)
                    report.updated += 1
                    logger.debug(
                        f"🔧 Updated {group.category} product: {name}",
                        rows=matched,
                    )
                except SQLAlchemyError as e:
                    report.failed += 1
                    logger.error(f"❌ Error updating {name}", category=group.category, error=str(e))

        if not report.complete:
            raise EnrichmentIncompleteError(
                f"Attempted {report.attempted} of {report.expected} image writes"
            )

        logger.info(
            f"🎉 Successfully processed {report.attempted} product image writes",
            updated=report.updated,
            failed=report.failed,
            fallback_used=report.fallback_used,
        )
        return report
