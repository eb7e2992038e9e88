"""
Prefect Workflow Orchestration - Storefront Migration

Runs the storefront tooling end to end, strictly in sequence:

1. Migrate the SQLite tables into MySQL
2. Seed the admin credentials
3. Enrich product images
4. Optionally run the HTTP flow test

Nothing is retried: every step either completes or fails the flow.
"""

from prefect import flow, get_run_logger, task

from droguerie.config import get_settings
from droguerie.database.connection import open_store, store_url
from droguerie.enrichment.images import ImageEnricher
from droguerie.migration.migrator import migrate
from droguerie.security.credentials import seed_admin
from droguerie.smoke.flow_tester import run_smoke_test


# =============================================================================
# TASKS
# =============================================================================

@task(
    name="migrate_tables",
    description="Copy the storefront tables from SQLite into MySQL",
    retries=0,
)
async def migrate_tables(create_tables: bool = False) -> dict:
    logger = get_run_logger()

    report = await migrate(get_settings(), create_tables=create_tables)

    logger.info(f"Migration complete: {sum(report.counts.values())} rows across {len(report.tables)} tables")
    return report.model_dump(mode="json")


@task(
    name="seed_admin_credentials",
    description="Hash and store the admin credentials",
    retries=0,
)
async def seed_admin_credentials(store: str = "destination") -> dict:
    logger = get_run_logger()
    settings = get_settings()

    async with open_store(store_url(settings, store), store) as engine:
        result = await seed_admin(engine, settings.admin)

    logger.info(f"Admin account {result.action.value}: {result.email}")
    return result.model_dump(mode="json")


@task(
    name="enrich_product_images",
    description="Assign catalog images to every product",
    retries=0,
)
async def enrich_product_images(store: str = "destination") -> dict:
    logger = get_run_logger()
    settings = get_settings()

    async with open_store(store_url(settings, store), store) as engine:
        report = await ImageEnricher(engine).run()

    logger.info(f"Image enrichment complete: {report.updated} updated, {report.failed} failed")
    return report.model_dump()


@task(
    name="run_flow_tests",
    description="Exercise the running storefront API",
    retries=0,
)
async def run_flow_tests() -> dict:
    logger = get_run_logger()

    scorecard = await run_smoke_test(get_settings())

    logger.info(f"Flow tests: {scorecard.passed_count}/{scorecard.total} passed")
    return {
        "passed": scorecard.passed_count,
        "total": scorecard.total,
        "verdict": scorecard.verdict.value,
        "checks": scorecard.as_dict(),
    }


# =============================================================================
# FLOWS
# =============================================================================

@flow(
    name="storefront_migration_pipeline",
    description="Migrate, seed, enrich and verify the Droguerie Jamal storefront",
    retries=0,
)
async def storefront_migration_pipeline(
    create_tables: bool = False,
    store: str = "destination",
    run_smoke: bool = True,
) -> dict:
    """
    Full storefront migration.

    Seeding and enrichment target `store`, the freshly migrated destination
    by default.
    """
    logger = get_run_logger()

    logger.info(f"Starting storefront pipeline (store={store}, smoke test={run_smoke})")

    results = {"store": store, "steps": {}}

    try:
        results["steps"]["migrate"] = await migrate_tables(create_tables=create_tables)
        results["steps"]["seed_admin"] = await seed_admin_credentials(store=store)
        results["steps"]["enrich_images"] = await enrich_product_images(store=store)

        if run_smoke:
            results["steps"]["smoke_test"] = await run_flow_tests()

        results["status"] = "success"

    except Exception as e:
        logger.error(f"Storefront pipeline failed: {e}")
        results["status"] = "failed"
        results["error"] = str(e)
        raise

    return results


if __name__ == "__main__":
    import asyncio

    asyncio.run(storefront_migration_pipeline())
