"""
Droguerie Jamal Data Tooling - Command Line Entry Point

Usage:
    droguerie migrate [--create-schema] [--dry-run]
    droguerie seed-admin [--store source|destination]
    droguerie enrich-images [--store source|destination]
    droguerie smoke-test
    droguerie check-connections
    droguerie pipeline [--skip-smoke-test] [--create-schema] [--store source|destination]
"""

import argparse
import asyncio
from typing import Callable, Dict, List, Optional

import httpx
import structlog

from droguerie.config import Settings, get_settings
from droguerie.config.logging import configure_logging
from droguerie.database.connection import STORES, check_database_health, open_store, store_url
from droguerie.enrichment.images import ImageEnricher
from droguerie.migration.migrator import migrate
from droguerie.security.credentials import seed_admin
from droguerie.smoke.flow_tester import run_smoke_test

logger = structlog.get_logger(__name__)


# =============================================================================
# COMMANDS
# =============================================================================

async def cmd_migrate(settings: Settings, args: argparse.Namespace) -> int:
    report = await migrate(settings, create_tables=args.create_schema, dry_run=args.dry_run)

    for table in report.tables:
        if table.source_missing:
            print(f"  ⚠️  {table.table}: not present in source")
        elif report.dry_run:
            print(f"  🔍 {table.table}: {table.rows_read} rows would be migrated")
        else:
            print(f"  ✅ {table.table}: {table.rows_written} rows")
    return 0


async def cmd_seed_admin(settings: Settings, args: argparse.Namespace) -> int:
    async with open_store(store_url(settings, args.store), args.store) as engine:
        await seed_admin(engine, settings.admin)
    return 0


async def cmd_enrich_images(settings: Settings, args: argparse.Namespace) -> int:
    async with open_store(store_url(settings, args.store), args.store) as engine:
        report = await ImageEnricher(engine).run()

    print(f"🎉 Updated {report.updated} product images ({report.failed} failed, {report.fallback_used} fallback)")
    return 0


async def cmd_smoke_test(settings: Settings, args: argparse.Namespace) -> int:
    """Always exits 0; failures are reported in the scorecard."""
    try:
        await run_smoke_test(settings)
    except Exception as e:
        logger.error("❌ Flow test run aborted", error=str(e), exc_info=True)
    return 0


async def check_connections(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> bool:
    """Check both stores and the API health endpoint. The source is opened read-only."""
    healthy = True

    for store in STORES:
        try:
            async with open_store(store_url(settings, store, read_only=True), store) as engine:
                health = await check_database_health(engine)
        except Exception as e:
            health = {"status": "unhealthy", "error": str(e)}

        if health["status"] == "healthy":
            print(f"  ✅ {store}: {health['latency_ms']} ms")
        else:
            healthy = False
            print(f"  ❌ {store}: {health['error']}")

    try:
        async with httpx.AsyncClient(base_url=settings.smoke.api_base_url, transport=transport) as client:
            response = await client.get("/health", timeout=settings.smoke.timeout_seconds)
            response.raise_for_status()
        print(f"  ✅ api: {settings.smoke.api_base_url}")
    except httpx.HTTPError as e:
        healthy = False
        print(f"  ❌ api: {e}")

    return healthy


async def cmd_check_connections(settings: Settings, args: argparse.Namespace) -> int:
    return 0 if await check_connections(settings) else 1


async def cmd_pipeline(settings: Settings, args: argparse.Namespace) -> int:
    from droguerie.workflows.pipeline import storefront_migration_pipeline

    await storefront_migration_pipeline(
        create_tables=args.create_schema,
        store=args.store,
        run_smoke=not args.skip_smoke_test,
    )
    return 0


COMMANDS: Dict[str, Callable] = {
    "migrate": cmd_migrate,
    "seed-admin": cmd_seed_admin,
    "enrich-images": cmd_enrich_images,
    "smoke-test": cmd_smoke_test,
    "check-connections": cmd_check_connections,
    "pipeline": cmd_pipeline,
}


# =============================================================================
# ENTRY POINT
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="droguerie",
        description="Droguerie Jamal storefront data tooling",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    migrate_parser = subparsers.add_parser("migrate", help="Copy the SQLite tables into MySQL")
    migrate_parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create missing destination tables before migrating",
    )
    migrate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Read every table and report counts without writing",
    )

    for name, help_text in [
        ("seed-admin", "Hash and store the admin credentials"),
        ("enrich-images", "Assign catalog images to every product"),
    ]:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--store",
            choices=STORES,
            default="source",
            help="Store to write to (default: source)",
        )

    subparsers.add_parser("smoke-test", help="Run the HTTP flow test against the running API")
    subparsers.add_parser("check-connections", help="Check both stores and the API health endpoint")

    pipeline_parser = subparsers.add_parser("pipeline", help="Run the full Prefect pipeline")
    pipeline_parser.add_argument(
        "--skip-smoke-test",
        action="store_true",
        help="Stop after image enrichment",
    )
    pipeline_parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create missing destination tables before migrating",
    )
    pipeline_parser.add_argument(
        "--store",
        choices=STORES,
        default="destination",
        help="Store to seed and enrich (default: destination)",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(log_level=args.log_level, settings=settings)

    command = COMMANDS[args.command]
    try:
        return asyncio.run(command(settings, args))
    except KeyboardInterrupt:
        logger.warning("Interrupted", command=args.command)
        return 130
    except Exception as e:
        logger.error(f"❌ {args.command} failed", error=str(e), exc_info=True)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
