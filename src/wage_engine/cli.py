"""Wage engine command line interface.

Provides operational tools for:
- Schema creation
- Normalizing a wage by hand
- Auditing (and repairing) denormalized counters
- Wage statistics
- Inspecting cache versions

Usage:
    python -m wage_engine init-db
    python -m wage_engine normalize 60000 weekly --hours-per-week 40
    python -m wage_engine audit-counters --repair
    python -m wage_engine stats --location-id 12 --format json
    python -m wage_engine cache-versions
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from wage_engine.calculators.normalizer import WagePeriod, normalize_to_hourly
from wage_engine.config import get_settings
from wage_engine.database import create_schema, get_engine, make_session_factory
from wage_engine.errors import NormalizationError
from wage_engine.models import format_money
from wage_engine.services.cache_versions import CacheVersionService, DatabaseCounterStore
from wage_engine.services.counter_audit import CounterAuditService
from wage_engine.services.statistics_service import WageStatisticsService


class WageCli:
    """Wage engine command line interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="wage-engine",
            description="Wage normalization and counter maintenance tools",
        )
        parser.add_argument(
            "--database-url",
            type=str,
            help="Database URL (default: $DATABASE_URL)",
        )
        parser.add_argument(
            "--verbose",
            "-v",
            action="store_true",
            help="Enable debug logging",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        subparsers.add_parser("init-db", help="Create all tables")

        normalize = subparsers.add_parser(
            "normalize",
            help="Convert a wage to hourly cents",
        )
        normalize.add_argument("amount_cents", type=int, help="Amount in cents")
        normalize.add_argument(
            "period",
            type=str,
            choices=[p.value for p in WagePeriod],
            help="Pay period of the amount",
        )
        normalize.add_argument("--hours-per-week", type=int, help="Weekly hours (default: 40)")
        normalize.add_argument("--shift-hours", type=int, help="Hours per shift (default: 8)")

        audit = subparsers.add_parser(
            "audit-counters",
            help="Compare wage_reports_count with true approved counts",
        )
        audit.add_argument(
            "--repair",
            action="store_true",
            help="Overwrite drifted counters with their true values",
        )

        stats = subparsers.add_parser("stats", help="Show wage statistics")
        scope = stats.add_mutually_exclusive_group()
        scope.add_argument("--location-id", type=int, help="Restrict to one location")
        scope.add_argument("--organization-id", type=int, help="Restrict to one organization")
        stats.add_argument(
            "--format",
            type=str,
            choices=["json", "text"],
            default="text",
            help="Output format",
        )

        subparsers.add_parser("cache-versions", help="Show current cache versions")

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        logging.basicConfig(
            level=logging.DEBUG if parsed.verbose else logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        if not parsed.command:
            self.parser.print_help()
            return 1

        if parsed.command == "normalize":
            return self._cmd_normalize(parsed)

        handlers: dict[str, Callable[[AsyncSession, argparse.Namespace], Awaitable[int]]] = {
            "audit-counters": self._cmd_audit_counters,
            "stats": self._cmd_stats,
            "cache-versions": self._cmd_cache_versions,
        }

        if parsed.command == "init-db":
            return asyncio.run(self._cmd_init_db(parsed))

        handler = handlers.get(parsed.command)
        if handler:
            return asyncio.run(self._with_session(parsed, handler))

        print(f"Unknown command: {parsed.command}", file=sys.stderr)
        return 1

    async def _with_session(
        self,
        args: argparse.Namespace,
        handler: Callable[[AsyncSession, argparse.Namespace], Awaitable[int]],
    ) -> int:
        engine = get_engine(args.database_url)
        try:
            factory = make_session_factory(engine)
            async with factory() as session:
                try:
                    code = await handler(session, args)
                    await session.commit()
                    return code
                except Exception:
                    await session.rollback()
                    raise
        finally:
            await engine.dispose()

    async def _cmd_init_db(self, args: argparse.Namespace) -> int:
        """Create all tables."""
        engine = get_engine(args.database_url)
        try:
            await create_schema(engine)
        finally:
            await engine.dispose()
        print("Schema created.")
        return 0

    def _cmd_normalize(self, args: argparse.Namespace) -> int:
        """Normalize one wage and print the hourly rate."""
        try:
            cents = normalize_to_hourly(
                args.amount_cents,
                args.period,
                args.hours_per_week,
                args.shift_hours,
                get_settings().normalization_bounds(),
            )
        except NormalizationError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1

        print(f"{cents} cents/hour ({format_money(cents)}/hour)")
        return 0

    async def _cmd_audit_counters(self, session: AsyncSession, args: argparse.Namespace) -> int:
        """Audit organization and location counters."""
        result = await CounterAuditService(session).run(repair=args.repair)

        print("Counter Audit")
        print("=" * 40)
        print(f"  Organizations checked: {result.organizations_checked}")
        print(f"  Locations checked:     {result.locations_checked}")

        if result.consistent:
            print("\nAll counters consistent.")
            return 0

        print(f"\n{len(result.discrepancies)} discrepancy(ies):")
        for d in result.discrepancies:
            print(f"  - {d.table} {d.parent_id}: stored={d.stored} actual={d.actual}")

        if result.repaired:
            print("\nCounters repaired.")
            return 0
        print("\nRun with --repair to fix.")
        return 1

    async def _cmd_stats(self, session: AsyncSession, args: argparse.Namespace) -> int:
        """Print wage statistics."""
        settings = get_settings()
        service = WageStatisticsService(
            session,
            CacheVersionService(DatabaseCounterStore(session)),
            ttl_seconds=settings.statistics_cache_ttl,
        )
        if args.location_id is not None:
            stats = await service.location_statistics(args.location_id)
        elif args.organization_id is not None:
            stats = await service.organization_statistics(args.organization_id)
        else:
            stats = await service.global_statistics()

        if args.format == "json":
            print(json.dumps(stats, indent=2))
        else:
            self._print_stats(stats)
        return 0

    def _print_stats(self, stats: dict[str, Any]) -> None:
        print("Wage Statistics")
        print("=" * 40)
        print(f"  Reports: {stats['count']}")
        for label, key in (
            ("Average", "average_cents"),
            ("Median", "median_cents"),
            ("Min", "min_cents"),
            ("Max", "max_cents"),
            ("P25", "p25"),
            ("P75", "p75"),
            ("P90", "p90"),
        ):
            print(f"  {label + ':':<9}{format_money(stats[key]):>12}/hour")
        if stats["job_titles"]:
            print("\n  Top job titles:")
            for row in stats["job_titles"]:
                print(f"    {row['title']}: {row['count']} ({format_money(row['average_cents'])})")

    async def _cmd_cache_versions(self, session: AsyncSession, args: argparse.Namespace) -> int:
        """Print the current cache versions."""
        versions = await CacheVersionService(DatabaseCounterStore(session)).snapshot()
        for key, value in versions.items():
            print(f"  {key}: {value}")
        return 0


def main() -> int:
    """CLI entry point."""
    cli = WageCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
