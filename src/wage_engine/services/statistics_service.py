"""Wage statistics over approved reports, cached under versioned keys."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from wage_engine.calculators.statistics import round_cents, summarize
from wage_engine.models import WageReport
from wage_engine.services.cache_versions import CacheVersionService

TOP_JOB_TITLES = 10


@dataclass(frozen=True)
class StatisticsFilters:
    """Optional narrowing of the approved population."""

    job_title: str | None = None
    employment_type: str | None = None
    currency: str | None = None
    min_cents: int | None = None
    max_cents: int | None = None

    def cache_fragment(self) -> str:
        return ",".join(
            f"{name}={value}" for name, value in sorted(self.__dict__.items()) if value is not None
        )


class TTLCache:
    """Small process-local cache with per-entry expiry."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def put(self, key: str, value: Any) -> None:
        """Store a value, dropping any entries that have already expired."""
        now = self._clock()
        for stale in [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]:
            del self._entries[stale]
        self._entries[key] = (now + self.ttl_seconds, value)

    def retain(self, prefix: str) -> int:
        """Drop every entry whose key does not start with prefix."""
        stale = [k for k in self._entries if not k.startswith(prefix)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class WageStatisticsService:
    """Global, per-location and per-organization wage statistics.

    Results are cached under keys prefixed with the current wages cache
    version, so any wage report write makes older entries unreachable.
    """

    def __init__(
        self,
        session: AsyncSession,
        cache_versions: CacheVersionService,
        cache: TTLCache | None = None,
        ttl_seconds: float = 900,
    ):
        self.session = session
        self.cache_versions = cache_versions
        self.cache = cache if cache is not None else TTLCache(ttl_seconds)

    async def global_statistics(self, filters: StatisticsFilters | None = None) -> dict[str, Any]:
        return await self._cached("global", None, filters or StatisticsFilters())

    async def location_statistics(
        self, location_id: int, filters: StatisticsFilters | None = None
    ) -> dict[str, Any]:
        return await self._cached("location", location_id, filters or StatisticsFilters())

    async def organization_statistics(
        self, organization_id: int, filters: StatisticsFilters | None = None
    ) -> dict[str, Any]:
        return await self._cached("organization", organization_id, filters or StatisticsFilters())

    async def _cached(
        self, context: str, context_id: int | None, filters: StatisticsFilters
    ) -> dict[str, Any]:
        key = await self.cache_versions.versioned_key(
            "wages", "stats", context, context_id if context_id is not None else "all",
            filters.cache_fragment(),
        )
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        stats = await self._calculate(context, context_id, filters)
        # Entries under an older wages version can never be read again
        namespace, version, _ = key.split(":", 2)
        self.cache.retain(f"{namespace}:{version}:")
        self.cache.put(key, stats)
        return stats

    def _conditions(self, context: str, context_id: int | None, filters: StatisticsFilters) -> list:
        conditions = [WageReport.status == "approved", WageReport.deleted_at.is_(None)]
        if context == "location":
            conditions.append(WageReport.location_id == context_id)
        elif context == "organization":
            conditions.append(WageReport.organization_id == context_id)

        if filters.job_title:
            conditions.append(WageReport.job_title.ilike(f"%{filters.job_title}%"))
        if filters.employment_type:
            conditions.append(WageReport.employment_type == filters.employment_type)
        if filters.currency:
            conditions.append(WageReport.currency == filters.currency.upper())
        if filters.min_cents is not None:
            conditions.append(WageReport.normalized_hourly_cents >= filters.min_cents)
        if filters.max_cents is not None:
            conditions.append(WageReport.normalized_hourly_cents <= filters.max_cents)
        return conditions

    async def _calculate(
        self, context: str, context_id: int | None, filters: StatisticsFilters
    ) -> dict[str, Any]:
        conditions = self._conditions(context, context_id, filters)

        result = await self.session.execute(
            select(WageReport.normalized_hourly_cents).where(*conditions)
        )
        summary = summarize(result.scalars().all())
        stats = summary.to_dict()
        stats["employment_types"] = []
        stats["job_titles"] = []
        if summary.count == 0:
            return stats

        stats["employment_types"] = await self._breakdown(
            WageReport.employment_type, "type", conditions
        )
        stats["job_titles"] = await self._breakdown(
            WageReport.job_title, "title", conditions, limit=TOP_JOB_TITLES
        )
        return stats

    async def _breakdown(
        self, column, label: str, conditions: list, limit: int | None = None
    ) -> list[dict[str, Any]]:
        count = func.count(WageReport.id)
        stmt = (
            select(column, count, func.avg(WageReport.normalized_hourly_cents))
            .where(*conditions)
            .group_by(column)
            .order_by(count.desc(), column)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        rows = await self.session.execute(stmt)
        return [
            {label: value, "count": int(n), "average_cents": round_cents(avg or 0)}
            for value, n, avg in rows.all()
        ]
