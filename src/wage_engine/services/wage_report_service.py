"""Wage report service - the write path for wage reports.

Every write runs the same pipeline inside the caller's transaction:

    normalize -> score (create only) -> persist -> plan_effects()
        -> counters -> rewards -> cache version bump

Normalization runs before anything is written, so a rejected wage
leaves no trace. Counters and cache versions are written through the
same session, so a rollback undoes them together with the report.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wage_engine.calculators.normalizer import NormalizationBounds, normalize_to_hourly
from wage_engine.calculators.outlier_scorer import OutlierScorer
from wage_engine.config import Settings, get_settings
from wage_engine.errors import (
    LocationNotFoundError,
    NormalizationError,
    ReportNotFoundError,
)
from wage_engine.models import Location, WageReport
from wage_engine.services.cache_versions import (
    CacheVersionService,
    CounterStore,
    DatabaseCounterStore,
)
from wage_engine.services.counter_service import CounterService
from wage_engine.services.reward_service import RewardService
from wage_engine.services.sanity_service import SanityScoringService
from wage_engine.services.state_machine import (
    LifecyclePlan,
    ReportSnapshot,
    WageReportEvent,
    WageReportStateMachine,
    plan_effects,
)

logger = logging.getLogger(__name__)

# Fields a caller may change after submission
UPDATABLE_FIELDS = frozenset(
    {
        "amount_cents",
        "wage_period",
        "hours_per_week",
        "shift_hours",
        "job_title",
        "employment_type",
        "currency",
        "effective_date",
        "tips_included",
        "unionized",
        "notes",
        "status",
    }
)


def snapshot_of(report: WageReport) -> ReportSnapshot:
    """Capture the lifecycle-relevant state of a report."""
    return ReportSnapshot(
        status=report.status,
        amount_cents=report.amount_cents,
        wage_period=report.wage_period,
        hours_per_week=report.hours_per_week,
        deleted=report.deleted_at is not None,
    )


class WageReportService:
    """Service for the wage report lifecycle.

    Operations:
    - submit: normalize, score and persist a new report
    - update: change fields, re-normalizing when wage inputs change
    - moderate: move a report to pending/approved/rejected
    - delete / restore: soft delete and undo it
    - force_delete: remove the row permanently
    """

    def __init__(
        self,
        session: AsyncSession,
        settings: Settings | None = None,
        cache_store: CounterStore | None = None,
        scorer: OutlierScorer | None = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.bounds: NormalizationBounds = self.settings.normalization_bounds()
        self.sanity = SanityScoringService(
            session, scorer or OutlierScorer(self.settings.scoring_policy())
        )
        self.counters = CounterService(session)
        self.rewards = RewardService(session)
        self.cache_versions = CacheVersionService(cache_store or DatabaseCounterStore(session))

    async def get(self, report_id: int, include_deleted: bool = False) -> WageReport:
        """Load a report, raising ReportNotFoundError if missing."""
        stmt = select(WageReport).where(WageReport.id == report_id)
        if not include_deleted:
            stmt = stmt.where(WageReport.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        report = result.scalar_one_or_none()
        if report is None:
            raise ReportNotFoundError(report_id, include_deleted)
        return report

    async def submit(
        self,
        *,
        location_id: int,
        amount_cents: int,
        wage_period: str,
        job_title: str,
        hours_per_week: int | None = None,
        shift_hours: int | None = None,
        organization_id: int | None = None,
        user_id: int | None = None,
        employment_type: str = "full_time",
        currency: str = "USD",
        effective_date: date | None = None,
        tips_included: bool = False,
        unionized: bool | None = None,
        notes: str | None = None,
        source: str = "user",
    ) -> WageReport:
        """Create a wage report.

        Status and sanity score are always computed here; callers cannot
        set them.

        Raises:
            LocationNotFoundError: location_id does not exist
            NormalizationError: the wage cannot be normalized or is out of range
        """
        location = await self.session.get(Location, location_id)
        if location is None:
            raise LocationNotFoundError(location_id)
        if organization_id is None:
            organization_id = location.organization_id

        normalized = self._normalize(amount_cents, wage_period, hours_per_week, shift_hours)
        score = await self.sanity.score(normalized, location_id, organization_id)

        report = WageReport(
            user_id=user_id,
            organization_id=organization_id,
            location_id=location_id,
            job_title=job_title,
            employment_type=employment_type,
            wage_period=wage_period,
            currency=currency.upper(),
            amount_cents=amount_cents,
            normalized_hourly_cents=normalized,
            hours_per_week=hours_per_week,
            shift_hours=shift_hours,
            effective_date=effective_date,
            tips_included=tips_included,
            unionized=unionized,
            notes=notes,
            source=source,
            sanity_score=score.sanity_score,
            status=score.status,
        )
        self.session.add(report)
        await self.session.flush()

        plan = plan_effects(WageReportEvent.CREATED, None, snapshot_of(report))
        await self._apply(plan, report)
        logger.debug(
            "Wage report %s scored %d against %s basis (n=%d)",
            report.id,
            score.sanity_score,
            score.basis.value,
            score.population_size,
        )
        return report

    async def update(self, report_id: int, **changes: Any) -> WageReport:
        """Apply field changes to a live report.

        Re-normalizes when amount, period or hours change; adjusts
        counters when status moves into or out of approved. The cache
        versions are bumped on every update.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update wage report fields: {', '.join(sorted(unknown))}")
        if "status" in changes:
            changes["status"] = WageReportStateMachine.validate_status(changes["status"])
        if "currency" in changes and changes["currency"] is not None:
            changes["currency"] = changes["currency"].upper()

        report = await self.get(report_id)
        before = snapshot_of(report)

        proposed = {name: changes.get(name, getattr(report, name)) for name in UPDATABLE_FIELDS}
        after = ReportSnapshot(
            status=proposed["status"],
            amount_cents=proposed["amount_cents"],
            wage_period=proposed["wage_period"],
            hours_per_week=proposed["hours_per_week"],
            deleted=before.deleted,
        )
        plan = plan_effects(WageReportEvent.UPDATED, before, after)

        # Validate before mutating anything
        if plan.renormalize or "shift_hours" in changes:
            changes["normalized_hourly_cents"] = self._normalize(
                proposed["amount_cents"],
                proposed["wage_period"],
                proposed["hours_per_week"],
                proposed["shift_hours"],
            )

        for name, value in changes.items():
            setattr(report, name, value)
        await self.session.flush()

        await self._apply(plan, report)
        return report

    async def moderate(self, report_id: int, status: str) -> WageReport:
        """Move a report to a new status."""
        return await self.update(report_id, status=status)

    async def delete(self, report_id: int) -> WageReport:
        """Soft delete a report, removing it from counters if it was approved."""
        report = await self.get(report_id)
        plan = plan_effects(WageReportEvent.DELETED, snapshot_of(report), None)

        report.deleted_at = datetime.now(timezone.utc)
        await self.session.flush()

        await self._apply(plan, report)
        return report

    async def restore(self, report_id: int) -> WageReport:
        """Undo a soft delete, counting the report again if it is approved."""
        report = await self.get(report_id, include_deleted=True)
        before = snapshot_of(report)
        plan = plan_effects(WageReportEvent.RESTORED, before, replace(before, deleted=False))

        report.deleted_at = None
        await self.session.flush()

        await self._apply(plan, report)
        return report

    async def force_delete(self, report_id: int) -> None:
        """Permanently remove a report, live or soft-deleted."""
        report = await self.get(report_id, include_deleted=True)
        plan = plan_effects(WageReportEvent.FORCE_DELETED, snapshot_of(report), None)

        await self.session.delete(report)
        await self.session.flush()

        await self._apply(plan, report)

    def _normalize(
        self,
        amount_cents: int,
        wage_period: str,
        hours_per_week: int | None,
        shift_hours: int | None,
    ) -> int:
        try:
            return normalize_to_hourly(
                amount_cents, wage_period, hours_per_week, shift_hours, self.bounds
            )
        except NormalizationError as e:
            logger.warning("Rejected wage report input: %s", e)
            raise

    async def _apply(self, plan: LifecyclePlan, report: WageReport) -> None:
        """Apply a lifecycle plan's side effects in order."""
        if plan.counter_delta:
            await self.counters.apply(
                plan.counter_delta, report.organization_id, report.location_id
            )
        if plan.award_rewards:
            await self.rewards.award_submission(report)
        versions = await self.cache_versions.bump_all() if plan.bump_cache else {}

        logger.info(
            "Wage report %s %s: status=%s counter_delta=%+d versions=%s",
            report.id,
            plan.event.value,
            report.status,
            plan.counter_delta,
            versions,
        )
