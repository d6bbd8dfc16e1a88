"""Reference population lookup for outlier scoring."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wage_engine.calculators.outlier_scorer import OutlierScorer, ScoreBasis, ScoreResult
from wage_engine.models import WageReport

logger = logging.getLogger(__name__)


class SanityScoringService:
    """Loads approved peer wages and scores a candidate against them."""

    def __init__(self, session: AsyncSession, scorer: OutlierScorer | None = None):
        self.session = session
        self.scorer = scorer or OutlierScorer()

    async def approved_wages(
        self,
        *,
        location_id: int | None = None,
        organization_id: int | None = None,
        exclude_report_id: int | None = None,
    ) -> list[int]:
        """Normalized hourly wages of approved, non-deleted reports."""
        stmt = select(WageReport.normalized_hourly_cents).where(
            WageReport.status == "approved",
            WageReport.deleted_at.is_(None),
        )
        if location_id is not None:
            stmt = stmt.where(WageReport.location_id == location_id)
        if organization_id is not None:
            stmt = stmt.where(WageReport.organization_id == organization_id)
        if exclude_report_id is not None:
            stmt = stmt.where(WageReport.id != exclude_report_id)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def score(
        self,
        candidate_cents: int,
        location_id: int | None,
        organization_id: int | None,
        exclude_report_id: int | None = None,
    ) -> ScoreResult:
        """Score a candidate, falling back from location to organization to global.

        A database error while loading populations yields a neutral score
        rather than failing the submission.
        """
        location_wages = None
        organization_wages = None
        try:
            # A savepoint keeps a failed lookup from aborting the caller's transaction
            async with self.session.begin_nested():
                if location_id is not None:
                    location_wages = await self.approved_wages(
                        location_id=location_id, exclude_report_id=exclude_report_id
                    )
                if organization_id is not None and not self.scorer.has_enough(location_wages):
                    organization_wages = await self.approved_wages(
                        organization_id=organization_id, exclude_report_id=exclude_report_id
                    )
        except SQLAlchemyError as e:
            logger.warning(
                "Error loading reference wages for location %s / organization %s: %s",
                location_id,
                organization_id,
                e,
            )
            return ScoreResult(sanity_score=0, basis=ScoreBasis.GLOBAL)

        return self.scorer.score(candidate_cents, location_wages, organization_wages)
