"""Experience points for approved wage report submissions."""

from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wage_engine.models import ExperienceAward, User, WageReport

logger = logging.getLogger(__name__)

SUBMISSION_POINTS = 10
FIRST_REPORT_POINTS = 25

SUBMISSION_REASON = "wage_report_submitted"
FIRST_REPORT_REASON = "first_wage_report"


class RewardService:
    """Awards experience points when a user's report is approved on submission.

    Anonymous reports earn nothing. A report whose user no longer exists
    is logged and skipped; rewards never fail a wage report write.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def award_submission(self, report: WageReport) -> list[ExperienceAward]:
        """Grant the per-submission award and, for a first report, the bonus."""
        if report.user_id is None or report.status != "approved":
            return []

        user = await self.session.get(User, report.user_id)
        if user is None:
            logger.warning(
                "Skipping experience points for wage report %s: user %s not found",
                report.id,
                report.user_id,
            )
            return []

        awards = [await self._grant(user.id, report.id, SUBMISSION_POINTS, SUBMISSION_REASON)]

        if await self._report_count(user.id) == 1:
            awards.append(
                await self._grant(user.id, report.id, FIRST_REPORT_POINTS, FIRST_REPORT_REASON)
            )

        logger.info(
            "Awarded %d experience points to user %s for wage report %s",
            sum(a.points for a in awards),
            user.id,
            report.id,
        )
        return awards

    async def _grant(self, user_id: int, report_id: int, points: int, reason: str) -> ExperienceAward:
        await self.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(experience_points=User.experience_points + points)
        )
        award = ExperienceAward(
            user_id=user_id,
            wage_report_id=report_id,
            points=points,
            reason=reason,
        )
        self.session.add(award)
        await self.session.flush()
        return award

    async def _report_count(self, user_id: int) -> int:
        result = await self.session.execute(
            select(func.count(WageReport.id)).where(
                WageReport.user_id == user_id,
                WageReport.deleted_at.is_(None),
            )
        )
        return int(result.scalar_one())
