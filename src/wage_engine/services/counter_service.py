"""Denormalized wage_reports_count maintenance for organizations and locations."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wage_engine.models import Location, Organization, WageReport

logger = logging.getLogger(__name__)

CountedParent = type[Organization] | type[Location]


@dataclass(frozen=True)
class CounterChange:
    """Rows touched by one counter adjustment."""

    organization_rows: int = 0
    location_rows: int = 0


class CounterService:
    """Applies +1/-1 to parent counters with atomic column updates.

    Counters are never read back into Python to be modified: each change
    is a single UPDATE ... SET wage_reports_count = wage_reports_count + n,
    which stays correct under concurrent writers. Decrements only touch
    rows whose counter is still above zero.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def apply(
        self,
        delta: int,
        organization_id: int | None,
        location_id: int | None,
    ) -> CounterChange:
        """Apply delta to both parents, skipping whichever id is None."""
        if delta == 0:
            return CounterChange()
        if delta not in (1, -1):
            raise ValueError(f"Counter delta must be +1 or -1, got {delta}")

        org_rows = 0
        loc_rows = 0
        if organization_id is not None:
            org_rows = await self._adjust(Organization, organization_id, delta)
        if location_id is not None:
            loc_rows = await self._adjust(Location, location_id, delta)
        return CounterChange(organization_rows=org_rows, location_rows=loc_rows)

    async def _adjust(self, model: CountedParent, parent_id: int, delta: int) -> int:
        stmt = update(model).where(model.id == parent_id)
        if delta < 0:
            stmt = stmt.where(model.wage_reports_count > 0)
        stmt = stmt.values(wage_reports_count=model.wage_reports_count + delta)

        result = await self.session.execute(stmt)
        rows = result.rowcount or 0
        if rows == 0 and delta < 0:
            logger.warning(
                "Clamped %s %s wage_reports_count at zero; counter was already inconsistent",
                model.__tablename__,
                parent_id,
            )
        return rows

    async def true_count(self, model: CountedParent, parent_id: int) -> int:
        """COUNT(*) of approved, non-deleted reports for one parent."""
        column = (
            WageReport.organization_id if model is Organization else WageReport.location_id
        )
        result = await self.session.execute(
            select(func.count(WageReport.id)).where(
                column == parent_id,
                WageReport.status == "approved",
                WageReport.deleted_at.is_(None),
            )
        )
        return int(result.scalar_one())

