"""Counter audit - compares denormalized counters with true counts.

The write pipeline keeps wage_reports_count exact; this audit exists to
detect and repair drift introduced outside it (manual SQL, restores from
backup, bugs).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wage_engine.models import Location, Organization, WageReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CounterDiscrepancy:
    """A parent whose stored counter differs from its true count."""

    table: str
    parent_id: int
    stored: int
    actual: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "table": self.table,
            "parent_id": self.parent_id,
            "stored": self.stored,
            "actual": self.actual,
        }


@dataclass
class CounterAuditResult:
    """Result of an audit run."""

    organizations_checked: int = 0
    locations_checked: int = 0
    discrepancies: list[CounterDiscrepancy] = field(default_factory=list)
    repaired: bool = False

    @property
    def consistent(self) -> bool:
        """Whether every counter matched (before any repair)."""
        return not self.discrepancies


class CounterAuditService:
    """Audits and optionally repairs organization/location counters."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def run(self, repair: bool = False) -> CounterAuditResult:
        """Check every counter; with repair=True overwrite drifted ones."""
        result = CounterAuditResult()

        for model, column in (
            (Organization, WageReport.organization_id),
            (Location, WageReport.location_id),
        ):
            actual = await self._true_counts(column)
            rows = await self.session.execute(select(model.id, model.wage_reports_count))
            checked = 0
            for parent_id, stored in rows.all():
                checked += 1
                expected = actual.get(parent_id, 0)
                if stored != expected:
                    result.discrepancies.append(
                        CounterDiscrepancy(
                            table=model.__tablename__,
                            parent_id=parent_id,
                            stored=stored,
                            actual=expected,
                        )
                    )
            if model is Organization:
                result.organizations_checked = checked
            else:
                result.locations_checked = checked

        for d in result.discrepancies:
            logger.warning(
                "Counter drift on %s %s: stored=%d actual=%d",
                d.table,
                d.parent_id,
                d.stored,
                d.actual,
            )

        if repair and result.discrepancies:
            await self._repair(result.discrepancies)
            result.repaired = True

        return result

    async def _true_counts(self, column) -> dict[int, int]:
        rows = await self.session.execute(
            select(column, func.count(WageReport.id))
            .where(
                column.is_not(None),
                WageReport.status == "approved",
                WageReport.deleted_at.is_(None),
            )
            .group_by(column)
        )
        return {parent_id: int(count) for parent_id, count in rows.all()}

    async def _repair(self, discrepancies: list[CounterDiscrepancy]) -> None:
        models = {Organization.__tablename__: Organization, Location.__tablename__: Location}
        for d in discrepancies:
            model = models[d.table]
            await self.session.execute(
                update(model).where(model.id == d.parent_id).values(wage_reports_count=d.actual)
            )
        logger.info("Repaired %d wage_reports_count discrepancies", len(discrepancies))
