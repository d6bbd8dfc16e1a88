"""Wage report status machine and lifecycle effect planning.

plan_effects() is a pure function of (event, before, after). The write
path calls it explicitly and then applies the returned plan, so the
sequencing of counters, rewards and cache bumps can be tested without a
database.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from wage_engine.errors import InvalidStatusError

NORMALIZATION_INPUTS = ("amount_cents", "wage_period", "hours_per_week")


class WageReportStatus(str, Enum):
    """Wage report status values."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class WageReportEvent(str, Enum):
    """Write operations that drive the lifecycle."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    FORCE_DELETED = "force_deleted"
    RESTORED = "restored"


@dataclass(frozen=True)
class ReportSnapshot:
    """The parts of a wage report the lifecycle cares about."""

    status: str
    amount_cents: int | None = None
    wage_period: str | None = None
    hours_per_week: int | None = None
    deleted: bool = False

    @property
    def counted(self) -> bool:
        return self.status == WageReportStatus.APPROVED and not self.deleted


@dataclass(frozen=True)
class LifecyclePlan:
    """Side effects a single write must apply, in order."""

    event: WageReportEvent
    renormalize: bool = False
    counter_delta: int = 0
    award_rewards: bool = False
    bump_cache: bool = True


class WageReportStateMachine:
    """Status rules for wage reports.

    Any status may move to any other status (moderators approve, reject
    or send back for review). Only approved reports are counted.
    """

    STATUSES = frozenset(s.value for s in WageReportStatus)
    COUNTED = WageReportStatus.APPROVED

    @classmethod
    def validate_status(cls, status: str) -> str:
        """Return the status value, raising InvalidStatusError if unknown."""
        value = status.value if isinstance(status, WageReportStatus) else status
        if value not in cls.STATUSES:
            raise InvalidStatusError(status)
        return value

    @classmethod
    def is_counted(cls, status: str) -> bool:
        return cls.validate_status(status) == cls.COUNTED

    @classmethod
    def counter_delta(cls, from_status: str, to_status: str) -> int:
        """+1 entering approved, -1 leaving it, 0 otherwise."""
        was = cls.is_counted(from_status)
        now = cls.is_counted(to_status)
        if was == now:
            return 0
        return 1 if now else -1

    @classmethod
    def needs_renormalization(cls, before: ReportSnapshot, after: ReportSnapshot) -> bool:
        return any(
            getattr(before, name) != getattr(after, name) for name in NORMALIZATION_INPUTS
        )


def plan_effects(
    event: WageReportEvent,
    before: ReportSnapshot | None,
    after: ReportSnapshot | None,
) -> LifecyclePlan:
    """Decide the side effects of one write.

    Args:
        event: The write operation
        before: State prior to the write (None for create)
        after: State after the write (None for force-delete)

    Returns:
        LifecyclePlan; the cache bump is always requested
    """
    sm = WageReportStateMachine

    if event == WageReportEvent.CREATED:
        if after is None:
            raise ValueError("A created report needs its resulting state")
        counted = sm.is_counted(after.status)
        return LifecyclePlan(
            event=event,
            renormalize=True,
            counter_delta=1 if counted else 0,
            award_rewards=counted,
        )

    if before is None:
        raise ValueError(f"Event '{event.value}' needs the prior state of the report")
    sm.validate_status(before.status)

    if event == WageReportEvent.UPDATED:
        if after is None:
            raise ValueError("An updated report needs its resulting state")
        delta = 0 if before.deleted else sm.counter_delta(before.status, after.status)
        return LifecyclePlan(
            event=event,
            renormalize=sm.needs_renormalization(before, after),
            counter_delta=delta,
        )

    if event in (WageReportEvent.DELETED, WageReportEvent.FORCE_DELETED):
        # A soft-deleted report was already subtracted when it was deleted
        return LifecyclePlan(event=event, counter_delta=-1 if before.counted else 0)

    if event == WageReportEvent.RESTORED:
        restores_count = before.deleted and sm.is_counted(before.status)
        return LifecyclePlan(event=event, counter_delta=1 if restores_count else 0)

    raise ValueError(f"Unknown lifecycle event: {event}")
