"""Wage report model."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wage_engine.models.base import Base, BigIntId, TimestampMixin

if TYPE_CHECKING:
    from wage_engine.models.organization import Location, Organization
    from wage_engine.models.user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


WAGE_PERIOD_LABELS = {
    "hourly": "Hourly",
    "weekly": "Weekly",
    "biweekly": "Bi-weekly",
    "monthly": "Monthly",
    "yearly": "Yearly",
    "per_shift": "Per Shift",
}

EMPLOYMENT_TYPE_LABELS = {
    "full_time": "Full Time",
    "part_time": "Part Time",
    "seasonal": "Seasonal",
    "contract": "Contract",
}

# Flagging thresholds used by moderation views
OUTLIER_SCORE_THRESHOLD = -2
SUSPICIOUSLY_HIGH_CENTS = 10000  # > $100/hour
SUSPICIOUSLY_LOW_CENTS = 725  # < $7.25/hour (federal minimum)


def format_money(cents: int) -> str:
    """Format integer cents as a dollar string, e.g. 1500 -> '$15.00'."""
    sign = "-" if cents < 0 else ""
    dollars, remainder = divmod(abs(cents), 100)
    return f"{sign}${dollars:,}.{remainder:02d}"


class WageReport(Base, TimestampMixin):
    """A single crowdsourced wage observation.

    normalized_hourly_cents, sanity_score and status are derived by the
    write pipeline and never accepted from the submitter.
    """

    __tablename__ = "wage_reports"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int | None] = mapped_column(
        BigIntId,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    organization_id: Mapped[int | None] = mapped_column(
        BigIntId,
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    location_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("locations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    job_title: Mapped[str] = mapped_column(String, nullable=False)
    employment_type: Mapped[str] = mapped_column(String, nullable=False, default="full_time")
    wage_period: Mapped[str] = mapped_column(String, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    normalized_hourly_cents: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    hours_per_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    shift_hours: Mapped[int | None] = mapped_column(Integer, nullable=True)
    effective_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    tips_included: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    unionized: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    source: Mapped[str] = mapped_column(String, nullable=False, default="user")
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending", index=True)
    sanity_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="wage_reports_amount_positive"),
        CheckConstraint(
            "hours_per_week IS NULL OR hours_per_week BETWEEN 1 AND 168",
            name="wage_reports_hours_check",
        ),
        CheckConstraint(
            "wage_period IN ('hourly', 'weekly', 'biweekly', 'monthly', 'yearly', 'per_shift')",
            name="wage_reports_period_check",
        ),
        CheckConstraint(
            "employment_type IN ('full_time', 'part_time', 'seasonal', 'contract')",
            name="wage_reports_employment_type_check",
        ),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="wage_reports_status_check",
        ),
    )

    # Relationships
    user: Mapped[User | None] = relationship(back_populates="wage_reports")
    organization: Mapped[Organization | None] = relationship(back_populates="wage_reports")
    location: Mapped[Location] = relationship(back_populates="wage_reports")

    @property
    def is_counted(self) -> bool:
        """Whether this report contributes to parent wage_reports_count."""
        return self.status == "approved" and self.deleted_at is None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_outlier(self) -> bool:
        return self.sanity_score < OUTLIER_SCORE_THRESHOLD

    @property
    def is_suspiciously_high(self) -> bool:
        return self.normalized_hourly_cents > SUSPICIOUSLY_HIGH_CENTS

    @property
    def is_suspiciously_low(self) -> bool:
        return self.normalized_hourly_cents < SUSPICIOUSLY_LOW_CENTS

    def normalized_hourly_money(self) -> str:
        return format_money(self.normalized_hourly_cents)

    def original_amount_money(self) -> str:
        return format_money(self.amount_cents)

    @property
    def wage_period_display(self) -> str:
        return WAGE_PERIOD_LABELS.get(self.wage_period, self.wage_period.capitalize())

    @property
    def employment_type_display(self) -> str:
        return EMPLOYMENT_TYPE_LABELS.get(
            self.employment_type, self.employment_type.capitalize()
        )

    @property
    def status_display(self) -> str:
        return self.status.capitalize()
