"""Organization and location aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wage_engine.models.base import Base, BigIntId, TimestampMixin

if TYPE_CHECKING:
    from wage_engine.models.wage_report import WageReport


class Organization(Base, TimestampMixin):
    """Employer that wage reports are filed against.

    wage_reports_count is denormalized: it is only ever written by the
    counter service and always equals the number of approved,
    non-deleted reports for this organization.
    """

    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    slug: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    wage_reports_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (
        CheckConstraint("wage_reports_count >= 0", name="organizations_count_non_negative"),
    )

    # Relationships
    locations: Mapped[list[Location]] = relationship(back_populates="organization")
    wage_reports: Mapped[list[WageReport]] = relationship(back_populates="organization")


class Location(Base, TimestampMixin):
    """Physical workplace, optionally owned by an organization."""

    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    organization_id: Mapped[int | None] = mapped_column(
        BigIntId,
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    city: Mapped[str | None] = mapped_column(String, nullable=True)
    state_province: Mapped[str | None] = mapped_column(String, nullable=True)
    wage_reports_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (
        CheckConstraint("wage_reports_count >= 0", name="locations_count_non_negative"),
    )

    # Relationships
    organization: Mapped[Organization | None] = relationship(back_populates="locations")
    wage_reports: Mapped[list[WageReport]] = relationship(back_populates="location")
