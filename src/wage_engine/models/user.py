"""Users and the experience points they earn for submissions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wage_engine.models.base import Base, BigIntId, TimestampMixin

if TYPE_CHECKING:
    from wage_engine.models.wage_report import WageReport


class User(Base, TimestampMixin):
    """Registered submitter. Anonymous reports have no user."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    experience_points: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (
        CheckConstraint("experience_points >= 0", name="users_xp_non_negative"),
    )

    # Relationships
    wage_reports: Mapped[list[WageReport]] = relationship(back_populates="user")
    awards: Mapped[list[ExperienceAward]] = relationship(back_populates="user")


class ExperienceAward(Base, TimestampMixin):
    """One reward signal granted to a user."""

    __tablename__ = "experience_awards"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    wage_report_id: Mapped[int | None] = mapped_column(
        BigIntId,
        ForeignKey("wage_reports.id", ondelete="SET NULL"),
        nullable=True,
    )
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (CheckConstraint("points > 0", name="experience_awards_points_positive"),)

    # Relationships
    user: Mapped[User] = relationship(back_populates="awards")
