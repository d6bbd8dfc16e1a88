"""ORM models for the wage engine."""

from wage_engine.models.base import Base, TimestampMixin
from wage_engine.models.cache import CacheVersion
from wage_engine.models.organization import Location, Organization
from wage_engine.models.user import ExperienceAward, User
from wage_engine.models.wage_report import WageReport, format_money

__all__ = [
    "Base",
    "TimestampMixin",
    "CacheVersion",
    "Location",
    "Organization",
    "ExperienceAward",
    "User",
    "WageReport",
    "format_money",
]
