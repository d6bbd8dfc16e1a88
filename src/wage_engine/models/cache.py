"""Persistent cache version counters."""

from __future__ import annotations

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from wage_engine.models.base import Base


class CacheVersion(Base):
    """Monotonic version used as a prefix for read-path cache keys."""

    __tablename__ = "cache_versions"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
