"""Wage engine services."""

from wage_engine.services.cache_versions import (
    CacheVersionService,
    DatabaseCounterStore,
    InMemoryCounterStore,
)
from wage_engine.services.counter_audit import CounterAuditService
from wage_engine.services.counter_service import CounterService
from wage_engine.services.reward_service import RewardService
from wage_engine.services.sanity_service import SanityScoringService
from wage_engine.services.state_machine import (
    LifecyclePlan,
    ReportSnapshot,
    WageReportEvent,
    WageReportStateMachine,
    WageReportStatus,
    plan_effects,
)
from wage_engine.services.statistics_service import StatisticsFilters, WageStatisticsService
from wage_engine.services.wage_report_service import WageReportService

__all__ = [
    "CacheVersionService",
    "DatabaseCounterStore",
    "InMemoryCounterStore",
    "CounterAuditService",
    "CounterService",
    "RewardService",
    "SanityScoringService",
    "LifecyclePlan",
    "ReportSnapshot",
    "WageReportEvent",
    "WageReportStateMachine",
    "WageReportStatus",
    "plan_effects",
    "StatisticsFilters",
    "WageStatisticsService",
    "WageReportService",
]
