"""Denormalized counter tests.

Goal: wage_reports_count on organizations and locations always equals
the number of approved, non-deleted reports, and never goes negative.
"""

import logging

import pytest
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from wage_engine.models import Location, Organization, WageReport
from wage_engine.services.counter_audit import CounterAuditService
from wage_engine.services.counter_service import CounterService

from .conftest import approved_count, stored_count


pytestmark = pytest.mark.asyncio


async def assert_counters_match(session: AsyncSession, org_id: int, loc_id: int, expected: int):
    """Stored counters equal the true count, which equals expected."""
    assert await approved_count(session, WageReport.organization_id, org_id) == expected
    assert await approved_count(session, WageReport.location_id, loc_id) == expected
    assert await stored_count(session, Organization, org_id) == expected
    assert await stored_count(session, Location, loc_id) == expected


class TestLifecycleCounters:
    """Test counters across the full report lifecycle."""

    async def test_moderation_sequence(self, session, service, organization, location):
        org_id, loc_id = organization.id, location.id
        report = await service.submit(
            location_id=loc_id, amount_cents=1500, wage_period="hourly", job_title="Barista"
        )
        await assert_counters_match(session, org_id, loc_id, 1)

        for status, expected in (
            ("pending", 0),
            ("approved", 1),
            ("rejected", 0),
            ("rejected", 0),
            ("approved", 1),
            ("approved", 1),
        ):
            await service.moderate(report.id, status)
            await assert_counters_match(session, org_id, loc_id, expected)

    async def test_delete_restore_force_delete(self, session, service, organization, location):
        org_id, loc_id = organization.id, location.id
        report = await service.submit(
            location_id=loc_id, amount_cents=1500, wage_period="hourly", job_title="Barista"
        )

        await service.delete(report.id)
        await assert_counters_match(session, org_id, loc_id, 0)

        await service.restore(report.id)
        await assert_counters_match(session, org_id, loc_id, 1)

        await service.delete(report.id)
        await service.force_delete(report.id)
        await assert_counters_match(session, org_id, loc_id, 0)

    async def test_force_delete_of_live_approved_report(
        self, session, service, organization, location
    ):
        org_id, loc_id = organization.id, location.id
        report = await service.submit(
            location_id=loc_id, amount_cents=1500, wage_period="hourly", job_title="Barista"
        )

        await service.force_delete(report.id)

        await assert_counters_match(session, org_id, loc_id, 0)

    async def test_pending_reports_are_not_counted(self, session, service, organization, location):
        org_id, loc_id = organization.id, location.id
        report = await service.submit(
            location_id=loc_id, amount_cents=1500, wage_period="hourly", job_title="Barista"
        )
        await service.moderate(report.id, "pending")

        await service.delete(report.id)
        await assert_counters_match(session, org_id, loc_id, 0)

        await service.restore(report.id)
        await assert_counters_match(session, org_id, loc_id, 0)

    async def test_field_edits_leave_counters_alone(self, session, service, organization, location):
        org_id, loc_id = organization.id, location.id
        report = await service.submit(
            location_id=loc_id, amount_cents=1500, wage_period="hourly", job_title="Barista"
        )

        await service.update(report.id, amount_cents=1700, notes="Raise")

        await assert_counters_match(session, org_id, loc_id, 1)

    async def test_location_without_organization(self, session, service, organization):
        loc = Location(name="Independent Diner", wage_reports_count=0)
        session.add(loc)
        await session.commit()

        report = await service.submit(
            location_id=loc.id, amount_cents=1500, wage_period="hourly", job_title="Cook"
        )

        assert report.organization_id is None
        assert await stored_count(session, Location, loc.id) == 1
        assert await stored_count(session, Organization, organization.id) == 0


class TestUnderflow:
    """Test that decrements clamp at zero."""

    async def test_decrement_below_zero_is_clamped(
        self, session, service, organization, location, caplog
    ):
        org_id, loc_id = organization.id, location.id
        report = await service.submit(
            location_id=loc_id, amount_cents=1500, wage_period="hourly", job_title="Barista"
        )
        # Simulate drift from outside the pipeline
        await session.execute(update(Organization).values(wage_reports_count=0))
        await session.execute(update(Location).values(wage_reports_count=0))

        with caplog.at_level(logging.WARNING, logger="wage_engine.services.counter_service"):
            await service.delete(report.id)

        assert await stored_count(session, Organization, org_id) == 0
        assert await stored_count(session, Location, loc_id) == 0
        assert "Clamped" in caplog.text

    async def test_counter_service_rejects_large_deltas(self, session, organization, location):
        with pytest.raises(ValueError):
            await CounterService(session).apply(2, organization.id, location.id)

    async def test_zero_delta_is_noop(self, session, organization, location):
        change = await CounterService(session).apply(0, organization.id, location.id)

        assert change.organization_rows == 0
        assert change.location_rows == 0
        assert await stored_count(session, Location, location.id) == 0


class TestCounterAudit:
    """Test drift detection and repair."""

    async def test_consistent_counters(self, session, service, location):
        await service.submit(
            location_id=location.id, amount_cents=1500, wage_period="hourly", job_title="Barista"
        )

        result = await CounterAuditService(session).run()

        assert result.consistent
        assert result.organizations_checked == 1
        assert result.locations_checked == 1

    async def test_detects_drift_without_repairing(self, session, service, organization, location):
        org_id, loc_id = organization.id, location.id
        await service.submit(
            location_id=loc_id, amount_cents=1500, wage_period="hourly", job_title="Barista"
        )
        await session.execute(
            update(Location).where(Location.id == loc_id).values(wage_reports_count=7)
        )

        result = await CounterAuditService(session).run()

        assert not result.consistent
        assert not result.repaired
        assert [d.to_dict() for d in result.discrepancies] == [
            {"table": "locations", "parent_id": loc_id, "stored": 7, "actual": 1}
        ]
        assert await stored_count(session, Location, loc_id) == 7
        assert await stored_count(session, Organization, org_id) == 1

    async def test_repair(self, session, service, organization, location):
        org_id, loc_id = organization.id, location.id
        await service.submit(
            location_id=loc_id, amount_cents=1500, wage_period="hourly", job_title="Barista"
        )
        await session.execute(update(Organization).values(wage_reports_count=0))
        await session.execute(update(Location).values(wage_reports_count=4))

        result = await CounterAuditService(session).run(repair=True)

        assert result.repaired
        assert len(result.discrepancies) == 2
        await assert_counters_match(session, org_id, loc_id, 1)
        assert (await CounterAuditService(session).run()).consistent


class TestTrueCount:
    async def test_true_count_ignores_pending_and_deleted(self, session, service, organization, location):
        first = await service.submit(
            location_id=location.id, amount_cents=1500, wage_period="hourly", job_title="Barista"
        )
        second = await service.submit(
            location_id=location.id, amount_cents=1550, wage_period="hourly", job_title="Barista"
        )
        await service.submit(
            location_id=location.id, amount_cents=1600, wage_period="hourly", job_title="Barista"
        )
        await service.moderate(first.id, "pending")
        await service.delete(second.id)

        counters = CounterService(session)
        assert await counters.true_count(Location, location.id) == 1
        assert await counters.true_count(Organization, organization.id) == 1
