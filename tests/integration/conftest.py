"""Database fixtures for wage pipeline integration tests."""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from wage_engine.config import Settings
from wage_engine.database import create_schema, enable_sqlite_savepoints, make_session_factory
from wage_engine.models import CacheVersion, Location, Organization, User, WageReport
from wage_engine.services.wage_report_service import WageReportService

from tests.conftest import TEST_DATABASE_URL


@pytest_asyncio.fixture
async def engine():
    """Create test database engine with a fresh schema."""
    engine = enable_sqlite_savepoints(
        create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    )
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    factory = make_session_factory(engine)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def organization(session: AsyncSession) -> Organization:
    """Committed organization with a zero counter."""
    org = Organization(name="Acme Coffee", slug="acme-coffee", wage_reports_count=0)
    session.add(org)
    await session.commit()
    return org


@pytest_asyncio.fixture
async def location(session: AsyncSession, organization: Organization) -> Location:
    """Committed location owned by the test organization."""
    loc = Location(
        name="Acme Coffee Downtown",
        organization_id=organization.id,
        city="Portland",
        state_province="OR",
        wage_reports_count=0,
    )
    session.add(loc)
    await session.commit()
    return loc


@pytest_asyncio.fixture
async def user(session: AsyncSession) -> User:
    """Committed registered user with no experience points."""
    u = User(name="Sam Rivera", email="sam@example.com", experience_points=0)
    session.add(u)
    await session.commit()
    return u


@pytest.fixture
def service(session: AsyncSession, settings: Settings) -> WageReportService:
    """Wage report service writing cache versions to the test database."""
    return WageReportService(session, settings=settings)


async def stored_count(session: AsyncSession, model, parent_id: int) -> int:
    """Read a denormalized counter straight from the database."""
    result = await session.execute(select(model.wage_reports_count).where(model.id == parent_id))
    return int(result.scalar_one())


async def approved_count(session: AsyncSession, column, parent_id: int) -> int:
    """COUNT(*) of approved, live reports for a parent."""
    result = await session.execute(
        select(func.count(WageReport.id)).where(
            column == parent_id,
            WageReport.status == "approved",
            WageReport.deleted_at.is_(None),
        )
    )
    return int(result.scalar_one())


async def cache_versions(session: AsyncSession) -> dict[str, int]:
    """All cache version rows as a dict."""
    result = await session.execute(select(CacheVersion.key, CacheVersion.value))
    return {key: value for key, value in result.all()}


async def seed_approved(
    service: WageReportService, location_id: int, hourly_cents: list[int]
) -> list[WageReport]:
    """Submit hourly wages and force them to approved."""
    reports = []
    for cents in hourly_cents:
        report = await service.submit(
            location_id=location_id,
            amount_cents=cents,
            wage_period="hourly",
            job_title="Barista",
        )
        if report.status != "approved":
            report = await service.moderate(report.id, "approved")
        reports.append(report)
    return reports
