"""Versioned cache invalidation.

Read paths prefix their cache keys with the current version of the data
they depend on. Every wage report write bumps all three versions, which
orphans every previously cached entry without having to enumerate them.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from sqlalchemy import case, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from wage_engine.models import CacheVersion

WAGES_VERSION_KEY = "wages:ver"
ORGS_VERSION_KEY = "orgs:ver"
LOCATIONS_VERSION_KEY = "locations:ver"
VERSION_KEYS = (WAGES_VERSION_KEY, ORGS_VERSION_KEY, LOCATIONS_VERSION_KEY)

# Largest value a BIGINT column holds; the next bump wraps to 1
MAX_VERSION = 2**63 - 1

NAMESPACE_KEYS = {
    "wages": WAGES_VERSION_KEY,
    "orgs": ORGS_VERSION_KEY,
    "locations": LOCATIONS_VERSION_KEY,
}


def next_version(current: int) -> int:
    return 1 if current >= MAX_VERSION else current + 1


@runtime_checkable
class CounterStore(Protocol):
    """Atomic integer counters keyed by name. Missing keys read as 0."""

    async def increment(self, key: str) -> int:
        """Atomically add one and return the new value."""
        ...

    async def get(self, key: str) -> int:
        ...

    async def set(self, key: str, value: int) -> None:
        ...

    async def forget(self, key: str) -> None:
        ...


class InMemoryCounterStore:
    """Process-local counter store.

    Writes made here are not rolled back with a database transaction;
    use DatabaseCounterStore when that matters.
    """

    def __init__(self) -> None:
        self._values: dict[str, int] = {}
        self._lock = threading.Lock()

    async def increment(self, key: str) -> int:
        with self._lock:
            value = next_version(self._values.get(key, 0))
            self._values[key] = value
            return value

    async def get(self, key: str) -> int:
        with self._lock:
            return self._values.get(key, 0)

    async def set(self, key: str, value: int) -> None:
        with self._lock:
            self._values[key] = value

    async def forget(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)


class DatabaseCounterStore:
    """Counter store backed by the cache_versions table.

    Increments run in the caller's session as a single upsert, so they
    commit or roll back together with the wage report write.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _insert(self):
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert(CacheVersion)
        if dialect == "sqlite":
            return sqlite_insert(CacheVersion)
        raise NotImplementedError(f"No atomic upsert for dialect '{dialect}'")

    async def increment(self, key: str) -> int:
        stmt = self._insert().values(key=key, value=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CacheVersion.key],
            set_={
                "value": case(
                    (CacheVersion.value >= MAX_VERSION, 1),
                    else_=CacheVersion.value + 1,
                )
            },
        ).returning(CacheVersion.value)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def get(self, key: str) -> int:
        result = await self.session.execute(
            select(CacheVersion.value).where(CacheVersion.key == key)
        )
        value = result.scalar_one_or_none()
        return int(value) if value is not None else 0

    async def set(self, key: str, value: int) -> None:
        stmt = self._insert().values(key=key, value=value)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CacheVersion.key],
            set_={"value": value},
        )
        await self.session.execute(stmt)

    async def forget(self, key: str) -> None:
        await self.session.execute(
            CacheVersion.__table__.delete().where(CacheVersion.key == key)
        )


class CacheVersionService:
    """Bumps and reads the wage/organization/location cache versions."""

    def __init__(self, store: CounterStore):
        self.store = store

    async def bump_all(self) -> dict[str, int]:
        """Increment every version key by exactly one."""
        return {key: await self.store.increment(key) for key in VERSION_KEYS}

    async def current(self, key: str) -> int:
        return await self.store.get(key)

    async def snapshot(self) -> dict[str, int]:
        return {key: await self.store.get(key) for key in VERSION_KEYS}

    async def versioned_key(self, namespace: str, *parts: object) -> str:
        """Build a cache key that changes whenever namespace data changes.

        e.g. versioned_key("wages", "location", 7) -> "wages:v12:location:7"
        """
        try:
            version_key = NAMESPACE_KEYS[namespace]
        except KeyError as e:
            raise ValueError(f"Unknown cache namespace: {namespace}") from e
        version = await self.store.get(version_key)
        suffix = ":".join(str(p) for p in parts)
        key = f"{namespace}:v{version}"
        return f"{key}:{suffix}" if suffix else key
