"""Device-scoped daily counter for the free demo recommendation.

One row per installation in ``device_usage``. A "day" is a UTC calendar day.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from .db import create_engine, create_session_factory, init_db
from .sqlmodels import DeviceUsage

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands datetimes back naive.
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)


class UsageCounter:
    def __init__(self, data_dir: Path, now: Callable[[], datetime] = _utcnow):
        self._data_dir = data_dir
        self._now = now
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._lock = asyncio.Lock()

    async def init(self) -> None:
        self._engine = create_engine(self._data_dir)
        await init_db(self._engine)
        self._session_factory = create_session_factory(self._engine)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_factory = None

    def _sessions(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise RuntimeError("UsageCounter.init() must be awaited before use")
        return self._session_factory

    async def _device(self, session: AsyncSession) -> DeviceUsage:
        result = await session.execute(select(DeviceUsage).order_by(DeviceUsage.id).limit(1))
        device = result.scalar_one_or_none()
        if device is None:
            device = DeviceUsage(device_id=str(uuid.uuid4()), created_at=self._now(), demo_usage_count=0)
            session.add(device)
            await session.flush()
            logger.debug("Created device record %s...", device.device_id[:8])
        return device

    def _used_on_current_day(self, device: DeviceUsage) -> bool:
        if device.last_demo_used_at is None:
            return False
        return _as_utc(device.last_demo_used_at).date() == _as_utc(self._now()).date()

    async def device_id(self) -> str:
        async with self._sessions()() as session:
            device = await self._device(session)
            await session.commit()
            return device.device_id

    async def used_today(self) -> bool:
        async with self._sessions()() as session:
            device = await self._device(session)
            await session.commit()
            return self._used_on_current_day(device)

    async def record(self) -> int:
        """Record one demo use; returns the new total."""
        async with self._sessions()() as session:
            device = await self._device(session)
            device.last_demo_used_at = self._now()
            device.demo_usage_count += 1
            count = device.demo_usage_count
            await session.commit()
        logger.debug("Recorded demo usage (total %d)", count)
        return count

    async def claim(self) -> bool:
        """Check-and-record in one step. False when today's demo is already used."""
        async with self._lock:
            if await self.used_today():
                return False
            await self.record()
            return True

    async def stats(self) -> dict:
        async with self._sessions()() as session:
            device = await self._device(session)
            await session.commit()
            return {
                "used_today": self._used_on_current_day(device),
                "total_usage": device.demo_usage_count,
                "device_id": device.device_id,
            }
