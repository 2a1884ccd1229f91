"""SQLAlchemy models for the local usage store.

Only the demo usage counter is persisted. Catalog data ships with the
package and remote results live in the in-memory response cache.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DeviceUsage(Base):
    """Demo usage of this installation, keyed by a random device id."""

    __tablename__ = "device_usage"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    device_id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    last_demo_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    demo_usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
