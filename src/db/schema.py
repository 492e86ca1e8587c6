"""Database tables / schema"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.core.models import utc_now


class Base(DeclarativeBase):
    pass


class DBEvent(Base):
    """One row per domain event. A stream is the event history of a single aggregate."""

    __tablename__ = "events"
    # optimistic concurrency: two writers can never both append version N to the same stream
    __table_args__ = (UniqueConstraint("stream_id", "stream_version", name="uq_stream_version"),)

    # global insertion order, across streams
    position: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    event_id: Mapped[UUID] = mapped_column(unique=True)
    stream_id: Mapped[UUID] = mapped_column(index=True)
    game_id: Mapped[UUID] = mapped_column(index=True)
    aggregate_type: Mapped[str]
    event_type: Mapped[str]
    event_data: Mapped[dict[str, Any]] = mapped_column(JSON)
    stream_version: Mapped[int]
    timestamp: Mapped[datetime] = mapped_column(default=utc_now)
