"""SQLAlchemy declarative base for all ORM models."""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all database models."""


class EngineStateModel(Base):
    """ORM model for per-engine persisted state.

    One row per engine key. payload holds a flat list of
    [animal_id, record] pairs.
    """

    __tablename__ = "engine_state"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    payload: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
