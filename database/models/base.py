"""
SQLAlchemy Base Model and Mixins

Declarative base shared by stories, stats, rankings and locks.
"""
from datetime import datetime, date
from typing import Any, Dict

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base with JSON-friendly dict conversion."""

    def to_dict(self) -> Dict[str, Any]:
        """Column values keyed by column name. Dates become ISO strings."""
        data = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            data[column.name] = value
        return data

    def __repr__(self) -> str:
        keys = ", ".join(
            f"{column.key}={getattr(self, column.key, None)!r}"
            for column in self.__mapper__.primary_key
        )
        return f"<{self.__class__.__name__}({keys})>"


class TimestampMixin:
    """
    Row bookkeeping timestamps for stats and ranking rows.

    Not used by Story: its updated_at drives time decay and must only move
    on content edits.
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=func.now(),
        nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=func.now(),
        onupdate=func.now(),
        nullable=True
    )
