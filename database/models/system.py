"""
System Models

Bookkeeping tables that are not part of the content model.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class RankingLock(Base):
    """
    Advisory lock held while a horizon's ranking is being computed.

    One row per horizon. A lock whose expires_at has passed is considered
    abandoned and may be taken over.
    """
    __tablename__ = "ranking_locks"

    horizon: Mapped[str] = mapped_column(String(20), primary_key=True)
    token: Mapped[str] = mapped_column(String(64), nullable=False)
    acquired_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
