from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import String
from sqlmodel import Column, Field, SQLModel


class MatchingStatus(str, Enum):
    open = "open"
    closed = "closed"


class Event(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: Optional[str] = None
    event_date: Optional[date] = None
    total_spots: int = Field(default=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Matching lifecycle: open -> closed, flipped once by the circle engine
    matching_status: MatchingStatus = Field(
        default=MatchingStatus.open, sa_column=Column(String, nullable=False, default=MatchingStatus.open.value)
    )
    matching_triggered_at: Optional[datetime] = Field(default=None)
    matching_completed_at: Optional[datetime] = Field(default=None)
