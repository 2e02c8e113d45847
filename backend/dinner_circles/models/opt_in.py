"""
Matching Opt-In Model

One row per (event, user) in an event's matching pool. A partner link is
stored on both sides; the engine reads each side as-is.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class MatchingOptIn(SQLModel, table=True):
    __tablename__ = "matching_opt_in"

    __table_args__ = (SAUniqueConstraint("event_id", "user_id", name="uq_opt_in_event_user"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    user_id: int = Field(foreign_key="app_user.id", index=True)
    partner_id: Optional[int] = Field(default=None, foreign_key="app_user.id")
    hosting_available: bool = Field(default=False)
    match_address: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
