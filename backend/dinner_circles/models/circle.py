"""
Circle Models

Circles and their members are written only by the matching engine, once per
event, and never reassigned afterwards.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import String
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, SQLModel


class CircleFormat(str, Enum):
    rotating = "rotating"
    hosted = "hosted"


class CircleRole(str, Enum):
    host = "host"
    participant = "participant"
    starter = "starter"
    main = "main"
    dessert = "dessert"


class Circle(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    name: str
    format: CircleFormat = Field(sa_column=Column(String, nullable=False))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CircleMember(SQLModel, table=True):
    """
    Membership of one user in one circle.

    Constraint: a user appears in at most one circle per event.
    """

    __tablename__ = "circle_member"

    __table_args__ = (SAUniqueConstraint("event_id", "user_id", name="uq_circle_member_event_user"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    circle_id: int = Field(foreign_key="circle.id", index=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    user_id: int = Field(foreign_key="app_user.id", index=True)
    role: CircleRole = Field(sa_column=Column(String, nullable=False))
    position: int  # 0-based order within the circle
