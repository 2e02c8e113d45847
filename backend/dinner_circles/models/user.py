from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from sqlalchemy import JSON, String
from sqlmodel import Column, Field, SQLModel


class UserRole(str, Enum):
    user = "user"
    admin = "admin"


class CookingExperience(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class PersonalityType(str, Enum):
    introvert = "introvert"
    ambivert = "ambivert"
    extrovert = "extrovert"


class User(SQLModel, table=True):
    """
    Platform user with the profile attributes matching reads.

    Profile editing lives elsewhere; this table is read by the matching pool
    loader and written only when opt-in creates a guest partner.
    """

    __tablename__ = "app_user"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(sa_column=Column(String, unique=True, nullable=False))
    name: Optional[str] = Field(default=None)
    role: UserRole = Field(default=UserRole.user, sa_column=Column(String, nullable=False))
    is_guest: bool = Field(default=False)

    # Profile attributes
    interests: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    personality_type: Optional[str] = Field(default=None)
    cooking_experience: Optional[str] = Field(default=None)
    dietary_restrictions: Optional[str] = Field(default=None)
    social_preferences: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
