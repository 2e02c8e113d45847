"""
Value types passed between the matching pool loader, the circle builders and
the result assembler. None of these are persisted directly.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class UserProfile:
    user_id: int
    name: Optional[str] = None
    interests: List[str] = field(default_factory=list)
    personality_type: Optional[str] = None
    cooking_experience: Optional[str] = None
    dietary_restrictions: Optional[str] = None
    social_preferences: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PoolEntry:
    """One opt-in enriched with the user's profile and, when linked, the partner's."""

    user_id: int
    partner_id: Optional[int] = None
    hosting_available: bool = False
    match_address: Optional[str] = None
    opt_in_id: Optional[int] = None
    profile: Optional[UserProfile] = None
    partner_profile: Optional[UserProfile] = None
    # None when unpartnered; False when the partner's own opt-in is missing or points elsewhere
    partner_link_symmetric: Optional[bool] = None

    @property
    def is_partnered(self) -> bool:
        return self.partner_id is not None


@dataclass
class CircleMemberView:
    user_id: int
    role: str
    position: int
    name: Optional[str] = None


@dataclass
class CircleView:
    id: int
    event_id: int
    name: str
    format: str
    members: List[CircleMemberView] = field(default_factory=list)
    compatibility: float = 0.0
    created_at: Optional[datetime] = None

    @property
    def member_ids(self) -> List[int]:
        return [m.user_id for m in self.members]


@dataclass
class MatchingOutcome:
    """Result of one successful matching run."""

    event_id: int
    pool_size: int
    circles: List[CircleView] = field(default_factory=list)
    unassigned_user_ids: List[int] = field(default_factory=list)
    completed_at: Optional[datetime] = None

    @property
    def assigned_count(self) -> int:
        return sum(len(c.members) for c in self.circles)
