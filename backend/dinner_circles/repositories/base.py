"""
Repository interfaces consumed by the matching services.

Implementations flush but never commit: the calling service owns the
transaction boundary.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Protocol

from dinner_circles.models.circle import Circle, CircleFormat, CircleMember, CircleRole
from dinner_circles.models.event import Event
from dinner_circles.models.opt_in import MatchingOptIn
from dinner_circles.models.user import User
from dinner_circles.services.matching_types import UserProfile


class OptInRepository(Protocol):
    def list_for_event(self, event_id: int) -> List[MatchingOptIn]:
        """All opt-ins for the event, oldest first."""
        ...

    def get(self, event_id: int, user_id: int) -> Optional[MatchingOptIn]: ...

    def count_for_event(self, event_id: int) -> int: ...

    def create(self, opt_in: MatchingOptIn) -> MatchingOptIn: ...

    def delete(self, opt_in: MatchingOptIn) -> None: ...

    def set_partner(self, event_id: int, user_id: int, partner_id: Optional[int]) -> None: ...


class ProfileReader(Protocol):
    def get_profiles(self, user_ids: Iterable[int]) -> Dict[int, UserProfile]: ...


class UserRepository(Protocol):
    def get(self, user_id: int) -> Optional[User]: ...

    def find_by_email(self, email: str) -> Optional[User]: ...

    def create_guest(self, email: str) -> User: ...


class EventRepository(Protocol):
    def get(self, event_id: int) -> Optional[Event]: ...

    def mark_closed(self, event: Event, triggered_at: datetime, completed_at: datetime) -> Event: ...


class CircleRepository(Protocol):
    def exists_for_event(self, event_id: int) -> bool: ...

    def create_circle(self, event_id: int, name: str, circle_format: CircleFormat) -> Circle: ...

    def add_member(self, circle: Circle, user_id: int, role: CircleRole) -> CircleMember: ...

    def member_count(self, circle_id: int) -> int: ...

    def list_for_event(self, event_id: int) -> List[Circle]:
        """Circles in creation order."""
        ...

    def list_members(self, circle_id: int) -> List[CircleMember]: ...

    def find_for_user(self, event_id: int, user_id: int) -> Optional[Circle]: ...


@dataclass
class MatchingRepositories:
    """The collaborators one matching unit of work runs against."""

    events: EventRepository
    opt_ins: OptInRepository
    users: UserRepository
    profiles: ProfileReader
    circles: CircleRepository
