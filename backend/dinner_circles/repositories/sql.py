"""
SQLModel implementations of the matching repositories.

All repositories share one Session and only flush; commit/rollback belongs to
the service running the unit of work.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from dinner_circles.models.circle import Circle, CircleFormat, CircleMember, CircleRole
from dinner_circles.models.event import Event, MatchingStatus
from dinner_circles.models.opt_in import MatchingOptIn
from dinner_circles.models.user import User
from dinner_circles.repositories.base import MatchingRepositories
from dinner_circles.services.matching_types import UserProfile
from dinner_circles.utils.sql import scalar_int


class SqlOptInRepository:
    def __init__(self, session: Session):
        self.session = session

    def list_for_event(self, event_id: int) -> List[MatchingOptIn]:
        return list(
            self.session.exec(
                select(MatchingOptIn)
                .where(MatchingOptIn.event_id == event_id)
                .order_by(MatchingOptIn.created_at.asc(), MatchingOptIn.id.asc())
            ).all()
        )

    def get(self, event_id: int, user_id: int) -> Optional[MatchingOptIn]:
        return self.session.exec(
            select(MatchingOptIn).where(MatchingOptIn.event_id == event_id, MatchingOptIn.user_id == user_id)
        ).first()

    def count_for_event(self, event_id: int) -> int:
        return scalar_int(
            self.session.exec(
                select(func.count()).select_from(MatchingOptIn).where(MatchingOptIn.event_id == event_id)
            ).one()
        )

    def create(self, opt_in: MatchingOptIn) -> MatchingOptIn:
        self.session.add(opt_in)
        self.session.flush()
        return opt_in

    def delete(self, opt_in: MatchingOptIn) -> None:
        self.session.delete(opt_in)
        self.session.flush()

    def set_partner(self, event_id: int, user_id: int, partner_id: Optional[int]) -> None:
        opt_in = self.get(event_id, user_id)
        if opt_in is None:
            return
        opt_in.partner_id = partner_id
        self.session.add(opt_in)
        self.session.flush()


class SqlUserRepository:
    """User lookups plus the batch profile read used by the pool loader."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.session.exec(select(User).where(func.lower(User.email) == email.strip().lower())).first()

    def create_guest(self, email: str) -> User:
        guest = User(email=email, name="Guest", is_guest=True)
        self.session.add(guest)
        self.session.flush()
        return guest

    def get_profiles(self, user_ids: Iterable[int]) -> Dict[int, UserProfile]:
        ids = sorted(set(user_ids))
        if not ids:
            return {}
        users = self.session.exec(select(User).where(User.id.in_(ids))).all()
        return {user.id: to_profile(user) for user in users}


def to_profile(user: User) -> UserProfile:
    return UserProfile(
        user_id=user.id,
        name=user.name,
        interests=list(user.interests or []),
        personality_type=user.personality_type,
        cooking_experience=user.cooking_experience,
        dietary_restrictions=user.dietary_restrictions,
        social_preferences=list(user.social_preferences or []),
    )


class SqlEventRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, event_id: int) -> Optional[Event]:
        return self.session.get(Event, event_id)

    def mark_closed(self, event: Event, triggered_at: datetime, completed_at: datetime) -> Event:
        event.matching_status = MatchingStatus.closed
        event.matching_triggered_at = triggered_at
        event.matching_completed_at = completed_at
        self.session.add(event)
        self.session.flush()
        return event


class SqlCircleRepository:
    def __init__(self, session: Session):
        self.session = session

    def exists_for_event(self, event_id: int) -> bool:
        return self.session.exec(select(Circle.id).where(Circle.event_id == event_id)).first() is not None

    def create_circle(self, event_id: int, name: str, circle_format: CircleFormat) -> Circle:
        circle = Circle(event_id=event_id, name=name, format=circle_format)
        self.session.add(circle)
        self.session.flush()
        return circle

    def add_member(self, circle: Circle, user_id: int, role: CircleRole) -> CircleMember:
        member = CircleMember(
            circle_id=circle.id,
            event_id=circle.event_id,
            user_id=user_id,
            role=role,
            position=self.member_count(circle.id),
        )
        self.session.add(member)
        self.session.flush()
        return member

    def member_count(self, circle_id: int) -> int:
        return scalar_int(
            self.session.exec(
                select(func.count()).select_from(CircleMember).where(CircleMember.circle_id == circle_id)
            ).one()
        )

    def list_for_event(self, event_id: int) -> List[Circle]:
        return list(self.session.exec(select(Circle).where(Circle.event_id == event_id).order_by(Circle.id.asc())).all())

    def list_members(self, circle_id: int) -> List[CircleMember]:
        return list(
            self.session.exec(
                select(CircleMember).where(CircleMember.circle_id == circle_id).order_by(CircleMember.position.asc())
            ).all()
        )

    def find_for_user(self, event_id: int, user_id: int) -> Optional[Circle]:
        member = self.session.exec(
            select(CircleMember).where(CircleMember.event_id == event_id, CircleMember.user_id == user_id)
        ).first()
        if member is None:
            return None
        return self.session.get(Circle, member.circle_id)


def sql_repositories(session: Session) -> MatchingRepositories:
    users = SqlUserRepository(session)
    return MatchingRepositories(
        events=SqlEventRepository(session),
        opt_ins=SqlOptInRepository(session),
        users=users,
        profiles=users,
        circles=SqlCircleRepository(session),
    )
