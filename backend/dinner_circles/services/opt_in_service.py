"""
Opt-in management for an event's matching pool.

Opting in with a partner email creates the partner's opt-in as well (the
partner user is created as a guest if the email is unknown). Opting out
severs the partner link on the other side.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlmodel import Session

from dinner_circles.models.event import Event, MatchingStatus
from dinner_circles.models.opt_in import MatchingOptIn
from dinner_circles.repositories.base import MatchingRepositories
from dinner_circles.repositories.sql import sql_repositories
from dinner_circles.services.errors import (
    AlreadyOptedIn,
    EventNotFound,
    InvalidPartner,
    MatchingClosed,
    NotOptedIn,
    PartnerAlreadyOptedIn,
)
from dinner_circles.services.matching_service import assemble_circle, is_user_opted_in
from dinner_circles.services.matching_types import CircleView

logger = logging.getLogger(__name__)


@dataclass
class OptInResult:
    opt_in: MatchingOptIn
    partner_opt_in: Optional[MatchingOptIn] = None
    partner_created: bool = False


@dataclass
class MatchingStatusReport:
    event_id: int
    matching_status: str
    matching_triggered_at: Optional[datetime]
    matching_completed_at: Optional[datetime]
    is_opted_in: bool
    user_circle: Optional[CircleView] = None
    pool_count: Optional[int] = None


def _open_event(repos: MatchingRepositories, event_id: int) -> Event:
    event = repos.events.get(event_id)
    if not event:
        raise EventNotFound(f"Event {event_id} not found")
    if event.matching_status != MatchingStatus.open:
        raise MatchingClosed(f"Event {event_id} is not open for matching")
    return event


def opt_in(
    session: Session,
    event_id: int,
    user_id: int,
    partner_email: Optional[str] = None,
    hosting_available: bool = False,
    match_address: Optional[str] = None,
) -> OptInResult:
    """
    Add a user (and optionally a partner) to the event's matching pool.

    The partner's opt-in is written first and never volunteers to host.
    Both rows are committed together.
    """
    repos = sql_repositories(session)
    _open_event(repos, event_id)

    if repos.opt_ins.get(event_id, user_id):
        raise AlreadyOptedIn(f"User {user_id} is already opted in for event {event_id}")

    try:
        partner_opt_in = None
        partner_created = False
        partner_id = None

        if partner_email:
            email = partner_email.strip().lower()
            partner = repos.users.find_by_email(email)
            if partner is None:
                partner = repos.users.create_guest(email)
                partner_created = True
                logger.info("Created guest user %s for partner email %s", partner.id, email)
            elif partner.id == user_id:
                raise InvalidPartner("You cannot opt in with yourself as partner")

            if repos.opt_ins.get(event_id, partner.id):
                raise PartnerAlreadyOptedIn(f"Partner {partner.id} is already opted in for event {event_id}")

            partner_id = partner.id
            partner_opt_in = repos.opt_ins.create(
                MatchingOptIn(
                    event_id=event_id,
                    user_id=partner_id,
                    partner_id=user_id,
                    match_address=match_address,
                    hosting_available=False,
                )
            )

        user_opt_in = repos.opt_ins.create(
            MatchingOptIn(
                event_id=event_id,
                user_id=user_id,
                partner_id=partner_id,
                match_address=match_address,
                hosting_available=hosting_available,
            )
        )
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(user_opt_in)
    if partner_opt_in is not None:
        session.refresh(partner_opt_in)

    return OptInResult(opt_in=user_opt_in, partner_opt_in=partner_opt_in, partner_created=partner_created)


def opt_out(session: Session, event_id: int, user_id: int) -> None:
    """Remove the user's opt-in and clear the partner's back-link."""
    repos = sql_repositories(session)
    _open_event(repos, event_id)

    existing = repos.opt_ins.get(event_id, user_id)
    if not existing:
        raise NotOptedIn(f"User {user_id} is not opted in for event {event_id}")

    partner_id = existing.partner_id
    try:
        repos.opt_ins.delete(existing)
        if partner_id is not None:
            repos.opt_ins.set_partner(event_id, partner_id, None)
        session.commit()
    except Exception:
        session.rollback()
        raise


def get_matching_status(session: Session, event_id: int, user_id: int, is_admin: bool = False) -> MatchingStatusReport:
    repos = sql_repositories(session)
    event = repos.events.get(event_id)
    if not event:
        raise EventNotFound(f"Event {event_id} not found")

    user_circle = None
    if event.matching_status == MatchingStatus.closed:
        circle = repos.circles.find_for_user(event_id, user_id)
        if circle is not None:
            user_circle = assemble_circle(repos, circle)

    return MatchingStatusReport(
        event_id=event_id,
        matching_status=str(getattr(event.matching_status, "value", event.matching_status)),
        matching_triggered_at=event.matching_triggered_at,
        matching_completed_at=event.matching_completed_at,
        is_opted_in=is_user_opted_in(session, event_id, user_id),
        user_circle=user_circle,
        pool_count=repos.opt_ins.count_for_event(event_id) if is_admin else None,
    )
