"""
Matching Service - trigger and read circle assignments for an event

trigger_matching runs as a single unit of work:
0. Validate (event exists, no circles yet, pool holds at least one full circle)
1. Load the opt-in pool (profiles batch-read once)
2. Assign circles (rotating -> hosted -> leftovers)
3. Mark the event closed and stamp timestamps
4. Commit, then reload the created circles

Any failure before the commit rolls the whole run back, so an event is either
fully matched and closed or untouched and still open.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from dinner_circles.config import MatchingConfig, load_matching_config
from dinner_circles.models.circle import Circle
from dinner_circles.repositories.base import MatchingRepositories
from dinner_circles.repositories.sql import sql_repositories
from dinner_circles.services.circle_builder import assign_circles
from dinner_circles.services.compatibility import circle_compatibility
from dinner_circles.services.errors import AlreadyMatched, EventNotFound, InsufficientPool
from dinner_circles.services.matching_pool import load_pool
from dinner_circles.services.matching_types import CircleMemberView, CircleView, MatchingOutcome, PoolEntry

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Result Assembly
# ============================================================================


def assemble_circle(repos: MatchingRepositories, circle: Circle) -> CircleView:
    members = repos.circles.list_members(circle.id)
    profiles = repos.profiles.get_profiles(m.user_id for m in members)

    member_views = [
        CircleMemberView(
            user_id=m.user_id,
            role=str(getattr(m.role, "value", m.role)),
            position=m.position,
            name=profiles[m.user_id].name if m.user_id in profiles else None,
        )
        for m in members
    ]

    return CircleView(
        id=circle.id,
        event_id=circle.event_id,
        name=circle.name,
        format=str(getattr(circle.format, "value", circle.format)),
        members=member_views,
        compatibility=circle_compatibility([profiles.get(m.user_id) for m in members]),
        created_at=circle.created_at,
    )


def assemble_event_circles(repos: MatchingRepositories, event_id: int) -> List[CircleView]:
    return [assemble_circle(repos, circle) for circle in repos.circles.list_for_event(event_id)]


# ============================================================================
# Trigger
# ============================================================================


def trigger_matching(
    session: Session,
    event_id: int,
    config: Optional[MatchingConfig] = None,
    repos: Optional[MatchingRepositories] = None,
) -> MatchingOutcome:
    """
    Partition an event's opt-in pool into circles and close the event.

    Raises:
        EventNotFound: Unknown event
        AlreadyMatched: Circles already exist for the event
        InsufficientPool: Fewer opt-ins than one full circle
    """
    config = config or load_matching_config()
    repos = repos or sql_repositories(session)
    triggered_at = _utcnow()

    event = repos.events.get(event_id)
    if not event:
        raise EventNotFound(f"Event {event_id} not found")

    if repos.circles.exists_for_event(event_id):
        raise AlreadyMatched(f"Matching has already been completed for event {event_id}")

    pool_size = repos.opt_ins.count_for_event(event_id)
    if pool_size < config.target_size:
        raise InsufficientPool(
            f"Need at least {config.target_size} opt-ins to match event {event_id}, have {pool_size}"
        )

    try:
        pool = load_pool(event_id, repos.opt_ins, repos.profiles)
        assignment = assign_circles(pool, repos.circles, event_id, config)
        completed_at = _utcnow()
        repos.events.mark_closed(event, triggered_at, completed_at)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning("Matching run for event %s hit a constraint violation; rolled back: %s", event_id, e)
        raise AlreadyMatched(f"Matching for event {event_id} conflicted with a concurrent run") from e
    except Exception:
        session.rollback()
        logger.exception("Matching run for event %s failed; rolled back", event_id)
        raise

    circles = assemble_event_circles(repos, event_id)

    assigned = {user_id for circle in circles for user_id in circle.member_ids}
    unassigned = [entry.user_id for entry in pool if entry.user_id not in assigned]
    stranded = [user_id for user_id in unassigned if user_id in assignment.used]
    if stranded:
        logger.warning(
            "Event %s: partners %s were claimed by a rotating circle their partner joined but not placed",
            event_id,
            stranded,
        )
    if unassigned:
        logger.warning("Event %s: %s opt-ins left unassigned: %s", event_id, len(unassigned), unassigned)

    logger.info("Event %s matched: %s circles, %s of %s users placed", event_id, len(circles), len(assigned), pool_size)

    return MatchingOutcome(
        event_id=event_id,
        pool_size=pool_size,
        circles=circles,
        unassigned_user_ids=unassigned,
        completed_at=completed_at,
    )


# ============================================================================
# Read-only queries
# ============================================================================


def get_matching_results(session: Session, event_id: int) -> List[CircleView]:
    """All circles for the event with resolved members; [] when there are none."""
    return assemble_event_circles(sql_repositories(session), event_id)


def get_user_circle(session: Session, event_id: int, user_id: int) -> Optional[CircleView]:
    repos = sql_repositories(session)
    circle = repos.circles.find_for_user(event_id, user_id)
    if circle is None:
        return None
    return assemble_circle(repos, circle)


def is_user_opted_in(session: Session, event_id: int, user_id: int) -> bool:
    return sql_repositories(session).opt_ins.get(event_id, user_id) is not None


def get_matching_pool(session: Session, event_id: int) -> List[PoolEntry]:
    """Opt-ins with partner resolution, in the order the builders consume them."""
    repos = sql_repositories(session)
    if not repos.events.get(event_id):
        raise EventNotFound(f"Event {event_id} not found")
    return load_pool(event_id, repos.opt_ins, repos.profiles)
