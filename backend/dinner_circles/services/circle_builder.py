"""
Circle Builder - greedy FIFO circle assignment

Stages, in order:
1. Rotating circles from partnered opt-ins (starter/main/dessert round-robin)
2. Hosted circles from everything not yet used (one selected host per circle)
3. Leftovers: top up circles below target size, then at most one overflow
   hosted circle if at least `min_size` users remain

Batches are taken FIFO and never revisited. The set of used user ids is
passed explicitly into every stage and mutated in place.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from dinner_circles.config import MatchingConfig
from dinner_circles.models.circle import Circle, CircleFormat, CircleRole
from dinner_circles.repositories.base import CircleRepository
from dinner_circles.services.host_selector import hosted_roles
from dinner_circles.services.matching_pool import partition_pool
from dinner_circles.services.matching_types import PoolEntry

logger = logging.getLogger(__name__)

ROTATING_ROLES = (CircleRole.starter, CircleRole.main, CircleRole.dessert)


def rotating_role(position: int) -> CircleRole:
    return ROTATING_ROLES[position % len(ROTATING_ROLES)]


class CircleWriter:
    """Creates circles for one event and remembers them in creation order."""

    def __init__(self, circles: CircleRepository, event_id: int):
        self.circles = circles
        self.event_id = event_id
        self.created: List[Circle] = []

    def create(self, circle_format: CircleFormat, members: Sequence[Tuple[int, CircleRole]]) -> Circle:
        circle = self.circles.create_circle(self.event_id, f"Circle {len(self.created) + 1}", circle_format)
        for user_id, role in members:
            self.circles.add_member(circle, user_id, role)
        self.created.append(circle)
        return circle


@dataclass
class LeftoverResult:
    topped_up: Dict[int, List[int]] = field(default_factory=dict)  # circle_id -> added user ids
    overflow_circle: Optional[Circle] = None
    unassigned: List[int] = field(default_factory=list)


@dataclass
class AssignmentResult:
    rotating: List[Circle] = field(default_factory=list)
    hosted: List[Circle] = field(default_factory=list)
    leftovers: LeftoverResult = field(default_factory=LeftoverResult)
    used: Set[int] = field(default_factory=set)

    @property
    def circles(self) -> List[Circle]:
        result = self.rotating + self.hosted
        if self.leftovers.overflow_circle is not None:
            result.append(self.leftovers.overflow_circle)
        return result


def _unused(entries: Sequence[PoolEntry], used: Set[int]) -> List[PoolEntry]:
    return [entry for entry in entries if entry.user_id not in used]


def build_rotating_circles(
    partnered: Sequence[PoolEntry], used: Set[int], writer: CircleWriter, target_size: int
) -> List[Circle]:
    """
    Consume partnered opt-ins in batches of `target_size`.

    Each batch member and their partner are marked used, even if the partner
    was not in the batch. A partner marked that way is never placed later.
    """
    created: List[Circle] = []
    available = _unused(partnered, used)

    while len(available) >= target_size:
        batch = available[:target_size]
        members = [(entry.user_id, rotating_role(i)) for i, entry in enumerate(batch)]
        created.append(writer.create(CircleFormat.rotating, members))

        for entry in batch:
            used.add(entry.user_id)
            if entry.partner_id is not None:
                used.add(entry.partner_id)

        available = _unused(available[target_size:], used)

    return created


def build_hosted_circles(
    pool: Sequence[PoolEntry], used: Set[int], writer: CircleWriter, target_size: int
) -> List[Circle]:
    """Consume every unused opt-in in batches of `target_size`, one host each."""
    created: List[Circle] = []
    available = _unused(pool, used)

    while len(available) >= target_size:
        batch = available[:target_size]
        available = available[target_size:]
        created.append(writer.create(CircleFormat.hosted, hosted_roles(batch)))
        used.update(entry.user_id for entry in batch)

    return created


def absorb_leftovers(
    pool: Sequence[PoolEntry], used: Set[int], writer: CircleWriter, target_size: int, min_size: int
) -> LeftoverResult:
    """
    Place users left over after both builders.

    1. Top up circles below `target_size` in creation order. Rotating circles
       continue the course round-robin from their member count; hosted
       circles take participants.
    2. If at least `min_size` users remain, form one overflow hosted circle.
    3. Anyone still left stays unassigned.
    """
    result = LeftoverResult()
    remaining = _unused(pool, used)

    for circle in list(writer.created):
        if not remaining:
            break
        count = writer.circles.member_count(circle.id)
        capacity = target_size - count
        if capacity <= 0:
            continue

        added = remaining[:capacity]
        remaining = remaining[capacity:]
        for offset, entry in enumerate(added):
            if circle.format == CircleFormat.rotating:
                role = rotating_role(count + offset)
            else:
                role = CircleRole.participant
            writer.circles.add_member(circle, entry.user_id, role)
            used.add(entry.user_id)
        result.topped_up[circle.id] = [entry.user_id for entry in added]

    if remaining and len(remaining) >= min_size:
        result.overflow_circle = writer.create(CircleFormat.hosted, hosted_roles(remaining))
        used.update(entry.user_id for entry in remaining)
        remaining = []

    result.unassigned = [entry.user_id for entry in remaining]
    return result


def assign_circles(
    pool: Sequence[PoolEntry], circles: CircleRepository, event_id: int, config: MatchingConfig
) -> AssignmentResult:
    """Run all stages over the loaded pool and persist circles through `circles`."""
    writer = CircleWriter(circles, event_id)
    result = AssignmentResult()

    partnered, single = partition_pool(pool)
    result.rotating = build_rotating_circles(partnered, result.used, writer, config.target_size)
    result.hosted = build_hosted_circles(pool, result.used, writer, config.target_size)
    result.leftovers = absorb_leftovers(pool, result.used, writer, config.target_size, config.min_size)

    logger.info(
        "Event %s: %s partnered / %s single -> %s rotating, %s hosted, overflow=%s, unassigned=%s",
        event_id,
        len(partnered),
        len(single),
        len(result.rotating),
        len(result.hosted),
        result.leftovers.overflow_circle is not None,
        len(result.leftovers.unassigned),
    )
    return result
