"""
Host selection for hosted circles.

Priority (highest first, stable so pool order breaks remaining ties):
1. hosting_available (if nobody volunteers, everyone is eligible)
2. partner present in the same batch
3. cooking experience: advanced > intermediate > beginner > unspecified
"""

from typing import List, Optional, Sequence, Tuple

from dinner_circles.models.circle import CircleRole
from dinner_circles.services.matching_types import PoolEntry, UserProfile

COOKING_RANK = {
    "advanced": 3,
    "intermediate": 2,
    "beginner": 1,
}


def cooking_rank(profile: Optional[UserProfile]) -> int:
    if profile is None or not profile.cooking_experience:
        return 0
    return COOKING_RANK.get(profile.cooking_experience.lower(), 0)


def select_host(batch: Sequence[PoolEntry]) -> PoolEntry:
    """Pick exactly one host from a non-empty batch."""
    if not batch:
        raise ValueError("Cannot select a host from an empty batch")

    eligible = [entry for entry in batch if entry.hosting_available]
    if not eligible:
        eligible = list(batch)

    batch_user_ids = {entry.user_id for entry in batch}

    ranked = sorted(
        eligible,
        key=lambda e: (
            0 if e.partner_id is not None and e.partner_id in batch_user_ids else 1,
            -cooking_rank(e.profile),
        ),
    )
    return ranked[0]


def hosted_roles(batch: Sequence[PoolEntry]) -> List[Tuple[int, CircleRole]]:
    """Host first, then everyone else as participant in batch order."""
    host = select_host(batch)
    roles = [(host.user_id, CircleRole.host)]
    roles.extend((entry.user_id, CircleRole.participant) for entry in batch if entry.user_id != host.user_id)
    return roles
