"""
Matching Pool Loader and Partition

Loads an event's opt-ins in insertion order (oldest first) and enriches each
with the user's profile and the linked partner's profile. The order is an
algorithmic input: every circle builder consumes the pool FIFO.
"""

from typing import Dict, List, Sequence, Tuple

from dinner_circles.repositories.base import OptInRepository, ProfileReader
from dinner_circles.services.errors import ProfileNotFound
from dinner_circles.services.matching_types import PoolEntry


def load_pool(event_id: int, opt_ins: OptInRepository, profiles: ProfileReader) -> List[PoolEntry]:
    """
    Load the opt-in pool for an event.

    Profiles for users and partners are fetched with one batch read.

    Raises:
        ProfileNotFound: If an opted-in user or a linked partner has no profile
    """
    rows = opt_ins.list_for_event(event_id)
    if not rows:
        return []

    partner_of: Dict[int, int] = {row.user_id: row.partner_id for row in rows if row.partner_id is not None}
    opted_in_ids = {row.user_id for row in rows}

    wanted = opted_in_ids | set(partner_of.values())
    profile_map = profiles.get_profiles(wanted)

    missing = wanted - set(profile_map)
    if missing:
        raise ProfileNotFound(missing)

    pool: List[PoolEntry] = []
    for row in rows:
        symmetric = None
        partner_profile = None
        if row.partner_id is not None:
            partner_profile = profile_map[row.partner_id]
            symmetric = row.partner_id in opted_in_ids and partner_of.get(row.partner_id) == row.user_id

        pool.append(
            PoolEntry(
                user_id=row.user_id,
                partner_id=row.partner_id,
                hosting_available=bool(row.hosting_available),
                match_address=row.match_address,
                opt_in_id=row.id,
                profile=profile_map[row.user_id],
                partner_profile=partner_profile,
                partner_link_symmetric=symmetric,
            )
        )

    return pool


def partition_pool(pool: Sequence[PoolEntry]) -> Tuple[List[PoolEntry], List[PoolEntry]]:
    """Split the pool into (partnered, single), preserving order."""
    partnered = [entry for entry in pool if entry.partner_id is not None]
    single = [entry for entry in pool if entry.partner_id is None]
    return partnered, single
