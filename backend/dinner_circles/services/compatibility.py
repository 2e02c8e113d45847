"""
Profile compatibility scoring.

Reported on circle results as a diagnostic only. Grouping is decided by FIFO
batching and host selection; this score never changes who lands together.

Weights (max 100 per pair):
- interests overlap: 30
- personality: 25 same, 20 adjacent (via ambivert), 10 otherwise
- social preferences overlap: 20
- dietary: 15 same, 10 both vegetarian, 5 otherwise
- cooking experience: 10 within one level, 5 otherwise
"""

from itertools import combinations
from typing import List, Optional, Sequence

from dinner_circles.services.matching_types import UserProfile

EXPERIENCE_LEVELS = ["beginner", "intermediate", "advanced"]

ADJACENT_PERSONALITIES = {
    frozenset(("extrovert", "ambivert")),
    frozenset(("introvert", "ambivert")),
}


def _overlap_ratio(a: List[str], b: List[str]) -> float:
    if not a or not b:
        return 0.0
    common = [item for item in a if item in b]
    return len(common) / max(len(a), len(b))


def compatibility_score(a: UserProfile, b: UserProfile) -> float:
    score = 0.0

    if a.interests and b.interests:
        score += _overlap_ratio(a.interests, b.interests) * 30

    if a.personality_type and b.personality_type:
        if a.personality_type == b.personality_type:
            score += 25
        elif frozenset((a.personality_type, b.personality_type)) in ADJACENT_PERSONALITIES:
            score += 20
        else:
            score += 10

    if a.social_preferences and b.social_preferences:
        score += _overlap_ratio(a.social_preferences, b.social_preferences) * 20

    if a.dietary_restrictions and b.dietary_restrictions:
        if a.dietary_restrictions == b.dietary_restrictions:
            score += 15
        elif "vegetarian" in a.dietary_restrictions and "vegetarian" in b.dietary_restrictions:
            score += 10
        else:
            score += 5

    if a.cooking_experience in EXPERIENCE_LEVELS and b.cooking_experience in EXPERIENCE_LEVELS:
        gap = abs(EXPERIENCE_LEVELS.index(a.cooking_experience) - EXPERIENCE_LEVELS.index(b.cooking_experience))
        score += 10 if gap <= 1 else 5

    return score


def circle_compatibility(profiles: Sequence[Optional[UserProfile]]) -> float:
    """Mean pairwise score over the circle; 0.0 with fewer than two profiles."""
    known = [p for p in profiles if p is not None]
    pairs = list(combinations(known, 2))
    if not pairs:
        return 0.0
    return round(sum(compatibility_score(a, b) for a, b in pairs) / len(pairs), 2)
