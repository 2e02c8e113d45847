from dinner_circles.models.circle import Circle, CircleFormat, CircleMember, CircleRole
from dinner_circles.models.event import Event, MatchingStatus
from dinner_circles.models.opt_in import MatchingOptIn
from dinner_circles.models.user import CookingExperience, PersonalityType, User, UserRole

__all__ = [
    "Circle",
    "CircleFormat",
    "CircleMember",
    "CircleRole",
    "CookingExperience",
    "Event",
    "MatchingOptIn",
    "MatchingStatus",
    "PersonalityType",
    "User",
    "UserRole",
]
