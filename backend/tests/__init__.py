# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from dinner_circles.models.circle import Circle, CircleMember  # noqa: F401
from dinner_circles.models.event import Event  # noqa: F401
from dinner_circles.models.opt_in import MatchingOptIn  # noqa: F401
from dinner_circles.models.user import User  # noqa: F401
