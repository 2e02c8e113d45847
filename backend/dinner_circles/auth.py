"""
Request identity.

Authentication happens upstream; the gateway forwards the caller as
X-User-Id / X-User-Role headers. These dependencies only resolve and gate.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlmodel import Session

from dinner_circles.database import get_session
from dinner_circles.models.user import User, UserRole


@dataclass
class CurrentUser:
    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin.value


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
    session: Session = Depends(get_session),
) -> CurrentUser:
    try:
        user_id = int(x_user_id)
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Authentication required")

    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Unknown user")

    # The stored role wins; the header only fills in a missing one
    stored_role = getattr(user.role, "value", user.role)
    role = (stored_role or x_user_role or UserRole.user.value).lower()
    return CurrentUser(user_id=user.id, role=role)


def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not current_user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user
