"""
API Routes for Matching - opt-in pool and circle assignment
"""

from dataclasses import asdict
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from sqlmodel import Session

from dinner_circles.auth import CurrentUser, get_current_user, require_admin
from dinner_circles.database import get_session
from dinner_circles.services import matching_service, opt_in_service
from dinner_circles.services.errors import AlreadyMatched, EventNotFound, MatchingError
from dinner_circles.services.matching_types import CircleView

router = APIRouter()

_ERROR_STATUS = {
    EventNotFound: 404,
    AlreadyMatched: 409,
}


def _http_error(e: MatchingError) -> HTTPException:
    return HTTPException(status_code=_ERROR_STATUS.get(type(e), 400), detail=e.to_dict())


# ============================================================================
# Request / Response Models
# ============================================================================


class OptInRequest(BaseModel):
    partner_email: Optional[EmailStr] = None
    match_address: Optional[str] = None
    hosting_available: bool = False

    @field_validator("partner_email", mode="before")
    @classmethod
    def blank_partner_email(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class OptInRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    user_id: int
    partner_id: Optional[int] = None
    hosting_available: bool
    match_address: Optional[str] = None
    created_at: datetime


class OptInResponse(BaseModel):
    message: str
    opt_in: OptInRecord
    partner_opt_in: Optional[OptInRecord] = None
    partner_created: bool = False


class MessageResponse(BaseModel):
    message: str


class CircleMemberResponse(BaseModel):
    user_id: int
    role: str
    position: int
    name: Optional[str] = None


class CircleResponse(BaseModel):
    id: int
    event_id: int
    name: str
    format: str
    members: List[CircleMemberResponse]
    compatibility: float
    created_at: Optional[datetime] = None


def _circle_response(view: CircleView) -> CircleResponse:
    return CircleResponse.model_validate(asdict(view))


class TriggerResponse(BaseModel):
    message: str
    event_id: int
    pool_size: int
    circles: List[CircleResponse]
    unassigned_user_ids: List[int]
    completed_at: Optional[datetime] = None


class ResultsResponse(BaseModel):
    event_id: int
    circles: List[CircleResponse]


class UserCircleResponse(BaseModel):
    event_id: int
    circle: Optional[CircleResponse] = None


class ProfileResponse(BaseModel):
    user_id: int
    name: Optional[str] = None
    interests: List[str] = []
    personality_type: Optional[str] = None
    cooking_experience: Optional[str] = None
    dietary_restrictions: Optional[str] = None
    social_preferences: List[str] = []


class PoolEntryResponse(BaseModel):
    opt_in_id: Optional[int] = None
    user_id: int
    partner_id: Optional[int] = None
    hosting_available: bool
    match_address: Optional[str] = None
    profile: Optional[ProfileResponse] = None
    partner_profile: Optional[ProfileResponse] = None
    partner_link_symmetric: Optional[bool] = None


class PoolResponse(BaseModel):
    event_id: int
    pool: List[PoolEntryResponse]


class StatusResponse(BaseModel):
    event_id: int
    matching_status: str
    matching_triggered_at: Optional[datetime] = None
    matching_completed_at: Optional[datetime] = None
    is_opted_in: bool
    user_circle: Optional[CircleResponse] = None
    pool_count: Optional[int] = None


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/matching/opt-in/{event_id}", response_model=OptInResponse)
def opt_in(
    event_id: int,
    payload: OptInRequest,
    session: Session = Depends(get_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Opt in to matching for an event.

    With partner_email, the partner is opted in too and linked both ways
    (created as a guest user if the email is unknown).
    """
    try:
        result = opt_in_service.opt_in(
            session,
            event_id,
            current_user.user_id,
            partner_email=payload.partner_email,
            hosting_available=payload.hosting_available,
            match_address=payload.match_address,
        )
    except MatchingError as e:
        raise _http_error(e)

    return OptInResponse(
        message="Successfully opted in for matching",
        opt_in=OptInRecord.model_validate(result.opt_in),
        partner_opt_in=OptInRecord.model_validate(result.partner_opt_in) if result.partner_opt_in else None,
        partner_created=result.partner_created,
    )


@router.post("/matching/opt-out/{event_id}", response_model=MessageResponse)
def opt_out(
    event_id: int,
    session: Session = Depends(get_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Opt out of matching; a linked partner stays in the pool unpartnered."""
    try:
        opt_in_service.opt_out(session, event_id, current_user.user_id)
    except MatchingError as e:
        raise _http_error(e)

    return MessageResponse(message="Successfully opted out of matching")


@router.get("/matching/status/{event_id}", response_model=StatusResponse)
def get_matching_status(
    event_id: int,
    session: Session = Depends(get_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Matching state for the caller; pool_count only for admins."""
    try:
        report = opt_in_service.get_matching_status(
            session, event_id, current_user.user_id, is_admin=current_user.is_admin
        )
    except MatchingError as e:
        raise _http_error(e)

    return StatusResponse(
        event_id=report.event_id,
        matching_status=report.matching_status,
        matching_triggered_at=report.matching_triggered_at,
        matching_completed_at=report.matching_completed_at,
        is_opted_in=report.is_opted_in,
        user_circle=_circle_response(report.user_circle) if report.user_circle else None,
        pool_count=report.pool_count,
    )


@router.post("/matching/trigger/{event_id}", response_model=TriggerResponse)
def trigger_matching(
    event_id: int,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    """
    Run circle assignment for an event (admin only).

    Not repeatable: once circles exist the call returns 409.

    Returns:
        TriggerResponse with the created circles in creation order
        (rotating, then hosted, then the overflow circle) and the ids of
        opt-ins that could not be placed.
    """
    try:
        outcome = matching_service.trigger_matching(session, event_id)
    except MatchingError as e:
        raise _http_error(e)

    return TriggerResponse(
        message="Matching completed successfully",
        event_id=outcome.event_id,
        pool_size=outcome.pool_size,
        circles=[_circle_response(c) for c in outcome.circles],
        unassigned_user_ids=outcome.unassigned_user_ids,
        completed_at=outcome.completed_at,
    )


@router.get("/matching/results/{event_id}", response_model=ResultsResponse)
def get_matching_results(event_id: int, session: Session = Depends(get_session)):
    """Circles with members; empty before matching has run."""
    circles = matching_service.get_matching_results(session, event_id)
    return ResultsResponse(event_id=event_id, circles=[_circle_response(c) for c in circles])


@router.get("/matching/my-circle/{event_id}", response_model=UserCircleResponse)
def get_my_circle(
    event_id: int,
    session: Session = Depends(get_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    circle = matching_service.get_user_circle(session, event_id, current_user.user_id)
    return UserCircleResponse(event_id=event_id, circle=_circle_response(circle) if circle else None)


@router.get("/matching/pool/{event_id}", response_model=PoolResponse)
def get_matching_pool(
    event_id: int,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    """Raw opt-in pool with partner resolution (admin only)."""
    try:
        pool = matching_service.get_matching_pool(session, event_id)
    except MatchingError as e:
        raise _http_error(e)

    return PoolResponse(event_id=event_id, pool=[PoolEntryResponse.model_validate(asdict(entry)) for entry in pool])
