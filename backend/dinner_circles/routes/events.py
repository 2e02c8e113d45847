from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session, select

from dinner_circles.auth import CurrentUser, require_admin
from dinner_circles.database import get_session
from dinner_circles.models.event import Event, MatchingStatus

router = APIRouter()


class EventCreate(BaseModel):
    title: str
    description: Optional[str] = None
    event_date: Optional[date] = None
    total_spots: int = 0

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError("title cannot be empty")
        return v.strip()

    @field_validator("total_spots")
    @classmethod
    def validate_total_spots(cls, v):
        if v < 0:
            raise ValueError("total_spots must be >= 0")
        return v


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    event_date: Optional[date] = None
    total_spots: int
    matching_status: MatchingStatus
    matching_triggered_at: Optional[datetime] = None
    matching_completed_at: Optional[datetime] = None


@router.get("/events", response_model=List[EventResponse])
def list_events(session: Session = Depends(get_session)):
    """List events, newest first"""
    return session.exec(select(Event).order_by(Event.id.desc())).all()


@router.get("/events/{event_id}", response_model=EventResponse)
def get_event(event_id: int, session: Session = Depends(get_session)):
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.post("/events", response_model=EventResponse, status_code=201)
def create_event(
    event_data: EventCreate,
    session: Session = Depends(get_session),
    _: CurrentUser = Depends(require_admin),
):
    """Create a new event, open for matching"""
    event = Event(**event_data.model_dump())
    session.add(event)
    session.commit()
    session.refresh(event)

    return event
