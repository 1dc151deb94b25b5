"""Event API routes — create events and manage their RSVP settings."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from gatherpress.config import settings
from gatherpress.database import get_db
from gatherpress.models.event import Event
from gatherpress.schemas.event import EventCreate, EventOut, EventUpdate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, db: Session = Depends(get_db)):
    """Create an event. The guest limit defaults to the site-wide setting."""
    max_guest_limit = payload.max_guest_limit
    if max_guest_limit is None:
        max_guest_limit = settings.MAX_GUEST_LIMIT
    event = Event(
        title=payload.title,
        max_guest_limit=max_guest_limit,
        enable_anonymous_rsvp=payload.enable_anonymous_rsvp,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s)", event.title, event.event_id)
    return event


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: int, db: Session = Depends(get_db)):
    """Fetch a single event by ID."""
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.patch("/{event_id}", response_model=EventOut)
def update_event(event_id: int, payload: EventUpdate, db: Session = Depends(get_db)):
    """Partial update of title, guest limit or the anonymous RSVP toggle."""
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(event, field, value)
    db.commit()
    db.refresh(event)
    logger.info("Updated event %s", event_id)
    return event
