"""RSVP API routes — thin wrappers around the admission engine."""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from gatherpress.database import get_db, storage_errors
from gatherpress.exceptions import StorageError
from gatherpress.models.event import Event
from gatherpress.models.user import User
from gatherpress.schemas.rsvp import Aggregate, RsvpResponse, RsvpSaveOut, RsvpSaveRequest
from gatherpress.services.cache import get_aggregate_cache
from gatherpress.services.interfaces import AggregateCache
from gatherpress.services.ordering import DEFAULT_ROLE
from gatherpress.services.rsvp_service import STATUSES, RsvpEngine, build_rsvp_engine

logger = logging.getLogger(__name__)
router = APIRouter()


def get_rsvp_engine(
    db: Session = Depends(get_db),
    cache: AggregateCache = Depends(get_aggregate_cache),
) -> RsvpEngine:
    return build_rsvp_engine(db, cache)


def _get_event(db: Session, event_id: int) -> Event:
    with storage_errors(db, f"load event {event_id}"):
        event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _storage_unavailable(exc: StorageError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.get("/{event_id}/rsvps", response_model=Aggregate)
def list_rsvps(
    event_id: int,
    show_identities: bool = Query(False, description="Include identities of anonymous responders"),
    db: Session = Depends(get_db),
    engine: RsvpEngine = Depends(get_rsvp_engine),
):
    """Responses for an event grouped by status."""
    try:
        _get_event(db, event_id)
        aggregate = engine.responses(event_id)
    except StorageError as exc:
        raise _storage_unavailable(exc)
    return aggregate if show_identities else aggregate.redacted(DEFAULT_ROLE)


@router.get("/{event_id}/rsvps/{user_id}", response_model=RsvpResponse)
def get_rsvp(
    event_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    engine: RsvpEngine = Depends(get_rsvp_engine),
):
    """A single user's response; ``no_status`` when they have not responded."""
    try:
        _get_event(db, event_id)
        response = engine.get(event_id, user_id)
    except StorageError as exc:
        raise _storage_unavailable(exc)
    if response is None:
        raise HTTPException(status_code=404, detail="Invalid user")
    return response


@router.post("/{event_id}/rsvps", response_model=RsvpSaveOut)
def save_rsvp(
    event_id: int,
    payload: RsvpSaveRequest,
    db: Session = Depends(get_db),
    engine: RsvpEngine = Depends(get_rsvp_engine),
):
    """Set or update a user's response, subject to the attending limit."""
    if payload.status not in STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid RSVP status: {payload.status}")
    try:
        event = _get_event(db, event_id)
        with storage_errors(db, f"load user {payload.user_id}"):
            user = db.query(User).filter(User.user_id == payload.user_id).first()
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        anonymous = payload.anonymous and event.enable_anonymous_rsvp
        response = engine.save(event_id, payload.user_id, payload.status, anonymous, payload.guests)
        responses = engine.responses(event_id)
    except StorageError as exc:
        raise _storage_unavailable(exc)

    logger.info("User %s RSVP request '%s' to event %s resolved to '%s'",
                payload.user_id, payload.status, event_id, response.status)
    return RsvpSaveOut(response=response, responses=responses.redacted(DEFAULT_ROLE))
