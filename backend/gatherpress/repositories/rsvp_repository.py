"""SQLAlchemy-backed response repository over the ``gatherpress_rsvps`` table."""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gatherpress.exceptions import StorageError
from gatherpress.models.rsvp import Rsvp
from gatherpress.schemas.rsvp import RsvpResponse
from gatherpress.services.interfaces import ResponseRepository

logger = logging.getLogger(__name__)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo; stored timestamps are always UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_response(row: Rsvp) -> RsvpResponse:
    return RsvpResponse(
        id=row.id,
        event_id=row.event_id,
        user_id=row.user_id,
        timestamp=_as_utc(row.timestamp),
        status=row.status,
        guests=row.guests or 0,
        anonymous=bool(row.anonymous),
    )


class SqlResponseRepository(ResponseRepository):
    def __init__(self, db: Session, page_size: int = 500):
        self.db = db
        self.page_size = page_size

    def find(self, event_id: int, user_id: int) -> Optional[RsvpResponse]:
        try:
            row = (
                self.db.query(Rsvp)
                .filter(Rsvp.event_id == event_id, Rsvp.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to load RSVP for event %s user %s", event_id, user_id)
            raise StorageError(f"Could not load RSVP for event {event_id}") from exc
        return _to_response(row) if row else None

    def list_all(self, event_id: int, limit: int) -> list[RsvpResponse]:
        """Read rows page by page (keyset on id) until ``limit`` rows are collected."""
        results: list[RsvpResponse] = []
        last_id = 0
        try:
            while len(results) < limit:
                batch = min(self.page_size, limit - len(results))
                rows = (
                    self.db.query(Rsvp)
                    .filter(Rsvp.event_id == event_id, Rsvp.id > last_id)
                    .order_by(Rsvp.id)
                    .limit(batch)
                    .all()
                )
                results.extend(_to_response(row) for row in rows)
                if len(rows) < batch:
                    break
                last_id = rows[-1].id
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to list RSVPs for event %s", event_id)
            raise StorageError(f"Could not list RSVPs for event {event_id}") from exc
        return results

    def upsert(self, response: RsvpResponse) -> RsvpResponse:
        try:
            row = self.db.get(Rsvp, response.id) if response.id else None
            if row is None:
                row = Rsvp(event_id=response.event_id, user_id=response.user_id)
                self.db.add(row)
            row.timestamp = response.timestamp
            row.status = response.status
            row.guests = response.guests
            row.anonymous = response.anonymous
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to save RSVP for event %s user %s", response.event_id, response.user_id)
            raise StorageError(f"Could not save RSVP for event {response.event_id}") from exc
        return _to_response(row)

    def delete(self, response_id: int) -> None:
        try:
            self.db.query(Rsvp).filter(Rsvp.id == response_id).delete()
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to delete RSVP %s", response_id)
            raise StorageError(f"Could not delete RSVP {response_id}") from exc
