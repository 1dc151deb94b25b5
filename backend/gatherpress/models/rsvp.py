"""RSVP ORM model — one row per (event, user)."""
import enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint

from gatherpress.database import Base


class RsvpStatus(str, enum.Enum):
    attending = "attending"
    not_attending = "not_attending"
    waiting_list = "waiting_list"
    no_status = "no_status"


class Rsvp(Base):
    __tablename__ = "gatherpress_rsvps"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_rsvp_event_user"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, nullable=False, index=True)
    # No foreign key: rows for deleted users are kept and skipped when aggregating.
    user_id = Column(Integer, nullable=False, index=True)
    timestamp = Column(DateTime(timezone=True), nullable=True)
    # Plain string so rows with unexpected values can still be read and filtered.
    status = Column(String(20), nullable=False, default=RsvpStatus.no_status.value)
    guests = Column(Integer, nullable=False, default=0)
    anonymous = Column(Boolean, nullable=False, default=False)
