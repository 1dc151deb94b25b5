"""Event ORM model — the entity RSVPs attach to."""
from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from gatherpress.database import Base

EVENT_POST_TYPE = "gatherpress_event"


class Event(Base):
    __tablename__ = "events"

    event_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    post_type = Column(String(20), nullable=False, default=EVENT_POST_TYPE)
    max_guest_limit = Column(Integer, nullable=False, default=0)
    enable_anonymous_rsvp = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
