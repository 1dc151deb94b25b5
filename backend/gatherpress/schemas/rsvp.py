"""Pydantic schemas for RSVP responses and the aggregated response view."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from gatherpress.models.rsvp import RsvpStatus

ANONYMOUS_NAME = "Anonymous"
DEFAULT_AVATAR_URL = "https://www.gravatar.com/avatar/?s=96&d=mm&r=g"


class RsvpResponse(BaseModel):
    """A single user's response to one event, as stored."""

    id: int = 0
    event_id: int = 0
    user_id: int = 0
    timestamp: Optional[datetime] = None
    status: str = RsvpStatus.no_status.value
    guests: int = 0
    anonymous: bool = False

    model_config = {"from_attributes": True}


class ResponseRecord(BaseModel):
    """A response resolved for display (name, avatar, role)."""

    id: int
    name: str
    photo: str = ""
    profile: str = ""
    role: str
    timestamp: Optional[datetime] = None
    status: str
    guests: int = 0
    anonymous: bool = False


class ResponseGroup(BaseModel):
    responses: list[ResponseRecord] = []
    count: int = 0


class Aggregate(BaseModel):
    """All responses for an event grouped by status.

    ``count`` of each group is the number of responders plus their guests.
    Only ``all`` is present for entities that are not events.
    """

    all: ResponseGroup = Field(default_factory=ResponseGroup)
    attending: Optional[ResponseGroup] = None
    not_attending: Optional[ResponseGroup] = None
    waiting_list: Optional[ResponseGroup] = None

    def redacted(self, default_role: str) -> Aggregate:
        """Copy with anonymous responders' identities hidden."""
        copy = self.model_copy(deep=True)
        groups = [copy.all] + [g for g in (copy.attending, copy.not_attending, copy.waiting_list) if g]
        for group in groups:
            for record in group.responses:
                if record.anonymous:
                    record.id = 0
                    record.name = ANONYMOUS_NAME
                    record.photo = DEFAULT_AVATAR_URL
                    record.profile = ""
                    record.role = default_role
        return copy


# no_status is never reported as a group
GROUPED_STATUSES = (
    RsvpStatus.attending.value,
    RsvpStatus.not_attending.value,
    RsvpStatus.waiting_list.value,
)


class RsvpSaveRequest(BaseModel):
    user_id: int
    status: str
    anonymous: bool = False
    guests: int = 0


class RsvpSaveOut(BaseModel):
    response: RsvpResponse
    responses: Aggregate
