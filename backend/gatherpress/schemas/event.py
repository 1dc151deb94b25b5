"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class EventCreate(BaseModel):
    title: str
    max_guest_limit: Optional[int] = Field(None, ge=0, le=5)
    enable_anonymous_rsvp: bool = False


class EventUpdate(BaseModel):
    title: Optional[str] = None
    max_guest_limit: Optional[int] = Field(None, ge=0, le=5)
    enable_anonymous_rsvp: Optional[bool] = None


class EventOut(BaseModel):
    event_id: int
    title: str
    post_type: str
    max_guest_limit: int
    enable_anonymous_rsvp: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
