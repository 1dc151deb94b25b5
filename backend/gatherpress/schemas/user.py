"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class UserCreate(BaseModel):
    user_login: str
    display_name: str
    email: str = ""


class UserRoleUpdate(BaseModel):
    role: Optional[str] = None  # None clears the leadership role


class UserOut(BaseModel):
    user_id: int
    user_login: str
    display_name: str
    email: str
    role: str
    created_at: Optional[datetime] = None
