"""User and leadership role ORM models."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from gatherpress.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    user_login = Column(String(60), nullable=False, unique=True)
    display_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    leadership = relationship(
        "LeadershipRole", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )


class LeadershipRole(Base):
    """Assigns a leadership role label (e.g. "Organizer") to a user."""

    __tablename__ = "leadership_roles"

    user_id = Column(Integer, ForeignKey("users.user_id"), primary_key=True)
    role = Column(String(100), nullable=False)

    user = relationship("User", back_populates="leadership")
