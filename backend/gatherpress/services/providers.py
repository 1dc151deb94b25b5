"""SQLAlchemy-backed settings, role, user and event collaborators for the RSVP engine."""
import hashlib
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from gatherpress.database import storage_errors
from gatherpress.models.event import EVENT_POST_TYPE, Event
from gatherpress.models.user import LeadershipRole, User
from gatherpress.services.interfaces import EventTypeCheck, RoleResolver, SettingsProvider, UserDirectory
from gatherpress.services.ordering import DEFAULT_ROLE

GRAVATAR_URL = "https://www.gravatar.com/avatar/{digest}?s=96&d=mm&r=g"


class SqlSettingsProvider(SettingsProvider):
    """Guest limit is stored per event; the attending limit is global."""

    def __init__(self, db: Session, max_attending_limit: int):
        self.db = db
        self._max_attending_limit = max_attending_limit

    def max_guest_limit(self, event_id: int) -> int:
        with storage_errors(self.db, f"load guest limit of event {event_id}"):
            limit = self.db.query(Event.max_guest_limit).filter(Event.event_id == event_id).scalar()
        return int(limit or 0)

    def max_attending_limit(self) -> int:
        return self._max_attending_limit


class SqlRoleResolver(RoleResolver):
    def __init__(self, db: Session, roles: list[str]):
        self.db = db
        self.roles = list(roles)

    def roles_ordered(self) -> list[str]:
        return list(self.roles)

    def role_of(self, user_id: int) -> str:
        with storage_errors(self.db, f"load role of user {user_id}"):
            role = self.db.query(LeadershipRole.role).filter(LeadershipRole.user_id == user_id).scalar()
        # Labels no longer configured fall back to Member.
        return role if role in self.roles else DEFAULT_ROLE


class SqlUserDirectory(UserDirectory):
    def __init__(self, db: Session, site_url: str):
        self.db = db
        self.site_url = site_url.rstrip("/")
        self._users: dict[int, Optional[User]] = {}

    def _user(self, user_id: int) -> Optional[User]:
        if user_id not in self._users:
            with storage_errors(self.db, f"load user {user_id}"):
                self._users[user_id] = self.db.get(User, user_id)
        return self._users[user_id]

    def exists(self, user_id: int) -> bool:
        return self._user(user_id) is not None

    def display_name(self, user_id: int) -> str:
        user = self._user(user_id)
        return user.display_name if user else ""

    def avatar_url(self, user_id: int) -> str:
        user = self._user(user_id)
        email = (user.email if user else "").strip().lower()
        digest = hashlib.md5(email.encode("utf-8")).hexdigest() if email else ""
        return GRAVATAR_URL.format(digest=digest)

    def profile_url(self, user_id: int) -> str:
        user = self._user(user_id)
        if not user:
            return ""
        return f"{self.site_url}/author/{user.user_login}/"

    def total_user_count(self) -> int:
        with storage_errors(self.db, "count users"):
            return self.db.query(func.count(User.user_id)).scalar() or 0


class SqlEventTypeCheck(EventTypeCheck):
    def __init__(self, db: Session):
        self.db = db

    def is_event_entity(self, event_id: int) -> bool:
        with storage_errors(self.db, f"load event {event_id}"):
            post_type = self.db.query(Event.post_type).filter(Event.event_id == event_id).scalar()
        return post_type == EVENT_POST_TYPE
