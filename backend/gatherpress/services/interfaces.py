"""
Collaborator interfaces consumed by the RSVP admission engine.

The engine never talks to the database or the user table directly; the
embedding application supplies these. SQLAlchemy-backed implementations live
in ``gatherpress.repositories`` and ``gatherpress.services.providers``.
"""

from abc import ABC, abstractmethod
from typing import Optional

from gatherpress.schemas.rsvp import Aggregate, RsvpResponse


class ResponseRepository(ABC):
    """
    Persistence for response rows, one per (event, user).

    Implementations raise ``StorageError`` when the store is unavailable.
    """

    @abstractmethod
    def find(self, event_id: int, user_id: int) -> Optional[RsvpResponse]:
        pass

    @abstractmethod
    def list_all(self, event_id: int, limit: int) -> list[RsvpResponse]:
        """Return at most ``limit`` rows for the event."""
        pass

    @abstractmethod
    def upsert(self, response: RsvpResponse) -> RsvpResponse:
        """
        Update the row ``response.id`` or insert a new one when id is 0.

        Returns:
            The stored response with its row id set.
        """
        pass

    @abstractmethod
    def delete(self, response_id: int) -> None:
        pass


class AggregateCache(ABC):
    """
    Short-lived cache of the aggregated response view, keyed by event.

    Implementations raise ``CacheError`` when unavailable.
    """

    @abstractmethod
    def get(self, event_id: int) -> Optional[Aggregate]:
        pass

    @abstractmethod
    def set(self, event_id: int, aggregate: Aggregate, ttl_seconds: int) -> None:
        pass

    @abstractmethod
    def invalidate(self, event_id: int) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        """Drop every cached view, e.g. after role labels change."""
        pass


class SettingsProvider(ABC):
    @abstractmethod
    def max_guest_limit(self, event_id: int) -> int:
        """Guests a single response may bring to this event."""
        pass

    @abstractmethod
    def max_attending_limit(self) -> int:
        """Seats (responders plus guests) available per event."""
        pass


class RoleResolver(ABC):
    @abstractmethod
    def roles_ordered(self) -> list[str]:
        """Leadership role labels, highest precedence first."""
        pass

    @abstractmethod
    def role_of(self, user_id: int) -> str:
        pass


class UserDirectory(ABC):
    @abstractmethod
    def exists(self, user_id: int) -> bool:
        pass

    @abstractmethod
    def display_name(self, user_id: int) -> str:
        pass

    @abstractmethod
    def avatar_url(self, user_id: int) -> str:
        pass

    @abstractmethod
    def profile_url(self, user_id: int) -> str:
        pass

    @abstractmethod
    def total_user_count(self) -> int:
        pass


class EventTypeCheck(ABC):
    @abstractmethod
    def is_event_entity(self, event_id: int) -> bool:
        pass
