"""RSVP admission engine — capacity-limited attendance with a waiting list.

Responsibilities:
- One response per (event, user), inserted or updated in place
- Guest counts clamped to the event's guest limit
- Responses held on the waiting list once the attending limit is reached
- Waiting-list promotion, longest waiting first, as seats free up
- Grouped response view per event, cached and invalidated on every write

Invalid ids or statuses never raise: they yield an empty/default response so
REST handlers can treat them uniformly. Storage failures propagate as
``StorageError``; cache failures only cost a repository read.
"""
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.orm import Session

from gatherpress.config import settings
from gatherpress.exceptions import CacheError
from gatherpress.models.rsvp import RsvpStatus
from gatherpress.repositories.rsvp_repository import SqlResponseRepository
from gatherpress.schemas.rsvp import (
    ANONYMOUS_NAME,
    GROUPED_STATUSES,
    Aggregate,
    ResponseGroup,
    ResponseRecord,
    RsvpResponse,
)
from gatherpress.services.interfaces import (
    AggregateCache,
    EventTypeCheck,
    ResponseRepository,
    RoleResolver,
    SettingsProvider,
    UserDirectory,
)
from gatherpress.services.ordering import sort_by_role, sort_by_timestamp
from gatherpress.services.providers import (
    SqlEventTypeCheck,
    SqlRoleResolver,
    SqlSettingsProvider,
    SqlUserDirectory,
)

logger = logging.getLogger(__name__)

ATTENDING = RsvpStatus.attending.value
NOT_ATTENDING = RsvpStatus.not_attending.value
WAITING_LIST = RsvpStatus.waiting_list.value
NO_STATUS = RsvpStatus.no_status.value
STATUSES = tuple(status.value for status in RsvpStatus)

# Saves for one event are serialized within the process so two requests
# cannot both pass the capacity check. Events share a fixed pool of
# striped locks, so memory stays bounded however many events are seen.
LOCK_STRIPES = 64
_event_locks = tuple(threading.RLock() for _ in range(LOCK_STRIPES))


def _event_lock(event_id: int) -> threading.RLock:
    return _event_locks[event_id % LOCK_STRIPES]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _group(records: list[ResponseRecord]) -> ResponseGroup:
    return ResponseGroup(
        responses=records,
        count=len(records) + sum(record.guests for record in records),
    )


class RsvpEngine:
    """Admission control for one site's event responses."""

    def __init__(
        self,
        repository: ResponseRepository,
        cache: AggregateCache,
        settings_provider: SettingsProvider,
        role_resolver: RoleResolver,
        user_directory: UserDirectory,
        event_check: EventTypeCheck,
        cache_ttl_seconds: int = 15 * 60,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.cache = cache
        self.settings = settings_provider
        self.roles = role_resolver
        self.users = user_directory
        self.event_check = event_check
        self.cache_ttl_seconds = cache_ttl_seconds
        self.clock = clock

    # ── Reads ──────────────────────────────────────────────────────

    def get(self, event_id: int, user_id: int) -> Optional[RsvpResponse]:
        """Stored response for the pair, or a ``no_status`` default.

        Returns None when either id is invalid.
        """
        if event_id < 1 or user_id < 1:
            return None

        stored = self.repository.find(event_id, user_id)
        if stored is not None:
            return stored
        return RsvpResponse(event_id=event_id, user_id=user_id)

    def responses(self, event_id: int) -> Aggregate:
        """All responses for the event grouped by status, sorted by role."""
        cached = self._cached(event_id)
        if cached is not None:
            return cached

        if not self.event_check.is_event_entity(event_id):
            return Aggregate()

        rows = self.repository.list_all(event_id, self.users.total_user_count())
        records = []
        for row in rows:
            if row.status not in GROUPED_STATUSES or row.user_id < 1 or not self.users.exists(row.user_id):
                continue
            records.append(
                ResponseRecord(
                    id=row.user_id,
                    name=self.users.display_name(row.user_id) or ANONYMOUS_NAME,
                    photo=self.users.avatar_url(row.user_id),
                    profile=self.users.profile_url(row.user_id),
                    role=self.roles.role_of(row.user_id),
                    timestamp=row.timestamp,
                    status=row.status,
                    guests=0 if row.status == WAITING_LIST else row.guests,
                    anonymous=row.anonymous,
                )
            )

        records = sort_by_role(records, self.roles.roles_ordered())
        aggregate = Aggregate(
            all=_group(records),
            **{status: _group([r for r in records if r.status == status]) for status in GROUPED_STATUSES},
        )
        self._store(event_id, aggregate)
        return aggregate

    def attending_limit_reached(
        self,
        event_id: int,
        current: Optional[RsvpResponse],
        additional_guests: int = 0,
    ) -> bool:
        """Whether admitting ``current`` with ``additional_guests`` would exceed the limit.

        A response that is already attending is counted once already, so only
        the change in its guest count matters.
        """
        responses = self.responses(event_id)
        user_count = 1

        if current is not None and current.status == ATTENDING:
            additional_guests -= current.guests
            user_count = 0

        if responses.attending is None:
            return False

        return responses.attending.count + user_count + additional_guests > self.settings.max_attending_limit()

    # ── Writes ─────────────────────────────────────────────────────

    def save(
        self,
        event_id: int,
        user_id: int,
        status: str,
        anonymous: bool = False,
        guests: int = 0,
    ) -> RsvpResponse:
        """Record a user's response, applying the attending limit.

        Returns the stored response. ``no_status`` is reported when the row was
        removed, and a zeroed default when the ids or status are invalid.
        """
        if event_id < 1 or user_id < 1 or status not in STATUSES:
            return RsvpResponse()

        with _event_lock(event_id):
            response, limit_reached = self._write(event_id, user_id, status, anonymous, guests)
            if not limit_reached:
                self.check_waiting_list(event_id)
        return response

    def check_waiting_list(self, event_id: int) -> int:
        """Move waiting-list responses into free seats. Returns how many moved.

        Runs promotion passes until one moves nobody. Every pass shrinks the
        waiting list, so the loop ends.
        """
        promoted = 0
        with _event_lock(event_id):
            while True:
                moved = self._promote_waiting(event_id)
                if not moved:
                    break
                promoted += moved
        return promoted

    def _promote_waiting(self, event_id: int) -> int:
        responses = self.responses(event_id)
        limit = self.settings.max_attending_limit()
        attending_count = responses.attending.count if responses.attending else 0
        waiting = responses.waiting_list.responses if responses.waiting_list else []

        if attending_count >= limit or not waiting:
            return 0

        moved = 0
        for record in sort_by_timestamp(waiting)[: limit - attending_count]:
            # Guests are not carried over from the waiting list.
            response, _ = self._write(event_id, record.id, ATTENDING, record.anonymous, 0)
            if response.status == ATTENDING:
                moved += 1
                logger.info("Promoted user %s from waiting list for event %s", record.id, event_id)
        return moved

    def _write(
        self,
        event_id: int,
        user_id: int,
        status: str,
        anonymous: bool,
        guests: int,
    ) -> tuple[RsvpResponse, bool]:
        guests = max(0, min(guests, self.settings.max_guest_limit(event_id)))
        current = self.get(event_id, user_id)
        limit_reached = self.attending_limit_reached(event_id, current, guests)

        # An attending update that would overflow keeps its previous guest count.
        if status == ATTENDING and limit_reached:
            guests = current.guests

        if status in (ATTENDING, WAITING_LIST) and current.status != ATTENDING and limit_reached:
            status = WAITING_LIST

        if status == WAITING_LIST:
            guests = 0

        response = RsvpResponse(
            id=current.id,
            event_id=event_id,
            user_id=user_id,
            timestamp=self.clock(),
            status=status,
            guests=guests,
            anonymous=bool(anonymous),
        )

        if status == NO_STATUS or (status == NOT_ATTENDING and anonymous):
            if current.id:
                self.repository.delete(current.id)
                logger.info("Removed RSVP of user %s for event %s", user_id, event_id)
            response = response.model_copy(update={"id": 0, "status": NO_STATUS})
        else:
            response = self.repository.upsert(response)
            logger.info(
                "User %s RSVP'd '%s' with %d guest(s) to event %s", user_id, status, guests, event_id
            )

        self._invalidate(event_id)
        return response, limit_reached

    # ── Cache ──────────────────────────────────────────────────────

    def _cached(self, event_id: int) -> Optional[Aggregate]:
        try:
            aggregate = self.cache.get(event_id)
        except CacheError:
            logger.warning("Response cache unavailable; reading event %s from storage", event_id)
            return None
        if aggregate is not None:
            logger.debug("Response cache hit for event %s", event_id)
        return aggregate

    def _store(self, event_id: int, aggregate: Aggregate) -> None:
        try:
            self.cache.set(event_id, aggregate, self.cache_ttl_seconds)
        except CacheError:
            logger.warning("Response cache unavailable; event %s not cached", event_id)

    def _invalidate(self, event_id: int) -> None:
        try:
            self.cache.invalidate(event_id)
        except CacheError:
            logger.warning("Response cache unavailable; could not invalidate event %s", event_id)


def build_rsvp_engine(db: Session, cache: AggregateCache) -> RsvpEngine:
    """Wire the engine to the SQL store and the configured limits."""
    return RsvpEngine(
        repository=SqlResponseRepository(db, page_size=settings.RSVP_PAGE_SIZE),
        cache=cache,
        settings_provider=SqlSettingsProvider(db, settings.MAX_ATTENDING_LIMIT),
        role_resolver=SqlRoleResolver(db, settings.leadership_roles),
        user_directory=SqlUserDirectory(db, settings.SITE_URL),
        event_check=SqlEventTypeCheck(db),
        cache_ttl_seconds=settings.RSVP_CACHE_TTL_SECONDS,
    )
