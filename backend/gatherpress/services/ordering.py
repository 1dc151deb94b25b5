"""Sort orders for RSVP responses."""
from datetime import datetime, timezone
from typing import Iterable, Protocol, Optional

DEFAULT_ROLE = "Member"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class _HasRole(Protocol):
    role: str


class _HasTimestamp(Protocol):
    timestamp: Optional[datetime]


def role_ranking(roles_ordered: Iterable[str]) -> list[str]:
    """Leadership roles followed by the implicit lowest-precedence Member role."""
    ranking = [role for role in roles_ordered if role != DEFAULT_ROLE]
    ranking.append(DEFAULT_ROLE)
    return ranking


def sort_by_role(records: Iterable[_HasRole], roles_ordered: Iterable[str]) -> list:
    """Leaders first, in the configured order. Unknown roles sort after Member."""
    ranking = role_ranking(roles_ordered)

    def _rank(record: _HasRole) -> int:
        try:
            return ranking.index(record.role)
        except ValueError:
            return len(ranking)

    return sorted(records, key=_rank)


def sort_by_timestamp(records: Iterable[_HasTimestamp]) -> list:
    """Earliest response first; responses without a timestamp go last."""
    return sorted(records, key=lambda r: (r.timestamp is None, r.timestamp or _EPOCH))
