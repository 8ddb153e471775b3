from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Literal

from git_momentum.clients.models.github import Repository

ACTIVE_DAYS = 7
NEEDS_ATTENTION_DAYS = 30

RepositoryFilter = Literal["all", "owner", "fork"]


class ActivityStatus(str, Enum):
    ACTIVE = "Active"
    NEEDS_ATTENTION = "Needs attention"
    DORMANT = "Dormant"


def days_since(timestamp: datetime, now: datetime | None = None) -> float:
    """The number of days, including fractions, between `timestamp` and `now`."""

    if now is None:
        now = datetime.now(tz=UTC)

    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)

    return (now - timestamp) / timedelta(days=1)


def classify_days(days: float) -> ActivityStatus:
    """Classify elapsed days since the last update. Boundaries belong to the less active status."""

    if days < ACTIVE_DAYS:
        return ActivityStatus.ACTIVE

    if days < NEEDS_ATTENTION_DAYS:
        return ActivityStatus.NEEDS_ATTENTION

    return ActivityStatus.DORMANT


def classify_activity(updated_at: datetime | None, now: datetime | None = None) -> ActivityStatus:
    if updated_at is None:
        return ActivityStatus.DORMANT

    return classify_days(days_since(updated_at, now=now))


def filter_repositories(repositories: Sequence[Repository], repository_filter: RepositoryFilter = "all") -> list[Repository]:
    """Filter repositories by ownership, preserving their order.

    `owner` keeps the repositories that are not forks and `fork` keeps the forks."""

    if repository_filter == "owner":
        return [repository for repository in repositories if not repository.fork]

    if repository_filter == "fork":
        return [repository for repository in repositories if repository.fork]

    return list(repositories)


def search_repositories(repositories: Sequence[Repository], query: str | None = None) -> list[Repository]:
    """Keep the repositories whose name or description contains `query`, ignoring case."""

    if not query:
        return list(repositories)

    needle = query.lower()

    return [
        repository
        for repository in repositories
        if needle in repository.name.lower() or (repository.description and needle in repository.description.lower())
    ]
