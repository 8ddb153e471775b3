from collections.abc import Sequence
from datetime import UTC, date, datetime, timedelta
from typing import Any

from fastmcp.server import FastMCP
from fastmcp.tools import Tool
from pydantic import BaseModel, Field

from git_momentum.clients.models.github import Repository
from git_momentum.servers.base import BaseViewServer

WEEK_DAYS = 7


class DailyActivity(BaseModel):
    day: str = Field(description="The abbreviated day of the week.")
    calendar_date: date = Field(description="The date.")
    count: int = Field(description="The number of repositories last pushed to on that day.")


class Milestone(BaseModel):
    title: str = Field(description="The name of the milestone.")
    description: str = Field(description="What it takes to reach the milestone.")
    progress: int = Field(ge=0, le=100, description="Progress towards the milestone, in percent.")


MILESTONES: list[Milestone] = [
    Milestone(title="Documentation Pro", description="10 READMEs generated", progress=80),
    Milestone(title="Consistent Coder", description="30-day commit streak", progress=25),
    Milestone(title="Hygiene Hero", description="Remove 50 TODO comments", progress=65),
    Milestone(title="Security First", description="Add 5 SECURITY.md files", progress=40),
]


class StreakStats(BaseModel):
    """How consistently your repositories have been worked on over the last week."""

    weekly_activity: list[DailyActivity] = Field(description="Activity for each of the last seven days, oldest first.")
    current_streak_days: int = Field(description="Consecutive days, ending today, with at least one push.")
    active_repositories: int = Field(description="The number of repositories pushed to in the last seven days.")
    milestones: list[Milestone] = Field(description="Goals to work towards.")


def compute_streak_stats(repositories: Sequence[Repository], now: datetime | None = None) -> StreakStats:
    """Derive weekly activity from the date each repository was last pushed to."""

    if now is None:
        now = datetime.now(tz=UTC)

    today: date = now.astimezone(UTC).date()

    pushed_dates: list[date] = [repository.pushed_at.astimezone(UTC).date() for repository in repositories if repository.pushed_at]

    days: list[date] = [today - timedelta(days=offset) for offset in reversed(range(WEEK_DAYS))]

    weekly_activity: list[DailyActivity] = [
        DailyActivity(day=day.strftime("%a"), calendar_date=day, count=pushed_dates.count(day)) for day in days
    ]

    streak: int = 0
    pushed_days: set[date] = set(pushed_dates)
    while today - timedelta(days=streak) in pushed_days:
        streak += 1

    return StreakStats(
        weekly_activity=weekly_activity,
        current_streak_days=streak,
        active_repositories=sum(activity.count for activity in weekly_activity),
        milestones=MILESTONES,
    )


class StreakServer(BaseViewServer):
    """The streak and metrics view."""

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.get_streak_stats))

        return fastmcp

    async def get_streak_stats(self) -> StreakStats:
        """Get your push activity over the last week, your current streak and your milestones."""

        return compute_streak_stats(repositories=await self._repositories())
