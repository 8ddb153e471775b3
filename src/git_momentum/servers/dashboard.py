from collections import Counter
from datetime import datetime
from typing import Any, Self

from fastmcp.server import FastMCP
from fastmcp.tools import Tool
from pydantic import BaseModel, Field

from git_momentum.clients.models.github import Repository
from git_momentum.servers.base import BaseViewServer
from git_momentum.servers.shared.annotations import REPOSITORY_FILTER, REPOSITORY_NAME, SEARCH_QUERY
from git_momentum.utilities.activity import ActivityStatus, classify_activity, filter_repositories, search_repositories

NO_DESCRIPTION = "No description provided."
NO_LANGUAGE = "Plain Text"


class RepositoryCard(BaseModel):
    """A repository as shown on the dashboard."""

    name: str = Field(description="The name of the repository.")
    full_name: str = Field(description="The full name of the repository.")
    status: ActivityStatus = Field(description="How recently the repository was updated.")
    description: str = Field(description="The description of the repository.")
    language: str = Field(description="The primary language of the repository.")
    stars: int = Field(description="The number of stars the repository has.")
    fork: bool = Field(description="Whether the repository is a fork.")
    private: bool = Field(description="Whether the repository is private.")
    updated_at: datetime | None = Field(default=None, description="When the repository was last updated.")

    @classmethod
    def from_repository(cls, repository: Repository, now: datetime | None = None) -> Self:
        return cls(
            name=repository.name,
            full_name=repository.full_name,
            status=classify_activity(repository.updated_at, now=now),
            description=repository.description or NO_DESCRIPTION,
            language=repository.language or NO_LANGUAGE,
            stars=repository.stargazers_count,
            fork=repository.fork,
            private=repository.private,
            updated_at=repository.updated_at,
        )


class DashboardOverview(BaseModel):
    """Totals across all of your repositories."""

    total_repositories: int = Field(description="The number of repositories.")
    owned_repositories: int = Field(description="The number of repositories that are not forks.")
    forked_repositories: int = Field(description="The number of forks.")
    total_stars: int = Field(description="The number of stars across all repositories.")
    status_counts: dict[ActivityStatus, int] = Field(description="The number of repositories per activity status.")


def build_overview(repositories: list[Repository], now: datetime | None = None) -> DashboardOverview:
    status_counts: Counter[ActivityStatus] = Counter(classify_activity(repository.updated_at, now=now) for repository in repositories)

    return DashboardOverview(
        total_repositories=len(repositories),
        owned_repositories=len(filter_repositories(repositories, "owner")),
        forked_repositories=len(filter_repositories(repositories, "fork")),
        total_stars=sum(repository.stargazers_count for repository in repositories),
        status_counts={status: status_counts[status] for status in ActivityStatus},
    )


class DashboardServer(BaseViewServer):
    """The list of your repositories."""

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.list_repositories))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.get_dashboard_overview))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.select_repository))

        return fastmcp

    async def list_repositories(self, filter: REPOSITORY_FILTER = "all", query: SEARCH_QUERY = None) -> list[RepositoryCard]:  # noqa: A002
        """List your repositories, most recently updated first, with how active each one is."""

        repositories: list[Repository] = await self._repositories()

        matching: list[Repository] = search_repositories(filter_repositories(repositories, filter), query=query)

        return [RepositoryCard.from_repository(repository=repository) for repository in matching]

    async def get_dashboard_overview(self) -> DashboardOverview:
        """Count your repositories, forks, stars and how many repositories are active, need attention or are dormant."""

        return build_overview(repositories=await self._repositories())

    async def select_repository(self, repository: REPOSITORY_NAME) -> Repository:
        """Select a repository to open its detail view."""

        selected: Repository = await self._resolve_repository(name=repository)

        self.session.select_repository(repository=selected)

        return selected
