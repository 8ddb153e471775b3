from abc import ABC, abstractmethod
from logging import Logger
from typing import Any

from fastmcp.server import FastMCP
from fastmcp.utilities.logging import get_logger

from git_momentum.clients.github import GitHubMomentumClient
from git_momentum.clients.models.github import Repository
from git_momentum.servers.shared.errors import NoRepositorySelectedError
from git_momentum.session import Session


class BaseViewServer(ABC):
    """A view of the dashboard, exposed as a set of tools that share the session."""

    session: Session
    logger: Logger

    def __init__(self, session: Session, logger: Logger | None = None):
        self.session = session
        self.logger = logger or get_logger(name=__name__)

    @abstractmethod
    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]: ...

    async def _github_client(self) -> GitHubMomentumClient:
        """The GitHub client for the connected session, loading the profile and repositories on first use."""

        await self.session.load()

        return self.session.github_client()

    async def _repositories(self) -> list[Repository]:
        await self.session.load()

        return self.session.repositories

    async def _resolve_repository(self, name: str | None) -> Repository:
        await self.session.load()

        if name is not None:
            return self.session.find_repository(name=name)

        if self.session.selected_repository is None:
            raise NoRepositorySelectedError

        return self.session.selected_repository
