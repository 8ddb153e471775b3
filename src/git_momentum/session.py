import asyncio
import json
import os
from collections.abc import Callable
from enum import Enum
from logging import Logger
from pathlib import Path

from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, Field

from git_momentum.clients.errors.github import ClientError
from git_momentum.clients.github import GitHubMomentumClient
from git_momentum.clients.models.github import Repository, User
from git_momentum.errors import AuthenticationRequiredError, RepositoryNotFoundError

TOKEN_KEY = "gtm_token"


class View(str, Enum):
    DASHBOARD = "dashboard"
    ANALYSIS = "analysis"
    STREAK = "streak"
    GENERATOR = "generator"
    SETTINGS = "settings"


def get_state_file() -> Path:
    if state_file := os.getenv("GIT_MOMENTUM_STATE_FILE"):
        return Path(state_file)

    return Path.home() / ".git-momentum" / "state.json"


class TokenStore:
    """Persists the GitHub token between runs. Nothing else is persisted."""

    path: Path
    logger: Logger

    def __init__(self, path: Path | None = None, logger: Logger | None = None):
        self.path = path or get_state_file()
        self.logger = logger or get_logger(name=__name__)

    def load(self) -> str | None:
        if not self.path.exists():
            return None

        try:
            state = json.loads(self.path.read_text())  # pyright: ignore[reportAny]
        except ValueError:
            self.logger.warning(f"Ignoring unreadable state file {self.path}")
            return None

        if isinstance(state, dict) and isinstance(token := state.get(TOKEN_KEY), str) and token:  # pyright: ignore[reportUnknownMemberType]
            return token

        return None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Only the owner may read the token
        self.path.touch(mode=0o600, exist_ok=True)
        self.path.chmod(0o600)

        _ = self.path.write_text(json.dumps({TOKEN_KEY: token}))

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class SessionSnapshot(BaseModel):
    """The state of the session as shown to the user."""

    connected: bool = Field(description="Whether a GitHub token is set.")
    user: User | None = Field(default=None, description="The authenticated user, once loaded.")
    repository_count: int = Field(default=0, description="The number of repositories loaded.")
    current_view: View = Field(description="The view the user is on.")
    selected_repository: str | None = Field(default=None, description="The full name of the selected repository.")


class Session:
    """The application state shared by every server.

    Only the token survives a restart, the profile and repository list are fetched again after the token is set."""

    token: str | None
    user: User | None
    repositories: list[Repository]
    current_view: View
    selected_repository: Repository | None

    def __init__(
        self,
        token_store: TokenStore | None = None,
        client_factory: Callable[[str], GitHubMomentumClient] | None = None,
        initial_token: str | None = None,
        logger: Logger | None = None,
    ):
        self.logger = logger or get_logger(name=__name__)
        self.token_store = token_store or TokenStore()
        self.client_factory: Callable[[str], GitHubMomentumClient] = client_factory or GitHubMomentumClient.from_token
        self._github_client: GitHubMomentumClient | None = None

        # A stored token wins over one provided by the environment
        self.token = self.token_store.load() or initial_token
        self._reset_data()

    def _reset_data(self) -> None:
        self.user = None
        self.repositories = []
        self.current_view = View.DASHBOARD
        self.selected_repository = None
        self._github_client = None

    @property
    def is_connected(self) -> bool:
        return bool(self.token)

    @property
    def is_loaded(self) -> bool:
        return self.user is not None

    def set_token(self, token: str) -> None:
        """Connect with a new token, forgetting any data loaded with a previous one."""

        token = token.strip()
        if not token:
            raise AuthenticationRequiredError

        self.token_store.save(token)
        self.token = token
        self._reset_data()

    def set_profile(self, user: User, repositories: list[Repository]) -> None:
        self.user = user
        self.repositories = repositories

    def select_view(self, view: View) -> None:
        self.current_view = view

        if view == View.DASHBOARD:
            self.selected_repository = None

    def select_repository(self, repository: Repository | None) -> None:
        self.selected_repository = repository

        if repository is not None:
            self.current_view = View.ANALYSIS

    def clear(self) -> None:
        """Log out: forget the persisted token and everything loaded with it."""

        self.token_store.clear()
        self.token = None
        self._reset_data()

    def require_token(self) -> str:
        if not self.token:
            raise AuthenticationRequiredError

        return self.token

    def github_client(self) -> GitHubMomentumClient:
        token = self.require_token()

        if self._github_client is None:
            self._github_client = self.client_factory(token)

        return self._github_client

    def find_repository(self, name: str) -> Repository:
        """Find a loaded repository by its name or full name."""

        for repository in self.repositories:
            if name in (repository.name, repository.full_name):
                return repository

        raise RepositoryNotFoundError(name=name)

    async def load(self) -> None:
        """Fetch the user profile and repositories for the current token, once.

        If either request fails the token is discarded and the error is raised."""

        if self.is_loaded:
            return

        github_client: GitHubMomentumClient = self.github_client()

        user, repositories = await asyncio.gather(github_client.get_user(), github_client.get_repositories(), return_exceptions=True)

        if isinstance(user, BaseException):
            raise self._load_failed(error=user)

        if isinstance(repositories, BaseException):
            raise self._load_failed(error=repositories)

        self.logger.info(f"Loaded {len(repositories)} repositories for {user.login}")

        self.set_profile(user=user, repositories=repositories)

    def _load_failed(self, error: BaseException) -> BaseException:
        if isinstance(error, ClientError):
            self.logger.warning(f"Failed to load the session, discarding the token: {error}")
            self.clear()

        return error

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            connected=self.is_connected,
            user=self.user,
            repository_count=len(self.repositories),
            current_view=self.current_view,
            selected_repository=self.selected_repository.full_name if self.selected_repository else None,
        )
