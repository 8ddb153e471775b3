from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from pathlib import Path
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastmcp import FastMCP
from githubkit.exception import RequestFailed as GitHubKitRequestFailed
from pydantic import BaseModel

from git_momentum.clients.generation import GenerationClient
from git_momentum.clients.github import GitHubMomentumClient
from git_momentum.clients.models.github import BranchReference, PullRequest, Repository, RepositoryOwner, User
from git_momentum.models.analysis import Completeness, ImprovementSuggestion, Metrics, RepoAnalysis
from git_momentum.session import Session, TokenStore

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)

TEST_TOKEN = "ghp_test_token"  # noqa: S105


def githubkit_response(parsed_data: Any) -> SimpleNamespace:  # pyright: ignore[reportAny]
    """A stand-in for a githubkit Response, which the client only reads `parsed_data` from."""
    return SimpleNamespace(parsed_data=parsed_data)


def request_failed(status_code: int, body: str) -> GitHubKitRequestFailed:
    """A githubkit RequestFailed error carrying the given status code and response body."""
    error = GitHubKitRequestFailed.__new__(GitHubKitRequestFailed)
    error.response = SimpleNamespace(status_code=status_code, text=body)  # pyright: ignore[reportAttributeAccessIssue]
    return error


def make_repository(
    name: str,
    owner: str = "octocat",
    fork: bool = False,
    updated_at: datetime | None = None,
    pushed_at: datetime | None = None,
    default_branch: str = "main",
    description: str | None = None,
    language: str | None = "Python",
    stars: int = 0,
) -> Repository:
    return Repository(
        id=sum(map(ord, f"{owner}/{name}")),
        name=name,
        full_name=f"{owner}/{name}",
        description=description,
        html_url=f"https://github.com/{owner}/{name}",
        updated_at=updated_at or NOW - timedelta(days=1),
        pushed_at=pushed_at or NOW - timedelta(days=1),
        stargazers_count=stars,
        language=language,
        fork=fork,
        private=False,
        default_branch=default_branch,
        owner=RepositoryOwner(login=owner),
    )


@pytest.fixture
def user() -> User:
    return User(login="octocat", name="The Octocat", avatar_url="https://avatars.example/octocat", html_url="https://github.com/octocat")


@pytest.fixture
def repositories() -> list[Repository]:
    return [
        make_repository(name="demo", description="A demo project", stars=5, updated_at=NOW - timedelta(days=2)),
        make_repository(name="forked-lib", owner="octocat", fork=True, language=None, updated_at=NOW - timedelta(days=12)),
        make_repository(name="old-notes", description="Notes from long ago", updated_at=NOW - timedelta(days=90)),
    ]


@pytest.fixture
def analysis() -> RepoAnalysis:
    return RepoAnalysis(
        health_score=72,
        completeness=Completeness(readme=True, contributing=False, license=True, security=False, changelog=False, code_of_conduct=False),
        metrics=Metrics(language="Python", framework="FastAPI", package_manager="pip", has_tests=True, todo_count=3),
        recommendations=["Add a CONTRIBUTING.md", "Add a SECURITY.md"],
    )


@pytest.fixture
def suggestions() -> list[ImprovementSuggestion]:
    return [
        ImprovementSuggestion(
            id="contributing",
            type="documentation",
            title="Add contribution guidelines",
            description="Create a CONTRIBUTING.md describing how to run the tests.",
            difficulty="easy",
            estimated_time="10 minutes",
        )
    ]


@pytest.fixture
def mock_github_client(user: User, repositories: list[Repository]) -> AsyncMock:
    github_client = AsyncMock(spec=GitHubMomentumClient)
    github_client.get_user.return_value = user
    github_client.get_repositories.return_value = repositories
    github_client.get_branch.return_value = BranchReference(name="main", sha="abc123")
    github_client.create_pull_request.return_value = PullRequest(
        number=7, title="Improvement: Add README.md", html_url="https://github.com/octocat/demo/pull/7", head="branch", base="main"
    )
    return github_client


@pytest.fixture
def mock_generation_client() -> AsyncMock:
    return AsyncMock(spec=GenerationClient)


@pytest.fixture
def token_store(tmp_path: Path) -> TokenStore:
    return TokenStore(path=tmp_path / "state.json")


@pytest.fixture
def session(token_store: TokenStore, mock_github_client: AsyncMock) -> Session:
    return Session(token_store=token_store, client_factory=lambda _token: mock_github_client)


@pytest.fixture
def connected_session(session: Session) -> Session:
    session.set_token(TEST_TOKEN)
    return session


@pytest.fixture
def githubkit_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def fastmcp() -> FastMCP[Any]:
    return FastMCP[Any](name="Git Momentum MCP")


def dump_for_snapshot(basemodel: BaseModel | None, /, exclude_none: bool = True, **dump_kwargs: Any) -> dict[str, Any] | None:
    if basemodel is None:
        return None

    return basemodel.model_dump(mode="json", exclude_none=exclude_none, **dump_kwargs)


def dump_list_for_snapshot(basemodels: Sequence[BaseModel] | None, /, exclude_none: bool = True, **dump_kwargs: Any) -> list[Any]:
    if basemodels is None:
        return []

    return [dump_for_snapshot(item, exclude_none=exclude_none, **dump_kwargs) for item in basemodels]
