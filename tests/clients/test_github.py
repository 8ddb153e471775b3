import base64
import re
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from inline_snapshot import snapshot

from git_momentum.clients.errors.github import (
    FALLBACK_ERROR_MESSAGE,
    GENERIC_ERROR_MESSAGE,
    AuthenticationError,
    MissingContentError,
    RequestError,
    ResourceNotFoundError,
    ResourceTypeMismatchError,
    UndecodableContentError,
)
from git_momentum.clients.github import GitHubMomentumClient, extract_error_message, get_github_token
from git_momentum.clients.models.github import ContentEntry, Repository
from git_momentum.errors import AuthenticationRequiredError, ErrorKind
from git_momentum.utilities.encoding import encode_content
from tests.conftest import dump_for_snapshot, dump_list_for_snapshot, githubkit_response, request_failed


@pytest.fixture
def github_client(githubkit_client: MagicMock) -> GitHubMomentumClient:
    return GitHubMomentumClient(githubkit_client=githubkit_client)


def githubkit_file(path: str, content: str | None = "aGVsbG8=", sha: str = "file-sha", type: str = "file") -> SimpleNamespace:  # noqa: A002
    return SimpleNamespace(name=path.rsplit("/", 1)[-1], path=path, type=type, sha=sha, size=5, content=content)


def githubkit_repository(name: str, fork: bool = False) -> SimpleNamespace:
    return SimpleNamespace(
        id=1,
        name=name,
        full_name=f"octocat/{name}",
        description=None,
        html_url=f"https://github.com/octocat/{name}",
        updated_at=datetime(2026, 10, 1, tzinfo=UTC),
        pushed_at=datetime(2026, 10, 1, tzinfo=UTC),
        stargazers_count=3,
        language="Go",
        fork=fork,
        private=False,
        default_branch="trunk",
        owner=SimpleNamespace(login="octocat", avatar_url="https://avatars.example/octocat"),
    )


class TestTokens:
    def test_from_token_requires_a_token(self):
        with pytest.raises(AuthenticationRequiredError):
            _ = GitHubMomentumClient.from_token(token="")

    def test_from_token(self):
        github_client = GitHubMomentumClient.from_token(token="ghp_abc")  # noqa: S106
        assert github_client.githubkit_client is not None

    def test_get_github_token(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.setenv("GITHUB_PERSONAL_ACCESS_TOKEN", "ghp_from_env")
        assert get_github_token() == "ghp_from_env"

        monkeypatch.delenv("GITHUB_PERSONAL_ACCESS_TOKEN")
        assert get_github_token() is None


class TestErrorMessages:
    def test_message_from_json_body(self):
        assert extract_error_message('{"message": "Reference already exists"}') == "Reference already exists"

    def test_json_body_without_message(self):
        assert extract_error_message('{"errors": []}') == FALLBACK_ERROR_MESSAGE

    def test_body_that_is_not_json(self):
        assert extract_error_message("<html>Bad Gateway</html>") == GENERIC_ERROR_MESSAGE


class TestErrorMapping:
    async def test_unauthorized(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.users.async_get_authenticated = AsyncMock(side_effect=request_failed(401, '{"message": "Bad credentials"}'))

        with pytest.raises(AuthenticationError) as exc_info:
            _ = await github_client.get_user()

        assert exc_info.value.kind == ErrorKind.AUTH
        assert exc_info.value.provider_message == "Bad credentials"

    async def test_not_found(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.repos.async_get_content = AsyncMock(side_effect=request_failed(404, '{"message": "Not Found"}'))

        error_text: str = re.escape("A request error occurred. (action: Get file content, message: Not Found, resource: README.md)")

        with pytest.raises(ResourceNotFoundError, match=error_text):
            _ = await github_client.get_file_content(owner="octocat", repo="demo", path="README.md")

    async def test_other_failures_keep_the_provider_message(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.git.async_create_ref = AsyncMock(
            side_effect=request_failed(403, '{"message": "Resource not accessible by personal access token"}')
        )

        with pytest.raises(RequestError) as exc_info:
            _ = await github_client.create_ref(owner="octocat", repo="demo", ref="refs/heads/new", sha="abc123")

        assert exc_info.value.kind == ErrorKind.PROVIDER
        assert exc_info.value.provider_message == "Resource not accessible by personal access token"

    async def test_body_that_is_not_json(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.pulls.async_create = AsyncMock(side_effect=request_failed(502, "Bad Gateway"))

        with pytest.raises(RequestError) as exc_info:
            _ = await github_client.create_pull_request(owner="octocat", repo="demo", title="t", head="new", base="main", body="b")

        assert exc_info.value.provider_message == GENERIC_ERROR_MESSAGE


class TestProfile:
    async def test_get_user(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.users.async_get_authenticated = AsyncMock(
            return_value=githubkit_response(
                SimpleNamespace(
                    login="octocat", name=None, avatar_url="https://avatars.example/octocat", html_url="https://github.com/octocat"
                )
            )
        )

        user = await github_client.get_user()

        assert dump_for_snapshot(user) == snapshot(
            {"login": "octocat", "avatar_url": "https://avatars.example/octocat", "html_url": "https://github.com/octocat"}
        )

    async def test_get_repositories(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.repos.async_list_for_authenticated_user = AsyncMock(
            return_value=githubkit_response([githubkit_repository("newest"), githubkit_repository("a-fork", fork=True)])
        )

        repositories: list[Repository] = await github_client.get_repositories()

        githubkit_client.rest.repos.async_list_for_authenticated_user.assert_awaited_once_with(sort="updated", per_page=100)

        assert [repository.name for repository in repositories] == ["newest", "a-fork"]
        assert repositories[1].fork is True
        assert repositories[0].default_branch == "trunk"
        assert repositories[0].owner_and_name() == ("octocat", "newest")


class TestContents:
    async def test_get_repository_contents(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.repos.async_get_content = AsyncMock(
            return_value=githubkit_response(
                [githubkit_file("README.md", content=None), githubkit_file("src", content=None, sha="dir-sha", type="dir")]
            )
        )

        contents: list[ContentEntry] = await github_client.get_repository_contents(owner="octocat", repo="demo")

        assert dump_list_for_snapshot(contents) == snapshot(
            [
                {"name": "README.md", "path": "README.md", "type": "file", "sha": "file-sha", "size": 5},
                {"name": "src", "path": "src", "type": "dir", "sha": "dir-sha", "size": 5},
            ]
        )

    async def test_get_repository_contents_of_a_file(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.repos.async_get_content = AsyncMock(return_value=githubkit_response(githubkit_file("go.mod")))

        contents: list[ContentEntry] = await github_client.get_repository_contents(owner="octocat", repo="demo", path="go.mod")

        assert [entry.name for entry in contents] == ["go.mod"]

    async def test_get_file_content(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.repos.async_get_content = AsyncMock(
            return_value=githubkit_response(githubkit_file("README.md", content="IyBE\nZW1v\n"))
        )

        assert await github_client.get_file_content(owner="octocat", repo="demo", path="README.md") == "# Demo"

        githubkit_client.rest.repos.async_get_content.assert_awaited_once_with(owner="octocat", repo="demo", path="README.md")

    async def test_get_file_content_of_a_directory(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.repos.async_get_content = AsyncMock(return_value=githubkit_response([githubkit_file("docs/index.md")]))

        with pytest.raises(ResourceTypeMismatchError, match="docs: Expected file, got dir"):
            _ = await github_client.get_file_content(owner="octocat", repo="demo", path="docs")

    async def test_get_file_content_without_content(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.repos.async_get_content = AsyncMock(return_value=githubkit_response(githubkit_file("big.bin", content="")))

        with pytest.raises(MissingContentError):
            _ = await github_client.get_file_content(owner="octocat", repo="demo", path="big.bin")

    async def test_get_file_content_that_is_not_utf8(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        latin1_content: str = base64.b64encode("caf\u00e9".encode("latin-1")).decode("ascii")
        githubkit_client.rest.repos.async_get_content = AsyncMock(
            return_value=githubkit_response(githubkit_file("NOTES.txt", content=latin1_content))
        )

        with pytest.raises(UndecodableContentError, match="The file is not UTF-8 text"):
            _ = await github_client.get_file_content(owner="octocat", repo="demo", path="NOTES.txt")


class TestWriting:
    async def test_get_branch(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.repos.async_get_branch = AsyncMock(
            return_value=githubkit_response(SimpleNamespace(name="main", commit=SimpleNamespace(sha="abc123")))
        )

        branch = await github_client.get_branch(owner="octocat", repo="demo", branch="main")

        assert branch.sha == "abc123"

    async def test_create_ref(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.git.async_create_ref = AsyncMock(
            return_value=githubkit_response(SimpleNamespace(ref="refs/heads/new-branch", object_=SimpleNamespace(sha="abc123")))
        )

        git_reference = await github_client.create_ref(owner="octocat", repo="demo", ref="refs/heads/new-branch", sha="abc123")

        githubkit_client.rest.git.async_create_ref.assert_awaited_once_with(
            owner="octocat", repo="demo", ref="refs/heads/new-branch", sha="abc123"
        )
        assert git_reference.branch == "new-branch"

    async def test_write_file_updates_existing_file(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.repos.async_get_content = AsyncMock(return_value=githubkit_response(githubkit_file("README.md", sha="old-sha")))
        githubkit_client.rest.repos.async_create_or_update_file_contents = AsyncMock(
            return_value=githubkit_response(SimpleNamespace(content=SimpleNamespace(sha="new-sha"), commit=SimpleNamespace(sha="commit-sha")))
        )

        file_commit = await github_client.write_file(
            owner="octocat",
            repo="demo",
            path="README.md",
            message="docs: add README.md",
            content="# Démo",
            branch="new-branch",
            sha_lookup_branch="main",
        )

        # The existing file is looked up on the base branch, not the new one
        githubkit_client.rest.repos.async_get_content.assert_awaited_once_with(owner="octocat", repo="demo", path="README.md", ref="main")
        githubkit_client.rest.repos.async_create_or_update_file_contents.assert_awaited_once_with(
            owner="octocat",
            repo="demo",
            path="README.md",
            message="docs: add README.md",
            content=encode_content("# Démo"),
            branch="new-branch",
            sha="old-sha",
        )

        assert dump_for_snapshot(file_commit) == snapshot({"path": "README.md", "sha": "new-sha", "commit_sha": "commit-sha"})

    async def test_write_file_creates_missing_file(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.repos.async_get_content = AsyncMock(side_effect=request_failed(404, '{"message": "Not Found"}'))
        githubkit_client.rest.repos.async_create_or_update_file_contents = AsyncMock(
            return_value=githubkit_response(SimpleNamespace(content=None, commit=SimpleNamespace(sha="commit-sha")))
        )

        _ = await github_client.write_file(
            owner="octocat", repo="demo", path="SECURITY.md", message="docs: add SECURITY.md", content="# Security", branch="new-branch"
        )

        githubkit_client.rest.repos.async_get_content.assert_awaited_once_with(
            owner="octocat", repo="demo", path="SECURITY.md", ref="new-branch"
        )

        request_args = githubkit_client.rest.repos.async_create_or_update_file_contents.await_args.kwargs
        assert "sha" not in request_args

    async def test_create_pull_request(self, github_client: GitHubMomentumClient, githubkit_client: MagicMock):
        githubkit_client.rest.pulls.async_create = AsyncMock(
            return_value=githubkit_response(
                SimpleNamespace(
                    number=7,
                    title="Improvement: Add README.md",
                    html_url="https://github.com/octocat/demo/pull/7",
                    head=SimpleNamespace(ref="new-branch"),
                    base=SimpleNamespace(ref="main"),
                )
            )
        )

        pull_request = await github_client.create_pull_request(
            owner="octocat", repo="demo", title="Improvement: Add README.md", head="new-branch", base="main", body="Body"
        )

        assert dump_for_snapshot(pull_request) == snapshot(
            {
                "number": 7,
                "title": "Improvement: Add README.md",
                "html_url": "https://github.com/octocat/demo/pull/7",
                "head": "new-branch",
                "base": "main",
            }
        )
