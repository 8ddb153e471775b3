import json
import os
from collections.abc import Awaitable, Callable, Sequence
from logging import Logger, getLogger
from typing import Any, Self

from githubkit import GitHub as GitHubKit
from githubkit.auth.token import TokenAuthStrategy
from githubkit.exception import GitHubException as GitHubKitGitHubException
from githubkit.exception import RequestFailed as GitHubKitRequestFailed
from githubkit.response import Response as GitHubKitResponse
from pydantic import BaseModel

from git_momentum.clients.errors.github import (
    FALLBACK_ERROR_MESSAGE,
    GENERIC_ERROR_MESSAGE,
    AuthenticationError,
    ClientError,
    MissingContentError,
    RequestError,
    ResourceNotFoundError,
    ResourceTypeMismatchError,
    UndecodableContentError,
)
from git_momentum.clients.models.github import (
    BranchReference,
    ContentEntry,
    FileCommit,
    GitReference,
    PullRequest,
    Repository,
    User,
)
from git_momentum.errors import AuthenticationRequiredError
from git_momentum.utilities.encoding import decode_content, encode_content

UNAUTHORIZED_ERROR = 401
NOT_FOUND_ERROR = 404

DEFAULT_REPOSITORIES_LIMIT = 100

GITHUBKIT_RESPONSE_TYPE = BaseModel | Sequence[BaseModel]


def extract_response[T: GITHUBKIT_RESPONSE_TYPE](response: GitHubKitResponse[T], /) -> T:
    """Extract the response from a response."""

    return response.parsed_data


def extract_error_message(body: str) -> str:
    """Extract GitHub's error message from a response body.

    Bodies that are not JSON produce a generic message, JSON bodies without a message produce a fallback message."""

    try:
        error_body = json.loads(body)  # pyright: ignore[reportAny]
    except ValueError:
        return GENERIC_ERROR_MESSAGE

    if isinstance(error_body, dict) and (message := error_body.get("message")):  # pyright: ignore[reportUnknownMemberType, reportUnknownVariableType]
        return str(message)  # pyright: ignore[reportUnknownArgumentType]

    return FALLBACK_ERROR_MESSAGE


def get_github_token() -> str | None:
    env_vars: list[str] = ["GITHUB_TOKEN", "GITHUB_PERSONAL_ACCESS_TOKEN"]
    for env_var in env_vars:
        if token := os.getenv(env_var):
            return token
    return None


def get_githubkit_client(token: str) -> GitHubKit[TokenAuthStrategy]:
    # Failures are surfaced to the user as-is, nothing is retried
    return GitHubKit[TokenAuthStrategy](auth=TokenAuthStrategy(token=token), auto_retry=False)


class GitHubMomentumClient:
    """Wraps the GitHub REST API operations used by Git Momentum."""

    githubkit_client: GitHubKit[Any]
    logger: Logger

    log_requests: bool
    log_responses: bool
    log_on_error: bool

    def __init__(
        self,
        githubkit_client: GitHubKit[Any],
        logger: Logger | None = None,
        log_requests: bool = True,
        log_responses: bool = False,
        log_on_error: bool = True,
    ):
        self.githubkit_client = githubkit_client
        self.logger = logger or getLogger(__name__)
        self.log_requests = log_requests
        self.log_responses = log_responses
        self.log_on_error = log_on_error

    @classmethod
    def from_token(cls, token: str | None, logger: Logger | None = None) -> Self:
        if not token:
            raise AuthenticationRequiredError

        return cls(githubkit_client=get_githubkit_client(token=token), logger=logger)

    def _get_loggers(
        self, log_request: bool | None = None, log_response: bool | None = None, log_on_error: bool | None = None
    ) -> tuple[Callable[[str], Any], Callable[[str], Any], Callable[[str], Any]]:
        request_logger = self.logger.info if log_request or self.log_requests else self.logger.debug
        response_logger = self.logger.info if log_response or self.log_responses else self.logger.debug
        error_logger = self.logger.warning if log_on_error or self.log_on_error else self.logger.debug
        return request_logger, response_logger, error_logger

    async def _perform_rest_request[T: GITHUBKIT_RESPONSE_TYPE](
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        log_on_error: bool | None = None,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T:
        """Perform a request and extract the response.

        Args:
            action: The action being performed.
            log_request: Whether to log the request.
            log_response: Whether to log the response.
            log_on_error: Whether to log on error.

        Raises:
            AuthenticationError: If GitHub rejects the token.
            ResourceNotFoundError: If the resource is not found.
            RequestError: If the request fails for any other reason.
        """

        request_logger, response_logger, error_logger = self._get_loggers(
            log_request=log_request, log_response=log_response, log_on_error=log_on_error
        )

        request_logger(f"Performing {action} with kwargs {sorted(request_args)}")

        try:
            response: GitHubKitResponse[T] = await method(**request_args)
        except GitHubKitRequestFailed as e:
            status_code: int = e.response.status_code
            message: str = extract_error_message(e.response.text)

            error_logger(f"GitHub returned {status_code} performing {action}: {message}")

            if status_code == UNAUTHORIZED_ERROR:
                raise AuthenticationError(action=action, message=message) from e

            if status_code == NOT_FOUND_ERROR:
                raise ResourceNotFoundError(action=action, resource=request_args.get("path"), message=message) from e

            raise RequestError(action=action, message=message) from e
        except GitHubKitGitHubException as e:
            error_logger(f"Error performing {action}: {e}")

            raise RequestError(action=action, message=str(e)) from e

        extracted_response = extract_response(response)

        response_logger(f"Extracted response for {action}: {extracted_response}")

        return extracted_response

    async def get_user(self) -> User:
        """Get the profile of the authenticated user."""

        githubkit_user = await self._perform_rest_request(
            action="Get user",
            method=self.githubkit_client.rest.users.async_get_authenticated,
        )

        return User.from_githubkit_user(user=githubkit_user)

    async def get_repositories(self, limit: int = DEFAULT_REPOSITORIES_LIMIT) -> list[Repository]:
        """Get the repositories of the authenticated user, most recently updated first."""

        githubkit_repositories = await self._perform_rest_request(
            action="List repositories",
            method=self.githubkit_client.rest.repos.async_list_for_authenticated_user,
            sort="updated",
            per_page=limit,
        )

        return [Repository.from_githubkit_repository(repository=repository) for repository in githubkit_repositories]

    async def get_repository_contents(self, owner: str, repo: str, path: str = "") -> list[ContentEntry]:
        """List the entries of a directory in a repository.

        Args:
            owner: The owner of the repository.
            repo: The name of the repository.
            path: The path of the directory. Defaults to the root of the repository.
        """

        contents = await self._perform_rest_request(
            action="Get repository contents",
            method=self.githubkit_client.rest.repos.async_get_content,
            owner=owner,
            repo=repo,
            path=path,
        )

        if isinstance(contents, list):
            return [ContentEntry.from_content_item(item=item) for item in contents]  # pyright: ignore[reportUnknownVariableType]

        return [ContentEntry.from_content_item(item=contents)]

    async def _get_file(self, action: str, owner: str, repo: str, path: str, ref: str | None = None) -> Any:  # pyright: ignore[reportAny]
        request_args: dict[str, str] = {"owner": owner, "repo": repo, "path": path}
        if ref is not None:
            request_args["ref"] = ref

        file = await self._perform_rest_request(
            action=action,
            method=self.githubkit_client.rest.repos.async_get_content,
            **request_args,
        )

        if isinstance(file, list):
            raise ResourceTypeMismatchError(action=action, resource=path, expected_type="file", actual_type="dir")

        if file.type != "file":  # pyright: ignore[reportAny]
            raise ResourceTypeMismatchError(action=action, resource=path, expected_type="file", actual_type=file.type)  # pyright: ignore[reportAny]

        return file  # pyright: ignore[reportAny]

    async def get_file_content(self, owner: str, repo: str, path: str, ref: str | None = None) -> str:
        """Get the decoded text content of a file.

        Args:
            owner: The owner of the repository.
            repo: The name of the repository.
            path: The path of the file.
            ref: The branch, tag or commit to read from. If not provided, the default branch will be used.
        """

        file = await self._get_file(action="Get file content", owner=owner, repo=repo, path=path, ref=ref)  # pyright: ignore[reportAny]

        if not file.content:  # pyright: ignore[reportAny]
            raise MissingContentError(action="Get file content", resource=path)

        try:
            return decode_content(file.content)  # pyright: ignore[reportAny]
        except ValueError as e:
            self.logger.warning(f"Could not decode {path} in {owner}/{repo}: {e}")

            raise UndecodableContentError(action="Get file content", resource=path) from e

    async def get_branch(self, owner: str, repo: str, branch: str) -> BranchReference:
        """Get a branch and its latest commit."""

        githubkit_branch = await self._perform_rest_request(
            action="Get branch",
            method=self.githubkit_client.rest.repos.async_get_branch,
            owner=owner,
            repo=repo,
            branch=branch,
        )

        return BranchReference.from_branch(branch=githubkit_branch)

    async def create_ref(self, owner: str, repo: str, ref: str, sha: str) -> GitReference:
        """Create a reference, for example `refs/heads/my-branch`, pointing at a commit."""

        githubkit_ref = await self._perform_rest_request(
            action="Create ref",
            method=self.githubkit_client.rest.git.async_create_ref,
            owner=owner,
            repo=repo,
            ref=ref,
            sha=sha,
        )

        return GitReference.from_git_ref(git_ref=githubkit_ref)

    async def _get_file_sha(self, owner: str, repo: str, path: str, ref: str) -> str | None:
        try:
            file = await self._get_file(action="Get file sha", owner=owner, repo=repo, path=path, ref=ref)  # pyright: ignore[reportAny]
        except ClientError:
            self.logger.debug(f"No existing file at {path} on {ref}, a new file will be created.")
            return None

        return file.sha  # pyright: ignore[reportAny]

    async def write_file(
        self,
        owner: str,
        repo: str,
        path: str,
        message: str,
        content: str,
        branch: str,
        sha_lookup_branch: str | None = None,
    ) -> FileCommit:
        """Create or update a file on a branch.

        Args:
            owner: The owner of the repository.
            repo: The name of the repository.
            path: The path of the file.
            message: The commit message.
            content: The text content of the file.
            branch: The branch to commit to.
            sha_lookup_branch: The branch to look up the existing file on. Defaults to `branch`. A freshly created
                               branch may not be readable yet, so callers can point the lookup at the branch it
                               was created from.
        """

        request_args: dict[str, str] = {
            "owner": owner,
            "repo": repo,
            "path": path,
            "message": message,
            "content": encode_content(content),
            "branch": branch,
        }

        if sha := await self._get_file_sha(owner=owner, repo=repo, path=path, ref=sha_lookup_branch or branch):
            request_args["sha"] = sha

        githubkit_file_commit = await self._perform_rest_request(
            action="Write file",
            method=self.githubkit_client.rest.repos.async_create_or_update_file_contents,
            **request_args,
        )

        return FileCommit.from_file_commit(path=path, file_commit=githubkit_file_commit)

    async def create_pull_request(self, owner: str, repo: str, title: str, head: str, base: str, body: str) -> PullRequest:
        """Open a pull request from `head` into `base`."""

        githubkit_pull_request = await self._perform_rest_request(
            action="Create pull request",
            method=self.githubkit_client.rest.pulls.async_create,
            owner=owner,
            repo=repo,
            title=title,
            head=head,
            base=base,
            body=body,
        )

        return PullRequest.from_githubkit_pull_request(pull_request=githubkit_pull_request)
