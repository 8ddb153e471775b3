"""Opening a pull request that adds a generated artifact to a repository.

The workflow runs its steps strictly in order and stops at the first failure:

1. resolve the owner, name and default branch of the repository
2. fetch the commit at the head of the default branch
3. create a new branch at that commit
4. wait for the new branch to replicate
5. write the artifact to the new branch
6. open a pull request from the new branch into the default branch

A failure after the branch is created leaves the branch behind.
"""

import asyncio
import os
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from enum import Enum
from logging import Logger

from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, Field

from git_momentum.clients.errors.github import RequestError
from git_momentum.clients.github import GitHubMomentumClient
from git_momentum.clients.models.github import (
    REFS_HEADS_PREFIX,
    BranchReference,
    FileCommit,
    GitReference,
    PullRequest,
    Repository,
)
from git_momentum.errors import ErrorKind, MomentumError
from git_momentum.models.artifacts import BRAND, ArtifactTemplate, PullRequestDraft

BRANCH_PREFIX = "evergreeners-improve"
DEFAULT_REPLICATION_DELAY = 2.0

PERMISSION_DENIED_MARKER = "Resource not accessible by personal access token"
PERMISSION_DENIED_HINT = "Permission Denied: Ensure your token has 'Contents' and 'Pull Requests' Read/Write access."

PULL_REQUEST_DESCRIPTION = """This PR adds a contextual {label} generated by AI after analyzing the codebase manifests and structure.

Goal: Enhance repository documentation and maintain project hygiene.

Generated by **{brand}**."""


def get_replication_delay() -> float:
    return float(os.getenv("GIT_MOMENTUM_PR_DELAY", str(DEFAULT_REPLICATION_DELAY)))


class BranchNamer:
    """Names branches after the current time in milliseconds.

    Names handed out by one namer are strictly increasing, even when two are requested within the same millisecond."""

    def __init__(self, prefix: str = BRANCH_PREFIX):
        self.prefix: str = prefix
        self._last_timestamp: int = 0

    def next_name(self, now: datetime | None = None) -> str:
        if now is None:
            now = datetime.now(tz=UTC)

        timestamp: int = max(int(now.timestamp() * 1000), self._last_timestamp + 1)
        self._last_timestamp = timestamp

        return f"{self.prefix}-{timestamp}"


def prepare_draft(template: ArtifactTemplate, branch_namer: BranchNamer, now: datetime | None = None) -> PullRequestDraft:
    return PullRequestDraft(
        title=f"Improvement: Add {template.label}",
        description=PULL_REQUEST_DESCRIPTION.format(label=template.label, brand=BRAND),
        branch=branch_namer.next_name(now=now),
        file_path=template.path,
    )


def commit_message_for(template: ArtifactTemplate) -> str:
    return f"docs: add {template.id} via {BRAND}"


def user_facing_message(error: Exception) -> str:
    """The message shown for a failed step, with GitHub's token permission error rewritten into a hint."""

    message: str = error.provider_message if isinstance(error, RequestError) else str(error)

    if PERMISSION_DENIED_MARKER in message:
        return PERMISSION_DENIED_HINT

    return message


class WorkflowStep(str, Enum):
    RESOLVE_TARGET = "resolve_target"
    FETCH_BASE = "fetch_base"
    CREATE_BRANCH = "create_branch"
    WAIT_FOR_REPLICATION = "wait_for_replication"
    WRITE_ARTIFACT = "write_artifact"
    OPEN_PULL_REQUEST = "open_pull_request"


class PullRequestTarget(BaseModel):
    owner: str = Field(description="The owner of the repository.")
    repo: str = Field(description="The name of the repository.")
    base_branch: str = Field(description="The branch the pull request will be merged into.")


class PullRequestFailure(BaseModel):
    step: WorkflowStep = Field(description="The step that failed.")
    kind: ErrorKind = Field(description="The kind of failure.")
    message: str = Field(description="A human readable description of the failure.")


class PullRequestOutcome(BaseModel):
    """The result of running the workflow."""

    success: bool = Field(description="Whether the pull request was opened.")
    url: str | None = Field(default=None, description="The URL of the pull request.")
    branch: str = Field(description="The branch the workflow created or tried to create.")
    pull_request: PullRequest | None = Field(default=None, description="The pull request that was opened.")
    failure: PullRequestFailure | None = Field(default=None, description="Why the workflow stopped.")


class PullRequestWorkflow:
    github_client: GitHubMomentumClient
    delay: float
    logger: Logger

    def __init__(
        self,
        github_client: GitHubMomentumClient,
        delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        logger: Logger | None = None,
    ):
        self.github_client = github_client
        self.delay = get_replication_delay() if delay is None else delay
        self.sleep: Callable[[float], Awaitable[None]] = sleep
        self.logger = logger or get_logger(name=__name__)

    def resolve_target(self, repository: Repository) -> PullRequestTarget:
        owner, repo = repository.owner_and_name()

        return PullRequestTarget(owner=owner, repo=repo, base_branch=repository.default_branch)

    async def fetch_base(self, target: PullRequestTarget) -> BranchReference:
        return await self.github_client.get_branch(owner=target.owner, repo=target.repo, branch=target.base_branch)

    async def create_branch(self, target: PullRequestTarget, draft: PullRequestDraft, base: BranchReference) -> GitReference:
        return await self.github_client.create_ref(
            owner=target.owner, repo=target.repo, ref=f"{REFS_HEADS_PREFIX}{draft.branch}", sha=base.sha
        )

    async def wait_for_replication(self) -> None:
        await self.sleep(self.delay)

    async def write_artifact(self, target: PullRequestTarget, draft: PullRequestDraft, content: str, commit_message: str) -> FileCommit:
        # The new branch may not be readable yet, so the existing file is looked up on the base branch
        return await self.github_client.write_file(
            owner=target.owner,
            repo=target.repo,
            path=draft.file_path,
            message=commit_message,
            content=content,
            branch=draft.branch,
            sha_lookup_branch=target.base_branch,
        )

    async def open_pull_request(self, target: PullRequestTarget, draft: PullRequestDraft) -> PullRequest:
        return await self.github_client.create_pull_request(
            owner=target.owner,
            repo=target.repo,
            title=draft.title,
            head=draft.branch,
            base=target.base_branch,
            body=draft.description,
        )

    async def execute(self, repository: Repository, draft: PullRequestDraft, content: str, commit_message: str) -> PullRequestOutcome:
        """Run every step in order. The first failure stops the workflow and is returned in the outcome."""

        step: WorkflowStep = WorkflowStep.RESOLVE_TARGET

        try:
            target: PullRequestTarget = self.resolve_target(repository=repository)

            step = WorkflowStep.FETCH_BASE
            base: BranchReference = await self.fetch_base(target=target)

            step = WorkflowStep.CREATE_BRANCH
            _ = await self.create_branch(target=target, draft=draft, base=base)
            self.logger.info(f"Created branch {draft.branch} in {repository.full_name} at {base.sha}")

            step = WorkflowStep.WAIT_FOR_REPLICATION
            await self.wait_for_replication()

            step = WorkflowStep.WRITE_ARTIFACT
            _ = await self.write_artifact(target=target, draft=draft, content=content, commit_message=commit_message)

            step = WorkflowStep.OPEN_PULL_REQUEST
            pull_request: PullRequest = await self.open_pull_request(target=target, draft=draft)
        except MomentumError as e:
            return self._failed(repository=repository, draft=draft, step=step, kind=e.kind, error=e)
        except ValueError as e:
            return self._failed(repository=repository, draft=draft, step=step, kind=ErrorKind.VALIDATION, error=e)

        self.logger.info(f"Opened pull request {pull_request.html_url}")

        return PullRequestOutcome(success=True, url=pull_request.html_url, branch=draft.branch, pull_request=pull_request)

    def _failed(
        self, repository: Repository, draft: PullRequestDraft, step: WorkflowStep, kind: ErrorKind, error: Exception
    ) -> PullRequestOutcome:
        self.logger.warning(f"Pull request workflow for {repository.full_name} failed at {step.value}: {error}")

        return PullRequestOutcome(
            success=False,
            branch=draft.branch,
            failure=PullRequestFailure(step=step, kind=kind, message=user_facing_message(error)),
        )