from datetime import datetime
from typing import TYPE_CHECKING, Any, Literal, Self

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from githubkit.versions.v2022_11_28.models import BranchWithProtection as GitHubKitBranchWithProtection
    from githubkit.versions.v2022_11_28.models import FileCommit as GitHubKitFileCommit
    from githubkit.versions.v2022_11_28.models import GitRef as GitHubKitGitRef
    from githubkit.versions.v2022_11_28.models import PrivateUser as GitHubKitPrivateUser
    from githubkit.versions.v2022_11_28.models import PublicUser as GitHubKitPublicUser
    from githubkit.versions.v2022_11_28.models import PullRequest as GitHubKitPullRequest
    from githubkit.versions.v2022_11_28.models import Repository as GitHubKitRepository

REFS_HEADS_PREFIX = "refs/heads/"


class User(BaseModel):
    """The authenticated GitHub account."""

    model_config = ConfigDict(frozen=True)

    login: str = Field(description="The login of the user.")
    name: str | None = Field(default=None, description="The display name of the user.")
    avatar_url: str = Field(description="The URL of the user's avatar.")
    html_url: str = Field(description="The URL of the user's profile.")

    @classmethod
    def from_githubkit_user(cls, user: "GitHubKitPrivateUser | GitHubKitPublicUser") -> Self:
        return cls(login=user.login, name=user.name, avatar_url=user.avatar_url, html_url=user.html_url)


class RepositoryOwner(BaseModel):
    """The owner of a repository."""

    model_config = ConfigDict(frozen=True)

    login: str = Field(description="The login of the owner.")
    avatar_url: str | None = Field(default=None, description="The URL of the owner's avatar.")


class Repository(BaseModel):
    """A repository the authenticated user has access to."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="The ID of the repository.")
    name: str = Field(description="The name of the repository.")
    full_name: str = Field(description="The full name of the repository, in the form owner/name.")
    description: str | None = Field(default=None, description="The description of the repository.")
    html_url: str = Field(description="The URL of the repository on GitHub.")
    updated_at: datetime | None = Field(default=None, description="The date and time the repository was updated.")
    pushed_at: datetime | None = Field(default=None, description="The date and time the repository was pushed to.")
    stargazers_count: int = Field(default=0, description="The number of stars the repository has.")
    language: str | None = Field(default=None, description="The primary language of the repository.")
    fork: bool = Field(default=False, description="Whether the repository is a fork.")
    private: bool = Field(default=False, description="Whether the repository is private.")
    default_branch: str = Field(default="main", description="The default branch of the repository.")
    owner: RepositoryOwner | None = Field(default=None, description="The owner of the repository.")

    @classmethod
    def from_githubkit_repository(cls, repository: "GitHubKitRepository") -> Self:
        return cls(
            id=repository.id,
            name=repository.name,
            full_name=repository.full_name,
            description=repository.description,
            html_url=repository.html_url,
            updated_at=repository.updated_at,
            pushed_at=repository.pushed_at,
            stargazers_count=repository.stargazers_count,
            language=repository.language,
            fork=repository.fork,
            private=repository.private,
            default_branch=repository.default_branch,
            owner=RepositoryOwner(login=repository.owner.login, avatar_url=repository.owner.avatar_url),
        )

    def owner_and_name(self) -> tuple[str, str]:
        """Split the full name of the repository into its owner and name."""

        parts = self.full_name.split("/")

        if len(parts) != 2 or not all(parts):  # noqa: PLR2004
            msg = f"Expected a full name of the form owner/name, got {self.full_name}"
            raise ValueError(msg)

        return parts[0], parts[1]


class ContentEntry(BaseModel):
    """An entry in a directory listing."""

    name: str = Field(description="The name of the entry.")
    path: str = Field(description="The path of the entry.")
    type: Literal["file", "dir", "symlink", "submodule"] = Field(description="The type of the entry.")
    sha: str | None = Field(default=None, description="The blob SHA of the entry.")
    size: int | None = Field(default=None, description="The size of the entry in bytes.")

    @classmethod
    def from_content_item(cls, item: Any) -> Self:  # pyright: ignore[reportAny]
        return cls(name=item.name, path=item.path, type=item.type, sha=item.sha, size=item.size)  # pyright: ignore[reportAny]


class BranchReference(BaseModel):
    """A branch and the commit it points to."""

    name: str = Field(description="The name of the branch.")
    sha: str = Field(description="The SHA of the latest commit on the branch.")

    @classmethod
    def from_branch(cls, branch: "GitHubKitBranchWithProtection") -> Self:
        return cls(name=branch.name, sha=branch.commit.sha)


class GitReference(BaseModel):
    """A git reference."""

    ref: str = Field(description="The fully qualified name of the reference.")
    sha: str = Field(description="The SHA the reference points to.")

    @property
    def branch(self) -> str:
        return self.ref.removeprefix(REFS_HEADS_PREFIX)

    @classmethod
    def from_git_ref(cls, git_ref: "GitHubKitGitRef") -> Self:
        return cls(ref=git_ref.ref, sha=git_ref.object_.sha)


class FileCommit(BaseModel):
    """The result of writing a file to a branch."""

    path: str = Field(description="The path of the file that was written.")
    sha: str | None = Field(default=None, description="The blob SHA of the written file.")
    commit_sha: str | None = Field(default=None, description="The SHA of the commit that wrote the file.")

    @classmethod
    def from_file_commit(cls, path: str, file_commit: "GitHubKitFileCommit") -> Self:
        content = file_commit.content
        return cls(
            path=path,
            sha=content.sha if content else None,
            commit_sha=file_commit.commit.sha,
        )


class PullRequest(BaseModel):
    """A pull request that was opened."""

    number: int = Field(description="The number of the pull request.")
    title: str = Field(description="The title of the pull request.")
    html_url: str = Field(description="The URL of the pull request on GitHub.")
    head: str = Field(description="The branch the changes come from.")
    base: str = Field(description="The branch the changes will be merged into.")

    @classmethod
    def from_githubkit_pull_request(cls, pull_request: "GitHubKitPullRequest") -> Self:
        return cls(
            number=pull_request.number,
            title=pull_request.title,
            html_url=pull_request.html_url,
            head=pull_request.head.ref,
            base=pull_request.base.ref,
        )
