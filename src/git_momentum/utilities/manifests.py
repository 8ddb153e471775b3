from collections.abc import Sequence

from fastmcp.utilities.logging import get_logger

from git_momentum.clients.errors.github import ClientError
from git_momentum.clients.github import GitHubMomentumClient

logger = get_logger(__name__)

# Checked in order, the first manifest that can be read wins
MANIFEST_PRIORITY: list[str] = ["package.json", "go.mod", "requirements.txt", "Cargo.toml", "pom.xml"]

MANIFEST_PREVIEW_CHARACTERS = 3000
NO_MANIFEST = "No manifest found."


def find_manifest_candidates(file_names: Sequence[str]) -> list[str]:
    """Return the manifests present in `file_names`, in priority order, using the file names as listed."""

    listed: dict[str, str] = {file_name.lower(): file_name for file_name in file_names}

    return [listed[manifest.lower()] for manifest in MANIFEST_PRIORITY if manifest.lower() in listed]


def format_manifest_summary(file_name: str, content: str) -> str:
    return f"File: {file_name}\nContent:\n{content[:MANIFEST_PREVIEW_CHARACTERS]}"


async def find_manifest_summary(github_client: GitHubMomentumClient, owner: str, repo: str, file_names: Sequence[str]) -> str:
    """Summarize the highest priority dependency manifest found in the root of the repository."""

    for file_name in find_manifest_candidates(file_names):
        try:
            content: str = await github_client.get_file_content(owner=owner, repo=repo, path=file_name)
        except ClientError as e:
            logger.warning(f"Could not read {file_name} in {owner}/{repo}: {e}")
            continue

        return format_manifest_summary(file_name=file_name, content=content)

    return NO_MANIFEST
