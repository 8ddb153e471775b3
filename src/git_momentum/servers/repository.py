from datetime import datetime
from logging import Logger
from typing import Any

from fastmcp.server import FastMCP
from fastmcp.tools import Tool
from pydantic import BaseModel, Field

from git_momentum.clients.errors.github import ClientError
from git_momentum.clients.generation import GenerationClient
from git_momentum.clients.github import GitHubMomentumClient
from git_momentum.clients.models.github import ContentEntry, Repository
from git_momentum.models.analysis import ImprovementSuggestion, RepoAnalysis
from git_momentum.servers.base import BaseViewServer
from git_momentum.servers.shared.annotations import OPTIONAL_REPOSITORY_NAME
from git_momentum.session import Session

README_PATH = "README.md"


class RepositoryReport(BaseModel):
    """The health of a repository and what to do about it."""

    repository: str = Field(description="The full name of the repository.")
    html_url: str = Field(description="The URL of the repository on GitHub.")
    default_branch: str = Field(description="The default branch of the repository.")
    stars: int = Field(description="The number of stars the repository has.")
    pushed_at: datetime | None = Field(default=None, description="When the repository was last pushed to.")
    has_readme: bool = Field(description="Whether a README.md was found and included in the analysis.")
    analysis: RepoAnalysis = Field(description="The health report.")
    suggestions: list[ImprovementSuggestion] = Field(description="Small tasks that improve the health of the repository.")


class RepositoryServer(BaseViewServer):
    """The detail view of a repository, with its health analysis."""

    generation_client: GenerationClient
    last_report: RepositoryReport | None

    def __init__(self, session: Session, generation_client: GenerationClient | None = None, logger: Logger | None = None):
        super().__init__(session=session, logger=logger)
        self.generation_client = generation_client or GenerationClient(logger=logger)
        self.last_report = None

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.analyze_repository))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.get_last_analysis))

        return fastmcp

    async def _get_readme(self, github_client: GitHubMomentumClient, owner: str, repo: str) -> str:
        try:
            return await github_client.get_file_content(owner=owner, repo=repo, path=README_PATH)
        except ClientError as e:
            self.logger.info(f"No README found in {owner}/{repo}, analyzing without it: {e}")
            return ""

    async def analyze_repository(self, repository: OPTIONAL_REPOSITORY_NAME = None) -> RepositoryReport:
        """Analyze the health of a repository: standard files, tooling, recommendations and up to three quick improvements.

        Running it again replaces the previous analysis."""

        selected: Repository = await self._resolve_repository(name=repository)
        github_client: GitHubMomentumClient = await self._github_client()

        self.session.select_repository(repository=selected)

        owner, repo = selected.owner_and_name()

        contents: list[ContentEntry] = await github_client.get_repository_contents(owner=owner, repo=repo)
        file_names: list[str] = [entry.name for entry in contents]

        readme: str = await self._get_readme(github_client=github_client, owner=owner, repo=repo)

        self.logger.info(f"Analyzing {selected.full_name} with {len(file_names)} root entries.")

        analysis: RepoAnalysis = await self.generation_client.analyze_repository(repo_name=selected.name, file_names=file_names, readme=readme)

        suggestions: list[ImprovementSuggestion] = await self.generation_client.generate_suggestions(analysis=analysis)

        self.last_report = RepositoryReport(
            repository=selected.full_name,
            html_url=selected.html_url,
            default_branch=selected.default_branch,
            stars=selected.stargazers_count,
            pushed_at=selected.pushed_at,
            has_readme=bool(readme),
            analysis=analysis,
            suggestions=suggestions,
        )

        return self.last_report

    async def get_last_analysis(self) -> RepositoryReport | None:
        """Get the most recent analysis without running a new one."""

        return self.last_report
