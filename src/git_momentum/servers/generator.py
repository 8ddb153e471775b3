from collections.abc import Callable
from logging import Logger
from typing import Any

from fastmcp.exceptions import ToolError
from fastmcp.server import FastMCP
from fastmcp.tools import Tool

from git_momentum.clients.generation import GenerationClient
from git_momentum.clients.github import GitHubMomentumClient
from git_momentum.clients.models.github import ContentEntry, Repository
from git_momentum.errors import MomentumError
from git_momentum.models.artifacts import (
    ARTIFACT_TEMPLATES,
    ArtifactTemplate,
    GeneratedArtifact,
    GenerationMode,
    PullRequestDraft,
    get_artifact_template,
)
from git_momentum.servers.base import BaseViewServer
from git_momentum.servers.shared.annotations import GENERATION_MODE, REPOSITORY_NAME, TEMPLATE_ID
from git_momentum.servers.shared.errors import NoPullRequestDraftError, NothingGeneratedError
from git_momentum.session import Session
from git_momentum.utilities.manifests import find_manifest_summary
from git_momentum.workflows.pull_request import (
    BranchNamer,
    PullRequestOutcome,
    PullRequestWorkflow,
    commit_message_for,
    prepare_draft,
)

WorkflowFactory = Callable[[GitHubMomentumClient], PullRequestWorkflow]


def summarize_repository(repository: Repository) -> str:
    return f"Repo Name: {repository.name}, Language: {repository.language}, Desc: {repository.description}"


def style_context_for(template: ArtifactTemplate) -> str:
    return f"Professional GitHub standard {template.label}. Use clean formatting and clear placeholders."


class GeneratorServer(BaseViewServer):
    """Generates documentation artifacts and proposes them to a repository as a pull request."""

    generation_client: GenerationClient
    workflow_factory: WorkflowFactory
    branch_namer: BranchNamer

    artifact: GeneratedArtifact | None
    draft: PullRequestDraft | None

    def __init__(
        self,
        session: Session,
        generation_client: GenerationClient | None = None,
        workflow_factory: WorkflowFactory | None = None,
        branch_namer: BranchNamer | None = None,
        logger: Logger | None = None,
    ):
        super().__init__(session=session, logger=logger)
        self.generation_client = generation_client or GenerationClient(logger=logger)
        self.workflow_factory = workflow_factory or (lambda github_client: PullRequestWorkflow(github_client=github_client, logger=logger))
        self.branch_namer = branch_namer or BranchNamer()
        self.artifact = None
        self.draft = None

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.list_templates))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.generate_artifact))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.preview_pull_request))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.open_pull_request))

        return fastmcp

    async def list_templates(self) -> list[ArtifactTemplate]:
        """List the documentation artifacts that can be generated and where each one is written."""

        return ARTIFACT_TEMPLATES

    async def _generate_from_template(self, repository: Repository, template: ArtifactTemplate) -> str:
        return await self.generation_client.generate_markdown(
            artifact_label=template.label,
            repo_info=summarize_repository(repository=repository),
            style_context=style_context_for(template=template),
        )

    async def _generate_from_context(self, repository: Repository, template: ArtifactTemplate) -> str:
        github_client: GitHubMomentumClient = await self._github_client()
        owner, repo = repository.owner_and_name()

        contents: list[ContentEntry] = await github_client.get_repository_contents(owner=owner, repo=repo)
        file_names: list[str] = [entry.name for entry in contents]

        manifest_summary: str = await find_manifest_summary(github_client=github_client, owner=owner, repo=repo, file_names=file_names)

        return await self.generation_client.generate_contextual_markdown(
            artifact_label=template.label,
            repo_name=repo,
            file_names=file_names,
            manifest_summary=manifest_summary,
        )

    async def generate_artifact(
        self,
        repository: REPOSITORY_NAME,
        template_id: TEMPLATE_ID = "README.md",
        mode: GENERATION_MODE = GenerationMode.TEMPLATE,
    ) -> GeneratedArtifact:
        """Generate a documentation artifact, like a README or a bug report template, for one of your repositories.

        The result replaces any previously generated artifact and must be previewed with `preview_pull_request`
        before it can be proposed to the repository."""

        selected: Repository = await self._resolve_repository(name=repository)
        template: ArtifactTemplate = get_artifact_template(template_id=template_id)

        self.artifact = None
        self.draft = None

        self.logger.info(f"Generating {template.label} for {selected.full_name} in {mode.value} mode.")

        try:
            if mode == GenerationMode.CONTEXTUAL:
                content: str = await self._generate_from_context(repository=selected, template=template)
            else:
                content = await self._generate_from_template(repository=selected, template=template)
        except MomentumError as e:
            raise ToolError(f"Generation failed: {e}") from e

        self.artifact = GeneratedArtifact(repository=selected.full_name, template=template, mode=mode, content=content)

        return self.artifact

    async def preview_pull_request(self) -> PullRequestDraft:
        """Prepare the title, description, branch and file path of the pull request for the generated artifact."""

        if self.artifact is None:
            raise NothingGeneratedError

        self.draft = prepare_draft(template=self.artifact.template, branch_namer=self.branch_namer)

        return self.draft

    async def open_pull_request(self) -> PullRequestOutcome:
        """Create the previewed branch, commit the generated artifact to it and open a pull request into the default branch.

        A failure stops at the failing step and reports it. A branch created before the failure is left in place."""

        if self.artifact is None:
            raise NothingGeneratedError

        if self.draft is None:
            raise NoPullRequestDraftError

        repository: Repository = await self._resolve_repository(name=self.artifact.repository)
        workflow: PullRequestWorkflow = self.workflow_factory(await self._github_client())

        # A draft is only ever used once, a retry needs a new preview and so a new branch
        draft, self.draft = self.draft, None

        return await workflow.execute(
            repository=repository,
            draft=draft,
            content=self.artifact.content,
            commit_message=commit_message_for(template=self.artifact.template),
        )
