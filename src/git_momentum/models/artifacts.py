from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

BRAND = "Evergreeners Momentum"


class GenerationMode(str, Enum):
    """How an artifact is generated."""

    TEMPLATE = "template"
    """A generic, well-formatted template built from the repository metadata only."""

    CONTEXTUAL = "contextual"
    """A document informed by the repository's file listing and dependency manifest."""


class ArtifactTemplate(BaseModel):
    """A documentation file that can be generated and proposed to a repository."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="The identifier of the template.")
    label: str = Field(description="The human readable name of the template.")
    path: str = Field(description="The path the generated file is written to.")


ARTIFACT_TEMPLATES: list[ArtifactTemplate] = [
    ArtifactTemplate(id="README.md", label="README.md", path="README.md"),
    ArtifactTemplate(id="bug_report.md", label="Bug Report Template", path=".github/ISSUE_TEMPLATE/bug_report.md"),
    ArtifactTemplate(id="feature_request.md", label="Feature Request Template", path=".github/ISSUE_TEMPLATE/feature_request.md"),
    ArtifactTemplate(id="CONTRIBUTING.md", label="CONTRIBUTING.md", path="CONTRIBUTING.md"),
    ArtifactTemplate(id="LICENSE", label="LICENSE", path="LICENSE"),
    ArtifactTemplate(id="SECURITY.md", label="SECURITY.md", path="SECURITY.md"),
    ArtifactTemplate(id="CHANGELOG.md", label="CHANGELOG.md", path="CHANGELOG.md"),
    ArtifactTemplate(id="ARCHITECTURE.md", label="ARCHITECTURE.md", path="ARCHITECTURE.md"),
]


def get_artifact_template(template_id: str) -> ArtifactTemplate:
    """Get a template by id. Unknown ids are treated as a file name at the root of the repository."""

    for template in ARTIFACT_TEMPLATES:
        if template.id == template_id:
            return template

    return ArtifactTemplate(id=template_id, label=template_id, path=template_id)


class GeneratedArtifact(BaseModel):
    """Markdown generated for a repository."""

    repository: str = Field(description="The name of the repository the artifact was generated for.")
    template: ArtifactTemplate = Field(description="The template that was generated.")
    mode: GenerationMode = Field(description="How the artifact was generated.")
    content: str = Field(description="The generated markdown.")


class PullRequestDraft(BaseModel):
    """The parameters of a pull request that is about to be opened, for the user to review."""

    title: str = Field(description="The title of the pull request.")
    description: str = Field(description="The body of the pull request.")
    branch: str = Field(description="The name of the branch that will be created.")
    file_path: str = Field(description="The path the artifact will be written to.")
