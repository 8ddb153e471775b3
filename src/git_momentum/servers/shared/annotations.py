from typing import Annotated

from pydantic import Field

from git_momentum.models.artifacts import GenerationMode
from git_momentum.session import View
from git_momentum.utilities.activity import RepositoryFilter

REPOSITORY_NAME = Annotated[str, Field(description="The name or full name (owner/name) of one of your repositories.")]
OPTIONAL_REPOSITORY_NAME = Annotated[
    str | None,
    Field(description="The name or full name (owner/name) of one of your repositories. Defaults to the selected repository."),
]

TOKEN = Annotated[str, Field(description="A GitHub personal access token with Contents and Pull Requests access.")]
VIEW = Annotated[View, Field(description="The view to switch to.")]

REPOSITORY_FILTER = Annotated[
    RepositoryFilter,
    Field(description="Which repositories to include: `all`, `owner` for repositories that are not forks, or `fork`."),
]
SEARCH_QUERY = Annotated[str | None, Field(description="Only include repositories whose name or description contains this text.")]

TEMPLATE_ID = Annotated[str, Field(description="The id of the artifact template, see `list_templates`.")]
GENERATION_MODE = Annotated[
    GenerationMode,
    Field(
        description="`template` generates a generic document from the repository metadata, "
        + "`contextual` reads the repository's files and dependency manifest first."
    ),
]
