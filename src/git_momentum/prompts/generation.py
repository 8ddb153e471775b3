from collections.abc import Sequence

import yaml

from git_momentum.models.analysis import RepoAnalysis

README_PREVIEW_CHARACTERS = 1000
NO_README = "None found"

SUGGESTIONS_COUNT = 3
SUGGESTIONS_MAX_MINUTES = 20

ANALYZE_REPOSITORY = """
Analyze the following repository structure and provide a health report.
Repository: {repo_name}
Files: {file_names}
README content preview: {readme_preview}

Return a JSON object representing the repo health.
"""

GENERATE_SUGGESTIONS = """
Based on this repository analysis:
{analysis}

Suggest {count} micro-improvements that a developer can do in under {minutes} minutes to improve the repo health.
These must be real, actionable tasks like adding a specific section to a README or creating a missing template.
"""

GENERATE_MARKDOWN = """
Generate a professional {artifact_label} for a GitHub repository.
Repository context: {repo_info}
Additional details: {style_context}
Ensure it follows best practices and is highly detailed.
Output ONLY the markdown content.
"""

GENERATE_CONTEXTUAL_MARKDOWN = """
Generate a professional {artifact_label} for the GitHub repository "{repo_name}".
Base it on what the repository actually contains, do not invent features, commands or dependencies.

Files in the root of the repository: {file_names}

Dependency manifest:
{manifest_summary}

Use the manifest to describe the real installation steps, dependencies and scripts of the project.
Where information is missing, leave a clear placeholder instead of guessing.
Output ONLY the markdown content.
"""


def analyze_repository_prompt(repo_name: str, file_names: Sequence[str], readme: str | None = None) -> str:
    readme_preview: str = readme[:README_PREVIEW_CHARACTERS] if readme else NO_README

    return ANALYZE_REPOSITORY.format(repo_name=repo_name, file_names=", ".join(file_names), readme_preview=readme_preview).strip()


def generate_suggestions_prompt(analysis: RepoAnalysis) -> str:
    dumped_analysis: str = yaml.safe_dump(analysis.model_dump(), sort_keys=False, indent=1, width=400)

    return GENERATE_SUGGESTIONS.format(analysis=dumped_analysis, count=SUGGESTIONS_COUNT, minutes=SUGGESTIONS_MAX_MINUTES).strip()


def generate_markdown_prompt(artifact_label: str, repo_info: str, style_context: str) -> str:
    return GENERATE_MARKDOWN.format(artifact_label=artifact_label, repo_info=repo_info, style_context=style_context).strip()


def generate_contextual_markdown_prompt(artifact_label: str, repo_name: str, file_names: Sequence[str], manifest_summary: str) -> str:
    return GENERATE_CONTEXTUAL_MARKDOWN.format(
        artifact_label=artifact_label,
        repo_name=repo_name,
        file_names=", ".join(file_names),
        manifest_summary=manifest_summary,
    ).strip()
