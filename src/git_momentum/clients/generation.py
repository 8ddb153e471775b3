import os
from collections.abc import Sequence
from logging import Logger, getLogger
from typing import Any

from google.genai import Client as GoogleGenaiClient
from google.genai.errors import APIError as GoogleGenaiAPIError
from google.genai.types import GenerateContentConfig, GenerateContentResponse
from pydantic import TypeAdapter, ValidationError

from git_momentum.clients.errors.generation import EmptyGenerationError, GenerationRequestError, MalformedResponseError
from git_momentum.models.analysis import ImprovementSuggestion, RepoAnalysis
from git_momentum.prompts.generation import (
    SUGGESTIONS_COUNT,
    analyze_repository_prompt,
    generate_contextual_markdown_prompt,
    generate_markdown_prompt,
    generate_suggestions_prompt,
)

DEFAULT_ANALYSIS_MODEL = "gemini-3-flash-preview"
DEFAULT_MARKDOWN_MODEL = "gemini-3-pro-preview"

JSON_MIME_TYPE = "application/json"


def get_analysis_model() -> str:
    return os.getenv("GOOGLE_ANALYSIS_MODEL") or DEFAULT_ANALYSIS_MODEL


def get_markdown_model() -> str:
    return os.getenv("GOOGLE_MARKDOWN_MODEL") or DEFAULT_MARKDOWN_MODEL


def get_finish_reason(response: GenerateContentResponse) -> str | None:
    if response.candidates and response.candidates[0].finish_reason:
        return str(response.candidates[0].finish_reason)

    return None


class GenerationClient:
    """Wraps the Google Gen AI text generation API."""

    logger: Logger
    analysis_model: str
    markdown_model: str

    def __init__(
        self,
        client: GoogleGenaiClient | None = None,
        analysis_model: str | None = None,
        markdown_model: str | None = None,
        logger: Logger | None = None,
    ):
        self._client: GoogleGenaiClient | None = client
        self.analysis_model = analysis_model or get_analysis_model()
        self.markdown_model = markdown_model or get_markdown_model()
        self.logger = logger or getLogger(__name__)

    @property
    def client(self) -> GoogleGenaiClient:
        # The API key is read from the environment when the client is created
        if self._client is None:
            try:
                self._client = GoogleGenaiClient()
            except ValueError as e:
                raise GenerationRequestError(action="Create client", message=str(e)) from e

        return self._client

    async def _generate(self, action: str, model: str, prompt: str, config: GenerateContentConfig | None = None) -> str:
        self.logger.info(f"Performing {action} with {model} using a prompt of {len(prompt)} characters.")

        try:
            response: GenerateContentResponse = await self.client.aio.models.generate_content(
                model=model,
                contents=prompt,
                config=config,
            )
        except GoogleGenaiAPIError as e:
            self.logger.warning(f"Generation service returned {e.code} performing {action}: {e.message}")

            raise GenerationRequestError(action=action, message=e.message) from e

        if not (text := response.text):
            raise EmptyGenerationError(action=action, finish_reason=get_finish_reason(response))

        return text

    async def _generate_structured[T](self, action: str, prompt: str, object_type: Any) -> T:  # pyright: ignore[reportAny]
        """Generate a JSON response constrained to `object_type` and validate it before returning it."""

        type_adapter: TypeAdapter[T] = TypeAdapter(object_type)  # pyright: ignore[reportAny]

        try:
            text: str = await self._generate(
                action=action,
                model=self.analysis_model,
                prompt=prompt,
                config=GenerateContentConfig(response_mime_type=JSON_MIME_TYPE, response_schema=object_type),
            )
        except EmptyGenerationError as e:
            raise MalformedResponseError(action=action, message="The response was empty.") from e

        try:
            return type_adapter.validate_json(text)
        except ValidationError as e:
            self.logger.warning(f"Failed to parse structured response for {action}: {e}")

            raise MalformedResponseError(action=action, message=str(e)) from e

    async def analyze_repository(self, repo_name: str, file_names: Sequence[str], readme: str | None = None) -> RepoAnalysis:
        """Produce a health report for a repository from its root listing and README."""

        return await self._generate_structured(
            action="Analyze repository",
            prompt=analyze_repository_prompt(repo_name=repo_name, file_names=file_names, readme=readme),
            object_type=RepoAnalysis,
        )

    async def generate_suggestions(self, analysis: RepoAnalysis) -> list[ImprovementSuggestion]:
        """Suggest up to three small tasks that improve the analysed repository."""

        suggestions: list[ImprovementSuggestion] = await self._generate_structured(
            action="Generate suggestions",
            prompt=generate_suggestions_prompt(analysis=analysis),
            object_type=list[ImprovementSuggestion],
        )

        return suggestions[:SUGGESTIONS_COUNT]

    async def generate_markdown(self, artifact_label: str, repo_info: str, style_context: str) -> str:
        """Generate markdown for an artifact from a one-line repository summary."""

        return await self._generate(
            action="Generate markdown",
            model=self.markdown_model,
            prompt=generate_markdown_prompt(artifact_label=artifact_label, repo_info=repo_info, style_context=style_context),
        )

    async def generate_contextual_markdown(
        self, artifact_label: str, repo_name: str, file_names: Sequence[str], manifest_summary: str
    ) -> str:
        """Generate markdown for an artifact informed by the repository's files and dependency manifest."""

        return await self._generate(
            action="Generate contextual markdown",
            model=self.markdown_model,
            prompt=generate_contextual_markdown_prompt(
                artifact_label=artifact_label,
                repo_name=repo_name,
                file_names=file_names,
                manifest_summary=manifest_summary,
            ),
        )
