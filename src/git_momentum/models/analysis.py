from typing import Literal

from pydantic import BaseModel, Field


class Completeness(BaseModel):
    """Which of the standard community files the repository has."""

    readme: bool = Field(description="Whether the repository has a README.")
    contributing: bool = Field(description="Whether the repository has contributing guidelines.")
    license: bool = Field(description="Whether the repository has a license.")
    security: bool = Field(description="Whether the repository has a security policy.")
    changelog: bool = Field(description="Whether the repository has a changelog.")
    code_of_conduct: bool = Field(description="Whether the repository has a code of conduct.")


class Metrics(BaseModel):
    """Facts about the code in the repository."""

    language: str = Field(description="The primary language of the repository.")
    framework: str | None = Field(default=None, description="The framework the repository is built on, if any.")
    package_manager: str | None = Field(default=None, description="The package manager the repository uses, if any.")
    has_tests: bool = Field(description="Whether the repository contains tests.")
    todo_count: int = Field(ge=0, description="The number of TODO comments found in the repository.")


class RepoAnalysis(BaseModel):
    """A health report for a repository."""

    health_score: int = Field(ge=0, le=100, description="Score from 0 to 100.")
    completeness: Completeness = Field(description="Which standard community files are present.")
    metrics: Metrics = Field(description="Facts about the code in the repository.")
    recommendations: list[str] = Field(description="Free-text recommendations to improve the repository.")


class ImprovementSuggestion(BaseModel):
    """A small task that improves the health of a repository."""

    id: str = Field(description="A short unique identifier for the suggestion.")
    type: Literal["documentation", "structure", "hygiene"] = Field(description="The category of the suggestion.")
    title: str = Field(description="The title of the suggestion.")
    description: str = Field(description="What to do and why.")
    difficulty: Literal["easy", "medium", "hard"] = Field(description="How hard the task is.")
    estimated_time: str = Field(description="How long the task takes, for example '10 minutes'.")
