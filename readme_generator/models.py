"""
Pydantic models for the API payloads and for the GitHub records we read.

API:
  Request:  {"repoUrl": "..."}
  Response: {"readme": "..."}
  Error:    {"error": "..."}

GitHub payloads are validated here at the boundary; fields we never use are
ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ── API payloads ───────────────────────────────────────────────
class GenerateReadmeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    repo_url: str = Field(
        "", alias="repoUrl", description="URL of a public GitHub repository"
    )


class GenerateReadmeResponse(BaseModel):
    readme: str = Field(..., description="Generated README in Markdown")


class ErrorResponse(BaseModel):
    error: str


# ── GitHub records ─────────────────────────────────────────────
class RepoMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    full_name: str | None = None
    description: str | None = None
    language: str | None = None
    default_branch: str = "main"


class DirectoryEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    type: str

    @property
    def display_name(self) -> str:
        return self.name + "/" if self.type == "dir" else self.name


class Manifest(BaseModel):
    """The subset of ``package.json`` that feeds the prompt."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    dependencies: dict[str, Any] = Field(default_factory=dict)
    scripts: dict[str, Any] = Field(default_factory=dict)

    # A hand-edited package.json may carry odd values; drop just the bad field.
    @field_validator("name", mode="before")
    @classmethod
    def name_or_none(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @field_validator("dependencies", "scripts", mode="before")
    @classmethod
    def mapping_or_empty(cls, value: Any) -> dict[str, Any]:
        if not isinstance(value, dict):
            return {}
        return {str(key): val for key, val in value.items()}


# language name → bytes of code
LanguageMap = dict[str, int]


class RepositorySnapshot(BaseModel):
    """Everything the GitHub fan-out produced for one repository.

    Each record is ``None`` when its fetch failed (or, for the manifest,
    when the file does not exist). ``fetch_error`` describes the first
    failure, if any.
    """

    metadata: RepoMetadata | None = None
    languages: LanguageMap | None = None
    root_contents: list[DirectoryEntry] = Field(default_factory=list)
    manifest: Manifest | None = None
    fetch_error: str | None = None
