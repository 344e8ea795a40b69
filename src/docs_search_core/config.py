"""Centralized configuration for docs-search-core using Pydantic Settings."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScoringConfig(BaseModel):
    """Ranking constants for the query engine.

    The defaults keep two orderings for every corpus: a single exact title
    hit outranks any text-only match, and a single exact hit outranks any
    prefix-only hit.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    title_weight: Annotated[
        float,
        Field(gt=0.0, le=100.0, description="Field weight for title occurrences (strongest signal)"),
    ] = 5.0

    page_weight: Annotated[
        float,
        Field(gt=0.0, le=100.0, description="Field weight for page name occurrences"),
    ] = 2.0

    text_weight: Annotated[
        float,
        Field(gt=0.0, le=100.0, description="Field weight for free text occurrences (weakest signal)"),
    ] = 1.0

    exact_match_bonus: Annotated[
        float,
        Field(gt=0.0, le=10.0, description="Multiplier applied when an indexed token equals the query term"),
    ] = 1.0

    prefix_match_factor: Annotated[
        float,
        Field(ge=0.0, le=1.0, description="Multiplier applied when an indexed token only starts with the query term"),
    ] = 0.05

    tf_saturation: Annotated[
        float,
        Field(gt=0.0, le=10.0, description="Half-saturation constant k in tf / (tf + k)"),
    ] = 1.0

    length_penalty: Annotated[
        float,
        Field(ge=0.0, le=0.1, description="Penalty per unit of field length relative to the field average"),
    ] = 0.02

    max_length_ratio: Annotated[
        float,
        Field(ge=1.0, le=16.0, description="Cap on field length / average length used by the penalty"),
    ] = 4.0

    min_prefix_length: Annotated[
        int,
        Field(ge=1, le=32, description="Shortest query term that is also expanded as a prefix"),
    ] = 1

    @model_validator(mode="after")
    def _penalty_below_single_hit(self) -> ScoringConfig:
        single_hit = 1.0 / (1.0 + self.tf_saturation)
        if self.length_penalty * self.max_length_ratio >= single_hit:
            msg = "length_penalty * max_length_ratio must stay below the score of a single occurrence"
            raise ValueError(msg)
        return self


class SnippetConfig(BaseModel):
    """Snippet/highlight preferences."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    window_size: Annotated[
        int,
        Field(ge=0, le=5000, description="Characters of text context returned around the first match"),
    ] = 160

    open_marker: Annotated[
        str,
        Field(description="Marker inserted before each highlighted token"),
    ] = "[["

    close_marker: Annotated[
        str,
        Field(description="Marker inserted after each highlighted token"),
    ] = "]]"


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Nested sections use ``__`` as delimiter, for example
    ``DOCS_SEARCH_SCORING__PREFIX_MATCH_FACTOR=0.1``.
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCS_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    corpus_name: str = Field(default="docs", description="Label attached to metrics and log records")
    log_level: str = Field(default="info", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit structured JSON log lines")
    strict_ingest: bool = Field(default=False, description="Fail the whole batch on the first malformed record")
    default_limit: int = Field(default=20, ge=0, description="Result cap used when a caller does not pass one")
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    snippet: SnippetConfig = Field(default_factory=SnippetConfig)


def get_settings() -> Settings:
    """Load settings from the environment (and ``.env`` when present)."""

    return Settings()
