"""Domain models for the documentation search core.

Value objects are immutable (frozen=True) so a corpus version and the
results computed against it can be shared freely between threads.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Category(str, Enum):
    """Kinds of records emitted by static documentation generators."""

    SECTION = "section"
    FUNCTION = "function"
    TYPE = "type"
    PAGE = "page"
    OTHER = "other"

    @classmethod
    def coerce(cls, value: Any) -> Category:
        """Map producer values onto the vocabulary; anything unknown becomes ``OTHER``."""

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.OTHER
        return cls.OTHER


class DocumentField(str, Enum):
    """Document fields that are indexed for search."""

    TITLE = "title"
    PAGE = "page"
    TEXT = "text"


class Document(BaseModel):
    """A validated documentation record with a stable identifier.

    Unknown keys from the producer are kept as extra attributes (see
    ``extras``) so newer record formats pass through untouched.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    HEADING_FIELD: ClassVar[str] = "page/title"

    id: int = Field(ge=0)
    location: str
    page: str = ""
    title: str = ""
    text: str = ""
    category: Category = Category.OTHER

    @field_validator("page", "title", "text", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> Category:
        return Category.coerce(value)

    @model_validator(mode="after")
    def _require_heading(self) -> Document:
        if not self.page.strip() and not self.title.strip():
            raise ValueError("requires a non-blank page or title")
        return self

    @property
    def extras(self) -> dict[str, Any]:
        """Producer fields outside the known record shape."""

        return dict(self.model_extra or {})

    def field_value(self, field: DocumentField) -> str:
        return getattr(self, field.value)


class QueryResult(BaseModel):
    """A scored match for one document, produced fresh for every query."""

    model_config = ConfigDict(frozen=True)

    document_id: int
    score: float = Field(ge=0.0)
    matched_fields: frozenset[DocumentField] = Field(default_factory=frozenset)
    positions: dict[DocumentField, tuple[int, ...]] = Field(default_factory=dict)
    matched_terms: dict[str, tuple[str, ...]] = Field(default_factory=dict)

    def positions_for(self, field: DocumentField) -> tuple[int, ...]:
        return self.positions.get(field, ())
