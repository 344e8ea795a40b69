"""
Schema definition for search indexing.

A documentation record has three searchable fields. Each field is analyzed
independently and carries a fixed weight used by the query engine:
- title: headings and qualified names, the strongest ranking signal
- page: the name of the page a record belongs to
- text: free text, the weakest signal
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from docs_search_core.config import ScoringConfig
from docs_search_core.domain.model import DocumentField


@dataclass(frozen=True)
class TextField:
    """Analyzed text field with its scoring weight."""

    field: DocumentField
    boost: float = 1.0

    @property
    def name(self) -> str:
        return self.field.value

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "boost": self.boost}


@dataclass(frozen=True)
class Schema:
    """Ordered set of indexed fields.

    The order is also the order in which fields are scored, which keeps
    floating point sums identical across rebuilds.
    """

    fields: tuple[TextField, ...]
    name: str = "docs"

    def __post_init__(self) -> None:
        names = [f.field for f in self.fields]
        if len(names) != len(set(names)):
            msg = f"Duplicate fields in schema '{self.name}'"
            raise ValueError(msg)

    def __iter__(self):
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, field: object) -> bool:
        return any(f.field == field for f in self.fields)

    def get_boost(self, field: DocumentField) -> float:
        for text_field in self.fields:
            if text_field.field == field:
                return text_field.boost
        return 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "fields": [f.to_dict() for f in self.fields]}


def create_default_schema(scoring: ScoringConfig | None = None) -> Schema:
    """Create the schema for documentation records (title > page > text)."""

    scoring = scoring or ScoringConfig()
    return Schema(
        fields=(
            TextField(DocumentField.TITLE, boost=scoring.title_weight),
            TextField(DocumentField.PAGE, boost=scoring.page_weight),
            TextField(DocumentField.TEXT, boost=scoring.text_weight),
        ),
    )
