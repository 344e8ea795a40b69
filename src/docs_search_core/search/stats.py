"""Statistical helpers for field-weighted scoring.

The functions here stay independent of the index layout so they can be
unit tested on their own and reused by any scorer.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from docs_search_core.domain.model import DocumentField


@dataclass(frozen=True)
class FieldLengthStats:
    """Aggregated term statistics for a field."""

    field: DocumentField
    total_terms: int
    document_count: int

    @property
    def average_length(self) -> float:
        if self.document_count == 0:
            return 0.0
        return self.total_terms / self.document_count


def compute_field_length_stats(
    field_lengths: Mapping[DocumentField, Mapping[int, int]],
) -> dict[DocumentField, FieldLengthStats]:
    """Return aggregate stats for each field given per-document lengths.

    Only documents where the field holds at least one token are counted,
    so empty section bodies do not drag the text average down.
    """

    stats: dict[DocumentField, FieldLengthStats] = {}
    for field, lengths in field_lengths.items():
        non_empty = [length for length in lengths.values() if length > 0]
        stats[field] = FieldLengthStats(
            field=field,
            total_terms=sum(non_empty),
            document_count=len(non_empty),
        )
    return stats


def saturate(tf: int, k: float) -> float:
    """Saturating term-frequency curve ``tf / (tf + k)``; tends to 1, never exceeds it."""

    if tf <= 0:
        return 0.0
    return tf / (tf + k)


def length_penalty(
    field_length: int,
    avg_field_length: float,
    *,
    per_unit: float,
    max_ratio: float = 4.0,
) -> float:
    """Penalty proportional to field length relative to the field average.

    The ratio is capped so very long fields are treated as ``max_ratio``
    times the average.
    """

    if per_unit <= 0 or field_length <= 0:
        return 0.0
    raw_ratio = field_length / max(avg_field_length, 1e-9)
    return per_unit * min(raw_ratio, max_ratio)
