"""Field-weighted ranking of documents for interactive queries.

Scoring for one query term against one document:

* every indexed token equal to the term (exact) or starting with it
  (prefix) is a candidate;
* a candidate scores ``sum_f max(0, w_f * m * (sat(tf) - penalty))`` over
  the fields it occurs in, with ``m`` the exact bonus or the prefix factor;
* a prefix candidate never outscores the weakest possible exact hit (one
  occurrence in the lowest-weighted field at the maximum length penalty),
  so a completed word ranks a document at least as high as its prefix;
* the term contributes its best candidate.

Term contributions are summed and scaled by the share of query terms the
document matched. Results are ordered by descending score, then ascending
document id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import heapq
import logging

from docs_search_core.config import ScoringConfig
from docs_search_core.domain.errors import InvalidArgumentError
from docs_search_core.domain.model import DocumentField, QueryResult
from docs_search_core.search.analyzers import normalize
from docs_search_core.search.document_store import DocumentStore
from docs_search_core.search.indexer import Index
from docs_search_core.search.models import Posting
from docs_search_core.search.stats import length_penalty, saturate


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryTerms:
    """Immutable snapshot of the normalized, de-duplicated query terms."""

    terms: tuple[str, ...]
    seed_text: str

    @classmethod
    def empty(cls, seed_text: str = "") -> QueryTerms:
        return cls((), seed_text)

    def is_empty(self) -> bool:
        return not self.terms


@dataclass
class _DocumentMatch:
    score: float = 0.0
    matched_terms: int = 0
    positions: dict[DocumentField, set[int]] = field(default_factory=dict)
    tokens: dict[str, list[str]] = field(default_factory=dict)

    def record(self, term: str, token: str, posting: Posting) -> None:
        self.positions.setdefault(posting.field, set()).update(posting.positions)
        tokens = self.tokens.setdefault(term, [])
        if token not in tokens:
            tokens.append(token)


class QueryEngine:
    """Score and rank documents of an ``Index`` for free-text queries."""

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()

    def tokenize_query(self, query: str) -> QueryTerms:
        """Return query terms in order of first appearance, without duplicates."""

        seed_text = query.strip() if isinstance(query, str) else ""
        if not seed_text:
            return QueryTerms.empty()

        seen: set[str] = set()
        terms: list[str] = []
        for token in normalize(seed_text):
            if token.text in seen:
                continue
            seen.add(token.text)
            terms.append(token.text)
        return QueryTerms(tuple(terms), seed_text)

    def search(
        self,
        index: Index,
        store: DocumentStore | None,
        query: str,
        limit: int,
    ) -> list[QueryResult]:
        """Return at most ``limit`` results for ``query``.

        Raises:
            InvalidArgumentError: ``limit`` is negative or not an integer.
        """

        _validate_limit(limit)
        query_terms = self.tokenize_query(query)
        if query_terms.is_empty() or limit == 0:
            return []

        store = store if store is not None else index.store
        matches = self._collect_matches(index, query_terms)
        total_terms = len(query_terms.terms)

        results: list[QueryResult] = []
        for document_id, match in matches.items():
            if document_id not in store:
                logger.debug("Dropping posting for document %s missing from store", document_id)
                continue
            coordination = match.matched_terms / total_terms
            results.append(
                QueryResult(
                    document_id=document_id,
                    score=max(0.0, match.score * coordination),
                    matched_fields=frozenset(match.positions),
                    positions={
                        field_name: tuple(sorted(positions)) for field_name, positions in match.positions.items()
                    },
                    matched_terms={term: tuple(tokens) for term, tokens in match.tokens.items()},
                )
            )

        ranked = heapq.nsmallest(limit, results, key=_ranking_key)
        logger.debug(
            "Query %r -> %d candidates, returning %d (terms=%s)",
            query_terms.seed_text,
            len(results),
            len(ranked),
            query_terms.terms,
        )
        return ranked

    def _collect_matches(self, index: Index, query_terms: QueryTerms) -> dict[int, _DocumentMatch]:
        matches: dict[int, _DocumentMatch] = {}
        prefix_ceiling = self._prefix_ceiling(index)
        for term in query_terms.terms:
            best: dict[int, float] = {}
            for token, is_exact in index.expand(term, min_prefix_length=self.config.min_prefix_length):
                factor = self.config.exact_match_bonus if is_exact else self.config.prefix_match_factor
                token_scores: dict[int, float] = {}
                for posting in index.get_postings(token):
                    weight = self._posting_weight(index, posting, factor)
                    token_scores[posting.document_id] = token_scores.get(posting.document_id, 0.0) + weight
                    match = matches.get(posting.document_id)
                    if match is None:
                        match = matches[posting.document_id] = _DocumentMatch()
                    match.record(term, token, posting)
                for document_id, score in token_scores.items():
                    if not is_exact:
                        score = min(score, prefix_ceiling)
                    if document_id not in best or score > best[document_id]:
                        best[document_id] = score

            for document_id, score in best.items():
                match = matches[document_id]
                match.score += score
                match.matched_terms += 1
        return matches

    def _prefix_ceiling(self, index: Index) -> float:
        weakest = min((text_field.boost for text_field in index.schema), default=0.0)
        single_hit = saturate(1, self.config.tf_saturation) - self.config.length_penalty * self.config.max_length_ratio
        return max(0.0, weakest * self.config.exact_match_bonus * single_hit)

    def _posting_weight(self, index: Index, posting: Posting, factor: float) -> float:
        field_boost = index.schema.get_boost(posting.field)
        penalty = length_penalty(
            index.field_length(posting.field, posting.document_id),
            index.average_length(posting.field),
            per_unit=self.config.length_penalty,
            max_ratio=self.config.max_length_ratio,
        )
        weight = field_boost * factor * (saturate(posting.frequency, self.config.tf_saturation) - penalty)
        return max(0.0, weight)


def _ranking_key(result: QueryResult) -> tuple[float, int]:
    return (-result.score, result.document_id)


def _validate_limit(limit: object) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int):
        msg = f"limit must be an integer, got {type(limit).__name__}"
        raise InvalidArgumentError(msg)
    if limit < 0:
        msg = f"limit must be >= 0, got {limit}"
        raise InvalidArgumentError(msg)


_DEFAULT_ENGINE = QueryEngine()


def search(
    index: Index,
    store: DocumentStore | None,
    query: str,
    limit: int,
    *,
    config: ScoringConfig | None = None,
) -> list[QueryResult]:
    """Rank documents of ``index`` for ``query`` (see ``QueryEngine.search``)."""

    engine = QueryEngine(config) if config is not None else _DEFAULT_ENGINE
    return engine.search(index, store, query, limit)
