"""
Retrieval Models
================

Request options and the engine's output.
"""

import copy
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from recall.config.settings import RetrievalWeights
from recall.query.models import StructuredQuery
from recall.ranking.models import RankedResult


@dataclass(frozen=True)
class SearchOptions:
    """
    Per-call options for RetrievalService.search.

    Attributes:
        conversation_id: Restrict vector search to one conversation
        limit: Max results (default: config.final_limit)
        include_graph: Query the entity graph as well (default: True)
        force_refresh: Bypass the cache lookup (the result is still cached)
    """
    conversation_id: Optional[str] = None
    limit: Optional[int] = None
    include_graph: bool = True
    force_refresh: bool = False

    def __post_init__(self):
        if self.limit is not None:
            if isinstance(self.limit, bool) or not isinstance(self.limit, int):
                raise ValueError(f"limit must be an integer, got {self.limit!r}")
            if self.limit <= 0:
                raise ValueError(f"limit must be > 0, got {self.limit}")


@dataclass(frozen=True)
class RetrievalMetadata:
    """
    Counters and timing for one search.

    Attributes:
        vector_count: Hits returned by the vector branch
        graph_count: Hits returned by the graph branch (after graph dedupe)
        total_candidates: Results after merge/dedupe, before threshold
        final_count: Results returned
        execution_time_ms: Wall-clock time of the search
        cache_hit: True when served from the cache
        weights_used: Effective weights after strategy selection
    """
    vector_count: int
    graph_count: int
    total_candidates: int
    final_count: int
    execution_time_ms: float
    weights_used: RetrievalWeights
    cache_hit: bool = False
    vector_error: Optional[str] = None
    graph_error: Optional[str] = None


@dataclass(frozen=True)
class RetrievalResult:
    """Ranked results for one query, with metadata."""
    query: StructuredQuery
    results: List[RankedResult] = field(default_factory=list)
    metadata: Optional[RetrievalMetadata] = None

    def __repr__(self) -> str:
        hit = self.metadata.cache_hit if self.metadata else False
        return (
            f"<RetrievalResult(type={self.query.query_type.value}, "
            f"results={len(self.results)}, cache_hit={hit})>"
        )

    def snapshot(self) -> "RetrievalResult":
        """Deep copy: no list or scores dict is shared with the original."""
        return copy.deepcopy(self)

    def as_cache_hit(self) -> "RetrievalResult":
        """Copy flagged as served from the cache; the stored entry is left untouched."""
        result = self.snapshot()
        if result.metadata is None:
            return result
        return replace(result, metadata=replace(result.metadata, cache_hit=True))

    def to_dict(self) -> Dict[str, Any]:
        metadata = None
        if self.metadata is not None:
            metadata = {
                "vector_count": self.metadata.vector_count,
                "graph_count": self.metadata.graph_count,
                "total_candidates": self.metadata.total_candidates,
                "final_count": self.metadata.final_count,
                "execution_time_ms": self.metadata.execution_time_ms,
                "cache_hit": self.metadata.cache_hit,
                "weights_used": self.metadata.weights_used.model_dump(),
                "vector_error": self.metadata.vector_error,
                "graph_error": self.metadata.graph_error,
            }
        return {
            "query": self.query.to_dict(),
            "results": [r.to_dict() for r in self.results],
            "metadata": metadata,
        }
