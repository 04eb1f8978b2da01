from .models import RankedResult, ResultMetadata, ResultSource
from .ranker import (
    DEFAULT_WEIGHTS,
    DIVERSITY_PENALTY,
    recency_score,
    entity_overlap,
    graph_relevance,
    rank_vector_results,
    rank_graph_results,
    deduplicate_results,
    apply_diversity_penalty,
    merge_and_rank,
    filter_by_threshold,
    top_n,
)

__all__ = [
    "RankedResult",
    "ResultMetadata",
    "ResultSource",
    "DEFAULT_WEIGHTS",
    "DIVERSITY_PENALTY",
    "recency_score",
    "entity_overlap",
    "graph_relevance",
    "rank_vector_results",
    "rank_graph_results",
    "deduplicate_results",
    "apply_diversity_penalty",
    "merge_and_rank",
    "filter_by_threshold",
    "top_n",
]
