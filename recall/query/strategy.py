"""
Strategy Selector
=================

Maps a query type to retrieval weights: how much to trust the vector index
versus the entity graph, and whether recent items get a boost.

    relational  -> graph-heavy (0.3 / 0.7)
    temporal    -> vector-heavy with recency boost (0.8 / 0.2)
    exploratory -> balanced (0.5 / 0.5)
    factual     -> vector-heavy (0.7 / 0.3)
    semantic    -> default (0.6 / 0.4)
"""

from dataclasses import dataclass
from typing import Dict

from recall.config.settings import RetrievalWeights

from .models import QueryType, StructuredQuery

RECENCY_BOOST_FACTOR = 1.5


@dataclass(frozen=True)
class StrategySuggestion:
    """Per-query-type override of the base weights."""
    vector_weight: float
    graph_weight: float
    use_recency_boost: bool = False


STRATEGY_TABLE: Dict[QueryType, StrategySuggestion] = {
    QueryType.RELATIONAL: StrategySuggestion(vector_weight=0.3, graph_weight=0.7),
    QueryType.TEMPORAL: StrategySuggestion(vector_weight=0.8, graph_weight=0.2, use_recency_boost=True),
    QueryType.EXPLORATORY: StrategySuggestion(vector_weight=0.5, graph_weight=0.5),
    QueryType.FACTUAL: StrategySuggestion(vector_weight=0.7, graph_weight=0.3),
    QueryType.SEMANTIC: StrategySuggestion(vector_weight=0.6, graph_weight=0.4),
}


def suggest_strategy(query: StructuredQuery) -> StrategySuggestion:
    """Look up the strategy for the query type (SEMANTIC when unknown)."""
    return STRATEGY_TABLE.get(query.query_type, STRATEGY_TABLE[QueryType.SEMANTIC])


def apply_strategy(base: RetrievalWeights, strategy: StrategySuggestion) -> RetrievalWeights:
    """
    Compute effective weights for one search.

    vector/graph come from the strategy; recency is multiplied by
    RECENCY_BOOST_FACTOR when the strategy asks for it; importance and
    entity_overlap are taken from the base weights unchanged.
    """
    recency = base.recency * RECENCY_BOOST_FACTOR if strategy.use_recency_boost else base.recency
    return base.model_copy(update={
        "vector": strategy.vector_weight,
        "graph": strategy.graph_weight,
        "recency": recency,
    })


def select_weights(query: StructuredQuery, base: RetrievalWeights) -> RetrievalWeights:
    return apply_strategy(base, suggest_strategy(query))
