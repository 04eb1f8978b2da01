"""
Tests for the strategy selector.
"""

import pytest

from recall.config import RetrievalWeights
from recall.query import (
    QueryType,
    StructuredQuery,
    STRATEGY_TABLE,
    RECENCY_BOOST_FACTOR,
    suggest_strategy,
    apply_strategy,
    select_weights,
)


def _query(query_type: QueryType) -> StructuredQuery:
    return StructuredQuery(original_text="x", query_type=query_type)


class TestSuggestStrategy:

    @pytest.mark.parametrize("query_type,vector,graph,boost", [
        (QueryType.RELATIONAL, 0.3, 0.7, False),
        (QueryType.TEMPORAL, 0.8, 0.2, True),
        (QueryType.EXPLORATORY, 0.5, 0.5, False),
        (QueryType.FACTUAL, 0.7, 0.3, False),
        (QueryType.SEMANTIC, 0.6, 0.4, False),
    ])
    def test_weight_table(self, query_type, vector, graph, boost):
        suggestion = suggest_strategy(_query(query_type))
        assert suggestion.vector_weight == vector
        assert suggestion.graph_weight == graph
        assert suggestion.use_recency_boost is boost

    def test_every_query_type_has_a_strategy(self):
        assert set(STRATEGY_TABLE) == set(QueryType)


class TestApplyStrategy:

    def test_overrides_vector_and_graph(self):
        weights = apply_strategy(RetrievalWeights(), suggest_strategy(_query(QueryType.RELATIONAL)))
        assert weights.vector == 0.3
        assert weights.graph == 0.7
        assert weights.recency == pytest.approx(0.15)

    def test_recency_boost(self):
        base = RetrievalWeights(recency=0.2)
        weights = apply_strategy(base, suggest_strategy(_query(QueryType.TEMPORAL)))
        assert weights.recency == pytest.approx(0.2 * RECENCY_BOOST_FACTOR)

    def test_keeps_importance_and_entity_overlap(self):
        base = RetrievalWeights(importance=0.05, entity_overlap=0.3)
        weights = select_weights(_query(QueryType.FACTUAL), base)
        assert weights.importance == 0.05
        assert weights.entity_overlap == 0.3

    def test_base_weights_not_mutated(self):
        base = RetrievalWeights()
        apply_strategy(base, suggest_strategy(_query(QueryType.TEMPORAL)))
        assert base.vector == 0.6
        assert base.recency == 0.15
