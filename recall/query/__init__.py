"""
Query understanding: parsing and strategy selection.
"""

from .models import QueryType, StructuredQuery, TemporalWindow
from .parser import QueryParser, parse_query, STOP_WORDS, QUERY_TYPE_PATTERNS
from .strategy import (
    StrategySuggestion,
    STRATEGY_TABLE,
    RECENCY_BOOST_FACTOR,
    suggest_strategy,
    apply_strategy,
    select_weights,
)

__all__ = [
    "QueryType",
    "StructuredQuery",
    "TemporalWindow",
    "QueryParser",
    "parse_query",
    "STOP_WORDS",
    "QUERY_TYPE_PATTERNS",
    "StrategySuggestion",
    "STRATEGY_TABLE",
    "RECENCY_BOOST_FACTOR",
    "suggest_strategy",
    "apply_strategy",
    "select_weights",
]
