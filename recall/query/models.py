"""
Query Models
============

Dataclasses for the structured representation of a free-text query.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class QueryType(str, Enum):
    """Query families, in classification priority order."""
    FACTUAL = "factual"          # "What is X?", "Tell me about Y"
    RELATIONAL = "relational"    # "Who works with X?", "What's related to Y?"
    TEMPORAL = "temporal"        # "Recent updates", "Last week's activity"
    EXPLORATORY = "exploratory"  # "Show me everything about X"
    SEMANTIC = "semantic"        # General similarity search (fallback)


@dataclass(frozen=True)
class TemporalWindow:
    """
    Time constraint extracted from the query.

    Attributes:
        start: Window start (inclusive)
        end: Window end (inclusive)
        label: Relative phrase that produced the window ("last week", ...)
    """
    start: datetime
    end: datetime
    label: str

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "label": self.label,
        }


@dataclass(frozen=True)
class StructuredQuery:
    """
    Parsed query, produced once per request.

    Attributes:
        original_text: Query text as received (original casing)
        query_type: Exactly one QueryType
        entities: Quoted phrases and capitalised words, deduplicated
        keywords: Lowercase content terms, stop words removed, deduplicated
        intent: Human-readable summary, for logging only
        temporal_window: Optional time constraint
        confidence: Parsing confidence [0-1]
    """
    original_text: str
    query_type: QueryType = QueryType.SEMANTIC
    entities: Tuple[str, ...] = field(default_factory=tuple)
    keywords: Tuple[str, ...] = field(default_factory=tuple)
    intent: str = ""
    temporal_window: Optional[TemporalWindow] = None
    confidence: float = 0.5

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")

    def __repr__(self) -> str:
        return (
            f"<StructuredQuery(type={self.query_type.value}, "
            f"entities={list(self.entities)}, keywords={list(self.keywords)}, "
            f"confidence={self.confidence:.2f})>"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_text": self.original_text,
            "query_type": self.query_type.value,
            "entities": list(self.entities),
            "keywords": list(self.keywords),
            "intent": self.intent,
            "temporal_window": self.temporal_window.to_dict() if self.temporal_window else None,
            "confidence": self.confidence,
        }
