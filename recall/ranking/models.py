"""
Ranking Models
==============

RankedResult is a tagged variant: ``source`` decides which payload type
``content`` holds (MemoryItem for VECTOR, GraphHit for GRAPH). The pairing is
checked at construction.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Union

from recall.storage.models import GraphHit, MemoryItem


class ResultSource(str, Enum):
    VECTOR = "vector"
    GRAPH = "graph"


RankedContent = Union[MemoryItem, GraphHit]

_CONTENT_TYPES = {
    ResultSource.VECTOR: MemoryItem,
    ResultSource.GRAPH: GraphHit,
}


@dataclass(frozen=True)
class ResultMetadata:
    matched_entities: List[str] = field(default_factory=list)
    matched_keywords: List[str] = field(default_factory=list)
    relevance_reason: str = ""


@dataclass(frozen=True)
class RankedResult:
    """
    One scored candidate.

    Attributes:
        source: VECTOR or GRAPH
        content: MemoryItem (vector) or GraphHit (graph)
        scores: Individual factor scores plus the required ``combined`` key
        metadata: Matched entities/keywords and a relevance reason
    """
    source: ResultSource
    content: RankedContent
    scores: Dict[str, float]
    metadata: ResultMetadata = field(default_factory=ResultMetadata)

    def __post_init__(self):
        expected = _CONTENT_TYPES.get(self.source)
        if expected is None:
            raise ValueError(f"Unknown result source: {self.source!r}")
        if not isinstance(self.content, expected):
            raise ValueError(
                f"{self.source.value} result requires {expected.__name__} content, "
                f"got {type(self.content).__name__}"
            )
        if "combined" not in self.scores:
            raise ValueError("scores must contain 'combined'")

    @property
    def combined(self) -> float:
        return self.scores["combined"]

    def with_combined(self, combined: float, **extra_scores: float) -> "RankedResult":
        """Copy with a new combined score (and optional extra factors)."""
        return replace(self, scores={**self.scores, **extra_scores, "combined": combined})

    def dedup_key(self) -> str:
        """
        Identity across both schemas.

        Vector: memory id, or the first 50 characters of content.
        Graph: "{label}:{node name}" (node id when unnamed).
        """
        if self.source == ResultSource.VECTOR:
            return self.content.id or self.content.content[:50]
        elif self.source == ResultSource.GRAPH:
            node = self.content.node
            return f"{self.content.label}:{node.name or node.id or 'unknown'}"
        raise ValueError(f"Unknown result source: {self.source!r}")

    def to_dict(self) -> Dict[str, Any]:
        if self.source == ResultSource.VECTOR:
            content = {
                "id": self.content.id,
                "content": self.content.content,
                "created_at": self.content.created_at.isoformat(),
                "conversation_id": self.content.conversation_id,
            }
        elif self.source == ResultSource.GRAPH:
            node = self.content.node
            content = {
                "label": self.content.label,
                "id": node.id,
                "name": node.name,
                "frequency": node.frequency,
                "last_seen": node.last_seen.isoformat() if node.last_seen else None,
            }
        else:
            raise ValueError(f"Unknown result source: {self.source!r}")

        return {
            "source": self.source.value,
            "content": content,
            "scores": dict(self.scores),
            "metadata": {
                "matched_entities": list(self.metadata.matched_entities),
                "matched_keywords": list(self.metadata.matched_keywords),
                "relevance_reason": self.metadata.relevance_reason,
            },
        }
