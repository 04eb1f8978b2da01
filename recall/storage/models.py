"""
Storage Models
==============

Raw hits returned by the external stores, before ranking.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class VectorHit:
    """
    Raw result from the vector store.

    Attributes:
        id: Memory identifier (may be empty for ad-hoc content)
        content: Memory text
        similarity: Cosine similarity to the query embedding [0-1]
        created_at: Creation timestamp
        importance: Importance on a 1-10 scale
        access_count: Number of times the memory was read
        user_id: Owner of the memory
        conversation_id: Conversation the memory was captured in
        metadata: Store-specific payload
    """
    id: str
    content: str
    similarity: float
    created_at: datetime
    importance: int = 5
    access_count: int = 0
    user_id: str = ""
    conversation_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"<VectorHit(id={self.id[:8]}..., sim={self.similarity:.3f}, "
            f"importance={self.importance})>"
        )


@dataclass
class GraphNode:
    """
    Node returned by the graph store.

    Entity nodes carry name/frequency/last_seen; other nodes (emails,
    documents) only have an id and properties.
    """
    id: str = ""
    name: Optional[str] = None
    normalized: Optional[str] = None
    frequency: Optional[int] = None
    last_seen: Optional[datetime] = None
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_entity(self) -> bool:
        return bool(self.name)

    @property
    def normalized_name(self) -> str:
        if self.normalized:
            return self.normalized
        if self.name:
            return self.name.strip().lower()
        return self.id


@dataclass
class GraphHit:
    """Raw result from the graph store: a node plus its label (Person, Company, ...)."""
    node: GraphNode
    label: str

    def __repr__(self) -> str:
        return f"<GraphHit({self.label}:{self.node.name or self.node.id})>"


@dataclass
class MemoryItem:
    """
    Memory payload carried by vector-sourced ranked results.

    Built from a VectorHit; similarity/importance/access count are folded into
    metadata the way the memory layer exposes them.
    """
    id: str
    user_id: str
    content: str
    created_at: datetime
    conversation_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_hit(cls, hit: VectorHit) -> "MemoryItem":
        return cls(
            id=hit.id,
            user_id=hit.user_id,
            content=hit.content,
            created_at=hit.created_at,
            conversation_id=hit.conversation_id,
            metadata={
                **hit.metadata,
                "similarity": hit.similarity,
                "importance": hit.importance,
                "access_count": hit.access_count,
            },
        )
