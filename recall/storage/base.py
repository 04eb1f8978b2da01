"""
Storage Interfaces
==================

Abstract interfaces for the external collaborators consumed by the engine,
and the AdapterResult type returned by every adapter call.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from .models import GraphHit, VectorHit

T = TypeVar("T")


@dataclass
class AdapterResult(Generic[T]):
    """
    Outcome of an adapter call: either a value or an error, never both.

    Adapters return this instead of raising, so a store outage shows up as a
    failed result that the orchestrator replaces with an empty list.
    """
    value: Optional[T] = None
    error: Optional[BaseException] = None
    source: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T, source: str = "") -> "AdapterResult[T]":
        return cls(value=value, source=source)

    @classmethod
    def failure(cls, error: BaseException, source: str = "") -> "AdapterResult[T]":
        return cls(error=error, source=source)

    def unwrap_or(self, default: T) -> T:
        return self.value if self.ok and self.value is not None else default


@dataclass
class VectorFilters:
    """Metadata filters applied by the vector store."""
    conversation_id: Optional[str] = None
    min_importance: int = 1
    exclude_deleted: bool = True
    extra: dict = field(default_factory=dict)


class EmbeddingClient(ABC):
    """Interface for the embedding service."""

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """Return a fixed-length vector for ``text``. Must raise instead of returning []."""
        pass


class VectorStore(ABC):
    """Interface for the vector store (similarity search scoped per user)."""

    @abstractmethod
    async def search_similar(
        self,
        embedding: List[float],
        user_id: str,
        limit: int = 10,
        threshold: float = 0.7,
        filters: Optional[VectorFilters] = None
    ) -> List[VectorHit]:
        """Semantic similarity search."""
        pass


class GraphStore(ABC):
    """Interface for the entity graph store."""

    @abstractmethod
    async def search_entities(self, term: str, limit: int = 10) -> List[GraphHit]:
        """Find entities whose name matches ``term``."""
        pass

    @abstractmethod
    async def related_entities(self, name: str, limit: int = 10) -> List[GraphHit]:
        """Entities connected to ``name``. Not used by the ranking core."""
        pass
