"""
Storage Layer
=============

Adapters over the external stores consumed by the retrieval engine.

Components:
- base: EmbeddingClient / VectorStore / GraphStore interfaces, AdapterResult
- models: VectorHit, GraphNode, GraphHit, MemoryItem
- vectors/: VectorRetriever, HttpEmbeddingClient
- graph/: GraphRetriever

    Query embedding            Keywords / entities
          |                            |
          v                            v
    [VectorRetriever]           [GraphRetriever]
    similarity search           entity lookup
          |                            |
          +------------+---------------+
                       |
                 AdapterResult
          (value, or error -> empty list)
"""

from recall.storage.base import (
    AdapterResult,
    EmbeddingClient,
    GraphStore,
    VectorFilters,
    VectorStore,
)
from recall.storage.models import GraphHit, GraphNode, MemoryItem, VectorHit
from recall.storage.vectors import VectorRetriever, HttpEmbeddingClient, EmbeddingConfig
from recall.storage.graph import GraphRetriever

__all__ = [
    # Interfaces
    "AdapterResult",
    "EmbeddingClient",
    "GraphStore",
    "VectorFilters",
    "VectorStore",
    # Models
    "GraphHit",
    "GraphNode",
    "MemoryItem",
    "VectorHit",
    # Adapters
    "VectorRetriever",
    "GraphRetriever",
    "HttpEmbeddingClient",
    "EmbeddingConfig",
]
