"""
Recall: Hybrid Retrieval & Ranking Engine
=========================================

Ranked retrieval over a personal assistant's memories, combining semantic
vector search with an entity relationship graph.

Quick Start:
    from recall import RetrievalService, load_config

    service = RetrievalService(
        embedder=embedding_client,
        vector_store=vector_store,
        graph_store=graph_store,
        config=load_config(),
    )

    result = await service.search("user-1", "recent updates from Acme Corp")
    for r in result.results:
        print(r.source.value, r.combined, r.metadata.relevance_reason)

    service.update_config({"final_limit": 5})
    print(service.cache_stats())

Components:
- query: QueryParser, StrategySelector (suggest_strategy / apply_strategy)
- storage: VectorRetriever, GraphRetriever, HttpEmbeddingClient, store interfaces
- ranking: scoring, merge, dedupe, diversity, threshold
- cache: ResultCache
- retrieval: RetrievalService (orchestrator)
- config: RetrievalConfig, RetrievalWeights, load_config
"""

__version__ = "0.1.0"

from recall.config import RetrievalConfig, RetrievalWeights, load_config
from recall.query import QueryParser, QueryType, StructuredQuery, parse_query, suggest_strategy
from recall.ranking import RankedResult, ResultSource
from recall.cache import ResultCache
from recall.retrieval import RetrievalService, RetrievalResult, SearchOptions
from recall.storage import (
    EmbeddingClient,
    GraphHit,
    GraphNode,
    GraphStore,
    HttpEmbeddingClient,
    VectorHit,
    VectorStore,
)

__all__ = [
    # Orchestrator
    "RetrievalService",
    "RetrievalResult",
    "SearchOptions",
    # Config
    "RetrievalConfig",
    "RetrievalWeights",
    "load_config",
    # Query
    "QueryParser",
    "QueryType",
    "StructuredQuery",
    "parse_query",
    "suggest_strategy",
    # Ranking
    "RankedResult",
    "ResultSource",
    # Cache
    "ResultCache",
    # Storage
    "EmbeddingClient",
    "GraphHit",
    "GraphNode",
    "GraphStore",
    "HttpEmbeddingClient",
    "VectorHit",
    "VectorStore",
]
