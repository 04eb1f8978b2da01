"""
RetrievalService
================

Hybrid retrieval over the user's memories (vector store) and the entity
graph (graph store).

Flow:
    Query text
        |
    ResultCache.get ------------------------------> hit: return (cache_hit=True)
        |
    QueryParser -> StrategySelector (effective weights)
        |
        +---------------------------+
        |                           |
    embed + VectorRetriever     GraphRetriever (keywords[:3] + entities[:2])
        |                           |
        +------------ gather -------+
                      |
    rank_vector_results / rank_graph_results
                      |
    merge_and_rank (dedupe, sort, diversity)
                      |
    filter_by_threshold -> top_n -> ResultCache.set -> RetrievalResult

A failing branch (embedding, vector store or graph store) contributes zero
results; search() itself only raises ValueError for invalid arguments.
"""

import asyncio
import time
import structlog
from dataclasses import fields, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from recall.cache import CacheStats, ResultCache
from recall.config.settings import RetrievalConfig
from recall.exceptions import EmbeddingError
from recall.query.models import StructuredQuery
from recall.query.parser import QueryParser
from recall.query.strategy import select_weights
from recall.ranking.ranker import (
    filter_by_threshold,
    merge_and_rank,
    rank_graph_results,
    rank_vector_results,
    top_n,
)
from recall.storage.base import (
    AdapterResult,
    EmbeddingClient,
    GraphStore,
    VectorFilters,
    VectorStore,
)
from recall.storage.graph import GraphRetriever
from recall.storage.models import GraphHit, VectorHit
from recall.storage.vectors import VectorRetriever

from .models import RetrievalMetadata, RetrievalResult, SearchOptions

log = structlog.get_logger()

SEARCH_OPTION_FIELDS = frozenset(f.name for f in fields(SearchOptions))


class RetrievalService:
    """
    Hybrid retrieval engine.

    Constructed with injected collaborators; there is no module-level
    instance.

    Example:
        >>> service = RetrievalService(
        ...     embedder=HttpEmbeddingClient(),
        ...     vector_store=my_vector_store,
        ...     graph_store=my_graph_store,
        ... )
        >>> result = await service.search("user-1", "recent updates from Acme Corp")
        >>> for r in result.results:
        ...     print(r.source.value, round(r.combined, 3), r.metadata.relevance_reason)
    """

    def __init__(
        self,
        embedder: Optional[EmbeddingClient],
        vector_store: Optional[VectorStore],
        graph_store: Optional[GraphStore],
        cache: Optional[ResultCache] = None,
        config: Optional[RetrievalConfig] = None,
        parser: Optional[QueryParser] = None,
        now_fn: Optional[Callable[[], datetime]] = None
    ):
        """
        Args:
            embedder: Embedding service client
            vector_store: Vector store client (wrapped in a VectorRetriever)
            graph_store: Graph store client (wrapped in a GraphRetriever)
            cache: Result cache (default: new ResultCache sized from config)
            config: Engine configuration (default: RetrievalConfig())
            parser: Query parser (default: QueryParser sharing ``now_fn``)
            now_fn: Clock used for temporal parsing and recency scoring
        """
        self.config = config or RetrievalConfig()
        self.now_fn = now_fn or datetime.now
        self.embedder = embedder
        self.vector_retriever = VectorRetriever(vector_store)
        self.graph_retriever = GraphRetriever(graph_store)
        self.parser = parser or QueryParser(now_fn=self.now_fn)
        # An empty ResultCache is falsy (__len__), so test identity
        if cache is None:
            cache = ResultCache(
                ttl_seconds=self.config.cache_ttl_seconds,
                max_size=self.config.cache_max_size,
            )
        self.cache = cache

        log.info(
            "RetrievalService initialized",
            vector_limit=self.config.vector_limit,
            graph_limit=self.config.graph_limit,
            final_limit=self.config.final_limit,
            min_combined_score=self.config.min_combined_score,
            cache_enabled=self.config.cache_enabled,
        )

    async def search(
        self,
        user_id: str,
        query_text: str,
        options: Optional[SearchOptions] = None,
        **overrides: Any
    ) -> RetrievalResult:
        """
        Hybrid search for ``user_id``.

        Args:
            user_id: User whose memories are searched (also scopes the cache)
            query_text: Free-text query
            options: SearchOptions
            **overrides: SearchOptions fields applied on top of ``options``
                         (conversation_id, limit, include_graph, force_refresh)

        Returns:
            RetrievalResult, possibly empty when every source failed

        Raises:
            ValueError: invalid user id, query or options (before any I/O)
        """
        options = self._resolve_options(options, overrides)
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValueError("user_id must be a non-empty string")
        if not isinstance(query_text, str):
            raise ValueError(f"query_text must be a string, got {type(query_text).__name__}")

        start = time.perf_counter()
        # Snapshot: update_config() during an in-flight search does not affect it
        config = self.config

        if config.cache_enabled and not options.force_refresh:
            cached = self.cache.get(query_text, user_id)
            if cached is not None:
                log.info("search() - served from cache", user_id=user_id, results=len(cached.results))
                return cached

        query = self.parser.parse(query_text)
        weights = select_weights(query, config.weights)

        log.debug(
            "search() - query parsed",
            query_type=query.query_type.value,
            confidence=query.confidence,
            intent=query.intent,
            vector_weight=weights.vector,
            graph_weight=weights.graph,
            recency_weight=weights.recency,
        )

        vector_outcome, graph_outcome = await self._run_branches(user_id, query, options, config)
        vector_hits = vector_outcome.unwrap_or([])
        graph_hits = graph_outcome.unwrap_or([])

        now = self.now_fn()
        ranked_vector = rank_vector_results(vector_hits, query, weights, now=now)
        ranked_graph = rank_graph_results(graph_hits, query, weights, now=now)
        merged = merge_and_rank(ranked_vector, ranked_graph, weights)

        filtered = filter_by_threshold(merged, config.min_combined_score)
        final = top_n(filtered, options.limit or config.final_limit)

        execution_time_ms = (time.perf_counter() - start) * 1000.0
        result = RetrievalResult(
            query=query,
            results=final,
            metadata=RetrievalMetadata(
                vector_count=len(vector_hits),
                graph_count=len(graph_hits),
                total_candidates=len(merged),
                final_count=len(final),
                execution_time_ms=execution_time_ms,
                weights_used=weights,
                cache_hit=False,
                vector_error=str(vector_outcome.error) if not vector_outcome.ok else None,
                graph_error=str(graph_outcome.error) if not graph_outcome.ok else None,
            ),
        )

        if config.cache_enabled:
            self.cache.set(query_text, user_id, result)

        log.info(
            "search() - completed",
            user_id=user_id,
            query_type=query.query_type.value,
            vector=len(vector_hits),
            graph=len(graph_hits),
            candidates=len(merged),
            final=len(final),
            execution_time_ms=round(execution_time_ms, 1),
        )

        return result

    @staticmethod
    def _resolve_options(options: Optional[SearchOptions], overrides: Dict[str, Any]) -> SearchOptions:
        unknown = set(overrides) - SEARCH_OPTION_FIELDS
        if unknown:
            raise ValueError(f"Unknown search options: {', '.join(sorted(unknown))}")
        if options is None:
            return SearchOptions(**overrides)
        if overrides:
            return replace(options, **overrides)
        return options

    async def _run_branches(
        self,
        user_id: str,
        query: StructuredQuery,
        options: SearchOptions,
        config: RetrievalConfig
    ) -> Tuple[AdapterResult[List[VectorHit]], AdapterResult[List[GraphHit]]]:
        vector_branch = self._execute_vector_search(user_id, query, options, config)

        if not options.include_graph:
            return await vector_branch, AdapterResult.success([], source="graph")

        graph_branch = self._execute_graph_search(query, config)

        if config.parallel_execution:
            vector_outcome, graph_outcome = await asyncio.gather(vector_branch, graph_branch)
        else:
            vector_outcome = await vector_branch
            graph_outcome = await graph_branch

        return vector_outcome, graph_outcome

    async def _execute_vector_search(
        self,
        user_id: str,
        query: StructuredQuery,
        options: SearchOptions,
        config: RetrievalConfig
    ) -> AdapterResult[List[VectorHit]]:
        """Embed the query, then run the similarity search. Never raises."""
        if self.embedder is None:
            log.warning("Embedding client not configured, skipping vector search")
            return AdapterResult.success([], source="vector")

        try:
            embedding = await self.embedder.embed(query.original_text)
            if not embedding:
                raise EmbeddingError("Embedding service returned an empty vector")
        except Exception as e:
            log.error("Query embedding failed, skipping vector search", user_id=user_id, error=str(e))
            return AdapterResult.failure(e, source="vector")

        return await self.vector_retriever.search(
            user_id,
            embedding,
            limit=config.vector_limit,
            similarity_threshold=config.vector_threshold,
            filters=VectorFilters(conversation_id=options.conversation_id),
        )

    async def _execute_graph_search(
        self,
        query: StructuredQuery,
        config: RetrievalConfig
    ) -> AdapterResult[List[GraphHit]]:
        """
        Look up keywords and entities in the graph. Never raises.

        Lookups run concurrently; individual failures are dropped. The branch
        only fails when every lookup failed.
        """
        terms = [
            *query.keywords[:config.graph_keyword_fanout],
            *query.entities[:config.graph_entity_fanout],
        ]
        if not terms:
            return AdapterResult.success([], source="graph")

        outcomes = await asyncio.gather(*(
            self.graph_retriever.search(term, limit=config.graph_limit) for term in terms
        ))

        failures = [o for o in outcomes if not o.ok]
        if failures and len(failures) == len(outcomes):
            return AdapterResult.failure(failures[0].error, source="graph")

        unique: Dict[Tuple[str, str], GraphHit] = {}
        for outcome in outcomes:
            for hit in outcome.unwrap_or([]):
                key = (hit.label, hit.node.normalized_name)
                if key not in unique:
                    unique[key] = hit

        hits = list(unique.values())[:config.graph_limit]
        log.debug("Graph search completed", terms=len(terms), failed=len(failures), hits=len(hits))
        return AdapterResult.success(hits, source="graph")

    def clear_cache(self) -> None:
        self.cache.clear()

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def update_config(self, overrides: Union[Dict[str, Any], RetrievalConfig]) -> RetrievalConfig:
        """
        Merge ``overrides`` into the running configuration.

        Weights are merged key by key. Cache TTL and capacity changes apply to
        the existing cache immediately. Raises ValueError on invalid values and
        leaves the current configuration untouched.

        Returns:
            The new configuration
        """
        new_config = self.config.merged(overrides)
        self.config = new_config
        self.cache.ttl_seconds = new_config.cache_ttl_seconds
        self.cache.max_size = new_config.cache_max_size

        log.info("Retrieval config updated", overrides=overrides if isinstance(overrides, dict) else "config")
        return new_config
