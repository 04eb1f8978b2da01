"""
VectorRetriever
===============

Thin adapter over the external vector store.

Failures (unreachable store, malformed rows) are logged and returned as a
failed AdapterResult; nothing is raised to the caller.
"""

import structlog
from typing import List, Optional

from recall.exceptions import AdapterError
from recall.storage.base import AdapterResult, VectorFilters, VectorStore
from recall.storage.models import VectorHit

log = structlog.get_logger()

ADAPTER_NAME = "vector"


class VectorRetriever:
    """
    Similarity search over the user's memories.

    Example:
        >>> retriever = VectorRetriever(store)
        >>> result = await retriever.search("user-1", embedding, limit=20, similarity_threshold=0.6)
        >>> hits = result.unwrap_or([])
    """

    def __init__(self, store: Optional[VectorStore]):
        self.store = store

    async def search(
        self,
        user_id: str,
        embedding: List[float],
        limit: int,
        similarity_threshold: float,
        filters: Optional[VectorFilters] = None
    ) -> AdapterResult[List[VectorHit]]:
        """
        Run a similarity search scoped to ``user_id``.

        Args:
            user_id: Owner of the memories
            embedding: Query embedding
            limit: Max hits
            similarity_threshold: Minimum similarity; lower hits are dropped
                                  even if the store returns them
            filters: Optional metadata filters

        Returns:
            AdapterResult with the hits, or the error that occurred
        """
        if self.store is None:
            log.warning("Vector store not configured, returning empty results")
            return AdapterResult.success([], source=ADAPTER_NAME)

        try:
            raw_hits = await self.store.search_similar(
                embedding,
                user_id=user_id,
                limit=limit,
                threshold=similarity_threshold,
                filters=filters or VectorFilters(),
            )
            hits = self._validate(raw_hits, similarity_threshold)
        except Exception as e:
            log.error("Vector search failed", user_id=user_id, error=str(e))
            return AdapterResult.failure(e, source=ADAPTER_NAME)

        log.debug("Vector search completed", user_id=user_id, hits=len(hits))
        return AdapterResult.success(hits[:limit], source=ADAPTER_NAME)

    def _validate(self, raw_hits, similarity_threshold: float) -> List[VectorHit]:
        if raw_hits is None:
            raise AdapterError(ADAPTER_NAME, "store returned None")

        hits = []
        for hit in raw_hits:
            if not isinstance(hit, VectorHit):
                raise AdapterError(ADAPTER_NAME, f"unexpected hit type {type(hit).__name__}")
            if hit.similarity < similarity_threshold:
                continue
            hits.append(hit)
        return hits
