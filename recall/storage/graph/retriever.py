"""
GraphRetriever
==============

Thin adapter over the external entity graph store.

Like VectorRetriever, failures are logged and returned as a failed
AdapterResult rather than raised.
"""

import structlog
from typing import List, Optional

from recall.exceptions import AdapterError
from recall.storage.base import AdapterResult, GraphStore
from recall.storage.models import GraphHit

log = structlog.get_logger()

ADAPTER_NAME = "graph"


class GraphRetriever:
    """Entity lookup in the knowledge graph."""

    def __init__(self, store: Optional[GraphStore]):
        self.store = store

    async def search(self, term: str, limit: int) -> AdapterResult[List[GraphHit]]:
        """
        Find graph entities matching ``term``.

        Args:
            term: Keyword or entity name
            limit: Max hits for this lookup

        Returns:
            AdapterResult with the hits, or the error that occurred
        """
        if self.store is None:
            log.warning("Graph store not configured, returning empty results")
            return AdapterResult.success([], source=ADAPTER_NAME)

        try:
            hits = self._validate(await self.store.search_entities(term, limit=limit))
        except Exception as e:
            log.error("Graph search failed", term=term, error=str(e))
            return AdapterResult.failure(e, source=ADAPTER_NAME)

        return AdapterResult.success(hits[:limit], source=ADAPTER_NAME)

    async def related(self, entity_name: str, limit: int = 10) -> AdapterResult[List[GraphHit]]:
        """Entities connected to ``entity_name``, for callers that expand results."""
        if self.store is None:
            return AdapterResult.success([], source=ADAPTER_NAME)

        try:
            hits = self._validate(await self.store.related_entities(entity_name, limit=limit))
        except Exception as e:
            log.error("Related entities lookup failed", entity=entity_name, error=str(e))
            return AdapterResult.failure(e, source=ADAPTER_NAME)

        return AdapterResult.success(hits[:limit], source=ADAPTER_NAME)

    def _validate(self, raw_hits) -> List[GraphHit]:
        if raw_hits is None:
            raise AdapterError(ADAPTER_NAME, "store returned None")
        for hit in raw_hits:
            if not isinstance(hit, GraphHit):
                raise AdapterError(ADAPTER_NAME, f"unexpected hit type {type(hit).__name__}")
        return list(raw_hits)
