"""
Recall Test Configuration
=========================

Shared fixtures for all tests.
"""

import pytest
from datetime import datetime, timedelta
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

# Wednesday; the current week starts Monday 2026-10-12
FIXED_NOW = datetime(2026, 10, 14, 12, 0, 0)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def parser(fixed_now):
    from recall.query import QueryParser
    return QueryParser(now_fn=lambda: fixed_now)


@pytest.fixture
def make_vector_hit(fixed_now):
    """Factory for VectorHit with an age in days instead of a timestamp."""
    from recall.storage.models import VectorHit

    def _make(
        id: str,
        content: str,
        similarity: float,
        age_days: float = 0,
        importance: int = 5,
        user_id: str = "user-1"
    ):
        return VectorHit(
            id=id,
            content=content,
            similarity=similarity,
            created_at=fixed_now - timedelta(days=age_days),
            importance=importance,
            user_id=user_id,
        )

    return _make


@pytest.fixture
def make_graph_hit(fixed_now):
    """Factory for GraphHit on an entity node."""
    from recall.storage.models import GraphHit, GraphNode

    def _make(
        name: Optional[str],
        label: str = "Company",
        frequency: Optional[int] = None,
        last_seen_days: Optional[float] = None,
        id: str = ""
    ):
        last_seen = fixed_now - timedelta(days=last_seen_days) if last_seen_days is not None else None
        return GraphHit(
            node=GraphNode(id=id or (name or "node"), name=name, frequency=frequency, last_seen=last_seen),
            label=label,
        )

    return _make


@pytest.fixture
def mock_embedder():
    """Embedding client returning a constant 8-dim vector."""
    embedder = MagicMock()
    embedder.embed = AsyncMock(return_value=[0.1] * 8)
    return embedder


@pytest.fixture
def mock_vector_store():
    store = MagicMock()
    store.search_similar = AsyncMock(return_value=[])
    return store


@pytest.fixture
def mock_graph_store():
    store = MagicMock()
    store.search_entities = AsyncMock(return_value=[])
    store.related_entities = AsyncMock(return_value=[])
    return store
