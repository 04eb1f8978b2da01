"""
Retrieval Configuration
=======================

Pydantic models for the retrieval engine configuration.

Values can be:
- Loaded from YAML (packaged ``retrieval.yaml`` by default)
- Pointed at a different file via the ``RECALL_CONFIG`` environment variable
- Overridden at runtime through ``RetrievalConfig.merged()`` (no restart)

Usage:
    from recall.config import load_config

    config = load_config()
    print(config.weights.vector)  # 0.6

    tuned = config.merged({"final_limit": 5, "weights": {"recency": 0.3}})
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError

from recall.exceptions import ConfigError

log = structlog.get_logger()

CONFIG_ENV_VAR = "RECALL_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).parent / "retrieval.yaml"


class RetrievalWeights(BaseModel):
    """
    Weights applied to the individual scoring factors.

    They multiply independent factors and are not required to sum to 1.

    Attributes:
        vector: Weight of cosine similarity for vector hits
        graph: Weight of graph relevance for graph hits
        recency: Weight of the recency step function
        importance: Weight of normalised memory importance
        entity_overlap: Weight of query entity matches
    """
    vector: float = Field(default=0.6, ge=0.0, le=1.0)
    graph: float = Field(default=0.4, ge=0.0, le=1.0)
    recency: float = Field(default=0.15, ge=0.0, le=1.0)
    importance: float = Field(default=0.1, ge=0.0, le=1.0)
    entity_overlap: float = Field(default=0.2, ge=0.0, le=1.0)


class RetrievalConfig(BaseModel):
    """
    Engine configuration.

    Attributes:
        weights: Base scoring weights (vector/graph are overridden per query type)
        vector_limit: Max hits requested from the vector store
        graph_limit: Max hits per graph lookup and after graph dedupe
        final_limit: Default number of results returned by search()
        vector_threshold: Minimum cosine similarity accepted from the vector store
        min_combined_score: Minimum combined score kept after merging
        cache_enabled: Enable the per-user result cache
        cache_ttl_seconds: Cache entry lifetime measured from insertion
        cache_max_size: Max cache entries before LRU eviction
        parallel_execution: Run vector and graph branches concurrently
        graph_keyword_fanout: Number of keywords looked up in the graph
        graph_entity_fanout: Number of entities looked up in the graph
    """
    weights: RetrievalWeights = Field(default_factory=RetrievalWeights)
    vector_limit: int = Field(default=20, ge=1, le=500)
    graph_limit: int = Field(default=10, ge=1, le=200)
    final_limit: int = Field(default=10, ge=1, le=200)
    vector_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    min_combined_score: float = Field(default=0.6, ge=0.0)
    cache_enabled: bool = True
    cache_ttl_seconds: float = Field(default=300.0, gt=0.0)
    cache_max_size: int = Field(default=100, ge=1)
    parallel_execution: bool = True
    graph_keyword_fanout: int = Field(default=3, ge=0)
    graph_entity_fanout: int = Field(default=2, ge=0)

    def merged(self, overrides: Union[Dict[str, Any], "RetrievalConfig", None]) -> "RetrievalConfig":
        """
        Return a new config with ``overrides`` applied on top of this one.

        Nested ``weights`` are merged key by key, so ``{"weights": {"recency": 0.3}}``
        keeps the other weights untouched. Raises ``ValueError`` (pydantic
        ``ValidationError``) when an override is out of bounds.
        """
        if overrides is None:
            return self.model_copy(deep=True)
        if isinstance(overrides, RetrievalConfig):
            overrides = overrides.model_dump(exclude_unset=True)

        data = self.model_dump()
        for key, value in overrides.items():
            if key == "weights" and value is not None:
                if isinstance(value, RetrievalWeights):
                    value = value.model_dump(exclude_unset=True)
                data["weights"] = {**data["weights"], **value}
            else:
                data[key] = value

        return RetrievalConfig.model_validate(data)


def _resolve_config_path(path: Optional[Union[str, Path]]) -> Path:
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR, "")
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def load_config(path: Optional[Union[str, Path]] = None) -> RetrievalConfig:
    """
    Load RetrievalConfig from YAML.

    Resolution order: explicit ``path``, ``RECALL_CONFIG`` env var, packaged
    ``retrieval.yaml``. A missing file falls back to defaults; a file that
    exists but is malformed raises ConfigError.

    Args:
        path: Optional path to a YAML file

    Returns:
        Validated RetrievalConfig
    """
    config_path = _resolve_config_path(path)

    try:
        with open(config_path, "r") as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError:
        log.warning("Retrieval config not found, using defaults", path=str(config_path))
        return RetrievalConfig()
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    data = raw.get("retrieval", raw) if isinstance(raw, dict) else None
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {config_path}, got {type(raw).__name__}")

    try:
        config = RetrievalConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid retrieval config in {config_path}: {e}") from e

    log.debug("Loaded retrieval config", path=str(config_path))
    return config
