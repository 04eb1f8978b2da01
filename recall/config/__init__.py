"""
Configuration module for Recall.
"""

from .settings import (
    RetrievalWeights,
    RetrievalConfig,
    load_config,
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_PATH,
)

__all__ = [
    "RetrievalWeights",
    "RetrievalConfig",
    "load_config",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
]
