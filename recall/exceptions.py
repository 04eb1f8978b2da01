"""
Recall Exceptions
=================

Exception hierarchy for the retrieval engine.

Only ``ValueError`` (invalid arguments) is expected to reach callers of
``RetrievalService.search``; the classes below are raised inside adapters and
converted into failed ``AdapterResult`` values before they cross the
orchestrator boundary.
"""


class RecallError(Exception):
    """Base class for all engine errors."""


class AdapterError(RecallError):
    """An external store (vector or graph) failed or returned garbage."""

    def __init__(self, adapter: str, message: str):
        self.adapter = adapter
        super().__init__(f"[{adapter}] {message}")


class EmbeddingError(RecallError):
    """The embedding service could not produce a usable vector."""


class ConfigError(RecallError):
    """Configuration file could not be parsed into a RetrievalConfig."""
