from .retriever import VectorRetriever
from .embeddings import HttpEmbeddingClient, EmbeddingConfig

__all__ = ["VectorRetriever", "HttpEmbeddingClient", "EmbeddingConfig"]
