from .retriever import GraphRetriever

__all__ = ["GraphRetriever"]
