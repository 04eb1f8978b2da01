from .models import RetrievalMetadata, RetrievalResult, SearchOptions
from .service import RetrievalService

__all__ = ["RetrievalMetadata", "RetrievalResult", "SearchOptions", "RetrievalService"]
