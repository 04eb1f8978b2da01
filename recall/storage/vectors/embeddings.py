"""
HTTP Embedding Client
=====================

EmbeddingClient for OpenAI-compatible ``/embeddings`` endpoints (OpenAI,
OpenRouter, vLLM, Ollama's compatibility layer, ...).

Environment Variables:
    EMBEDDING_API_URL: Base URL (default: https://api.openai.com/v1)
    EMBEDDING_API_KEY: Bearer token
    EMBEDDING_MODEL: Model name (default: text-embedding-3-small)
    EMBEDDING_DIMENSION: Expected vector size (default: 1536)

Usage:
    client = HttpEmbeddingClient()
    vector = await client.embed("recent updates from Acme Corp")
    await client.close()
"""

import asyncio
import math
import os
import aiohttp
import structlog
from dataclasses import dataclass, field
from typing import List, Optional

from recall.exceptions import EmbeddingError
from recall.storage.base import EmbeddingClient

log = structlog.get_logger()


@dataclass
class EmbeddingConfig:
    """
    Configuration for the HTTP embedding client.

    Attributes:
        base_url: API base URL, without the trailing ``/embeddings``
        api_key: Bearer token (optional for local servers)
        model: Embedding model name
        dimension: Expected vector length; responses of another size are rejected
        timeout_s: Total request timeout in seconds
    """
    base_url: str = field(default_factory=lambda: os.environ.get("EMBEDDING_API_URL", "https://api.openai.com/v1"))
    api_key: Optional[str] = field(default_factory=lambda: os.environ.get("EMBEDDING_API_KEY") or None)
    model: str = field(default_factory=lambda: os.environ.get("EMBEDDING_MODEL", "text-embedding-3-small"))
    dimension: int = field(default_factory=lambda: int(os.environ.get("EMBEDDING_DIMENSION", 1536)))
    timeout_s: float = 10.0

    def __post_init__(self):
        if self.dimension < 1:
            raise ValueError(f"dimension must be >= 1, got {self.dimension}")


class HttpEmbeddingClient(EmbeddingClient):
    """
    Embedding client over HTTP.

    Never returns an empty vector: any transport, status or shape problem
    raises EmbeddingError.
    """

    def __init__(self, config: Optional[EmbeddingConfig] = None):
        self.config = config or EmbeddingConfig()
        self.session: Optional[aiohttp.ClientSession] = None

        log.info(
            "HttpEmbeddingClient initialized",
            base_url=self.config.base_url,
            model=self.config.model,
            dimension=self.config.dimension,
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_s)
            )
        return self.session

    async def close(self):
        """Close the aiohttp session."""
        if self.session and not self.session.closed:
            await self.session.close()

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    async def embed(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")

        url = f"{self.config.base_url.rstrip('/')}/embeddings"
        payload = {"model": self.config.model, "input": text}

        try:
            session = await self._get_session()
            async with session.post(url, json=payload, headers=self._headers()) as response:
                if response.status != 200:
                    body = await response.text()
                    raise EmbeddingError(f"Embedding API returned {response.status}: {body[:200]}")
                data = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        return self._parse_vector(data)

    def _parse_vector(self, data: dict) -> List[float]:
        try:
            vector = data["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError) as e:
            raise EmbeddingError(f"Malformed embedding response: {e}") from e

        if not vector:
            raise EmbeddingError("Embedding API returned an empty vector")
        if len(vector) != self.config.dimension:
            raise EmbeddingError(
                f"Expected {self.config.dimension} dimensions, got {len(vector)}"
            )

        vector = [float(v) for v in vector]
        if not all(math.isfinite(v) for v in vector):
            raise EmbeddingError("Embedding contains non-finite values")
        return vector
