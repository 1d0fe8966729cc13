"""Interfaces shared by generation-model clients."""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from ..models import CacheHandle


class GenerationError(RuntimeError):
    """Raised when the generation service rejects or fails a request."""


@runtime_checkable
class GenerationClient(Protocol):
    """Minimal capability the pipeline needs from a generative model."""

    async def create_cache(
        self,
        content: str,
        *,
        mime_type: str = "text/plain",
        ttl_seconds: int = 600,
        display_name: Optional[str] = None,
    ) -> CacheHandle: ...

    async def generate_content(self, prompt: str, cache: Optional[CacheHandle] = None) -> str: ...


@runtime_checkable
class CacheListingClient(Protocol):
    """Optional capability: enumerate existing remote caches."""

    async def list_caches(self) -> List[CacheHandle]: ...


__all__ = ["CacheListingClient", "GenerationClient", "GenerationError"]
