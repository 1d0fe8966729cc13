"""Content-addressed reuse of remote context caches."""

from __future__ import annotations

import hashlib

from ..logging import get_logger
from ..models import CacheHandle
from .base import CacheListingClient, GenerationClient

logger = get_logger("llm.cache")

DEFAULT_TTL_SECONDS = 600


def content_key(payload: str) -> str:
    """Stable identity for a serialized context: sha256 over its UTF-8 bytes."""
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


async def obtain_cache(
    client: GenerationClient,
    payload: str,
    *,
    mime_type: str = "text/plain",
    ttl_seconds: int = DEFAULT_TTL_SECONDS,
) -> CacheHandle:
    """Return an existing cache whose display name matches the payload hash, or create one.

    Clients that cannot list caches always create a new one.
    """
    key = content_key(payload)
    if isinstance(client, CacheListingClient):
        try:
            existing = await client.list_caches()
        except Exception as exc:
            logger.warning("Failed to list existing caches: %s", exc)
        else:
            for handle in existing:
                if handle.display_name == key:
                    logger.info("Reusing cache %s (hash %s...)", handle.name, key[:8])
                    return handle

    logger.info("Creating new cache (hash %s...)", key[:8])
    return await client.create_cache(
        payload, mime_type=mime_type, ttl_seconds=ttl_seconds, display_name=key
    )


__all__ = ["content_key", "obtain_cache"]
