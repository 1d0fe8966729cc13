"""Generation-model clients."""

from .base import CacheListingClient, GenerationClient, GenerationError
from .cache import content_key, obtain_cache
from .gemini import GeminiClient

__all__ = [
    "CacheListingClient",
    "GeminiClient",
    "GenerationClient",
    "GenerationError",
    "content_key",
    "obtain_cache",
]
