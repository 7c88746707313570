"""Factory for cursor store instantiation."""

from listing_agent.config import Settings
from listing_agent.core.exceptions import ConfigurationError
from listing_agent.domains.listing.cursor_store import CursorStore, InMemoryCursorStore


def create_cursor_store(settings: Settings) -> CursorStore:
    """
    Instantiate the configured cursor backend.

    Args:
        settings: Application settings; cursor_backend selects json, memory or redis.

    Returns:
        Configured CursorStore implementation.
    """
    backend = settings.cursor_backend

    if backend == "json":
        from listing_agent.domains.listing.json_cursor_store import JsonFileCursorStore
        return JsonFileCursorStore(settings.cursor_file_path)

    if backend == "memory":
        return InMemoryCursorStore()

    if backend == "redis":
        if not settings.cursor_redis_url:
            raise ConfigurationError(
                "CURSOR_REDIS_URL must be set when CURSOR_BACKEND=redis"
            )
        from listing_agent.domains.listing.redis_cursor_store import RedisCursorStore
        return RedisCursorStore(settings.cursor_redis_url, settings.cursor_key)

    raise ConfigurationError(f"Unsupported cursor backend: {backend!r}")
