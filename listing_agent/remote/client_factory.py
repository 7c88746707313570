"""Factory for the remote file system client."""

from listing_agent.config import Settings
from listing_agent.core.exceptions import ConfigurationError
from listing_agent.remote.client import RemoteFileSystemClient


def create_remote_client(settings: Settings) -> RemoteFileSystemClient:
    backend = settings.filesystem_backend

    if backend == "local":
        from listing_agent.remote.local_client import LocalFileSystemClient
        return LocalFileSystemClient(settings.local_filesystem_root)

    if backend == "memory":
        from listing_agent.remote.memory_client import InMemoryFileSystemClient
        return InMemoryFileSystemClient()

    raise ConfigurationError(f"Unsupported filesystem backend: {backend!r}")
