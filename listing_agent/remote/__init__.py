from .client import RemoteChild, RemoteFileSystemClient
from .memory_client import InMemoryFileSystemClient

__all__ = ["RemoteChild", "RemoteFileSystemClient", "InMemoryFileSystemClient"]
