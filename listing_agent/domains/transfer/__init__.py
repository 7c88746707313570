"""
Transfer Domain
Single file fetch and put against the remote store.
"""
from .fetch_service import FetchService
from .put_service import PutService
from .registration import register_transfer_handlers

__all__ = ["FetchService", "PutService", "register_transfer_handlers"]
