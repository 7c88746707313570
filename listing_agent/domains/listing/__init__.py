"""
Listing Domain
Incremental recursive listing: filter, tree walk, cursor and cycle orchestration.
"""
from .cursor import advance, is_new, select_new_entries
from .cursor_store import CursorStore, InMemoryCursorStore
from .domain_objects import ListingConfiguration
from .listing_orchestrator import ListingOrchestrator
from .path_filter import PathFilter
from .tree_walker import TreeWalker

__all__ = [
    "advance",
    "is_new",
    "select_new_entries",
    "CursorStore",
    "InMemoryCursorStore",
    "ListingConfiguration",
    "ListingOrchestrator",
    "PathFilter",
    "TreeWalker",
]
