"""
Client side of the inventory: a session that drives the upload, review and
save flow over HTTP, and search over the fetched list.
"""

from .search import filter_books, highlight, mark_matches, matches
from .session import ClientState, ClientStateError, InventorySession

__all__ = [
    "ClientState",
    "ClientStateError",
    "InventorySession",
    "filter_books",
    "highlight",
    "mark_matches",
    "matches",
]
