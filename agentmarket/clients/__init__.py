"""Agent marketplace catalog clients."""

from agentmarket.clients.catalog import CatalogReader
from agentmarket.clients.events import EventRecorder
from agentmarket.clients.search import SearchEngine
from agentmarket.clients.submissions import CatalogWriter

__all__ = [
    "CatalogReader",
    "SearchEngine",
    "CatalogWriter",
    "EventRecorder",
]
