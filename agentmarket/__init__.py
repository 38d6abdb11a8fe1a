"""agentmarket - data-access layer for the agent marketplace catalog."""

from agentmarket.client import MarketplaceDB
from agentmarket.clients import CatalogReader, CatalogWriter, EventRecorder, SearchEngine
from agentmarket.exceptions import (
    ConfigurationError,
    MarketError,
    NotFoundError,
    QueryError,
    ScanError,
    TransactionError,
    ValidationError,
)
from agentmarket.logging import LogScope, configure_logging, get_logger
from agentmarket.pool import ConnectionPool, PoolConfig
from agentmarket.types import (
    AddAgentRequest,
    Agent,
    AgentFile,
    AgentPage,
    AgentWithDownloads,
    AgentWithMetadata,
    AgentWithRank,
    InstallationLocation,
    InstallTracker,
    SubmissionStatus,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Main client
    "MarketplaceDB",
    # Catalog clients
    "CatalogReader",
    "SearchEngine",
    "CatalogWriter",
    "EventRecorder",
    # Pool
    "ConnectionPool",
    "PoolConfig",
    # Exceptions
    "MarketError",
    "NotFoundError",
    "QueryError",
    "ScanError",
    "TransactionError",
    "ValidationError",
    "ConfigurationError",
    # Types
    "Agent",
    "AgentWithMetadata",
    "AgentWithDownloads",
    "AgentWithRank",
    "AgentFile",
    "AgentPage",
    "AddAgentRequest",
    "SubmissionStatus",
    "InstallTracker",
    "InstallationLocation",
    # Logging
    "LogScope",
    "configure_logging",
    "get_logger",
]
