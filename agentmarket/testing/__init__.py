"""agentmarket testing utilities.

Provides a mock connection pool and row factories for testing code that uses
the marketplace data layer.
"""

from agentmarket.testing.fixtures import create_add_agent_request, create_mock_agent_row
from agentmarket.testing.mock import MockCall, MockPool, MockResponse, normalize_sql

__all__ = [
    # Mock pool
    "MockPool",
    "MockCall",
    "MockResponse",
    "normalize_sql",
    # Helper functions
    "create_mock_agent_row",
    "create_add_agent_request",
]
