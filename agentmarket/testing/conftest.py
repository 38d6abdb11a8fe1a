"""
Pytest plugin for agentmarket testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
automatically discovered by pytest.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["agentmarket.testing.conftest"]
"""

# Re-export all fixtures for pytest auto-discovery
from agentmarket.testing.fixtures import (
    mock_agent_id,
    mock_db,
    mock_pool,
    sample_agent_row,
    sample_request,
)

__all__ = [
    "mock_pool",
    "mock_db",
    "mock_agent_id",
    "sample_agent_row",
    "sample_request",
]
