"""
Pytest fixtures for agentmarket testing.

Provides common fixtures and row factories for testing code that uses the
marketplace data layer without a database.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Generator

import pytest

from agentmarket.client import MarketplaceDB
from agentmarket.testing.mock import MockPool
from agentmarket.types.agents import AddAgentRequest


# ============================================================================
# Row Factories
# ============================================================================


def create_mock_agent_row(
    agent_id: str | None = None,
    name: str = "Test Agent",
    **kwargs: Any,
) -> dict[str, Any]:
    """
    Create a dict shaped like a catalog row as returned by the driver.

    Args:
        agent_id: Entry identifier (default: a fresh UUID)
        name: Entry name
        **kwargs: Additional columns to override or add (e.g. ``rank``)

    Returns:
        Row mapping with every metadata column
    """
    created = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
    row: dict[str, Any] = {
        "id": agent_id or str(uuid.uuid4()),
        "name": name,
        "description": f"{name} description",
        "author": "test-author",
        "keywords": ["test"],
        "categories": ["general"],
        "graph": {"name": name, "nodes": [], "links": []},
        "version": 1,
        "created_at": created,
        "updated_at": created,
        "submission_date": created,
        "submission_status": "APPROVED",
    }
    row.update(kwargs)
    return row


def create_add_agent_request(
    name: str = "New Agent",
    description: str = "Does something useful",
    **kwargs: Any,
) -> AddAgentRequest:
    """
    Create an AddAgentRequest whose graph carries ``name`` and ``description``.

    Args:
        name: Graph name
        description: Graph description
        **kwargs: author, keywords or categories overrides
    """
    defaults: dict[str, Any] = {
        "author": "test-author",
        "keywords": ["automation"],
        "categories": ["productivity"],
    }
    defaults.update(kwargs)
    graph = {"name": name, "description": description, "nodes": [], "links": []}
    return AddAgentRequest(graph=graph, **defaults)


# ============================================================================
# Mock Pool Fixtures
# ============================================================================


@pytest.fixture
def mock_pool() -> Generator[MockPool, None, None]:
    """
    Provide a MockPool for testing.

    Example:
        ```python
        def test_my_feature(mock_pool):
            mock_pool.configure_fetch("FROM agents a", rows=[create_mock_agent_row()])
            agents = asyncio.run(CatalogReader(mock_pool).list_agents())
            assert mock_pool.was_called("fetch", "submission_status = 'APPROVED'")
        ```
    """
    pool = MockPool()
    yield pool
    pool.reset()


@pytest.fixture
def mock_db(mock_pool: MockPool) -> MarketplaceDB:
    """Provide a MarketplaceDB whose clients share ``mock_pool``."""
    return MarketplaceDB(mock_pool)  # type: ignore[arg-type]


@pytest.fixture
def mock_agent_id() -> str:
    """Provide a test agent ID."""
    return "5f0c6a57-6d1b-4b7e-9d43-8f1f5a1e2c3d"


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_agent_row(mock_agent_id: str) -> dict[str, Any]:
    """Provide an approved catalog row."""
    return create_mock_agent_row(agent_id=mock_agent_id)


@pytest.fixture
def sample_request() -> AddAgentRequest:
    """Provide a submission request."""
    return create_add_agent_request()
