"""
Tests for the catalog write client.

Feature: agentmarket
"""

import asyncio
import uuid

import pytest
from asyncpg import exceptions as pg_exceptions
from hypothesis import given, settings
from hypothesis import strategies as st

from agentmarket.clients.submissions import CatalogWriter
from agentmarket.exceptions import NotFoundError, QueryError, TransactionError
from agentmarket.testing import MockPool, create_add_agent_request
from agentmarket.types import AddAgentRequest, SubmissionStatus


class TestSubmitAgent:
    """Tests for submit_agent."""

    def test_new_entry_is_pending_version_one(
        self, mock_pool: MockPool, sample_request: AddAgentRequest
    ) -> None:
        agent = asyncio.run(CatalogWriter(mock_pool).submit_agent(sample_request))

        assert uuid.UUID(agent.id)
        assert agent.version == 1
        assert agent.submission_status == SubmissionStatus.PENDING
        assert agent.created_at == agent.updated_at == agent.submission_date
        assert agent.created_at is not None and agent.created_at.tzinfo is not None
        assert agent.name == "New Agent"
        assert agent.description == "Does something useful"

    def test_insert_runs_in_committed_transaction(
        self, mock_pool: MockPool, sample_request: AddAgentRequest
    ) -> None:
        agent = asyncio.run(CatalogWriter(mock_pool).submit_agent(sample_request))

        methods = [c.method for c in mock_pool.calls]
        assert methods == ["begin", "execute", "commit"]
        assert len(mock_pool.committed) == 1
        insert = mock_pool.committed[0]
        assert insert.in_transaction
        assert "INSERT INTO agents" in insert.query
        assert insert.args == (
            agent.id,
            "New Agent",
            "Does something useful",
            "test-author",
            ["automation"],
            ["productivity"],
            sample_request.graph,
            1,
            agent.created_at,
            agent.created_at,
            agent.created_at,
            "PENDING",
        )

    @given(
        name=st.text(max_size=40),
        keywords=st.lists(st.text(max_size=15), max_size=5),
        categories=st.lists(st.text(max_size=15), max_size=5),
    )
    @settings(max_examples=50)
    def test_property_submission_fields_copied(
        self, name: str, keywords: list[str], categories: list[str]
    ) -> None:
        pool = MockPool()
        request = create_add_agent_request(name=name, keywords=keywords, categories=categories)

        agent = asyncio.run(CatalogWriter(pool).submit_agent(request))

        assert agent.name == name
        assert agent.keywords == keywords
        assert agent.categories == categories
        assert agent.graph == request.graph

    def test_ids_are_unique(self, mock_pool: MockPool, sample_request: AddAgentRequest) -> None:
        writer = CatalogWriter(mock_pool)

        ids = {asyncio.run(writer.submit_agent(sample_request)).id for _ in range(5)}

        assert len(ids) == 5

    def test_graph_without_name(self, mock_pool: MockPool) -> None:
        request = AddAgentRequest(graph={"nodes": []}, author="someone")

        agent = asyncio.run(CatalogWriter(mock_pool).submit_agent(request))

        assert agent.name == ""
        assert agent.description == ""

    def test_insert_failure_rolls_back(
        self, mock_pool: MockPool, sample_request: AddAgentRequest
    ) -> None:
        mock_pool.configure_execute(
            "INSERT INTO agents", error=pg_exceptions.UniqueViolationError("duplicate key")
        )

        with pytest.raises(TransactionError) as exc_info:
            asyncio.run(CatalogWriter(mock_pool).submit_agent(sample_request))

        assert exc_info.value.code == "TRANSACTION_FAILED"
        assert exc_info.value.operation == "submit_agent"
        assert mock_pool.committed == []
        assert mock_pool.was_called("rollback")
        assert not mock_pool.was_called("commit")

    def test_commit_failure_leaves_nothing(
        self, mock_pool: MockPool, sample_request: AddAgentRequest
    ) -> None:
        mock_pool.configure_transaction(
            commit_error=pg_exceptions.SerializationError("could not serialize")
        )

        with pytest.raises(TransactionError):
            asyncio.run(CatalogWriter(mock_pool).submit_agent(sample_request))

        assert mock_pool.committed == []
        assert len(mock_pool.rolled_back) == 1

    def test_begin_failure(self, mock_pool: MockPool, sample_request: AddAgentRequest) -> None:
        mock_pool.configure_transaction(
            begin_error=pg_exceptions.ConnectionDoesNotExistError("connection was closed")
        )

        with pytest.raises(TransactionError):
            asyncio.run(CatalogWriter(mock_pool).submit_agent(sample_request))

        assert not mock_pool.was_called("execute")

    def test_cancellation_rolls_back_and_propagates(
        self, mock_pool: MockPool, sample_request: AddAgentRequest
    ) -> None:
        mock_pool.configure_execute("INSERT INTO agents", error=asyncio.CancelledError())

        with pytest.raises(asyncio.CancelledError):
            asyncio.run(CatalogWriter(mock_pool).submit_agent(sample_request))

        assert mock_pool.committed == []
        assert mock_pool.was_called("rollback")


class TestIncrementDownloadCount:
    """Tests for increment_download_count."""

    def test_increments(self, mock_pool: MockPool, mock_agent_id: str) -> None:
        asyncio.run(CatalogWriter(mock_pool).increment_download_count(mock_agent_id))

        call = mock_pool.last_call("execute")
        assert "SET download_count = download_count + 1" in call.query
        assert call.args == (mock_agent_id,)

    def test_unknown_agent(self, mock_pool: MockPool, mock_agent_id: str) -> None:
        mock_pool.configure_execute("UPDATE agents", status="UPDATE 0")

        with pytest.raises(NotFoundError) as exc_info:
            asyncio.run(CatalogWriter(mock_pool).increment_download_count(mock_agent_id))

        assert exc_info.value.agent_id == mock_agent_id

    def test_timeout(self, mock_pool: MockPool, mock_agent_id: str) -> None:
        mock_pool.configure_execute("UPDATE agents", error=asyncio.TimeoutError())

        with pytest.raises(QueryError) as exc_info:
            asyncio.run(CatalogWriter(mock_pool).increment_download_count(mock_agent_id))

        assert exc_info.value.code == "QUERY_TIMEOUT"
