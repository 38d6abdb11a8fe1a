"""Catalog write client.

Submissions are written in one transaction: the row is either committed in
full or not there at all.
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from agentmarket.clients._rows import parse_agent_id
from agentmarket.exceptions import NotFoundError
from agentmarket.logging import LogScope
from agentmarket.pool import affected_rows
from agentmarket.types.agents import (
    AddAgentRequest,
    AgentWithMetadata,
    SubmissionStatus,
)

if TYPE_CHECKING:
    from agentmarket.pool import ConnectionPool

_INSERT_AGENT = """
    INSERT INTO agents (
        id, name, description, author, keywords, categories, graph,
        version, created_at, updated_at, submission_date, submission_status
    )
    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12)
"""


class CatalogWriter:
    """Client for catalog submissions and download counting."""

    def __init__(self, pool: "ConnectionPool") -> None:
        """
        Initialize the catalog writer.

        Args:
            pool: Shared connection pool
        """
        self.pool = pool

    async def submit_agent(
        self,
        request: AddAgentRequest,
        submitter: Any = None,
        *,
        timeout: float | None = None,
        scope: LogScope | None = None,
    ) -> AgentWithMetadata:
        """
        Submit a new agent for moderation.

        The entry gets a fresh UUID, version 1 and status PENDING; its
        created, updated and submission timestamps are the same instant.

        Args:
            request: Graph, author, keywords and categories of the new agent
            submitter: Who submitted it (logged only)
            timeout: Statement timeout in seconds (default: pool setting)
            scope: Caller's logging scope, for correlation

        Returns:
            The stored AgentWithMetadata

        Raises:
            TransactionError: If begin, insert or commit fails; nothing is stored
        """
        scope = LogScope.for_call("submit_agent", scope)
        scope.info("Submitting new agent", name=request.name, submitter=submitter)

        now = datetime.now(timezone.utc)
        agent = AgentWithMetadata(
            id=str(uuid.uuid4()),
            name=request.name,
            description=request.description,
            author=request.author,
            keywords=list(request.keywords),
            categories=list(request.categories),
            graph=request.graph,
            version=1,
            created_at=now,
            updated_at=now,
            submission_date=now,
            submission_status=SubmissionStatus.PENDING,
        )

        async with self.pool.transaction(scope, timeout=timeout) as tx:
            await tx.execute(
                _INSERT_AGENT,
                agent.id,
                agent.name,
                agent.description,
                agent.author,
                agent.keywords,
                agent.categories,
                agent.graph,
                agent.version,
                agent.created_at,
                agent.updated_at,
                agent.submission_date,
                agent.submission_status.value,
                scope=scope,
                timeout=timeout,
            )

        scope.info("Successfully submitted new agent", agent_id=agent.id)
        return agent

    async def increment_download_count(
        self,
        agent_id: str,
        *,
        timeout: float | None = None,
        scope: LogScope | None = None,
    ) -> None:
        """
        Count one download of an agent.

        Raises:
            NotFoundError: If no agent has this identifier
            QueryError: If the update fails
        """
        scope = LogScope.for_call("increment_download_count", scope)
        agent_id = parse_agent_id(agent_id, scope)

        status = await self.pool.execute(
            "UPDATE agents SET download_count = download_count + 1 WHERE id = $1",
            agent_id,
            scope=scope,
            timeout=timeout,
        )
        if affected_rows(status) == 0:
            scope.info("Agent not found", agent_id=agent_id)
            raise NotFoundError(
                "NOT_FOUND",
                f"agent {agent_id} not found",
                operation=scope.operation,
                agent_id=agent_id,
            )

        scope.info("Download count incremented", agent_id=agent_id)
