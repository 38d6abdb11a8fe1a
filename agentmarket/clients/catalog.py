"""Catalog read client.

Listing, detail and projection queries. Listings only ever show approved
entries; detail and file lookups resolve any identifier so submitters can
follow their own pending entries.
"""

from typing import TYPE_CHECKING, Any

from agentmarket.clients._rows import (
    AGENT_COLUMNS,
    METADATA_COLUMNS,
    agent_from_row,
    count_from_row,
    downloads_from_row,
    file_from_row,
    metadata_from_row,
    parse_agent_id,
    scan,
    scan_all,
)
from agentmarket.exceptions import NotFoundError, ValidationError
from agentmarket.logging import LogScope
from agentmarket.query import (
    APPROVED_ONLY,
    Predicate,
    QueryBuilder,
    array_contains,
    name_contains,
    validate_pagination,
)
from agentmarket.types.agents import (
    Agent,
    AgentFile,
    AgentPage,
    AgentWithDownloads,
    AgentWithMetadata,
)

if TYPE_CHECKING:
    from agentmarket.pool import ConnectionPool

FEATURED_ACTIVE = Predicate("fa.is_active = true")


class CatalogReader:
    """Client for read-only catalog queries."""

    def __init__(self, pool: "ConnectionPool") -> None:
        """
        Initialize the catalog reader.

        Args:
            pool: Shared connection pool
        """
        self.pool = pool

    async def list_agents(
        self,
        page: int = 1,
        page_size: int = 10,
        name: str | None = None,
        keyword: str | None = None,
        category: str | None = None,
        *,
        timeout: float | None = None,
        scope: LogScope | None = None,
    ) -> list[Agent]:
        """
        List approved agents, newest first.

        Args:
            page: 1-indexed page number
            page_size: Maximum number of agents returned
            name: Case-insensitive substring of the agent name
            keyword: Single keyword the agent must carry
            category: Single category the agent must belong to
            timeout: Statement timeout in seconds (default: pool setting)
            scope: Caller's logging scope, for correlation

        Returns:
            Up to ``page_size`` agents ordered by creation time descending

        Raises:
            ValidationError: If page or page_size is below 1
            QueryError: If the query fails
            ScanError: If a row does not match the projection
        """
        scope = LogScope.for_call("list_agents", scope)
        validate_pagination(page, page_size, scope.operation)
        scope.debug(
            "Query parameters",
            page=page,
            page_size=page_size,
            name=name,
            keyword=keyword,
            category=category,
        )

        builder = QueryBuilder()
        where = builder.where([
            APPROVED_ONLY,
            name_contains("a.name", name),
            array_contains("a.keywords", keyword),
            array_contains("a.categories", category),
        ])
        query = f"""
            SELECT {AGENT_COLUMNS}
            FROM agents a
            {where}
            ORDER BY a.created_at DESC
            {builder.paginate(page, page_size)}
        """

        rows = await self.pool.fetch(query, *builder.args, scope=scope, timeout=timeout)
        agents = scan_all(rows, agent_from_row, scope)

        scope.info("Found agents", count=len(agents))
        return agents

    async def get_agent_details(
        self,
        agent_id: str,
        *,
        timeout: float | None = None,
        scope: LogScope | None = None,
    ) -> AgentWithMetadata:
        """
        Get an agent with its lifecycle fields.

        Args:
            agent_id: The agent's identifier

        Returns:
            AgentWithMetadata, whatever its submission status

        Raises:
            NotFoundError: If no agent has this identifier
            QueryError: If the query fails
        """
        scope = LogScope.for_call("get_agent_details", scope)
        agent_id = parse_agent_id(agent_id, scope)

        query = f"""
            SELECT {METADATA_COLUMNS}
            FROM agents a
            WHERE a.id = $1
        """
        row = await self.pool.fetchrow(query, agent_id, scope=scope, timeout=timeout)
        if row is None:
            raise _not_found(agent_id, scope)

        agent = scan(row, metadata_from_row, scope, agent_id=agent_id)
        scope.info("Agent details retrieved", agent_id=agent_id)
        return agent

    async def get_agent_file(
        self,
        agent_id: str,
        *,
        timeout: float | None = None,
        scope: LogScope | None = None,
    ) -> AgentFile:
        """
        Get the downloadable projection of an agent.

        Args:
            agent_id: The agent's identifier

        Returns:
            AgentFile with id, name and graph

        Raises:
            NotFoundError: If no agent has this identifier
        """
        scope = LogScope.for_call("get_agent_file", scope)
        agent_id = parse_agent_id(agent_id, scope)

        row = await self.pool.fetchrow(
            "SELECT a.id, a.name, a.graph FROM agents a WHERE a.id = $1",
            agent_id,
            scope=scope,
            timeout=timeout,
        )
        if row is None:
            raise _not_found(agent_id, scope)

        agent_file = scan(row, file_from_row, scope, agent_id=agent_id)
        scope.info("Agent file retrieved", agent_id=agent_id)
        return agent_file

    async def get_top_agents_by_downloads(
        self,
        page: int = 1,
        page_size: int = 10,
        *,
        consistent: bool = False,
        timeout: float | None = None,
        scope: LogScope | None = None,
    ) -> AgentPage[AgentWithDownloads]:
        """
        List approved agents by download count, highest first.

        The total is read by a second query. With ``consistent=False`` the two
        queries run independently, so under concurrent writes the total may
        briefly disagree with the page. Pass ``consistent=True`` to run both
        in one read-only REPEATABLE READ transaction.

        Args:
            page: 1-indexed page number
            page_size: Maximum number of agents returned
            consistent: Read page and total from one snapshot

        Returns:
            AgentPage of AgentWithDownloads with the total of tracked agents

        Raises:
            ValidationError: If page or page_size is below 1
            QueryError: If a query fails
            TransactionError: If the consistent read fails
        """
        scope = LogScope.for_call("get_top_agents_by_downloads", scope)
        validate_pagination(page, page_size, scope.operation)

        page_builder = QueryBuilder()
        page_query = f"""
            SELECT {METADATA_COLUMNS}, tracker.downloads
            FROM agents a
            JOIN analytics_tracker tracker ON a.id = tracker.agent_id
            {page_builder.where([APPROVED_ONLY])}
            ORDER BY tracker.downloads DESC, a.created_at DESC
            {page_builder.paginate(page, page_size)}
        """
        count_builder = QueryBuilder()
        count_query = f"""
            SELECT COUNT(*) AS count
            FROM agents a
            JOIN analytics_tracker tracker ON a.id = tracker.agent_id
            {count_builder.where([APPROVED_ONLY])}
        """

        rows, count_row = await self._page_and_count(
            (page_query, page_builder.args),
            (count_query, count_builder.args),
            consistent=consistent,
            timeout=timeout,
            scope=scope,
        )
        agents = scan_all(rows, downloads_from_row, scope)
        total = scan(count_row, count_from_row, scope)

        scope.info("Top agents retrieved", count=len(agents), total=total)
        return AgentPage(agents=agents, total_count=total, page=page, page_size=page_size)

    async def get_featured_agents(
        self,
        category: str,
        page: int = 1,
        page_size: int = 10,
        *,
        consistent: bool = False,
        timeout: float | None = None,
        scope: LogScope | None = None,
    ) -> AgentPage[Agent]:
        """
        List approved agents a curator features in a category, newest first.

        An agent qualifies when its ``featured_agent`` row is active and its
        featured categories contain ``category``. The total has the same
        two-query caveat as ``get_top_agents_by_downloads``.

        Args:
            category: Category to list featured agents for
            page: 1-indexed page number
            page_size: Maximum number of agents returned
            consistent: Read page and total from one snapshot

        Returns:
            AgentPage of Agent with the total of featured agents in the category

        Raises:
            ValidationError: If category is None, or page or page_size is below 1
        """
        scope = LogScope.for_call("get_featured_agents", scope)
        validate_pagination(page, page_size, scope.operation)
        if category is None:
            raise ValidationError(
                "INVALID_ARGUMENT", "category is required", operation=scope.operation
            )

        def predicates() -> list[Predicate | None]:
            return [
                APPROVED_ONLY,
                FEATURED_ACTIVE,
                Predicate("{} = ANY(fa.featured_categories)", (category,)),
            ]

        page_builder = QueryBuilder()
        page_query = f"""
            SELECT {AGENT_COLUMNS}
            FROM agents a
            JOIN featured_agent fa ON a.id = fa.agent_id
            {page_builder.where(predicates())}
            ORDER BY a.created_at DESC
            {page_builder.paginate(page, page_size)}
        """
        count_builder = QueryBuilder()
        count_query = f"""
            SELECT COUNT(*) AS count
            FROM agents a
            JOIN featured_agent fa ON a.id = fa.agent_id
            {count_builder.where(predicates())}
        """

        rows, count_row = await self._page_and_count(
            (page_query, page_builder.args),
            (count_query, count_builder.args),
            consistent=consistent,
            timeout=timeout,
            scope=scope,
        )
        agents = scan_all(rows, agent_from_row, scope)
        total = scan(count_row, count_from_row, scope)

        scope.info("Featured agents retrieved", category=category, count=len(agents), total=total)
        return AgentPage(agents=agents, total_count=total, page=page, page_size=page_size)

    async def _page_and_count(
        self,
        page_statement: tuple[str, list[Any]],
        count_statement: tuple[str, list[Any]],
        consistent: bool,
        timeout: float | None,
        scope: LogScope,
    ) -> tuple[list[Any], Any]:
        page_query, page_args = page_statement
        count_query, count_args = count_statement

        if not consistent:
            rows = await self.pool.fetch(page_query, *page_args, scope=scope, timeout=timeout)
            count_row = await self.pool.fetchrow(
                count_query, *count_args, scope=scope, timeout=timeout
            )
            return rows, count_row

        async with self.pool.transaction(
            scope, isolation="repeatable_read", readonly=True, timeout=timeout
        ) as tx:
            rows = await tx.fetch(page_query, *page_args, scope=scope, timeout=timeout)
            count_row = await tx.fetchrow(count_query, *count_args, scope=scope, timeout=timeout)
        return rows, count_row


def _not_found(agent_id: str, scope: LogScope) -> NotFoundError:
    scope.info("Agent not found", agent_id=agent_id)
    return NotFoundError(
        "NOT_FOUND",
        f"agent {agent_id} not found",
        operation=scope.operation,
        agent_id=agent_id,
    )
