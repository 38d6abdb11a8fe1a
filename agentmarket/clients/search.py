"""Full-text search client.

One statement per search. The query text is tokenized by PostgreSQL's own
text engine; each lexeme becomes a prefix term and the terms are ANDed in
the order they appear. Ranking is ``ts_rank`` over the precomputed
``agents.search`` vector.
"""

from typing import TYPE_CHECKING

from agentmarket.clients._rows import ranked_from_row, scan_all
from agentmarket.exceptions import ValidationError
from agentmarket.logging import LogScope
from agentmarket.query import (
    APPROVED_ONLY,
    Predicate,
    QueryBuilder,
    SortKey,
    array_overlaps,
    parse_sort_order,
    validate_pagination,
)
from agentmarket.types.agents import AgentWithRank

if TYPE_CHECKING:
    from agentmarket.pool import ConnectionPool

# Search hits carry a shortened description to bound the payload
SEARCH_DESCRIPTION_MAX_LENGTH = 500

# Text without lexemes (empty, stop words only) yields a NULL query: no text restriction
TEXT_MATCH = Predicate("(query.q IS NULL OR a.search @@ query.q)")

_SORT_COLUMNS = {
    "createdAt": "a.created_at",
    "updatedAt": "a.updated_at",
    "name": "a.name",
}

_DEFAULT_SORT = [SortKey("rank", "DESC"), SortKey("a.created_at", "DESC")]


def resolve_sort(sort_by: str | None, sort_order: str | None, operation: str) -> list[SortKey]:
    """
    Build the ORDER BY keys of a search.

    Explicit keys (createdAt, updatedAt, name) sort in the requested
    direction with rank as the tie-break. Anything else sorts by rank, then
    newest first.

    Raises:
        ValidationError: If an explicit key comes with an unknown sort order
    """
    column = _SORT_COLUMNS.get(sort_by or "")
    if column is None:
        return list(_DEFAULT_SORT)
    direction = parse_sort_order(sort_order, operation)
    return [SortKey(column, direction), SortKey("rank", "DESC")]


class SearchEngine:
    """Client for ranked full-text search over approved agents."""

    def __init__(self, pool: "ConnectionPool") -> None:
        """
        Initialize the search engine.

        Args:
            pool: Shared connection pool
        """
        self.pool = pool

    async def search(
        self,
        query: str,
        categories: list[str] | tuple[str, ...] = (),
        page: int = 1,
        page_size: int = 10,
        sort_by: str | None = None,
        sort_order: str | None = "desc",
        *,
        timeout: float | None = None,
        scope: LogScope | None = None,
    ) -> list[AgentWithRank]:
        """
        Search approved agents.

        Args:
            query: Free text. Every lexeme must prefix-match the agent's search vector
            categories: Agent must belong to at least one (empty: no restriction)
            page: 1-indexed page number
            page_size: Maximum number of hits returned
            sort_by: "createdAt", "updatedAt" or "name"; anything else sorts by rank
            sort_order: "asc"/"ascending" or "desc"/"descending" for explicit keys
            timeout: Statement timeout in seconds (default: pool setting)
            scope: Caller's logging scope, for correlation

        Returns:
            Hits with a relevance rank and descriptions cut to 500 characters

        Raises:
            ValidationError: On bad pagination, sort order or a bare string as categories
            QueryError: If the query fails
        """
        scope = LogScope.for_call("search", scope)
        if isinstance(categories, str):
            raise ValidationError(
                "INVALID_ARGUMENT",
                f"categories must be a list of strings, got {categories!r}",
                operation=scope.operation,
            )
        validate_pagination(page, page_size, scope.operation)
        order_keys = resolve_sort(sort_by, sort_order, scope.operation)
        scope.debug(
            "Search parameters",
            query=query,
            categories=list(categories),
            page=page,
            page_size=page_size,
            sort_by=sort_by,
            sort_order=sort_order,
        )

        builder = QueryBuilder()
        text_param = builder.bind(query or "")
        where = builder.where([
            APPROVED_ONLY,
            TEXT_MATCH,
            array_overlaps("a.categories", categories),
        ])
        sql = f"""
            WITH query AS (
                SELECT to_tsquery(
                    string_agg(quote_literal(lexeme) || ':*', ' & ' ORDER BY positions)
                ) AS q
                FROM unnest(to_tsvector({text_param}::text))
            )
            SELECT
                a.id,
                a.name,
                LEFT(a.description, {SEARCH_DESCRIPTION_MAX_LENGTH}) AS description,
                a.author,
                a.keywords,
                a.categories,
                a.graph,
                a.version,
                a.created_at,
                a.updated_at,
                a.submission_date,
                a.submission_status,
                COALESCE(ts_rank(a.search, query.q), 0) AS rank
            FROM agents a, query
            {where}
            {builder.order_by(order_keys)}
            {builder.paginate(page, page_size)}
        """

        rows = await self.pool.fetch(sql, *builder.args, scope=scope, timeout=timeout)
        agents = scan_all(rows, ranked_from_row, scope)

        scope.info("Search completed", results=len(agents))
        return agents
