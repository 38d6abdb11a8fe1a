"""
Query composition for catalog statements.

Optional filters are ``Predicate`` values: a SQL fragment with ``{}`` markers
and the values that fill them. ``QueryBuilder`` numbers the markers as
``$n`` placeholders in the order they are rendered, so every caller-supplied
value reaches PostgreSQL as a bound parameter and never as SQL text.

Example:
    ```python
    builder = QueryBuilder()
    where = builder.where([
        APPROVED_ONLY,
        name_contains("a.name", "bot"),
        array_contains("a.keywords", None),  # skipped
    ])
    # where == "WHERE a.submission_status = 'APPROVED' AND a.name ILIKE $1"
    # builder.args == ["%bot%"]
    ```
"""

from dataclasses import dataclass
from typing import Any

from agentmarket.exceptions import ValidationError


@dataclass(frozen=True)
class Predicate:
    """A boolean SQL fragment and the values bound into its ``{}`` markers."""

    sql: str
    values: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        markers = self.sql.count("{}")
        if markers != len(self.values):
            raise ValueError(
                f"Predicate has {markers} markers but {len(self.values)} values: {self.sql}"
            )


# Every listing and search is restricted to approved entries
APPROVED_ONLY = Predicate("a.submission_status = 'APPROVED'")


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def name_contains(column: str, value: str | None) -> Predicate | None:
    """Case-insensitive substring match, or None when no value is given."""
    if value is None:
        return None
    return Predicate(f"{column} ILIKE {{}}", (f"%{escape_like(value)}%",))


def array_contains(column: str, value: str | None) -> Predicate | None:
    """Membership of one value in an array column, or None when no value is given."""
    if value is None:
        return None
    return Predicate(f"{{}} = ANY({column})", (value,))


def array_overlaps(column: str, values: list[str] | tuple[str, ...]) -> Predicate | None:
    """
    Intersection of an array column with a set of values (OR across values).

    The values travel as a single ``text[]`` parameter. Returns None for an
    empty collection, which applies no restriction.
    """
    if not values:
        return None
    return Predicate(f"{column} && {{}}::text[]", (list(values),))


@dataclass(frozen=True)
class SortKey:
    """One ORDER BY term. Expressions come from code, never from callers."""

    expression: str
    direction: str = "DESC"

    def render(self) -> str:
        return f"{self.expression} {self.direction}"


_SORT_DIRECTIONS = {
    "asc": "ASC",
    "ascending": "ASC",
    "desc": "DESC",
    "descending": "DESC",
}


def parse_sort_order(sort_order: str | None, operation: str) -> str:
    """
    Map a caller-supplied sort order to ASC or DESC.

    Args:
        sort_order: "asc", "ascending", "desc" or "descending" (any case);
            None means descending
        operation: Operation name for the error context

    Raises:
        ValidationError: For any other value
    """
    if sort_order is None:
        return "DESC"
    direction = _SORT_DIRECTIONS.get(sort_order.strip().lower())
    if direction is None:
        raise ValidationError(
            "INVALID_ARGUMENT",
            f"sort order must be one of {sorted(_SORT_DIRECTIONS)}, got {sort_order!r}",
            operation=operation,
        )
    return direction


def validate_pagination(page: int, page_size: int, operation: str) -> None:
    """
    Reject pages the LIMIT/OFFSET arithmetic cannot serve.

    Raises:
        ValidationError: If page < 1 or page_size < 1
    """
    if page < 1:
        raise ValidationError(
            "INVALID_ARGUMENT", f"page must be >= 1, got {page}", operation=operation
        )
    if page_size < 1:
        raise ValidationError(
            "INVALID_ARGUMENT",
            f"page_size must be >= 1, got {page_size}",
            operation=operation,
        )


class QueryBuilder:
    """Collects bound parameters while clauses are rendered."""

    def __init__(self) -> None:
        self.args: list[Any] = []

    def bind(self, value: Any) -> str:
        """Register a value and return its ``$n`` placeholder."""
        self.args.append(value)
        return f"${len(self.args)}"

    def render(self, predicate: Predicate) -> str:
        placeholders = [self.bind(value) for value in predicate.values]
        return predicate.sql.format(*placeholders)

    def where(self, predicates: list[Predicate | None]) -> str:
        """
        Render predicates joined with AND. None entries are skipped.

        Returns:
            "WHERE ..." or an empty string when nothing applies
        """
        rendered = [self.render(p) for p in predicates if p is not None]
        if not rendered:
            return ""
        return "WHERE " + " AND ".join(rendered)

    def order_by(self, keys: list[SortKey]) -> str:
        return "ORDER BY " + ", ".join(key.render() for key in keys)

    def paginate(self, page: int, page_size: int) -> str:
        """Render LIMIT/OFFSET for a 1-indexed page."""
        limit = self.bind(page_size)
        offset = self.bind((page - 1) * page_size)
        return f"LIMIT {limit} OFFSET {offset}"
