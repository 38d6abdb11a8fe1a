"""Row-to-model conversion shared by the catalog clients."""

import json
import uuid
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from agentmarket.exceptions import NotFoundError, ScanError
from agentmarket.logging import LogScope
from agentmarket.types.agents import (
    Agent,
    AgentFile,
    AgentWithDownloads,
    AgentWithMetadata,
    AgentWithRank,
    SubmissionStatus,
)

T = TypeVar("T")

# Column lists matching the builders below
AGENT_COLUMNS = "a.id, a.name, a.description, a.author, a.keywords, a.categories, a.graph"
METADATA_COLUMNS = (
    f"{AGENT_COLUMNS}, a.version, a.created_at, a.updated_at, "
    "a.submission_date, a.submission_status"
)


def _graph(value: Any) -> dict[str, Any]:
    # Connections without the jsonb codec hand back the raw JSON text
    if isinstance(value, (str, bytes)):
        value = json.loads(value)
    if not isinstance(value, dict):
        raise TypeError(f"graph must be a JSON object, got {type(value).__name__}")
    return value


def _agent_fields(row: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": str(row["id"]),
        "name": row["name"],
        "description": row["description"] or "",
        "author": row["author"] or "",
        "keywords": list(row["keywords"] or []),
        "categories": list(row["categories"] or []),
        "graph": _graph(row["graph"]),
    }


def _metadata_fields(row: Mapping[str, Any]) -> dict[str, Any]:
    return {
        **_agent_fields(row),
        "version": int(row["version"]),
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
        "submission_date": row["submission_date"],
        "submission_status": SubmissionStatus(row["submission_status"]),
    }


def agent_from_row(row: Mapping[str, Any]) -> Agent:
    return Agent(**_agent_fields(row))


def metadata_from_row(row: Mapping[str, Any]) -> AgentWithMetadata:
    return AgentWithMetadata(**_metadata_fields(row))


def downloads_from_row(row: Mapping[str, Any]) -> AgentWithDownloads:
    return AgentWithDownloads(**_metadata_fields(row), downloads=int(row["downloads"]))


def ranked_from_row(row: Mapping[str, Any]) -> AgentWithRank:
    return AgentWithRank(**_metadata_fields(row), rank=float(row["rank"] or 0.0))


def file_from_row(row: Mapping[str, Any]) -> AgentFile:
    return AgentFile(id=str(row["id"]), name=row["name"], graph=_graph(row["graph"]))


def parse_agent_id(agent_id: str, scope: LogScope) -> str:
    """
    Normalize an agent identifier.

    Identifiers are UUIDs assigned at submission, so a malformed one cannot
    match any row.

    Raises:
        NotFoundError: If ``agent_id`` is not a UUID
    """
    try:
        return str(uuid.UUID(str(agent_id)))
    except ValueError as e:
        scope.info("Agent not found", agent_id=agent_id, reason="malformed id")
        raise NotFoundError(
            "NOT_FOUND",
            f"agent {agent_id} not found",
            operation=scope.operation,
            agent_id=agent_id,
        ) from e


def count_from_row(row: Mapping[str, Any] | None) -> int:
    if row is None:
        raise TypeError("count query returned no row")
    return int(row["count"])


def scan(
    row: Any,
    build: Callable[[Any], T],
    scope: LogScope,
    agent_id: str | None = None,
) -> T:
    """
    Convert one row, turning shape mismatches into ScanError.

    Args:
        row: asyncpg Record (or any mapping with the projected columns)
        build: One of the ``*_from_row`` builders
        scope: Logging scope of the calling operation
        agent_id: Identifier involved, for the error context

    Raises:
        ScanError: If a column is missing or holds an unexpected value
    """
    try:
        return build(row)
    except (KeyError, TypeError, ValueError) as e:
        scope.error("Row does not match projection", builder=build.__name__, error=e)
        raise ScanError(
            "SCAN_FAILED",
            f"{scope.operation} could not read row: {type(e).__name__}: {e}",
            operation=scope.operation,
            agent_id=agent_id,
        ) from e


def scan_all(rows: list[Any], build: Callable[[Any], T], scope: LogScope) -> list[T]:
    return [scan(row, build, scope) for row in rows]
