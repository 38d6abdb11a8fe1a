"""
Connection pool for the agent marketplace data layer.

Wraps an asyncpg pool with statement logging, per-call timeouts, driver error
translation and transactions that always roll back before an error surfaces.
"""

import asyncio
import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import asyncpg
from asyncpg import exceptions as pg_exceptions

from agentmarket.exceptions import (
    ConfigurationError,
    QueryError,
    TransactionError,
)
from agentmarket.logging import LogScope, mask_dsn

# Errors raised by the driver or the network below it
DRIVER_ERRORS = (
    pg_exceptions.PostgresError,
    pg_exceptions.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


@dataclass
class PoolConfig:
    """Configuration for the shared connection pool."""

    min_size: int = 1
    max_size: int = 10
    command_timeout: float | None = 30.0  # Default per-statement timeout in seconds

    def __post_init__(self) -> None:
        if self.min_size < 0:
            raise ConfigurationError(f"min_size must be >= 0, got {self.min_size}")
        if self.max_size < 1 or self.max_size < self.min_size:
            raise ConfigurationError(
                f"max_size must be >= 1 and >= min_size, got {self.max_size}"
            )
        if self.command_timeout is not None and self.command_timeout <= 0:
            raise ConfigurationError(
                f"command_timeout must be positive, got {self.command_timeout}"
            )


def affected_rows(status: str) -> int:
    """
    Parse the row count from a command status tag.

    Args:
        status: Status returned by ``execute`` (e.g., "UPDATE 1", "INSERT 0 1")

    Returns:
        Number of rows affected, 0 when the tag carries no count
    """
    parts = status.split()
    if parts and parts[-1].isdigit():
        return int(parts[-1])
    return 0


def translate_error(exc: BaseException, scope: LogScope) -> QueryError:
    """
    Convert a driver error into a QueryError carrying the operation name.

    Args:
        exc: Exception raised by asyncpg or the socket layer
        scope: Logging scope of the failing call

    Returns:
        QueryError with code QUERY_TIMEOUT, CONNECTION_ERROR or QUERY_FAILED
    """
    # TimeoutError subclasses OSError, so it is checked first
    if isinstance(exc, (asyncio.TimeoutError, pg_exceptions.QueryCanceledError)):
        return QueryError(
            "QUERY_TIMEOUT",
            f"{scope.operation} timed out: {exc}",
            operation=scope.operation,
        )
    if isinstance(
        exc,
        (
            pg_exceptions.ConnectionDoesNotExistError,
            pg_exceptions.PostgresConnectionError,
            OSError,
        ),
    ):
        return QueryError(
            "CONNECTION_ERROR",
            f"{scope.operation} lost its connection: {exc}",
            operation=scope.operation,
        )
    return QueryError(
        "QUERY_FAILED",
        f"{scope.operation} failed: {type(exc).__name__}: {exc}",
        operation=scope.operation,
    )


async def _init_connection(conn: asyncpg.Connection) -> None:
    # Graph payloads are jsonb; exchange them as Python dicts
    await conn.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )


class TransactionSession:
    """Statements bound to the connection of an open transaction."""

    def __init__(self, conn: asyncpg.Connection, scope: LogScope) -> None:
        self._conn = conn
        self.scope = scope

    async def fetch(
        self, query: str, *args: Any, scope: LogScope, timeout: float | None = None
    ) -> list[Any]:
        return await _run(self._conn.fetch, query, args, scope, timeout)

    async def fetchrow(
        self, query: str, *args: Any, scope: LogScope, timeout: float | None = None
    ) -> Any | None:
        return await _run(self._conn.fetchrow, query, args, scope, timeout)

    async def execute(
        self, query: str, *args: Any, scope: LogScope, timeout: float | None = None
    ) -> str:
        return await _run(self._conn.execute, query, args, scope, timeout)


async def _run(
    method: Any,
    query: str,
    args: tuple[Any, ...],
    scope: LogScope,
    timeout: float | None,
) -> Any:
    scope.log_statement(query, args)
    try:
        return await method(query, *args, timeout=timeout)
    except DRIVER_ERRORS as e:
        error = translate_error(e, scope)
        scope.error("Statement failed", code=error.code, error=e)
        raise error from e


class ConnectionPool:
    """
    Pooled PostgreSQL access shared by every catalog component.

    Handles:
    - Single-statement fetch / fetchrow / execute on a pooled connection
    - Per-call timeouts (falling back to ``PoolConfig.command_timeout``)
    - Driver error translation into QueryError
    - Transactions with guaranteed rollback on failure or cancellation
    """

    def __init__(self, pool: asyncpg.Pool, config: PoolConfig | None = None) -> None:
        """
        Wrap an already created asyncpg pool.

        Args:
            pool: asyncpg pool (see ``create`` to build one)
            config: Configuration the pool was created with
        """
        self._pool = pool
        self.config = config or PoolConfig()

    @classmethod
    async def create(cls, dsn: str, config: PoolConfig | None = None) -> "ConnectionPool":
        """
        Open a new pool.

        Args:
            dsn: PostgreSQL connection string
            config: Pool sizing and timeouts (default: PoolConfig())

        Returns:
            Ready ConnectionPool

        Raises:
            QueryError: If the database cannot be reached
        """
        config = config or PoolConfig()
        scope = LogScope.new("ConnectionPool.create")
        scope.info(
            "Opening connection pool",
            dsn=mask_dsn(dsn),
            min_size=config.min_size,
            max_size=config.max_size,
        )
        try:
            pool = await asyncpg.create_pool(
                dsn,
                min_size=config.min_size,
                max_size=config.max_size,
                command_timeout=config.command_timeout,
                init=_init_connection,
            )
        except DRIVER_ERRORS as e:
            scope.error("Failed to open connection pool", error=e)
            raise translate_error(e, scope) from e
        return cls(pool, config)

    async def close(self) -> None:
        """Close the pool, waiting for connections to be released."""
        await self._pool.close()

    async def __aenter__(self) -> "ConnectionPool":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def fetch(
        self, query: str, *args: Any, scope: LogScope, timeout: float | None = None
    ) -> list[Any]:
        """
        Run a query returning zero or more rows.

        Raises:
            QueryError: On driver, connection or timeout failure
        """
        return await _run(self._pool.fetch, query, args, scope, timeout)

    async def fetchrow(
        self, query: str, *args: Any, scope: LogScope, timeout: float | None = None
    ) -> Any | None:
        """
        Run a query returning zero or one row.

        Raises:
            QueryError: On driver, connection or timeout failure
        """
        return await _run(self._pool.fetchrow, query, args, scope, timeout)

    async def execute(
        self, query: str, *args: Any, scope: LogScope, timeout: float | None = None
    ) -> str:
        """
        Run a statement returning no rows.

        Returns:
            Command status tag (e.g., "INSERT 0 1")

        Raises:
            QueryError: On driver, connection or timeout failure
        """
        return await _run(self._pool.execute, query, args, scope, timeout)

    @asynccontextmanager
    async def transaction(
        self,
        scope: LogScope,
        isolation: str = "read_committed",
        readonly: bool = False,
        timeout: float | None = None,
    ) -> AsyncIterator[TransactionSession]:
        """
        Run statements in one transaction on one connection.

        The transaction commits when the block exits normally. Any failure
        inside the block, at begin or at commit rolls it back first; statement
        and driver failures then surface as TransactionError, other
        MarketErrors and cancellation propagate unchanged.

        Args:
            scope: Logging scope of the calling operation
            isolation: "read_committed", "repeatable_read" or "serializable"
            readonly: Open a READ ONLY transaction
            timeout: Timeout for acquiring a connection

        Yields:
            TransactionSession bound to the transaction's connection
        """
        try:
            async with self._pool.acquire(timeout=timeout) as conn:
                tx = conn.transaction(isolation=isolation, readonly=readonly)
                try:
                    await tx.start()
                except DRIVER_ERRORS as e:
                    scope.error("Failed to begin transaction", error=e)
                    raise transaction_error(scope, "could not begin", e) from e

                try:
                    yield TransactionSession(conn, scope)
                except BaseException as e:
                    await self._rollback(tx, scope)
                    if is_statement_failure(e):
                        raise transaction_error(scope, "statement failed", e) from e
                    # Cancellation, NotFound, Scan and programming errors keep their type
                    raise

                try:
                    await tx.commit()
                except BaseException as e:
                    scope.error("Failed to commit transaction", error=e)
                    await self._rollback(tx, scope)
                    if is_statement_failure(e):
                        raise transaction_error(scope, "commit failed", e) from e
                    raise
        except DRIVER_ERRORS as e:
            scope.error("Connection failure around transaction", error=e)
            raise transaction_error(scope, "lost its connection", e) from e

    async def _rollback(self, tx: Any, scope: LogScope) -> None:
        try:
            await tx.rollback()
        except DRIVER_ERRORS as e:
            # The pool resets the connection on release, ending the transaction
            scope.error("Rollback failed", error=e)
        else:
            scope.warning("Transaction rolled back")


def is_statement_failure(exc: BaseException) -> bool:
    return isinstance(exc, (QueryError, *DRIVER_ERRORS))


def transaction_error(scope: LogScope, stage: str, exc: BaseException) -> TransactionError:
    return TransactionError(
        "TRANSACTION_FAILED",
        f"{scope.operation} {stage}: {exc}",
        operation=scope.operation,
    )
