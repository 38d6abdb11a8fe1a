"""
Agent marketplace data layer client.

Provides the single entry point that shares one connection pool between the
catalog reader, the search engine, the catalog writer and the event recorder.
"""

import os
from typing import Any

from agentmarket.clients import CatalogReader, CatalogWriter, EventRecorder, SearchEngine
from agentmarket.exceptions import ConfigurationError
from agentmarket.pool import ConnectionPool, PoolConfig


class MarketplaceDB:
    """
    Client for the agent marketplace catalog.

    Aggregates all catalog clients over one pool.

    Example:
        ```python
        import asyncio
        from agentmarket import MarketplaceDB

        async def main():
            async with await MarketplaceDB.connect("postgresql://localhost/market") as db:
                hits = await db.search.search("data pipeline", categories=["etl"])
                details = await db.catalog.get_agent_details(hits[0].id)

        asyncio.run(main())
        ```
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize the client over an open pool.

        Args:
            pool: Connection pool (or a compatible test double such as MockPool)
        """
        self._pool = pool

        self.catalog = CatalogReader(pool)
        self.search = SearchEngine(pool)
        self.submissions = CatalogWriter(pool)
        self.events = EventRecorder(pool)

    @classmethod
    async def connect(cls, dsn: str, config: PoolConfig | None = None) -> "MarketplaceDB":
        """
        Open a pool and build a client on it.

        Args:
            dsn: PostgreSQL connection string
            config: Pool sizing and timeouts (default: PoolConfig())

        Raises:
            QueryError: If the database cannot be reached
        """
        pool = await ConnectionPool.create(dsn, config)
        return cls(pool)

    @staticmethod
    def config_from_env() -> tuple[str, PoolConfig]:
        """
        Read the DSN and pool configuration from environment variables.

        Environment variables:
            MARKETPLACE_DATABASE_URL: PostgreSQL DSN (required)
            MARKETPLACE_POOL_MIN_SIZE: Minimum pool size (optional, default: 1)
            MARKETPLACE_POOL_MAX_SIZE: Maximum pool size (optional, default: 10)
            MARKETPLACE_COMMAND_TIMEOUT: Statement timeout in seconds (optional, default: 30)

        Returns:
            (dsn, PoolConfig)

        Raises:
            ConfigurationError: If the DSN is missing or a number does not parse
        """
        dsn = os.environ.get("MARKETPLACE_DATABASE_URL")
        if not dsn:
            raise ConfigurationError("MARKETPLACE_DATABASE_URL environment variable not set")

        defaults = PoolConfig()
        config = PoolConfig(
            min_size=_env_number("MARKETPLACE_POOL_MIN_SIZE", int, defaults.min_size),
            max_size=_env_number("MARKETPLACE_POOL_MAX_SIZE", int, defaults.max_size),
            command_timeout=_env_number(
                "MARKETPLACE_COMMAND_TIMEOUT", float, defaults.command_timeout
            ),
        )
        return dsn, config

    @classmethod
    async def from_env(cls) -> "MarketplaceDB":
        """
        Create a client from environment variables (see ``config_from_env``).

        Raises:
            ConfigurationError: If required environment variables are missing
            QueryError: If the database cannot be reached
        """
        dsn, config = cls.config_from_env()
        return await cls.connect(dsn, config)

    @property
    def pool(self) -> ConnectionPool:
        """Get the underlying connection pool (for advanced use cases)."""
        return self._pool

    async def close(self) -> None:
        """Close the client and release its connections."""
        await self._pool.close()

    async def __aenter__(self) -> "MarketplaceDB":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit - closes the pool."""
        await self.close()


def _env_number(name: str, kind: type, default: Any) -> Any:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ConfigurationError(
            f"Invalid {name}: {raw!r}. Must be {'an integer' if kind is int else 'a number'}"
        ) from None
