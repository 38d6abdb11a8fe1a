"""Install event client.

Install events are append-only facts. Nothing deduplicates them: recording
the same install twice stores two rows.
"""

from typing import TYPE_CHECKING

from agentmarket.logging import LogScope
from agentmarket.types.events import InstallationLocation, InstallTracker

if TYPE_CHECKING:
    from agentmarket.pool import ConnectionPool


class EventRecorder:
    """Client for recording install events."""

    def __init__(self, pool: "ConnectionPool") -> None:
        """
        Initialize the event recorder.

        Args:
            pool: Shared connection pool
        """
        self.pool = pool

    async def record_install(
        self,
        marketplace_agent_id: str,
        installed_agent_id: str,
        location: InstallationLocation | str,
        *,
        timeout: float | None = None,
        scope: LogScope | None = None,
    ) -> None:
        """
        Record that a marketplace agent was installed.

        Args:
            marketplace_agent_id: Catalog entry that was installed
            installed_agent_id: Identifier of the resulting local agent
            location: Where it was installed

        Raises:
            QueryError: If the insert fails
        """
        scope = LogScope.for_call("record_install", scope)
        if isinstance(location, InstallationLocation):
            location = location.value
        scope.info(
            "Creating agent installed event",
            marketplace_agent_id=marketplace_agent_id,
            location=location,
        )

        await self.pool.execute(
            """
            INSERT INTO install_tracker (
                marketplace_agent_id, installed_agent_id, installation_location
            )
            VALUES ($1, $2, $3)
            """,
            marketplace_agent_id,
            installed_agent_id,
            location,
            scope=scope,
            timeout=timeout,
        )

        scope.info("Agent installed event created successfully")

    async def record_install_event(
        self,
        event: InstallTracker,
        *,
        timeout: float | None = None,
        scope: LogScope | None = None,
    ) -> None:
        """Record an install event given as an InstallTracker."""
        await self.record_install(
            event.marketplace_agent_id,
            event.installed_agent_id,
            event.installation_location,
            timeout=timeout,
            scope=scope,
        )
