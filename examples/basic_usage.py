#!/usr/bin/env python3
"""
Basic agentmarket usage example.

Lists, searches, submits and records an install against a real database.
Run with: MARKETPLACE_DATABASE_URL=postgresql://... python examples/basic_usage.py
"""

import asyncio
import logging

from agentmarket import (
    InstallationLocation,
    LogScope,
    MarketError,
    MarketplaceDB,
    NotFoundError,
    configure_logging,
)
from agentmarket.types import AddAgentRequest


async def main() -> None:
    # Show statements with their summarized arguments
    configure_logging(level=logging.INFO, db_level=logging.DEBUG)

    async with await MarketplaceDB.from_env() as db:
        # One correlation id across every call of this run
        scope = LogScope.new("basic_usage")

        print("1. Newest approved agents...")
        for agent in await db.catalog.list_agents(page=1, page_size=5, scope=scope):
            print(f"   {agent.id}  {agent.name}")

        print("\n2. Searching for 'data pipeline' in etl/finance...")
        hits = await db.search.search(
            "data pipeline",
            categories=["etl", "finance"],
            sort_by="name",
            sort_order="ascending",
            scope=scope,
        )
        for hit in hits:
            print(f"   {hit.rank:.3f}  {hit.name}")

        print("\n3. Top agents by downloads...")
        top = await db.catalog.get_top_agents_by_downloads(page_size=3, consistent=True, scope=scope)
        print(f"   {len(top.agents)} of {top.total_count} tracked agents")

        print("\n4. Submitting a new agent...")
        request = AddAgentRequest(
            graph={"name": "Example Agent", "description": "Says hello", "nodes": [], "links": []},
            author="basic-usage",
            keywords=["example"],
            categories=["demo"],
        )
        submitted = await db.submissions.submit_agent(request, submitter="basic-usage", scope=scope)
        print(f"   {submitted.id} is {submitted.submission_status.value}")

        details = await db.catalog.get_agent_details(submitted.id, scope=scope)
        print(f"   version {details.version}, submitted {details.submission_date}")

        print("\n5. Recording an install...")
        await db.events.record_install(
            submitted.id, "local-example", InstallationLocation.LOCAL, scope=scope
        )

        print("\n6. Looking up an unknown agent...")
        try:
            await db.catalog.get_agent_details("00000000-0000-0000-0000-000000000000", scope=scope)
        except NotFoundError as e:
            print(f"   Caught {e.code}: {e.message}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except MarketError as e:
        print(f"Failed: {e}")
        raise SystemExit(1)
