"""Agent marketplace type definitions.

This module exports all data model types used by the data layer.
"""

from agentmarket.types.agents import (
    AddAgentRequest,
    Agent,
    AgentFile,
    AgentPage,
    AgentWithDownloads,
    AgentWithMetadata,
    AgentWithRank,
    SubmissionStatus,
)
from agentmarket.types.events import InstallationLocation, InstallTracker

__all__ = [
    # Catalog entries
    "Agent",
    "AgentWithMetadata",
    "AgentWithDownloads",
    "AgentWithRank",
    "AgentFile",
    "AgentPage",
    "SubmissionStatus",
    # Submissions
    "AddAgentRequest",
    # Install events
    "InstallTracker",
    "InstallationLocation",
]
