"""Install event data models."""

from dataclasses import dataclass
from enum import Enum


class InstallationLocation(str, Enum):
    """Where a marketplace agent was installed."""

    LOCAL = "local"
    CLOUD = "cloud"


@dataclass
class InstallTracker:
    """An append-only install fact. Repeated installs produce repeated rows."""

    marketplace_agent_id: str
    installed_agent_id: str
    installation_location: InstallationLocation | str
