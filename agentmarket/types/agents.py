"""Catalog entry data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class SubmissionStatus(str, Enum):
    """Lifecycle state of a catalog entry. Only APPROVED entries are listed."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


@dataclass
class Agent:
    """A catalog entry: a named graph artifact with its classification."""

    id: str
    name: str
    description: str
    author: str
    keywords: list[str]
    categories: list[str]
    graph: dict[str, Any]


@dataclass
class AgentWithMetadata(Agent):
    """Catalog entry with its lifecycle fields."""

    version: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None
    submission_date: datetime | None = None
    submission_status: SubmissionStatus = SubmissionStatus.PENDING


@dataclass
class AgentWithDownloads(AgentWithMetadata):
    """Catalog entry with its lifecycle fields and download count from the analytics aggregate."""

    downloads: int = 0


@dataclass
class AgentWithRank(AgentWithMetadata):
    """Search hit. The description is truncated to 500 characters."""

    rank: float = 0.0


@dataclass
class AgentFile:
    """Minimal projection used for download and export."""

    id: str
    name: str
    graph: dict[str, Any]


@dataclass
class AddAgentRequest:
    """A new submission. Name and description come from the graph itself."""

    graph: dict[str, Any]
    author: str
    keywords: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.graph.get("name", "")

    @property
    def description(self) -> str:
        return self.graph.get("description", "")


@dataclass
class AgentPage(Generic[T]):
    """
    One page of a listing plus the total number of matching entries.

    Unless the listing was requested with ``consistent=True``, the total is
    read by a separate query and may lag the page under concurrent writes.
    """

    agents: list[T]
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return -(-self.total_count // self.page_size) if self.page_size else 0
