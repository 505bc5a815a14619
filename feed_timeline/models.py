"""Data models for the feed timeline."""
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Feed:
    """Registered feed source."""

    id: int
    title: str
    url: str
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class NormalizedEntry:
    """One feed item in the shape shared by every source."""

    title: str | None
    url: str | None
    summary: str | None
    published: datetime  # always set, falls back to normalize time


@dataclass
class SourceResult:
    """Entries from one source, plus the failure message if it broke."""

    url: str
    entries: list[NormalizedEntry] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class Timeline:
    """Merged view across sources."""

    entries: list[NormalizedEntry]
    sources: list[SourceResult]

    @property
    def failed_sources(self) -> list[SourceResult]:
        return [s for s in self.sources if not s.ok]
