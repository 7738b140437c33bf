"""Data model shared by the crawler, scorer, scheduler, and CSV adapters."""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum


class ConfidenceBand(str, Enum):
    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    ERROR = "ERROR"
    TIMEOUT = "TIMEOUT"


# Bands that classify the target as an equipment owner
POSITIVE_BANDS = frozenset({ConfidenceBand.LOW, ConfidenceBand.MEDIUM, ConfidenceBand.HIGH})


@dataclass(frozen=True)
class Target:
    """One organization to classify. row_index points back at its input row."""
    name: str
    website: str
    email: str
    row_index: int = -1

    @property
    def has_website(self) -> bool:
        return bool(self.website and self.website.strip())


@dataclass
class Result:
    """Classification of one Target. error_message is empty on success."""
    name: str
    website: str
    email: str
    has_equipment: bool = False
    band: ConfidenceBand = ConfidenceBand.NONE
    score: int = 0
    evidence: str = ""
    reason: str = ""
    error_message: str = ""
    pages_examined: int = 0
    row_index: int = -1

    @classmethod
    def for_target(cls, target: Target, **fields) -> "Result":
        return cls(
            name=target.name,
            website=target.website,
            email=target.email,
            row_index=target.row_index,
            **fields,
        )

    @classmethod
    def error(cls, target: Target, message: str, *, pages_examined: int = 0) -> "Result":
        message = message or "unknown error"
        return cls.for_target(
            target,
            band=ConfidenceBand.ERROR,
            reason=f"crawl error: {message}",
            error_message=message,
            pages_examined=pages_examined,
        )

    @classmethod
    def timeout(cls, target: Target, *, pages_examined: int = 0) -> "Result":
        message = "global deadline exceeded"
        return cls.for_target(
            target,
            band=ConfidenceBand.TIMEOUT,
            reason=f"{message} after {pages_examined} pages",
            error_message=message,
            pages_examined=pages_examined,
        )


@dataclass(frozen=True)
class LinkCandidate:
    """A discovered link. priority 0 means excluded; seq is discovery order."""
    url: str
    anchor_text: str = ""
    priority: int = 0
    seq: int = 0


@dataclass(frozen=True)
class FrontierEntry:
    url: str
    depth: int


@dataclass
class CrawlState:
    """Traversal state for one target. Owned by a single crawler; never shared."""
    visited: set[str] = field(default_factory=set)
    queued: set[str] = field(default_factory=set)
    frontier: deque[FrontierEntry] = field(default_factory=deque)
    text_parts: list[str] = field(default_factory=list)
    evidence: list[str] = field(default_factory=list)
    page_count: int = 0
    timeout_count: int = 0

    def enqueue(self, entry: FrontierEntry) -> bool:
        """Add entry unless its URL was already fetched or queued."""
        if entry.url in self.visited or entry.url in self.queued:
            return False
        self.queued.add(entry.url)
        self.frontier.append(entry)
        return True

    def next_entry(self) -> FrontierEntry | None:
        while self.frontier:
            entry = self.frontier.popleft()
            self.queued.discard(entry.url)
            if entry.url not in self.visited:
                return entry
        return None

    def append_text(self, text: str) -> None:
        self.text_parts.append(text.lower())

    @property
    def aggregated_text(self) -> str:
        return " ".join(self.text_parts)
