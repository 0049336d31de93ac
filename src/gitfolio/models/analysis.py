"""Analysis result entities.

This module contains entities related to repository analysis:
- ItemStatus / BatchStatus: per-item and per-batch state
- ParsedAnalysis: the summary / bullet points / keywords triple
- AnalysisOutcome: per-item result variant produced by the orchestrator
- ProgressState: (current, total) snapshot of a running batch
- PipelineIssue: non-fatal errors encountered while building a portfolio
- PortfolioResult: aggregated output of one pipeline run
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gitfolio.models.repository import (
        AnalyzedRepository,
        EnhancedRepository,
        GitHubUser,
    )


class ItemStatus(Enum):
    """Terminal state of one repository in an analysis batch."""

    SUCCEEDED = "succeeded"
    SOFT_FAILED = "soft_failed"  # client returned a failure signal
    HARD_FAILED = "hard_failed"  # an exception was raised
    CANCELLED = "cancelled"
    SKIPPED = "skipped"


class BatchStatus(Enum):
    """State of an analysis batch or pipeline run."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ParsedAnalysis:
    """Structured fields derived from a generation reply.

    Attributes:
        summary: Short project summary
        bullet_points: Resume bullet points, in reply order
        keywords: Technical keywords, in reply order
    """

    summary: str = "No summary generated"
    bullet_points: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)

    @classmethod
    def fallback(cls, status: ItemStatus) -> "ParsedAnalysis":
        """Return the sentinel triple for a non-success status."""
        summary, bullets, keywords = FALLBACK_TRIPLES[status]
        return cls(summary=summary, bullet_points=list(bullets), keywords=list(keywords))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "summary": self.summary,
            "bullet_points": list(self.bullet_points),
            "keywords": list(self.keywords),
        }


# Sentinel content for each non-success path. "unavailable" and "failed" are
# kept distinct so consumers can tell an empty result from a raised error.
FALLBACK_TRIPLES: dict[ItemStatus, tuple[str, tuple[str, ...], tuple[str, ...]]] = {
    ItemStatus.SOFT_FAILED: (
        "Analysis unavailable",
        ("Analysis unavailable",),
        ("analysis", "unavailable"),
    ),
    ItemStatus.HARD_FAILED: (
        "Analysis failed",
        ("Analysis failed",),
        ("analysis", "failed"),
    ),
    ItemStatus.CANCELLED: (
        "Analysis cancelled",
        ("Analysis cancelled",),
        ("analysis", "cancelled"),
    ),
    ItemStatus.SKIPPED: (
        "Analysis skipped",
        ("Analysis skipped",),
        ("analysis", "skipped"),
    ),
}


@dataclass
class AnalysisOutcome:
    """Result of analyzing a single repository.

    Attributes:
        status: Which path finalized the item
        analysis: Parsed reply, or the fallback triple for the status
        error: Error message for failed items
        raw_response: Reply text for succeeded items
    """

    status: ItemStatus
    analysis: ParsedAnalysis
    error: str | None = None
    raw_response: str | None = None

    @classmethod
    def succeeded(cls, analysis: ParsedAnalysis, raw_response: str) -> "AnalysisOutcome":
        return cls(status=ItemStatus.SUCCEEDED, analysis=analysis, raw_response=raw_response)

    @classmethod
    def failed(cls, status: ItemStatus, error: str | None = None) -> "AnalysisOutcome":
        return cls(status=status, analysis=ParsedAnalysis.fallback(status), error=error)

    @property
    def ok(self) -> bool:
        return self.status is ItemStatus.SUCCEEDED


@dataclass(frozen=True)
class ProgressState:
    """Snapshot of batch progress.

    Attributes:
        current: Number of items started (0..total)
        total: Batch size, fixed for one run
    """

    current: int = 0
    total: int = 0

    def __post_init__(self) -> None:
        if self.total < 0 or not 0 <= self.current <= self.total:
            raise ValueError(f"Invalid progress {self.current}/{self.total}")

    @property
    def fraction(self) -> float:
        """Completed fraction in [0, 1]; 1.0 for an empty batch."""
        if self.total == 0:
            return 1.0
        return self.current / self.total


@dataclass
class PipelineIssue:
    """Non-fatal error encountered while building a portfolio.

    Attributes:
        component: Stage that failed (user, listing, enrichment, analysis)
        message: Error description
        repository: Repository full name (if applicable)
        recoverable: Whether the pipeline continued after this error
    """

    component: str
    message: str
    repository: str | None = None
    recoverable: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "component": self.component,
            "message": self.message,
            "repository": self.repository,
            "recoverable": self.recoverable,
        }


@dataclass
class PortfolioResult:
    """Aggregated output of one portfolio pipeline run.

    Attributes:
        username: Account the portfolio was built for
        user: Account profile (None when the lookup failed)
        repositories: Enriched repositories, in listing order
        analyzed: Analyzed repositories, same order and length as repositories
        issues: Non-fatal and fatal issues recorded by the stages
        status: Final pipeline status
        started_at: Run start (UTC)
        finished_at: Run end (UTC)
    """

    username: str
    user: "GitHubUser | None" = None
    repositories: list["EnhancedRepository"] = field(default_factory=list)
    analyzed: list["AnalyzedRepository"] = field(default_factory=list)
    issues: list[PipelineIssue] = field(default_factory=list)
    status: BatchStatus = BatchStatus.IDLE
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None

    def add_issue(self, issue: PipelineIssue) -> None:
        """Record an issue."""
        self.issues.append(issue)

    def has_fatal_issues(self) -> bool:
        """Check if any non-recoverable issue was recorded."""
        return any(not issue.recoverable for issue in self.issues)

    @property
    def selected(self) -> list["AnalyzedRepository"]:
        """Analyzed repositories currently included in the portfolio."""
        return [repo for repo in self.analyzed if repo.included]

    def count_by_status(self) -> dict[str, int]:
        """Count analyzed repositories per ItemStatus value."""
        counts: dict[str, int] = {}
        for repo in self.analyzed:
            counts[repo.status.value] = counts.get(repo.status.value, 0) + 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "username": self.username,
            "user": self.user.to_dict() if self.user else None,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "counts": self.count_by_status(),
            "repositories": [repo.to_dict() for repo in self.analyzed],
            "issues": [issue.to_dict() for issue in self.issues],
        }
