"""GitFolio data models.

This module exports all core entities used throughout the application:
- RawRepository: Repository as listed by the data provider
- EnhancedRepository: Repository plus languages and recent commits
- AnalyzedRepository: Repository plus summary, bullet points and keywords
- ParsedAnalysis: Structured triple parsed from a generation reply
- PortfolioResult: Aggregated output of one pipeline run
"""

from gitfolio.models.analysis import (
    AnalysisOutcome,
    BatchStatus,
    ItemStatus,
    ParsedAnalysis,
    PipelineIssue,
    PortfolioResult,
    ProgressState,
)
from gitfolio.models.repository import (
    AnalyzedRepository,
    CommitInfo,
    EnhancedRepository,
    GitHubUser,
    RawRepository,
)

__all__ = [
    "AnalysisOutcome",
    "AnalyzedRepository",
    "BatchStatus",
    "CommitInfo",
    "EnhancedRepository",
    "GitHubUser",
    "ItemStatus",
    "ParsedAnalysis",
    "PipelineIssue",
    "PortfolioResult",
    "ProgressState",
    "RawRepository",
]
