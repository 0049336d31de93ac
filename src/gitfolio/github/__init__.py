"""GitHub data provider integration.

- GitHubClient: user lookup, repository listing, languages, commits
- RepoEnricher: sequential per-repository enrichment with failure isolation
"""

from gitfolio.github.client import GitHubClient
from gitfolio.github.enricher import RepoEnricher, filter_portfolio_candidates

__all__ = ["GitHubClient", "RepoEnricher", "filter_portfolio_candidates"]
