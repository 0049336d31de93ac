"""Repository enrichment.

Fetches the language histogram and recent commits for each repository, one
repository at a time. A failure degrades only the affected repository;
the batch always returns one record per input.
"""

import logging
from collections.abc import Callable, Iterable

from gitfolio.errors import MalformedResponseError, TransportError
from gitfolio.github.client import GitHubClient
from gitfolio.models.analysis import PipelineIssue
from gitfolio.models.repository import CommitInfo, EnhancedRepository, RawRepository

logger = logging.getLogger(__name__)

DEFAULT_COMMIT_LIMIT = 10

ProgressCallback = Callable[[int, int], None]


def filter_portfolio_candidates(repos: Iterable[RawRepository]) -> list[RawRepository]:
    """Keep repositories worth showing in a portfolio.

    Forks are dropped, as are repositories with neither a description nor
    any stars. Order is preserved.
    """
    return [
        repo
        for repo in repos
        if not repo.fork and (repo.description or repo.stargazers_count > 0)
    ]


class RepoEnricher:
    """Attaches languages and recent commits to raw repositories."""

    def __init__(self, client: GitHubClient, commit_limit: int = DEFAULT_COMMIT_LIMIT) -> None:
        if commit_limit <= 0:
            raise ValueError(f"commit_limit must be positive. Got: {commit_limit}")
        self.client = client
        self.commit_limit = commit_limit

    def enrich(
        self,
        repos: list[RawRepository],
        errors: list[PipelineIssue] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[EnhancedRepository]:
        """Enrich repositories sequentially.

        Args:
            repos: Repositories to enrich
            errors: Optional list that receives one issue per failed sub-fetch
            on_progress: Called with (index, total) before each repository

        Returns:
            One EnhancedRepository per input, in input order
        """
        total = len(repos)
        enhanced: list[EnhancedRepository] = []

        logger.info("Enriching %d repositories", total)

        for index, repo in enumerate(repos):
            try:
                if on_progress:
                    on_progress(index, total)
                item = self.enrich_one(repo, errors)
            except Exception as e:
                item = self._degraded(repo, errors, f"Enrichment failed: {e}")
            enhanced.append(item)

        excluded = sum(1 for repo in enhanced if not repo.included)
        if excluded:
            logger.warning("%d/%d repositories could not be fully enriched", excluded, total)

        return enhanced

    def enrich_one(
        self,
        repo: RawRepository,
        errors: list[PipelineIssue] | None = None,
    ) -> EnhancedRepository:
        """Enrich a single repository; never raises.

        Provider failures degrade only the sub-fetch that failed. Any other
        error yields the repository with no languages or commits and
        `included=False`.
        """
        try:
            return self._fetch(repo, errors)
        except Exception as e:
            return self._degraded(repo, errors, f"Enrichment failed: {e}")

    def _fetch(
        self,
        repo: RawRepository,
        errors: list[PipelineIssue] | None,
    ) -> EnhancedRepository:
        languages: dict[str, int] = {}
        commits: list[CommitInfo] = []
        included = True

        try:
            languages = self.client.get_languages(repo.full_name)
        except (TransportError, MalformedResponseError) as e:
            included = False
            self._record(errors, repo, f"Language fetch failed: {e}")

        try:
            commits = self.client.get_commits(repo.full_name, limit=self.commit_limit)
        except (TransportError, MalformedResponseError) as e:
            self._record(errors, repo, f"Commit fetch failed: {e}")

        logger.debug(
            "Enriched %s: %d languages, %d commits",
            repo.full_name,
            len(languages),
            len(commits),
        )

        return EnhancedRepository.from_raw(
            repo,
            languages=languages,
            recent_commits=commits[: self.commit_limit],
            included=included,
        )

    def _degraded(
        self,
        repo: RawRepository,
        errors: list[PipelineIssue] | None,
        message: str,
    ) -> EnhancedRepository:
        self._record(errors, repo, message)
        return EnhancedRepository.from_raw(repo, languages={}, recent_commits=[], included=False)

    @staticmethod
    def _record(
        errors: list[PipelineIssue] | None,
        repo: RawRepository,
        message: str,
    ) -> None:
        logger.warning("%s: %s", repo.full_name, message)
        if errors is not None:
            errors.append(
                PipelineIssue(
                    component="enrichment",
                    message=message,
                    repository=repo.full_name,
                    recoverable=True,
                )
            )
