"""Portfolio pipeline.

Coordinates the stages that turn a GitHub username into analyzed
repositories:

1. User lookup
2. Repository listing (first page, most recently updated first)
3. Candidate filtering (forks and empty repositories dropped)
4. Enrichment (languages and recent commits, one repository at a time)
5. Analysis (one generation call per repository, throttled)

Stage 1 and 2 failures stop the run. Later stages degrade per repository.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from gitfolio.config import GitfolioConfig
from gitfolio.errors import MalformedResponseError, TransportError, UserInputError
from gitfolio.github import GitHubClient, RepoEnricher, filter_portfolio_candidates
from gitfolio.llm.client import AnalysisClient, create_client
from gitfolio.models.analysis import (
    BatchStatus,
    ItemStatus,
    ParsedAnalysis,
    PipelineIssue,
    PortfolioResult,
)
from gitfolio.models.repository import AnalyzedRepository, EnhancedRepository
from gitfolio.orchestrator import AnalysisOrchestrator, CancellationToken, ProgressCallback

logger = logging.getLogger(__name__)


@dataclass
class PipelineOptions:
    """Options for controlling pipeline execution.

    Attributes:
        skip_filter: Keep forks and repositories without description or stars
        skip_analysis: Skip generation calls and use placeholder analyses
        limit: Only enrich and analyze the first N candidates
        on_enrich_progress: Called with (index, total) during enrichment
        on_analysis_progress: Called with (index, total) during analysis
        cancel: Token that stops the analysis stage when set
    """

    skip_filter: bool = False
    skip_analysis: bool = False
    limit: int | None = None
    on_enrich_progress: ProgressCallback | None = None
    on_analysis_progress: ProgressCallback | None = None
    cancel: CancellationToken | None = None

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"limit must not be negative. Got: {self.limit}")


class PortfolioPipeline:
    """Builds a portfolio for one GitHub account."""

    def __init__(
        self,
        config: GitfolioConfig | None = None,
        github_client: GitHubClient | None = None,
        analysis_client: AnalysisClient | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: GitFolio configuration (uses defaults if None)
            github_client: GitHub client (built from config if None)
            analysis_client: Generation client (built from config if None)
            sleep: Sleep function used between generation calls
        """
        self.config = config or GitfolioConfig()
        self.github = github_client or GitHubClient(
            token=self.config.github.token,
            api_base=self.config.github.api_base,
            timeout=self.config.github.timeout,
        )
        self.analysis_client = analysis_client or create_client(self.config.llm)
        self.orchestrator = AnalysisOrchestrator(
            self.analysis_client,
            options=self.config.batch,
            sleep=sleep,
        )

    def run(self, username: str, options: PipelineOptions | None = None) -> PortfolioResult:
        """Execute the full portfolio pipeline.

        Args:
            username: GitHub account name
            options: Pipeline execution options

        Returns:
            PortfolioResult with enriched and analyzed repositories

        Raises:
            UserInputError: If the username is blank, or analysis needs an API
                key that is not configured
        """
        options = options or PipelineOptions()
        username = (username or "").strip()

        if not username:
            raise UserInputError("A GitHub username is required")

        if (
            not options.skip_analysis
            and self.analysis_client.requires_api_key
            and not self.analysis_client.config.api_key
        ):
            provider = self.analysis_client.config.provider
            raise UserInputError(
                f"An API key is required for the {provider} provider. "
                f"{self._get_llm_help_message(provider)}"
            )

        result = PortfolioResult(username=username, status=BatchStatus.RUNNING)
        logger.info("Building portfolio for %s", username)

        try:
            # Stage 1: User lookup
            logger.info("Stage 1: Looking up user")
            result.user = self.github.get_user(username)

            # Stage 2: Repository listing
            logger.info("Stage 2: Listing repositories")
            repos = self.github.list_repositories(
                username,
                per_page=self.config.github.per_page,
                sort="updated",
            )
            logger.info("Found %d repositories", len(repos))

        except (TransportError, MalformedResponseError) as e:
            component = "user" if result.user is None else "listing"
            logger.error("Pipeline failed at %s stage: %s", component, e)
            result.add_issue(
                PipelineIssue(component=component, message=str(e), recoverable=False)
            )
            return self._finish(result)

        # Stage 3: Candidate filtering
        if not options.skip_filter:
            candidates = filter_portfolio_candidates(repos)
            logger.info(
                "Stage 3: %d/%d repositories are portfolio candidates",
                len(candidates),
                len(repos),
            )
        else:
            logger.info("Stage 3: Skipping candidate filter (--include-forks flag)")
            candidates = list(repos)

        if options.limit is not None:
            candidates = candidates[: options.limit]

        # Stage 4: Enrichment
        logger.info("Stage 4: Enriching repositories")
        enricher = RepoEnricher(self.github, commit_limit=self.config.github.commit_limit)
        result.repositories = enricher.enrich(
            candidates,
            errors=result.issues,
            on_progress=options.on_enrich_progress,
        )

        # Stage 5: Analysis
        if not options.skip_analysis:
            logger.info("Stage 5: Analyzing repositories")
            result.analyzed = self.orchestrator.run(
                result.repositories,
                on_progress=options.on_analysis_progress,
                cancel=options.cancel,
            )
            self._record_analysis_issues(result)
        else:
            logger.info("Stage 5: Skipping analysis (--skip-analysis flag)")
            result.analyzed = self._apply_placeholder_analyses(result.repositories)

        return self._finish(result)

    def _record_analysis_issues(self, result: PortfolioResult) -> None:
        """Add one recoverable issue per repository that was not analyzed."""
        for repo, outcome in zip(
            result.repositories, self.orchestrator.last_outcomes, strict=True
        ):
            if outcome.ok:
                continue
            result.add_issue(
                PipelineIssue(
                    component="analysis",
                    message=f"{outcome.analysis.summary}: {outcome.error or 'no reply text'}",
                    repository=repo.full_name,
                    recoverable=True,
                )
            )

    def _apply_placeholder_analyses(
        self, repos: list[EnhancedRepository]
    ) -> list[AnalyzedRepository]:
        """Attach the skipped placeholder to every repository."""
        placeholder = ParsedAnalysis.fallback(ItemStatus.SKIPPED)
        return [
            AnalyzedRepository.from_analysis(repo, placeholder, ItemStatus.SKIPPED)
            for repo in repos
        ]

    def _finish(self, result: PortfolioResult) -> PortfolioResult:
        result.finished_at = datetime.now(UTC)
        if result.has_fatal_issues():
            result.status = BatchStatus.FAILED
        else:
            result.status = BatchStatus.COMPLETED

        logger.info(
            "Portfolio complete: %s (%d repositories, %d issues)",
            result.status.value,
            len(result.analyzed),
            len(result.issues),
        )
        return result

    def _get_llm_help_message(self, provider: str) -> str:
        """Get provider-specific help message for missing credentials.

        Args:
            provider: LLM provider name

        Returns:
            Help message string
        """
        help_messages = {
            "gemini": "Set GEMINI_API_KEY or pass --api-key.",
            "claude": "Set ANTHROPIC_API_KEY or pass --api-key.",
        }
        return help_messages.get(
            provider,
            "Run 'gitfolio init' to configure a different LLM provider.",
        )
