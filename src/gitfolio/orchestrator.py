"""Analysis batch orchestrator.

Drives one enriched repository at a time through prompt building, the
generation call and reply parsing. Every input produces exactly one
AnalyzedRepository, in input order:

- reply text            -> parsed fields          (SUCCEEDED)
- reply failure signal  -> "Analysis unavailable" (SOFT_FAILED)
- any raised exception  -> "Analysis failed"      (HARD_FAILED)
- cancelled / deadline  -> "Analysis cancelled"   (CANCELLED)

A fixed delay separates consecutive items, after failures too.
"""

import logging
import time
from collections.abc import Callable
from functools import partial
from typing import Protocol

from gitfolio.config import BatchConfig
from gitfolio.errors import UserInputError
from gitfolio.llm.client import AnalysisClient
from gitfolio.llm.parser import parse_analysis_response
from gitfolio.llm.prompts import build_repository_prompt
from gitfolio.models.analysis import (
    AnalysisOutcome,
    BatchStatus,
    ItemStatus,
    ProgressState,
)
from gitfolio.models.repository import AnalyzedRepository, EnhancedRepository

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class CancellationToken(Protocol):
    """Anything with `is_set()`, e.g. threading.Event."""

    def is_set(self) -> bool: ...


class AnalysisOrchestrator:
    """Runs analysis batches over enriched repositories.

    Batch state moves IDLE -> RUNNING -> COMPLETED and may be re-entered by
    calling `run` again. Nothing is carried over between runs.
    """

    def __init__(
        self,
        client: AnalysisClient,
        options: BatchConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            client: Generation client
            options: Throttle and deadline settings
            sleep: Sleep function used for the inter-item delay
            clock: Monotonic clock used for the deadline
        """
        self.client = client
        self.options = options or BatchConfig()
        self._sleep = sleep
        self._clock = clock
        self._status = BatchStatus.IDLE
        self._progress = ProgressState()
        self._outcomes: list[AnalysisOutcome] = []

    @property
    def status(self) -> BatchStatus:
        return self._status

    @property
    def progress(self) -> ProgressState:
        return self._progress

    @property
    def last_outcomes(self) -> list[AnalysisOutcome]:
        """Per-item outcomes of the most recent run."""
        return list(self._outcomes)

    def run(
        self,
        repos: list[EnhancedRepository],
        api_key: str | None = None,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> list[AnalyzedRepository]:
        """Analyze a batch of repositories.

        Args:
            repos: Enriched repositories, in display order
            api_key: API key for this run (falls back to the client config)
            on_progress: Called with (index, total) before each item starts
            cancel: Token checked before each item

        Returns:
            One AnalyzedRepository per input, in input order

        Raises:
            UserInputError: If the provider needs an API key and none is set
        """
        key = api_key or self.client.config.api_key
        if self.client.requires_api_key and not key:
            raise UserInputError(
                f"An API key is required for the {self.client.config.provider} provider"
            )

        total = len(repos)
        self._status = BatchStatus.RUNNING
        self._progress = ProgressState(0, total)
        self._outcomes = []

        deadline = None
        if self.options.deadline_seconds is not None:
            deadline = self._clock() + self.options.deadline_seconds

        logger.info("Analyzing %d repositories", total)

        results: list[AnalyzedRepository] = []
        stopped = False

        for index, repo in enumerate(repos):
            if not stopped and index > 0 and not self._should_stop(cancel, deadline):
                self._sleep(self.options.delay_seconds)

            if not stopped and self._should_stop(cancel, deadline):
                stopped = True
                logger.warning(
                    "Batch stopped after %d/%d repositories; remaining items cancelled",
                    index,
                    total,
                )

            if stopped:
                outcome = AnalysisOutcome.failed(ItemStatus.CANCELLED, "Batch cancelled")
            else:
                self._progress = ProgressState(index, total)
                on_start = partial(on_progress, index, total) if on_progress else None
                outcome = self._analyze_one(repo, key, on_start)

            self._outcomes.append(outcome)
            results.append(AnalyzedRepository.from_analysis(repo, outcome.analysis, outcome.status))

        self._progress = ProgressState(total, total)
        self._status = BatchStatus.COMPLETED

        failed = sum(1 for outcome in self._outcomes if not outcome.ok)
        logger.info(
            "Analysis complete: %d/%d succeeded, %d not analyzed",
            total - failed,
            total,
            failed,
        )

        return results

    def _should_stop(self, cancel: CancellationToken | None, deadline: float | None) -> bool:
        if cancel is not None and cancel.is_set():
            return True
        return deadline is not None and self._clock() >= deadline

    def _analyze_one(
        self,
        repo: EnhancedRepository,
        api_key: str | None,
        on_start: Callable[[], None] | None = None,
    ) -> AnalysisOutcome:
        """Analyze a single repository, calling `on_start` first. Exceptions never escape."""
        try:
            if on_start:
                on_start()

            prompt = build_repository_prompt(repo)
            logger.debug("Prompt for %s: %d chars", repo.full_name or repo.name, len(prompt))

            reply = self.client.analyze(prompt, api_key=api_key)
            if not reply.ok:
                logger.warning(
                    "Analysis unavailable for %s: %s",
                    repo.name,
                    reply.error or "no text returned",
                )
                return AnalysisOutcome.failed(ItemStatus.SOFT_FAILED, reply.error)

            analysis = parse_analysis_response(reply.text)
            logger.info(
                "Analyzed %s: %d bullet points, %d keywords",
                repo.name,
                len(analysis.bullet_points),
                len(analysis.keywords),
            )
            return AnalysisOutcome.succeeded(analysis, reply.text)

        except Exception as e:
            logger.warning("Analysis failed for %s: %s", repo.name, e)
            return AnalysisOutcome.failed(ItemStatus.HARD_FAILED, str(e))
