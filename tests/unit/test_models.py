"""Unit tests for GitFolio data models."""

from datetime import UTC, datetime

import pytest

from gitfolio.models.analysis import (
    FALLBACK_TRIPLES,
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
    parse_timestamp,
)
from tests.fixtures import commit_payload, make_enhanced, repo_payload


class TestParseTimestamp:
    """Tests for GitHub timestamp parsing."""

    def test_zulu_timestamp(self) -> None:
        """Test parsing a Z-suffixed timestamp."""
        assert parse_timestamp("2024-05-01T12:00:00Z") == datetime(2024, 5, 1, 12, tzinfo=UTC)

    @pytest.mark.parametrize("value", [None, "", "not a date", 12345])
    def test_invalid_values(self, value: object) -> None:
        """Test that missing or invalid values yield None."""
        assert parse_timestamp(value) is None


class TestRawRepository:
    """Tests for RawRepository."""

    def test_from_api(self) -> None:
        """Test building from a listing element."""
        repo = RawRepository.from_api(repo_payload("tool", description="CLI tool", stars=7))

        assert repo.name == "tool"
        assert repo.full_name == "octocat/tool"
        assert repo.description == "CLI tool"
        assert repo.stargazers_count == 7
        assert repo.topics == ["cli", "automation"]
        assert repo.license_name == "MIT License"
        assert repo.pushed_at == datetime(2024, 5, 1, 12, tzinfo=UTC)

    def test_from_api_sparse(self) -> None:
        """Test that absent fields fall back to defaults."""
        repo = RawRepository.from_api(
            {"id": 9, "name": "bare", "owner": {"login": "octocat"}, "license": None}
        )

        assert repo.full_name == "octocat/bare"
        assert repo.description is None
        assert repo.stargazers_count == 0
        assert repo.topics == []
        assert repo.license_name is None

    def test_from_api_wrong_nested_types(self) -> None:
        """Test that non-object owner and license values are ignored."""
        repo = RawRepository.from_api(
            {"id": 3, "name": "odd", "owner": "octocat", "license": "MIT", "topics": "cli"}
        )

        assert repo.full_name == "odd"
        assert repo.license_name is None
        assert repo.topics == []

    def test_immutable(self, raw_repo: RawRepository) -> None:
        """Test that repositories cannot be mutated in place."""
        with pytest.raises(AttributeError):
            raw_repo.name = "renamed"  # type: ignore[misc]


class TestEnhancedRepository:
    """Tests for EnhancedRepository."""

    def test_from_raw(self, raw_repo: RawRepository) -> None:
        """Test attaching enrichment data."""
        commit = CommitInfo.from_api(commit_payload("a1", "Add README"))

        repo = EnhancedRepository.from_raw(raw_repo, {"Python": 10}, [commit])

        assert repo.name == raw_repo.name
        assert repo.languages == {"Python": 10}
        assert repo.commit_messages == ["Add README"]
        assert repo.language_names == ["Python"]
        assert repo.included is True

    @pytest.mark.parametrize(
        "payload",
        [
            {"sha": "1", "commit": "oops"},
            {"sha": "1", "commit": {"message": "Fix", "author": "octocat"}},
            {"sha": "1"},
        ],
    )
    def test_commit_from_api_wrong_nested_types(self, payload: dict) -> None:
        """Test that malformed commit objects parse to empty fields."""
        commit = CommitInfo.from_api(payload)

        assert commit.sha == "1"
        assert commit.author_name is None
        assert commit.date is None

    def test_to_dict(self, enhanced_repo: EnhancedRepository) -> None:
        """Test serialization includes enrichment fields."""
        data = enhanced_repo.to_dict()

        assert data["languages"] == {"Python": 12000, "Shell": 300}
        assert data["recent_commits"][0]["message"] == "Add CLI entry point"
        assert data["included"] is True


class TestAnalyzedRepository:
    """Tests for AnalyzedRepository."""

    def test_from_analysis(self, enhanced_repo: EnhancedRepository) -> None:
        """Test merging a parsed triple onto an enriched repository."""
        analysis = ParsedAnalysis("Summary", ["Did a thing"], ["python"])

        repo = AnalyzedRepository.from_analysis(enhanced_repo, analysis, ItemStatus.SUCCEEDED)

        assert repo.summary == "Summary"
        assert repo.bullet_points == ["Did a thing"]
        assert repo.tech_keywords == ["python"]
        assert repo.languages == enhanced_repo.languages
        assert repo.analysis == analysis

    def test_with_inclusion(self, enhanced_repo: EnhancedRepository) -> None:
        """Test toggling inclusion returns a new instance."""
        repo = AnalyzedRepository.from_analysis(
            enhanced_repo, ParsedAnalysis(), ItemStatus.SUCCEEDED
        )

        toggled = repo.with_inclusion(False)

        assert toggled.included is False
        assert repo.included is True
        assert toggled.summary == repo.summary

    def test_to_dict(self, enhanced_repo: EnhancedRepository) -> None:
        """Test serialization includes the derived fields and status."""
        repo = AnalyzedRepository.from_analysis(
            enhanced_repo,
            ParsedAnalysis.fallback(ItemStatus.SOFT_FAILED),
            ItemStatus.SOFT_FAILED,
        )

        data = repo.to_dict()

        assert data["summary"] == "Analysis unavailable"
        assert data["tech_keywords"] == ["analysis", "unavailable"]
        assert data["status"] == "soft_failed"


class TestParsedAnalysis:
    """Tests for ParsedAnalysis and fallbacks."""

    def test_defaults(self) -> None:
        """Test the default triple."""
        analysis = ParsedAnalysis()

        assert analysis.summary == "No summary generated"
        assert analysis.bullet_points == []
        assert analysis.keywords == []

    def test_fallbacks_are_distinct(self) -> None:
        """Test that each failure status has its own sentinel summary."""
        summaries = {FALLBACK_TRIPLES[status][0] for status in FALLBACK_TRIPLES}

        assert len(summaries) == len(FALLBACK_TRIPLES)
        assert ItemStatus.SUCCEEDED not in FALLBACK_TRIPLES

    def test_fallback_lists_are_fresh(self) -> None:
        """Test that fallback lists are not shared between instances."""
        first = ParsedAnalysis.fallback(ItemStatus.HARD_FAILED)
        first.keywords.append("extra")

        assert ParsedAnalysis.fallback(ItemStatus.HARD_FAILED).keywords == ["analysis", "failed"]


class TestAnalysisOutcome:
    """Tests for AnalysisOutcome."""

    def test_succeeded(self) -> None:
        """Test the success variant."""
        outcome = AnalysisOutcome.succeeded(ParsedAnalysis("S"), "raw")

        assert outcome.ok is True
        assert outcome.raw_response == "raw"

    def test_failed(self) -> None:
        """Test the failure variant carries the fallback triple."""
        outcome = AnalysisOutcome.failed(ItemStatus.CANCELLED, "stopped")

        assert outcome.ok is False
        assert outcome.analysis.summary == "Analysis cancelled"
        assert outcome.error == "stopped"


class TestProgressState:
    """Tests for ProgressState."""

    def test_fraction(self) -> None:
        """Test the completed fraction."""
        assert ProgressState(1, 4).fraction == 0.25
        assert ProgressState(0, 0).fraction == 1.0

    @pytest.mark.parametrize(("current", "total"), [(-1, 3), (4, 3), (0, -1)])
    def test_invalid(self, current: int, total: int) -> None:
        """Test that out-of-range progress is rejected."""
        with pytest.raises(ValueError):
            ProgressState(current, total)


class TestPortfolioResult:
    """Tests for PortfolioResult."""

    def _analyzed(self, name: str, status: ItemStatus, included: bool = True) -> AnalyzedRepository:
        analysis = (
            ParsedAnalysis("S") if status is ItemStatus.SUCCEEDED else ParsedAnalysis.fallback(status)
        )
        return AnalyzedRepository.from_analysis(make_enhanced(name, included), analysis, status)

    def test_fatal_issues(self) -> None:
        """Test detection of non-recoverable issues."""
        result = PortfolioResult(username="octocat")
        result.add_issue(PipelineIssue(component="enrichment", message="x"))

        assert result.has_fatal_issues() is False

        result.add_issue(PipelineIssue(component="user", message="404", recoverable=False))

        assert result.has_fatal_issues() is True

    def test_selected_and_counts(self) -> None:
        """Test included selection and per-status counts."""
        result = PortfolioResult(
            username="octocat",
            analyzed=[
                self._analyzed("a", ItemStatus.SUCCEEDED),
                self._analyzed("b", ItemStatus.SOFT_FAILED, included=False),
                self._analyzed("c", ItemStatus.SUCCEEDED),
            ],
        )

        assert [r.name for r in result.selected] == ["a", "c"]
        assert result.count_by_status() == {"succeeded": 2, "soft_failed": 1}

    def test_to_dict(self) -> None:
        """Test JSON serialization."""
        result = PortfolioResult(
            username="octocat",
            user=GitHubUser(login="octocat", name="The Octocat"),
            analyzed=[self._analyzed("a", ItemStatus.SUCCEEDED)],
            status=BatchStatus.COMPLETED,
        )

        data = result.to_dict()

        assert data["username"] == "octocat"
        assert data["user"]["name"] == "The Octocat"
        assert data["status"] == "completed"
        assert data["repositories"][0]["name"] == "a"
        assert data["finished_at"] is None
