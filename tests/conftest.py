"""Shared pytest fixtures for GitFolio tests.

This module provides common fixtures used across unit and integration
tests. Fixtures are organized by category:
- API payload fixtures: GitHub and Gemini response bodies
- HTTP fixtures: Mock responses and sessions (no real network)
- Model fixtures: Pre-built repositories for prompt and orchestrator tests
- Configuration fixtures: Test configs for various scenarios
"""

import logging
from collections.abc import Iterator
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from gitfolio.models.repository import CommitInfo, EnhancedRepository, RawRepository
from tests.fixtures import commit_payload, repo_payload

# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_credentials_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials out of config fallbacks."""
    for var in ("GITHUB_TOKEN", "GEMINI_API_KEY", "GOOGLE_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def reset_gitfolio_logging() -> Iterator[None]:
    """Drop handlers installed by CLI runs so they don't outlive the test."""
    yield
    logger = logging.getLogger("gitfolio")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


# =============================================================================
# HTTP Fixtures
# =============================================================================


@pytest.fixture
def mock_session() -> MagicMock:
    """Return a mock requests.Session with a real headers dict."""
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    return session


# =============================================================================
# API Payload Fixtures
# =============================================================================


@pytest.fixture
def user_payload() -> dict[str, Any]:
    """Return a `/users/{login}` body."""
    return {
        "login": "octocat",
        "id": 583231,
        "html_url": "https://github.com/octocat",
        "name": "The Octocat",
        "company": "@github",
        "location": "San Francisco",
        "bio": None,
        "public_repos": 8,
        "followers": 9000,
        "following": 9,
        "created_at": "2011-01-25T18:44:36Z",
    }


@pytest.fixture
def repos_payload() -> list[dict[str, Any]]:
    """Return a listing with one fork and one empty repository."""
    return [
        repo_payload("hello-world", description="My first repository", stars=2),
        repo_payload("forked-lib", fork=True),
        repo_payload("scratch", description=None, stars=0),
        repo_payload("spoon-knife", description=None, stars=12),
    ]


@pytest.fixture
def commits_payload() -> list[dict[str, Any]]:
    """Return a commit listing."""
    return [
        commit_payload("a1", "Add CLI entry point"),
        commit_payload("b2", "Fix pagination bug"),
    ]


@pytest.fixture
def analysis_reply() -> str:
    """Return a well-formed analysis reply."""
    return (
        "SUMMARY:\n"
        "A command-line tool that greets the world.\n"
        "\n"
        "BULLET_POINTS:\n"
        "- Built a CLI in Python used by 100 developers\n"
        "- Reduced startup time by 40% through lazy imports\n"
        "\n"
        "KEYWORDS:\n"
        "Python, CLI, Typer, Packaging, Testing\n"
    )


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def raw_repo() -> RawRepository:
    """Return a raw repository."""
    return RawRepository(
        id=1,
        name="hello-world",
        full_name="octocat/hello-world",
        html_url="https://github.com/octocat/hello-world",
        description="My first repository",
        stargazers_count=2,
        forks_count=1,
        language="Python",
        topics=["cli", "automation"],
    )


@pytest.fixture
def enhanced_repo(raw_repo: RawRepository) -> EnhancedRepository:
    """Return an enriched repository."""
    return EnhancedRepository.from_raw(
        raw_repo,
        languages={"Python": 12000, "Shell": 300},
        recent_commits=[
            CommitInfo(sha="a1", message="Add CLI entry point"),
            CommitInfo(sha="b2", message="Fix pagination bug"),
        ],
    )


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def minimal_config() -> dict[str, Any]:
    """Return a minimal valid GitFolio configuration."""
    return {
        "llm": {
            "provider": "gemini",
            "api_key": "test-key",
        }
    }


@pytest.fixture
def full_config() -> dict[str, Any]:
    """Return a complete GitFolio configuration with all options."""
    return {
        "github": {
            "token": "ghp_test",
            "api_base": "https://github.example.com/api/v3",
            "commit_limit": 5,
            "per_page": 50,
            "timeout": 15,
        },
        "llm": {
            "provider": "claude",
            "model": "claude-3-5-haiku-20241022",
            "api_key": "sk-ant-test",
            "temperature": 0.3,
            "top_k": 20,
            "top_p": 0.9,
            "max_tokens": 512,
            "timeout": 30,
        },
        "batch": {
            "delay_seconds": 0.5,
            "deadline_seconds": 120,
        },
        "ci": {
            "json_output": True,
        },
    }
