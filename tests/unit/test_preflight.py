"""Unit tests for preflight validation."""

from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import requests

from gitfolio.config import GitfolioConfig, GitHubConfig
from gitfolio.models.llm_config import LLMConfig
from gitfolio.utils.preflight import PreflightChecker, PreflightResult, ToolCheck
from tests.fixtures import make_response


def rate_limit_payload(remaining: int, limit: int = 60) -> dict[str, Any]:
    return {
        "resources": {"core": {"limit": limit, "remaining": remaining, "reset": 1714564800}},
        "rate": {"limit": limit, "remaining": remaining, "reset": 1714564800},
    }


class TestPreflightResult:
    """Tests for PreflightResult bookkeeping."""

    def test_required_failure(self) -> None:
        """Test that a missing required check fails the result."""
        result = PreflightResult()
        result.add_check(ToolCheck(name="gemini", available=False, message="API key required"))

        assert result.success is False
        assert result.errors == ["gemini: API key required"]
        assert result.warnings == []

    def test_optional_failure(self) -> None:
        """Test that a missing optional check only warns."""
        result = PreflightResult()
        result.add_check(
            ToolCheck(name="litellm", available=False, required=False, message="missing")
        )

        assert result.success is True
        assert result.warnings == ["litellm: missing"]

    def test_to_dict(self) -> None:
        """Test JSON-ready conversion."""
        result = PreflightResult()
        result.add_check(ToolCheck(name="requests", available=True, version="2.32.3"))

        data = result.to_dict()

        assert data["success"] is True
        assert data["checks"][0]["name"] == "requests"
        assert data["checks"][0]["version"] == "2.32.3"


class TestCheckGitHub:
    """Tests for the GitHub rate limit check."""

    def test_plenty_remaining(self, mock_session: MagicMock) -> None:
        """Test that a healthy rate limit passes."""
        mock_session.get.return_value = make_response(json_data=rate_limit_payload(4999, 5000))
        checker = PreflightChecker(session=mock_session)

        check = checker.check_github(GitHubConfig(token="ghp_test"))

        assert check.available is True
        assert check.required is True
        assert "4999/5000" in check.message
        assert "authenticated" in check.message
        assert mock_session.get.call_args.args[0] == "https://api.github.com/rate_limit"

    def test_low_remaining_warns(self, mock_session: MagicMock) -> None:
        """Test that a nearly exhausted limit is an optional failure."""
        mock_session.get.return_value = make_response(json_data=rate_limit_payload(5))
        checker = PreflightChecker(session=mock_session)

        check = checker.check_github(GitHubConfig())

        assert check.available is False
        assert check.required is False
        assert "unauthenticated" in check.message

    def test_exhausted(self, mock_session: MagicMock) -> None:
        """Test that an exhausted limit is a required failure."""
        mock_session.get.return_value = make_response(json_data=rate_limit_payload(0))
        checker = PreflightChecker(session=mock_session)

        check = checker.check_github(GitHubConfig())

        assert check.available is False
        assert check.required is True
        assert "GITHUB_TOKEN" in check.message

    def test_unreachable(self, mock_session: MagicMock) -> None:
        """Test that a network failure is a required failure."""
        mock_session.get.side_effect = requests.ConnectionError("no route to host")
        checker = PreflightChecker(session=mock_session)

        check = checker.check_github(GitHubConfig())

        assert check.available is False
        assert "not reachable" in check.message


class TestCheckLLMProvider:
    """Tests for generation provider checks."""

    @pytest.mark.parametrize(
        "provider,env_var",
        [("gemini", "GEMINI_API_KEY"), ("claude", "ANTHROPIC_API_KEY")],
    )
    def test_missing_key(self, provider: str, env_var: str) -> None:
        """Test that keyed providers need a key."""
        check = PreflightChecker().check_llm_provider(LLMConfig(provider=provider))

        assert check.available is False
        assert env_var in check.message

    def test_key_present(self) -> None:
        """Test that a configured key passes without a network call."""
        check = PreflightChecker().check_llm_provider(
            LLMConfig(provider="gemini", api_key="test-key")
        )

        assert check.available is True
        assert "gemini-2.0-flash" in check.message

    def test_bedrock(self) -> None:
        """Test that Bedrock defers to AWS credential resolution."""
        check = PreflightChecker().check_llm_provider(LLMConfig(provider="bedrock"))

        assert check.available is True

    def test_ollama_running(self, mock_session: MagicMock) -> None:
        """Test that a responding Ollama server passes with its version."""
        mock_session.get.return_value = make_response(json_data={"version": "0.5.7"})
        checker = PreflightChecker(session=mock_session)

        check = checker.check_llm_provider(LLMConfig(provider="ollama"))

        assert check.available is True
        assert check.version == "0.5.7"
        assert mock_session.get.call_args.args[0] == "http://localhost:11434/api/version"

    def test_ollama_not_running(self, mock_session: MagicMock) -> None:
        """Test that a refused connection fails the Ollama check."""
        mock_session.get.side_effect = requests.ConnectionError("Connection refused")
        checker = PreflightChecker(session=mock_session)

        check = checker.check_ollama_server("http://localhost:11434")

        assert check.available is False
        assert "not responding" in check.message

    def test_ollama_http_error(self, mock_session: MagicMock) -> None:
        """Test that a non-200 answer fails the Ollama check."""
        mock_session.get.return_value = make_response(status_code=502)
        checker = PreflightChecker(session=mock_session)

        check = checker.check_ollama_server("http://localhost:11434/")

        assert check.available is False
        assert "HTTP 502" in check.message


class TestCheckPackage:
    """Tests for Python package checks."""

    def test_installed(self) -> None:
        """Test that an installed package reports its version."""
        check = PreflightChecker().check_package("requests", "HTTP client")

        assert check.available is True
        assert check.version == requests.__version__

    def test_missing(self) -> None:
        """Test that a missing package gives an install hint."""
        with patch("importlib.util.find_spec", return_value=None):
            check = PreflightChecker().check_package("litellm", "LLM interface", required=False)

        assert check.available is False
        assert check.required is False
        assert "pip install litellm" in check.message


class TestCheckAll:
    """Tests for check_all."""

    def test_skip_everything_but_packages(self) -> None:
        """Test that skipped checks are not run."""
        result = PreflightChecker().check_all(GitfolioConfig(), skip_github=True, skip_llm=True)

        assert [check.name for check in result.checks] == ["requests"]

    def test_gemini_run(self, mock_session: MagicMock) -> None:
        """Test a Gemini config: LiteLLM is optional, the key is required."""
        mock_session.get.return_value = make_response(json_data=rate_limit_payload(50))
        config = GitfolioConfig(llm=LLMConfig(provider="gemini"))

        result = PreflightChecker(session=mock_session).check_all(config)

        names = [check.name for check in result.checks]
        assert names == ["requests", "github", "litellm", "gemini"]
        litellm_check = result.checks[2]
        assert litellm_check.required is False
        assert result.success is False
        assert result.errors == [
            "gemini: API key required. Set llm.api_key or GEMINI_API_KEY env var"
        ]

    def test_claude_requires_litellm(self) -> None:
        """Test that LiteLLM is required for providers reached through it."""
        config = GitfolioConfig(llm=LLMConfig(provider="claude", api_key="sk-ant-test"))

        result = PreflightChecker().check_all(config, skip_github=True)

        litellm_check = next(check for check in result.checks if check.name == "litellm")
        assert litellm_check.required is True
