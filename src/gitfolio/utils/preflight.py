"""Preflight validation.

External dependencies are validated before a portfolio run begins: the
Python packages used for HTTP and generation, GitHub reachability with its
remaining rate limit, and the generation provider's credentials.
"""

import importlib.metadata
import importlib.util
from dataclasses import dataclass, field
from typing import Any

import requests

from gitfolio.config import GitfolioConfig, GitHubConfig
from gitfolio.errors import MalformedResponseError, TransportError
from gitfolio.github.client import GitHubClient
from gitfolio.models.llm_config import LLMConfig

# Below this many remaining core requests the check reports a warning
LOW_RATE_LIMIT = 20


@dataclass
class ToolCheck:
    """Result of checking a single dependency.

    Attributes:
        name: Dependency name
        available: Whether the dependency is usable
        version: Version if known
        required: Whether the dependency is required for this run
        path: Module path or endpoint URL if available
        message: Status message (human-readable context)
    """

    name: str
    available: bool
    version: str | None = None
    required: bool = True
    path: str | None = None
    message: str = ""


@dataclass
class PreflightResult:
    """Result of preflight validation.

    Attributes:
        success: Whether all required dependencies are available
        checks: Individual check results
        errors: Error messages for missing required dependencies
        warnings: Warning messages for missing optional dependencies
    """

    success: bool = True
    checks: list[ToolCheck] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_check(self, check: ToolCheck) -> None:
        """Add a check result."""
        self.checks.append(check)

        if not check.available:
            if check.required:
                self.success = False
                self.errors.append(f"{check.name}: {check.message}")
            else:
                self.warnings.append(f"{check.name}: {check.message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "success": self.success,
            "checks": [
                {
                    "name": c.name,
                    "available": c.available,
                    "version": c.version,
                    "required": c.required,
                    "path": c.path,
                    "message": c.message,
                }
                for c in self.checks
            ],
            "errors": self.errors,
            "warnings": self.warnings,
        }


class PreflightChecker:
    """Validates dependency availability before a portfolio run.

    Usage:
        checker = PreflightChecker()
        result = checker.check_all(config)
        if not result.success:
            sys.exit(1)
    """

    def __init__(
        self,
        timeout: int = 10,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize preflight checker.

        Args:
            timeout: Timeout in seconds for network checks
            session: HTTP session for network checks (mainly for tests)
        """
        self.timeout = timeout
        self.session = session

    def check_package(self, name: str, purpose: str, required: bool = True) -> ToolCheck:
        """Check if a Python package is importable.

        Args:
            name: Import name of the package
            purpose: Short description shown when the package is present
            required: Whether the package is required

        Returns:
            ToolCheck result
        """
        spec = importlib.util.find_spec(name)
        if spec is None:
            return ToolCheck(
                name=name,
                available=False,
                required=required,
                message=f"Install with: pip install {name}",
            )

        try:
            version = importlib.metadata.version(name)
        except importlib.metadata.PackageNotFoundError:
            version = None

        return ToolCheck(
            name=name,
            available=True,
            version=version,
            required=required,
            path=spec.origin,
            message=purpose,
        )

    def check_github(self, github: GitHubConfig) -> ToolCheck:
        """Check that the GitHub API answers and has requests left.

        Args:
            github: GitHub configuration

        Returns:
            ToolCheck result
        """
        client = GitHubClient(
            token=github.token,
            api_base=github.api_base,
            timeout=self.timeout,
            session=self.session,
        )
        auth = "authenticated" if client.authenticated else "unauthenticated"

        try:
            rate = client.get_rate_limit()
        except (TransportError, MalformedResponseError) as e:
            return ToolCheck(
                name="github",
                available=False,
                required=True,
                path=github.api_base,
                message=f"GitHub API not reachable: {e}",
            )

        if rate["remaining"] == 0:
            return ToolCheck(
                name="github",
                available=False,
                required=True,
                path=github.api_base,
                message=(
                    f"Rate limit exhausted ({auth}, limit {rate['limit']}). "
                    "Set GITHUB_TOKEN to raise it."
                ),
            )

        check = ToolCheck(
            name="github",
            available=True,
            required=True,
            path=github.api_base,
            message=f"{rate['remaining']}/{rate['limit']} requests remaining ({auth})",
        )
        if rate["remaining"] < LOW_RATE_LIMIT:
            check.required = False
            check.available = False
            check.message = (
                f"Only {rate['remaining']}/{rate['limit']} requests remaining ({auth})"
            )
        return check

    def check_ollama_server(self, api_base: str = "http://localhost:11434") -> ToolCheck:
        """Check if the Ollama server is running and responding.

        Args:
            api_base: Ollama API base URL

        Returns:
            ToolCheck result
        """
        session = self.session or requests.Session()
        base = api_base.rstrip("/")

        try:
            resp = session.get(f"{base}/api/version", timeout=self.timeout)
        except requests.RequestException as e:
            return ToolCheck(
                name="ollama",
                available=False,
                required=True,
                message=f"Ollama not responding at {api_base}: {e}",
            )

        if resp.status_code != 200:
            return ToolCheck(
                name="ollama",
                available=False,
                required=True,
                message=f"Ollama returned HTTP {resp.status_code} at {api_base}",
            )

        version = None
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            version = body.get("version")

        return ToolCheck(
            name="ollama",
            available=True,
            version=version,
            required=True,
            path=api_base,
            message="Local LLM server",
        )

    def check_llm_provider(self, llm: LLMConfig) -> ToolCheck:
        """Check that the configured generation provider can be used.

        Gemini and Claude need an API key; Ollama needs a running server;
        Bedrock relies on AWS credentials resolved at call time.

        Args:
            llm: Generation provider configuration

        Returns:
            ToolCheck result
        """
        if llm.provider == "ollama":
            return self.check_ollama_server(llm.api_base or "http://localhost:11434")

        if llm.provider == "bedrock":
            return ToolCheck(
                name="bedrock",
                available=True,
                required=True,
                message=f"AWS credentials are resolved at call time (model: {llm.model})",
            )

        env_hint = "GEMINI_API_KEY" if llm.provider == "gemini" else "ANTHROPIC_API_KEY"
        if not llm.api_key:
            return ToolCheck(
                name=llm.provider,
                available=False,
                required=True,
                message=f"API key required. Set llm.api_key or {env_hint} env var",
            )

        return ToolCheck(
            name=llm.provider,
            available=True,
            required=True,
            path=llm.api_base,
            message=f"API key configured (model: {llm.model})",
        )

    def check_all(
        self,
        config: GitfolioConfig | None = None,
        skip_github: bool = False,
        skip_llm: bool = False,
    ) -> PreflightResult:
        """Run all preflight checks.

        Args:
            config: GitFolio configuration (defaults if None)
            skip_github: Skip the GitHub reachability check
            skip_llm: Skip generation provider checks

        Returns:
            PreflightResult with all check results
        """
        config = config or GitfolioConfig()
        result = PreflightResult()

        result.add_check(self.check_package("requests", "HTTP client (Python package)"))

        if not skip_github:
            result.add_check(self.check_github(config.github))

        if not skip_llm:
            # LiteLLM is only on the call path for non-Gemini providers
            result.add_check(
                self.check_package(
                    "litellm",
                    "Unified LLM interface (Python package)",
                    required=config.llm.provider != "gemini",
                )
            )
            result.add_check(self.check_llm_provider(config.llm))

        return result
