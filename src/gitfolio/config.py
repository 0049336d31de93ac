"""GitFolio configuration system.

Configuration is primarily YAML-based with minimal CLI overrides (--token,
--api-key, --delay, --ci). Supports environment variable substitution
(${VAR}) in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.gitfolio/config.yaml
3. ./gitfolio.yaml
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from gitfolio.errors import ConfigError
from gitfolio.models.llm_config import LLMConfig

DEFAULT_GITHUB_API = "https://api.github.com"

# Checked in order when the config file does not set a key
LLM_KEY_ENV_VARS = {
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "claude": ("ANTHROPIC_API_KEY",),
}
GITHUB_TOKEN_ENV_VAR = "GITHUB_TOKEN"

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class GitHubConfig:
    """GitHub data provider configuration.

    Attributes:
        token: Personal access token (optional, raises the rate limit)
        api_base: REST API base URL
        commit_limit: Recent commits fetched per repository
        per_page: Repositories requested per listing page
        timeout: Request timeout in seconds
    """

    token: str | None = None
    api_base: str = DEFAULT_GITHUB_API
    commit_limit: int = 10
    per_page: int = 100
    timeout: int = 30

    def __post_init__(self) -> None:
        """Validate GitHub configuration."""
        if self.commit_limit <= 0:
            raise ConfigError(f"commit_limit must be positive. Got: {self.commit_limit}")
        if not 1 <= self.per_page <= 100:
            raise ConfigError(f"per_page must be between 1 and 100. Got: {self.per_page}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive. Got: {self.timeout}")


@dataclass
class BatchConfig:
    """Analysis batch configuration.

    Attributes:
        delay_seconds: Wait between consecutive generation requests
        deadline_seconds: Wall-clock budget for one batch (None = unlimited)
    """

    delay_seconds: float = 1.0
    deadline_seconds: float | None = None

    def __post_init__(self) -> None:
        """Validate batch configuration."""
        if self.delay_seconds < 0:
            raise ConfigError(f"delay_seconds must not be negative. Got: {self.delay_seconds}")
        if self.deadline_seconds is not None and self.deadline_seconds <= 0:
            raise ConfigError(
                f"deadline_seconds must be positive. Got: {self.deadline_seconds}"
            )


@dataclass
class CIConfig:
    """CI/CD-specific configuration.

    Attributes:
        json_output: Use JSON output format
    """

    json_output: bool = False


@dataclass
class GitfolioConfig:
    """Top-level GitFolio configuration.

    CLI provides only per-run overrides.

    Attributes:
        github: GitHub data provider settings
        llm: Text-generation provider settings
        batch: Throttle and deadline for analysis batches
        ci: CI/CD settings
    """

    github: GitHubConfig = field(default_factory=GitHubConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    ci: CIConfig = field(default_factory=CIConfig)

    # Runtime overrides (set by CLI)
    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax for environment variable substitution.
    Example: ${GEMINI_API_KEY} -> value of GEMINI_API_KEY

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ConfigError: If a referenced variable is not set
    """
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ConfigError(f"Environment variable not set: {var_name}")
            return env_value

        return pattern.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


def env_api_key(provider: str) -> str | None:
    """Return the first API key found in the provider's environment variables."""
    for var_name in LLM_KEY_ENV_VARS.get(provider, ()):
        value = os.environ.get(var_name)
        if value:
            return value
    return None


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.gitfolio/config.yaml
    2. ./gitfolio.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".gitfolio" / "config.yaml",
        start_path / "gitfolio.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' section must be a mapping")
    return section


def load_config_from_dict(data: dict[str, Any]) -> GitfolioConfig:
    """Load configuration from a dictionary.

    Missing credentials fall back to GITHUB_TOKEN and the provider's API key
    environment variables.

    Args:
        data: Configuration dictionary

    Returns:
        GitfolioConfig instance

    Raises:
        ConfigError: If a value is invalid
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    data = substitute_env_vars(data)

    github_data = _section(data, "github")
    llm_data = _section(data, "llm")
    batch_data = _section(data, "batch")
    ci_data = _section(data, "ci")

    try:
        github = GitHubConfig(
            token=github_data.get("token") or os.environ.get(GITHUB_TOKEN_ENV_VAR) or None,
            api_base=str(github_data.get("api_base") or DEFAULT_GITHUB_API),
            commit_limit=int(github_data.get("commit_limit", 10)),
            per_page=int(github_data.get("per_page", 100)),
            timeout=int(github_data.get("timeout", 30)),
        )

        deadline = batch_data.get("deadline_seconds")
        batch = BatchConfig(
            delay_seconds=float(batch_data.get("delay_seconds", 1.0)),
            deadline_seconds=float(deadline) if deadline is not None else None,
        )
    except (TypeError, ValueError) as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"Invalid configuration value: {e}") from e

    llm = LLMConfig.from_dict(llm_data)
    if not llm.api_key:
        llm.api_key = env_api_key(llm.provider)

    ci = CIConfig(json_output=bool(ci_data.get("json_output", False)))

    return GitfolioConfig(github=github, llm=llm, batch=batch, ci=ci)


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> GitfolioConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        GitfolioConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
        ConfigError: If the file is not valid YAML or holds invalid values
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        try:
            with open(found_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {found_path}: {e}") from e
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = load_config_from_dict({})

    return config


def create_default_config(
    provider: str = "gemini",
    model: str | None = None,
    api_key: str | None = None,
    api_base: str | None = None,
) -> str:
    """Create default configuration YAML content.

    Args:
        provider: LLM provider (gemini, claude, ollama, bedrock)
        model: Model identifier (provider default if None)
        api_key: API key or env var reference like ${GEMINI_API_KEY}
        api_base: API base URL (written for Ollama only)

    Returns:
        YAML string with default configuration and comments
    """
    llm = LLMConfig(provider=provider, model=model or "", api_base=api_base)

    if api_key:
        key_line = f'  api_key: "{api_key}"'
    elif llm.provider in LLM_KEY_ENV_VARS:
        key_line = f'  # api_key: "${{{LLM_KEY_ENV_VARS[llm.provider][0]}}}"  # Required'
    else:
        key_line = "  # No API key needed for this provider"

    base_line = f'\n  api_base: "{llm.api_base}"' if llm.provider == "ollama" else ""

    return f'''# GitFolio Configuration

# GitHub data provider
github:
  # token: "${{GITHUB_TOKEN}}"   # Optional, raises the API rate limit
  api_base: "{DEFAULT_GITHUB_API}"
  commit_limit: 10             # Recent commits sent with each prompt
  per_page: 100
  timeout: 30

# Text-generation provider
llm:
  provider: "{llm.provider}"           # gemini, claude, ollama, bedrock
  model: "{llm.model}"
{key_line}{base_line}
  temperature: 0.2
  top_k: 40
  top_p: 0.95
  max_tokens: 1024
  timeout: 60

# Analysis batch settings
batch:
  delay_seconds: 1.0           # Wait between generation requests
  # deadline_seconds: 600      # Cancel remaining repositories after this budget

# CI/CD settings
ci:
  json_output: false
'''
