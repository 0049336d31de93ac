"""GitFolio CLI interface.

Commands:
- analyze: Build a portfolio for a GitHub account
- check: Validate GitHub and generation provider availability
- init: Initialize GitFolio configuration

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: Enable CI mode with JSON output
- --version: Show version and exit
"""

import logging
from pathlib import Path
from typing import Annotated

import typer

from gitfolio import __version__
from gitfolio.config import (
    LLM_KEY_ENV_VARS,
    BatchConfig,
    GitfolioConfig,
    create_default_config,
    load_config,
)
from gitfolio.errors import ConfigError, GitfolioError
from gitfolio.models.analysis import PortfolioResult
from gitfolio.models.llm_config import DEFAULT_API_BASES, DEFAULT_MODELS
from gitfolio.utils.logging import configure_from_cli, get_logger

# Create Typer app
app = typer.Typer(
    name="gitfolio",
    help="Resume-ready portfolio generation from GitHub repositories",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: GitfolioConfig | None = None
_ci: bool = False
_logger = get_logger()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"gitfolio {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """GitFolio - Portfolio generation from GitHub repositories.

    Summarize an account's repositories into resume bullet points and
    technical keywords using a text-generation model.
    """
    global _config, _ci

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except ConfigError as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)

    _ci = ci or _config.ci.json_output


# =============================================================================
# analyze command
# =============================================================================


def _print_report(result: PortfolioResult) -> None:
    """Print a human-readable per-repository report."""
    typer.echo(f"\n📂 Portfolio for {result.username}")
    if result.user and result.user.name:
        typer.echo(f"   {result.user.name} ({result.user.public_repos} public repositories)")

    for repo in result.analyzed:
        marker = "✅" if repo.included else "➖"
        languages = ", ".join(repo.language_names) or "Unknown"
        typer.echo(f"\n{marker} {repo.name}  ★ {repo.stargazers_count}  [{repo.status.value}]")
        typer.echo(f"   {repo.html_url}")
        typer.echo(f"   Languages: {languages}")
        typer.echo(f"   {repo.summary}")
        for bullet in repo.bullet_points:
            typer.echo(f"   • {bullet}")
        if repo.tech_keywords:
            typer.echo(f"   Keywords: {', '.join(repo.tech_keywords)}")

    counts = result.count_by_status()
    summary = ", ".join(f"{count} {status}" for status, count in sorted(counts.items()))
    typer.echo(f"\n{len(result.analyzed)} repositories ({summary or 'none'})")


@app.command()
def analyze(
    username: Annotated[
        str,
        typer.Argument(help="GitHub username"),
    ],
    token: Annotated[
        str | None,
        typer.Option(
            "--token",
            help="GitHub token (overrides config and GITHUB_TOKEN)",
        ),
    ] = None,
    api_key: Annotated[
        str | None,
        typer.Option(
            "--api-key",
            help="Generation provider API key (overrides config)",
        ),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option(
            "--limit",
            "-n",
            min=0,
            help="Only analyze the first N portfolio candidates",
        ),
    ] = None,
    delay: Annotated[
        float | None,
        typer.Option(
            "--delay",
            min=0.0,
            help="Seconds to wait between generation requests",
        ),
    ] = None,
    deadline: Annotated[
        float | None,
        typer.Option(
            "--deadline",
            min=0.0,
            help="Cancel remaining repositories after this many seconds",
        ),
    ] = None,
    skip_analysis: Annotated[
        bool,
        typer.Option(
            "--skip-analysis",
            help="Skip generation calls (use placeholder analyses instead)",
        ),
    ] = False,
    include_forks: Annotated[
        bool,
        typer.Option(
            "--include-forks",
            help="Keep forks and repositories without description or stars",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results as JSON",
        ),
    ] = False,
) -> None:
    """Build a portfolio for a GitHub account.

    Lists the account's repositories, enriches them with languages and
    recent commits, then asks the configured model for a summary, bullet
    points and keywords per repository.

    Exit codes:
        0: Portfolio built without issues
        1: Missing input or pipeline failure
        2: Portfolio built with per-repository failures
    """
    import json as json_module

    from gitfolio.pipeline import PipelineOptions, PortfolioPipeline

    config = _config or GitfolioConfig()

    # Apply CLI overrides to config
    if token:
        config.github.token = token
    if api_key:
        config.llm.api_key = api_key
    if delay is not None or deadline is not None:
        try:
            config.batch = BatchConfig(
                delay_seconds=delay if delay is not None else config.batch.delay_seconds,
                deadline_seconds=deadline or config.batch.deadline_seconds,
            )
        except ConfigError as e:
            _logger.error(str(e))
            raise typer.Exit(1)

    def on_enrich_progress(index: int, total: int) -> None:
        _logger.structured(
            logging.DEBUG,
            f"[{index + 1}/{total}] Enriching repository",
            event="enrich_progress",
            index=index,
            total=total,
        )

    def on_analysis_progress(index: int, total: int) -> None:
        _logger.structured(
            logging.INFO,
            f"[{index + 1}/{total}] Analyzing repository",
            event="analysis_progress",
            index=index,
            total=total,
        )

    options = PipelineOptions(
        skip_filter=include_forks,
        skip_analysis=skip_analysis,
        limit=limit,
        on_enrich_progress=on_enrich_progress,
        on_analysis_progress=on_analysis_progress,
    )

    pipeline = PortfolioPipeline(config=config)

    try:
        result = pipeline.run(username, options)
    except GitfolioError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    if json_output or _ci:
        typer.echo(json_module.dumps(result.to_dict(), indent=2))
    else:
        _print_report(result)

    if result.issues:
        _logger.warning(f"Encountered {len(result.issues)} issue(s)")
        for issue in result.issues:
            where = f" {issue.repository}" if issue.repository else ""
            _logger.warning(f"  [{issue.component}]{where} {issue.message}")

    # Exit with appropriate code
    if result.has_fatal_issues():
        raise typer.Exit(1)
    elif result.issues:
        raise typer.Exit(2)
    else:
        raise typer.Exit(0)


# =============================================================================
# check command
# =============================================================================


@app.command()
def check(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results as JSON",
        ),
    ] = False,
    skip_llm: Annotated[
        bool,
        typer.Option(
            "--skip-llm",
            help="Skip generation provider checks",
        ),
    ] = False,
) -> None:
    """Validate GitHub and generation provider availability.

    Checks that the GitHub API answers with requests to spare and that the
    configured generation provider has what it needs.

    Exit codes:
        0: All required checks passed
        1: One or more required checks failed
        2: Only optional checks failed (warnings)
    """
    import json as json_module

    from gitfolio.utils.preflight import PreflightChecker

    checker = PreflightChecker()
    result = checker.check_all(_config or GitfolioConfig(), skip_llm=skip_llm)

    if json_output or _ci:
        typer.echo(json_module.dumps(result.to_dict(), indent=2))
        if not result.success:
            raise typer.Exit(1)
        raise typer.Exit(2 if result.warnings else 0)

    typer.echo("\n🔍 Preflight Check Results\n")

    for check_result in result.checks:
        status = "✅" if check_result.available else "❌"
        version_str = f" ({check_result.version})" if check_result.version else ""
        required_str = " [required]" if check_result.required else " [optional]"

        typer.echo(f"  {status} {check_result.name}{version_str}{required_str}")
        typer.echo(f"     └─ {check_result.message}")

    typer.echo()

    if result.errors:
        typer.echo("❌ Preflight check FAILED")
        for error in result.errors:
            typer.echo(f"   • {error}")
        raise typer.Exit(1)
    elif result.warnings:
        typer.echo("⚠️  Preflight check passed with WARNINGS")
        for warning in result.warnings:
            typer.echo(f"   • {warning}")
        raise typer.Exit(2)
    else:
        typer.echo("✅ All preflight checks passed")
        raise typer.Exit(0)


# =============================================================================
# init command
# =============================================================================


# Menu order for `init`; the first entry is the default
PROVIDER_CHOICES = (
    ("gemini", "Gemini (default, Google API)"),
    ("claude", "Claude (Anthropic API)"),
    ("ollama", "Ollama (local model server)"),
    ("bedrock", "Bedrock (AWS)"),
)


def _prompt_llm_settings() -> dict[str, str | None]:
    """Ask for the generation provider and its credentials.

    Returns:
        Keyword arguments for create_default_config
    """
    typer.echo("\n🤖 LLM Configuration (used to summarize repositories)\n")
    typer.echo("Available providers:")
    for number, (_, label) in enumerate(PROVIDER_CHOICES, start=1):
        typer.echo(f"  {number}. {label}")

    choice = typer.prompt(
        f"\nSelect LLM provider [1-{len(PROVIDER_CHOICES)}]",
        default="1",
        show_default=True,
    )
    try:
        provider = PROVIDER_CHOICES[int(choice) - 1][0]
    except (ValueError, IndexError):
        provider = PROVIDER_CHOICES[0][0]

    settings: dict[str, str | None] = {"provider": provider}

    if provider in LLM_KEY_ENV_VARS:
        env_var = LLM_KEY_ENV_VARS[provider][0]
        api_key = typer.prompt(
            f"{provider.capitalize()} API key (or set {env_var} env var)",
            default="",
            hide_input=True,
            show_default=False,
        )
        settings["api_key"] = api_key or f"${{{env_var}}}"

    elif provider == "ollama":
        settings["api_base"] = typer.prompt(
            "Ollama API base URL",
            default=DEFAULT_API_BASES["ollama"],
            show_default=True,
        )
        settings["model"] = typer.prompt(
            "Ollama model",
            default=DEFAULT_MODELS["ollama"],
            show_default=True,
        )
        typer.echo("\n💡 Make sure Ollama is running: ollama serve")

    else:
        typer.echo("\n💡 AWS credentials are read from the environment or ~/.aws/credentials")

    return settings


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing config",
        ),
    ] = False,
    non_interactive: Annotated[
        bool,
        typer.Option(
            "--non-interactive",
            "-y",
            help="Use defaults without prompting",
        ),
    ] = False,
) -> None:
    """Initialize GitFolio configuration.

    Creates .gitfolio/config.yaml, prompting for the generation provider
    unless --non-interactive is given.
    """
    config_dir = Path(".gitfolio")
    config_file = config_dir / "config.yaml"

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    settings: dict[str, str | None] = {"provider": "gemini"}
    if not non_interactive:
        settings = _prompt_llm_settings()

    config_content = create_default_config(**settings)

    config_dir.mkdir(exist_ok=True)
    config_file.write_text(config_content)
    _logger.info(f"Created config: {config_file}")

    typer.echo("\n✅ GitFolio configuration initialized")
    typer.echo(f"   Config: {config_file}")
    raise typer.Exit(0)
