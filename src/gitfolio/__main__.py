"""Entry point for running GitFolio as a module.

Usage:
    python -m gitfolio [command] [options]

Example:
    python -m gitfolio analyze octocat --limit 5
    python -m gitfolio check
"""

from gitfolio.cli import app

if __name__ == "__main__":
    app()
