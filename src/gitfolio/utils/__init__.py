"""GitFolio utility modules.

- logging: Standardized logging with human/verbose/JSON modes
- preflight: GitHub and generation provider availability checks
"""

from gitfolio.utils.logging import get_logger, setup_logging
from gitfolio.utils.preflight import PreflightChecker, PreflightResult

__all__ = [
    "get_logger",
    "setup_logging",
    "PreflightChecker",
    "PreflightResult",
]
