"""Exception taxonomy for GitFolio.

- UserInputError: missing identity or credential, raised before any batch work
- TransportError: non-success HTTP status or network fault from an upstream
- MalformedResponseError: upstream payload does not have the expected shape
- ConfigError: invalid configuration values

Transport and malformed-response errors are recovered per item by the
enricher and the orchestrator. Only UserInputError reaches the caller.
"""


class GitfolioError(Exception):
    """Base class for all GitFolio errors."""

    pass


class UserInputError(GitfolioError):
    """Required user input (username, API key) is missing."""

    pass


class TransportError(GitfolioError):
    """An upstream request failed at the HTTP or network level.

    Attributes:
        status_code: HTTP status code, or None for network faults
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(GitfolioError):
    """An upstream response did not contain the expected fields."""

    pass


class ConfigError(GitfolioError, ValueError):
    """Configuration value is invalid."""

    pass
