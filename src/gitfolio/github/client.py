"""GitHub REST client for the portfolio pipeline.

Wraps a requests.Session carrying the versioned Accept header and, when a
token is configured, the Authorization header. Every call makes exactly one
request; failures surface as TransportError or MalformedResponseError and
are recovered by the caller.
"""

import logging
from typing import Any
from urllib.parse import quote

import requests

from gitfolio import __version__
from gitfolio.errors import MalformedResponseError, TransportError
from gitfolio.models.repository import CommitInfo, GitHubUser, RawRepository

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.github.com"
ACCEPT_HEADER = "application/vnd.github.v3+json"
USER_AGENT = f"gitfolio/{__version__}"


def _error_message(resp: requests.Response) -> str:
    """Extract a short human-readable message from an error response."""
    try:
        body = resp.json()
    except ValueError:
        return (resp.text or "")[:300] or str(resp.reason or "")
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or resp.reason or "")
    return str(resp.reason or "")


class GitHubClient:
    """Minimal GitHub REST client.

    Usage:
        client = GitHubClient(token="ghp_...")
        user = client.get_user("octocat")
        repos = client.list_repositories("octocat")
    """

    def __init__(
        self,
        token: str | None = None,
        api_base: str = DEFAULT_API_BASE,
        timeout: int = 30,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            token: Personal access token (optional)
            api_base: REST API base URL
            timeout: Request timeout in seconds
            session: Pre-built session (mainly for tests)
        """
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": ACCEPT_HEADER,
                "User-Agent": USER_AGENT,
            }
        )
        if token:
            self.session.headers["Authorization"] = f"token {token}"
        else:
            self.session.headers.pop("Authorization", None)

    @property
    def authenticated(self) -> bool:
        """Return True if requests carry a token."""
        return "Authorization" in self.session.headers

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET a path and return the decoded JSON body.

        Raises:
            TransportError: On network fault or non-2xx status
            MalformedResponseError: If the body is not JSON
        """
        url = f"{self.api_base}{path}"
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            message = _error_message(resp)
            logger.debug("HTTP %d for %s: %s", resp.status_code, url, message)
            raise TransportError(
                f"HTTP {resp.status_code} for {url}: {message}",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as e:
            raise MalformedResponseError(f"Invalid JSON from {url}") from e

    def get_user(self, username: str) -> GitHubUser:
        """Look up an account profile."""
        data = self._get(f"/users/{quote(username)}")
        if not isinstance(data, dict):
            raise MalformedResponseError(f"Expected an object for user {username}")
        return GitHubUser.from_api(data)

    def list_repositories(
        self,
        username: str,
        per_page: int = 100,
        sort: str = "updated",
    ) -> list[RawRepository]:
        """List an account's repositories, most recently updated first.

        Only the first page is fetched, so at most `per_page` items return.
        """
        data = self._get(
            f"/users/{quote(username)}/repos",
            params={"per_page": per_page, "sort": sort},
        )
        if not isinstance(data, list):
            raise MalformedResponseError(f"Expected a list of repositories for {username}")
        return [RawRepository.from_api(item) for item in data if isinstance(item, dict)]

    def get_languages(self, full_name: str) -> dict[str, int]:
        """Fetch the language name to byte count histogram for a repository."""
        data = self._get(f"/repos/{full_name}/languages")
        if not isinstance(data, dict):
            raise MalformedResponseError(f"Expected a language object for {full_name}")
        languages: dict[str, int] = {}
        for name, size in data.items():
            try:
                languages[str(name)] = int(size)
            except (TypeError, ValueError) as e:
                raise MalformedResponseError(
                    f"Invalid byte count for {name} in {full_name}"
                ) from e
        return languages

    def get_commits(self, full_name: str, limit: int = 10) -> list[CommitInfo]:
        """Fetch the most recent commits for a repository."""
        data = self._get(f"/repos/{full_name}/commits", params={"per_page": limit})
        if not isinstance(data, list):
            raise MalformedResponseError(f"Expected a list of commits for {full_name}")
        return [CommitInfo.from_api(item) for item in data[:limit] if isinstance(item, dict)]

    def get_rate_limit(self) -> dict[str, int]:
        """Return the core rate limit bucket (limit, remaining, reset)."""
        data = self._get("/rate_limit")
        core = (data.get("resources") or {}).get("core") if isinstance(data, dict) else None
        if not isinstance(core, dict):
            raise MalformedResponseError("Rate limit payload has no core bucket")
        return {
            "limit": int(core.get("limit", 0)),
            "remaining": int(core.get("remaining", 0)),
            "reset": int(core.get("reset", 0)),
        }
