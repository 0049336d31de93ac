"""Test fixtures for GitFolio.

This package provides builders for GitHub and Gemini API payloads and
mock HTTP responses, so no test touches the network.
"""

from typing import Any
from unittest.mock import MagicMock

import requests

from gitfolio.models.repository import EnhancedRepository


def make_response(
    status_code: int = 200,
    json_data: Any = None,
    text: str = "",
    reason: str = "",
) -> MagicMock:
    """Build a mock requests.Response.

    Args:
        status_code: HTTP status code
        json_data: Decoded body (None makes `.json()` raise ValueError)
        text: Raw body text
        reason: HTTP reason phrase

    Returns:
        MagicMock standing in for requests.Response
    """
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.reason = reason
    resp.text = text
    if json_data is None:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        resp.json.return_value = json_data
    return resp


def repo_payload(
    name: str,
    description: str | None = "A sample project",
    stars: int = 3,
    fork: bool = False,
    **extra: Any,
) -> dict[str, Any]:
    """Build one element of a `/users/{login}/repos` body."""
    data = {
        "id": sum(ord(c) for c in name),
        "name": name,
        "full_name": f"octocat/{name}",
        "owner": {"login": "octocat"},
        "html_url": f"https://github.com/octocat/{name}",
        "description": description,
        "fork": fork,
        "created_at": "2020-01-01T00:00:00Z",
        "updated_at": "2024-05-01T12:00:00Z",
        "pushed_at": "2024-05-01T12:00:00Z",
        "homepage": None,
        "stargazers_count": stars,
        "watchers_count": stars,
        "language": "Python",
        "forks_count": 1,
        "open_issues_count": 0,
        "license": {"key": "mit", "name": "MIT License"},
        "topics": ["cli", "automation"],
        "visibility": "public",
    }
    data.update(extra)
    return data


def commit_payload(sha: str, message: str) -> dict[str, Any]:
    """Build one element of a `/repos/{name}/commits` body."""
    return {
        "sha": sha,
        "html_url": f"https://github.com/octocat/hello-world/commit/{sha}",
        "commit": {
            "message": message,
            "author": {
                "name": "The Octocat",
                "email": "octocat@github.com",
                "date": "2024-05-01T12:00:00Z",
            },
        },
    }


def gemini_payload(text: str) -> dict[str, Any]:
    """Build a generateContent response body."""
    return {
        "candidates": [
            {
                "content": {"parts": [{"text": text}], "role": "model"},
                "finishReason": "STOP",
            }
        ],
        "usageMetadata": {
            "promptTokenCount": 120,
            "candidatesTokenCount": 80,
            "totalTokenCount": 200,
        },
        "modelVersion": "gemini-2.0-flash",
    }


def make_enhanced(name: str, included: bool = True) -> EnhancedRepository:
    """Build a minimal enriched repository."""
    return EnhancedRepository(
        id=len(name),
        name=name,
        full_name=f"octocat/{name}",
        included=included,
    )
