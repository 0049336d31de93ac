"""Repository entities as they move through the portfolio pipeline.

RawRepository is what the listing endpoint returns. EnhancedRepository adds
the language histogram and recent commits. AnalyzedRepository adds the three
AI-derived fields. Each stage creates new frozen instances; nothing is
mutated in place.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any

from gitfolio.models.analysis import ItemStatus, ParsedAnalysis


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a GitHub ISO-8601 timestamp, returning None when absent or invalid."""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class GitHubUser:
    """GitHub account profile.

    Attributes:
        login: Account login
        id: Numeric account id
        name: Display name
        bio: Profile bio
        public_repos: Number of public repositories
        followers: Follower count
        following: Following count
    """

    login: str
    id: int = 0
    avatar_url: str | None = None
    html_url: str | None = None
    name: str | None = None
    company: str | None = None
    blog: str | None = None
    location: str | None = None
    email: str | None = None
    bio: str | None = None
    twitter_username: str | None = None
    public_repos: int = 0
    followers: int = 0
    following: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "GitHubUser":
        """Create a GitHubUser from a `/users/{login}` payload."""
        return cls(
            login=str(data.get("login") or ""),
            id=_int(data.get("id")),
            avatar_url=data.get("avatar_url"),
            html_url=data.get("html_url"),
            name=data.get("name"),
            company=data.get("company"),
            blog=data.get("blog"),
            location=data.get("location"),
            email=data.get("email"),
            bio=data.get("bio"),
            twitter_username=data.get("twitter_username"),
            public_repos=_int(data.get("public_repos")),
            followers=_int(data.get("followers")),
            following=_int(data.get("following")),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "login": self.login,
            "id": self.id,
            "name": self.name,
            "html_url": self.html_url,
            "company": self.company,
            "location": self.location,
            "bio": self.bio,
            "public_repos": self.public_repos,
            "followers": self.followers,
            "following": self.following,
            "created_at": _isoformat(self.created_at),
        }


@dataclass(frozen=True)
class CommitInfo:
    """A single commit from the repository history.

    Attributes:
        sha: Commit SHA
        message: Full commit message
        author_name: Commit author name
        date: Author date
    """

    sha: str
    message: str
    author_name: str | None = None
    author_email: str | None = None
    date: datetime | None = None
    html_url: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "CommitInfo":
        """Create a CommitInfo from one element of `/repos/{name}/commits`."""
        commit = _mapping(data.get("commit"))
        author = _mapping(commit.get("author"))
        return cls(
            sha=str(data.get("sha") or ""),
            message=str(commit.get("message") or ""),
            author_name=author.get("name"),
            author_email=author.get("email"),
            date=parse_timestamp(author.get("date")),
            html_url=data.get("html_url"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "sha": self.sha,
            "message": self.message,
            "author_name": self.author_name,
            "date": _isoformat(self.date),
        }


@dataclass(frozen=True)
class RawRepository:
    """Repository record as returned by the listing endpoint.

    Immutable once fetched.

    Attributes:
        id: Numeric repository id
        name: Short repository name
        full_name: owner/name
        description: Repository description (None when unset)
        fork: Whether the repository is a fork
        stargazers_count: Star count
        forks_count: Fork count
        language: Primary language label reported by GitHub
        topics: Repository topics
    """

    id: int
    name: str
    full_name: str = ""
    html_url: str | None = None
    description: str | None = None
    fork: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None
    homepage: str | None = None
    stargazers_count: int = 0
    watchers_count: int = 0
    language: str | None = None
    forks_count: int = 0
    open_issues_count: int = 0
    license_name: str | None = None
    topics: list[str] = field(default_factory=list)
    visibility: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RawRepository":
        """Create a RawRepository from one element of `/users/{login}/repos`."""
        name = str(data.get("name") or "")
        owner = _mapping(data.get("owner")).get("login")
        full_name = data.get("full_name") or (f"{owner}/{name}" if owner else name)
        license_info = _mapping(data.get("license"))
        topics = data.get("topics")
        if not isinstance(topics, list):
            topics = []

        return cls(
            id=_int(data.get("id")),
            name=name,
            full_name=str(full_name),
            html_url=data.get("html_url"),
            description=data.get("description"),
            fork=bool(data.get("fork", False)),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
            pushed_at=parse_timestamp(data.get("pushed_at")),
            homepage=data.get("homepage"),
            stargazers_count=_int(data.get("stargazers_count")),
            watchers_count=_int(data.get("watchers_count")),
            language=data.get("language"),
            forks_count=_int(data.get("forks_count")),
            open_issues_count=_int(data.get("open_issues_count")),
            license_name=license_info.get("name"),
            topics=[str(t) for t in topics if t],
            visibility=data.get("visibility"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "full_name": self.full_name,
            "html_url": self.html_url,
            "description": self.description,
            "fork": self.fork,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
            "pushed_at": _isoformat(self.pushed_at),
            "homepage": self.homepage,
            "stargazers_count": self.stargazers_count,
            "watchers_count": self.watchers_count,
            "language": self.language,
            "forks_count": self.forks_count,
            "open_issues_count": self.open_issues_count,
            "license": self.license_name,
            "topics": list(self.topics),
            "visibility": self.visibility,
        }


def _base_values(repo: RawRepository) -> dict[str, Any]:
    return {f.name: getattr(repo, f.name) for f in fields(RawRepository)}


@dataclass(frozen=True)
class EnhancedRepository(RawRepository):
    """RawRepository plus enrichment data.

    Attributes:
        languages: Language name to byte count (empty when the fetch failed)
        recent_commits: Most recent commits, newest first
        included: False only when enrichment failed for this repository
    """

    languages: dict[str, int] = field(default_factory=dict)
    recent_commits: list[CommitInfo] = field(default_factory=list)
    included: bool = True

    @classmethod
    def from_raw(
        cls,
        repo: RawRepository,
        languages: dict[str, int] | None = None,
        recent_commits: list[CommitInfo] | None = None,
        included: bool = True,
    ) -> "EnhancedRepository":
        """Attach enrichment data to a raw repository."""
        return cls(
            **_base_values(repo),
            languages=dict(languages or {}),
            recent_commits=list(recent_commits or []),
            included=included,
        )

    @property
    def commit_messages(self) -> list[str]:
        """Commit messages in history order."""
        return [c.message for c in self.recent_commits]

    @property
    def language_names(self) -> list[str]:
        """Language names in the order the provider reported them."""
        return list(self.languages)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = super().to_dict()
        data.update(
            {
                "languages": dict(self.languages),
                "recent_commits": [c.to_dict() for c in self.recent_commits],
                "included": self.included,
            }
        )
        return data


@dataclass(frozen=True)
class AnalyzedRepository(EnhancedRepository):
    """EnhancedRepository plus the AI-derived portfolio fields.

    The three derived fields are always set together, either from a parsed
    reply or from one of the fallback triples. A parsed reply contributes at
    most three bullet points.
    """

    summary: str = ""
    bullet_points: list[str] = field(default_factory=list)
    tech_keywords: list[str] = field(default_factory=list)
    status: ItemStatus = ItemStatus.SUCCEEDED

    @classmethod
    def from_analysis(
        cls,
        repo: EnhancedRepository,
        analysis: ParsedAnalysis,
        status: ItemStatus,
    ) -> "AnalyzedRepository":
        """Merge a parsed (or fallback) triple onto an enriched repository."""
        return cls(
            **_base_values(repo),
            languages=dict(repo.languages),
            recent_commits=list(repo.recent_commits),
            included=repo.included,
            summary=analysis.summary,
            bullet_points=list(analysis.bullet_points),
            tech_keywords=list(analysis.keywords),
            status=status,
        )

    @property
    def analysis(self) -> ParsedAnalysis:
        """The derived triple as a ParsedAnalysis."""
        return ParsedAnalysis(
            summary=self.summary,
            bullet_points=list(self.bullet_points),
            keywords=list(self.tech_keywords),
        )

    def with_inclusion(self, included: bool) -> "AnalyzedRepository":
        """Return a copy with the portfolio inclusion flag changed."""
        return replace(self, included=included)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = super().to_dict()
        data.update(
            {
                "summary": self.summary,
                "bullet_points": list(self.bullet_points),
                "tech_keywords": list(self.tech_keywords),
                "status": self.status.value,
            }
        )
        return data
