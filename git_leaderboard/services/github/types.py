"""Data types for GitHub API responses."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from git_leaderboard.services.github.helpers import parse_iso


@dataclass
class Repository:
    """Normalized organization repository."""

    id: int
    name: str
    full_name: str
    owner: str
    default_branch: str
    is_fork: bool
    description: str | None = None
    language: str | None = None
    stars_count: int = 0
    pushed_at: str | None = None
    url: str = ""


@dataclass
class Commit:
    """A single commit on a repository's default branch."""

    sha: str
    author_login: str | None
    author_avatar_url: str | None
    message: str  # First line only
    authored_at: str  # ISO 8601
    url: str
    repo_name: str

    @property
    def authored_datetime(self) -> datetime | None:
        return parse_iso(self.authored_at)


@dataclass
class CommitDetail:
    """Line-change stats for a single commit."""

    additions: int
    deletions: int
    files_changed: int


@dataclass
class PullRequest:
    """A pull request, optionally enriched with merge stats."""

    number: int
    author_login: str | None
    author_avatar_url: str | None
    title: str
    url: str
    state: str  # "open" or "closed"
    created_at: str
    updated_at: str | None
    closed_at: str | None
    merged_at: str | None
    repo_name: str
    # Only populated for a capped number of merged PRs
    additions: int | None = None
    deletions: int | None = None
    commits: int | None = None
    changed_files: int | None = None

    @property
    def is_merged(self) -> bool:
        return self.merged_at is not None

    @property
    def is_enriched(self) -> bool:
        return self.additions is not None and self.deletions is not None

    @property
    def activity_at(self) -> str:
        """Effective date: merged, else closed, else last update, else creation."""
        return self.merged_at or self.closed_at or self.updated_at or self.created_at

    @property
    def activity_datetime(self) -> datetime | None:
        return parse_iso(self.activity_at)


@dataclass
class Review:
    """A single submitted review on a pull request."""

    reviewer_login: str | None
    reviewer_avatar_url: str | None
    state: str
    submitted_at: str | None


@dataclass
class PullRequestRef:
    """Reference to a pull request someone reviewed."""

    repo_name: str
    number: int
    title: str
    url: str
    reviewed_at: str | None = None  # Latest review submission by this reviewer


@dataclass
class ReviewRecord:
    """Per-reviewer aggregate within one repository.

    ``timestamps`` and ``pull_requests`` may be empty; ``count`` is then the
    only information and carries no weekly attribution.
    """

    login: str
    avatar_url: str | None = None
    count: int = 0
    timestamps: list[str] = field(default_factory=list)
    pull_requests: list[PullRequestRef] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReviewRecord":
        return cls(
            login=data["login"],
            avatar_url=data.get("avatar_url"),
            count=data.get("count", 0),
            timestamps=list(data.get("timestamps", [])),
            pull_requests=[PullRequestRef(**ref) for ref in data.get("pull_requests", [])],
        )


@dataclass
class ContributorWeek:
    """One week of the contributor-stats series (``w``/``a``/``d``/``c`` upstream)."""

    week: int  # Unix seconds, Sunday 00:00 UTC
    additions: int = 0
    deletions: int = 0
    commits: int = 0


@dataclass
class ContributorStatsEntry:
    """Weekly commit statistics for one author in one repository."""

    login: str
    avatar_url: str | None
    total: int
    weeks: list[ContributorWeek] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContributorStatsEntry":
        return cls(
            login=data["login"],
            avatar_url=data.get("avatar_url"),
            total=data.get("total", 0),
            weeks=[ContributorWeek(**w) for w in data.get("weeks", [])],
        )
