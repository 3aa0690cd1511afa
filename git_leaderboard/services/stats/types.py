"""Data types for the stats aggregation pipeline."""

from dataclasses import dataclass, field
from datetime import datetime

from git_leaderboard.services.github.types import (
    Commit,
    ContributorStatsEntry,
    PullRequest,
    PullRequestRef,
    ReviewRecord,
)


@dataclass
class RepoActivity:
    """Everything collected for one repository in one run."""

    repo_name: str
    commits: list[Commit] = field(default_factory=list)
    pull_requests: list[PullRequest] = field(default_factory=list)
    review_map: dict[str, ReviewRecord] = field(default_factory=dict)
    # Native contributor stats, or the commit-derived equivalent
    contributor_stats: list[ContributorStatsEntry] = field(default_factory=list)

    @property
    def has_stats(self) -> bool:
        return bool(self.contributor_stats)

    @property
    def merged_pull_requests(self) -> list[PullRequest]:
        return [p for p in self.pull_requests if p.is_merged]


@dataclass
class WeeklyBucket:
    """Activity of one contributor during one Sunday-aligned week."""

    week_start: datetime
    additions: int = 0
    deletions: int = 0
    commits: int = 0
    pull_requests: int = 0
    reviews: int = 0


@dataclass(frozen=True)
class ContributorStat:
    """Aggregated activity of one contributor across all scanned repositories."""

    login: str
    avatar_url: str | None
    additions: int
    deletions: int
    net: int
    commits: int
    pull_requests: int
    reviews: int
    repos_contributed: int
    repo_names: tuple[str, ...]
    weekly: tuple[WeeklyBucket, ...]
    recent_commits: tuple[Commit, ...]
    recent_pull_requests: tuple[PullRequest, ...]
    recent_reviews: tuple[PullRequestRef, ...]
