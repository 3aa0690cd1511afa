"""
Cross-repository aggregation into per-contributor stats.

Folds RepoActivity records into one builder per login, then emits immutable
ContributorStat records with a fixed-length weekly series. The function is
pure: the same inputs and ``now`` always give the same output.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from typing import TypeVar

from git_leaderboard.config import settings
from git_leaderboard.services.github.helpers import parse_iso
from git_leaderboard.services.github.types import (
    Commit,
    PullRequest,
    PullRequestRef,
    ReviewRecord,
)
from git_leaderboard.services.stats.types import ContributorStat, RepoActivity, WeeklyBucket
from git_leaderboard.services.stats.weeks import week_series, week_start_of, window_size

T = TypeVar("T")

_OLDEST = datetime.min.replace(tzinfo=UTC)


@dataclass
class _ContributorBuilder:
    login: str
    avatar_url: str | None = None
    additions: int = 0
    deletions: int = 0
    commits: int = 0
    pull_requests: int = 0
    reviews: int = 0
    repos: set[str] = field(default_factory=set)
    weeks: dict[datetime, WeeklyBucket] = field(default_factory=dict)
    commit_items: list[Commit] = field(default_factory=list)
    pull_items: list[PullRequest] = field(default_factory=list)
    review_items: list[PullRequestRef] = field(default_factory=list)

    def week(self, moment: datetime) -> WeeklyBucket:
        start = week_start_of(moment)
        bucket = self.weeks.get(start)
        if bucket is None:
            bucket = self.weeks[start] = WeeklyBucket(week_start=start)
        return bucket

    def is_empty(self) -> bool:
        return not (
            self.additions or self.deletions or self.commits or self.pull_requests or self.reviews
        )


class _Aggregation:
    """Login -> builder map owned by a single aggregate() call."""

    def __init__(self, cutoff: datetime | None) -> None:
        self.cutoff = cutoff
        self.builders: dict[str, _ContributorBuilder] = {}

    def builder(self, login: str, avatar_url: str | None) -> _ContributorBuilder:
        builder = self.builders.get(login)
        if builder is None:
            builder = self.builders[login] = _ContributorBuilder(login=login)
        if builder.avatar_url is None and avatar_url:
            builder.avatar_url = avatar_url
        return builder

    def in_window(self, moment: datetime | None) -> bool:
        """Boundary inclusive; undated items only pass when there is no cutoff."""
        if self.cutoff is None:
            return True
        return moment is not None and moment >= self.cutoff

    def add_repo(self, activity: RepoActivity) -> None:
        for commit in activity.commits:
            self.add_commit(activity.repo_name, commit)
        for pull in activity.pull_requests:
            self.add_pull(activity.repo_name, pull)
        for record in activity.review_map.values():
            self.add_reviews(activity.repo_name, record)

    def add_commit(self, repo_name: str, commit: Commit) -> None:
        if not commit.author_login:
            return
        # Commits fetched with ``since`` can still fall before the cutoff
        authored = commit.authored_datetime
        if not self.in_window(authored):
            return

        builder = self.builder(commit.author_login, commit.author_avatar_url)
        builder.commits += 1
        builder.repos.add(repo_name)
        builder.commit_items.append(commit)
        if authored is not None:
            builder.week(authored).commits += 1

    def add_pull(self, repo_name: str, pull: PullRequest) -> None:
        if not pull.author_login:
            return
        activity = pull.activity_datetime
        if not self.in_window(activity):
            return

        builder = self.builder(pull.author_login, pull.author_avatar_url)
        builder.pull_requests += 1
        builder.repos.add(repo_name)
        builder.pull_items.append(pull)

        bucket = builder.week(activity) if activity is not None else None
        if bucket is not None:
            bucket.pull_requests += 1

        if pull.is_merged and pull.is_enriched:
            additions = pull.additions or 0
            deletions = pull.deletions or 0
            builder.additions += additions
            builder.deletions += deletions
            if bucket is not None:
                bucket.additions += additions
                bucket.deletions += deletions

    def add_reviews(self, repo_name: str, record: ReviewRecord) -> None:
        builder = self.builder(record.login, record.avatar_url)

        counted = 0
        for timestamp in record.timestamps:
            submitted = parse_iso(timestamp)
            if not self.in_window(submitted):
                continue
            counted += 1
            if submitted is not None:
                builder.week(submitted).reviews += 1

        # Undated reviews: totals only, no weekly attribution
        counted += max(record.count - len(record.timestamps), 0)

        if counted:
            builder.reviews += counted
            builder.repos.add(repo_name)

        for ref in record.pull_requests:
            if ref.reviewed_at is None or self.in_window(parse_iso(ref.reviewed_at)):
                builder.review_items.append(ref)


def _most_recent(items: list[T], date_of: Callable[[T], str | None], limit: int) -> tuple[T, ...]:
    ordered = sorted(items, key=lambda item: parse_iso(date_of(item)) or _OLDEST, reverse=True)
    return tuple(ordered[:limit])


def aggregate(
    results: Iterable[RepoActivity],
    window_days: int | None = None,
    now: datetime | None = None,
    recent_limit: int = settings.recent_items_limit,
) -> list[ContributorStat]:
    """
    Aggregate per-repository activity into per-contributor stats.

    Args:
        results: One RepoActivity per scanned repository
        window_days: Only count activity from the last N days (None: everything)
        now: Reference time for the cutoff and the weekly series (default: now)
        recent_limit: Size cap of each recent-items list

    Returns:
        ContributorStat list sorted by net lines, commits, then login.
        Contributors without any counted activity are omitted.
    """
    now = now or datetime.now(UTC)
    cutoff = now - timedelta(days=window_days) if window_days else None

    aggregation = _Aggregation(cutoff)
    for activity in results:
        aggregation.add_repo(activity)

    series = week_series(now, window_size(window_days))

    stats: list[ContributorStat] = []
    for builder in aggregation.builders.values():
        if builder.is_empty():
            continue

        weekly = tuple(
            replace(builder.weeks[week]) if week in builder.weeks else WeeklyBucket(week_start=week)
            for week in series
        )
        stats.append(
            ContributorStat(
                login=builder.login,
                avatar_url=builder.avatar_url,
                additions=builder.additions,
                deletions=builder.deletions,
                net=builder.additions - builder.deletions,
                commits=builder.commits,
                pull_requests=builder.pull_requests,
                reviews=builder.reviews,
                repos_contributed=len(builder.repos),
                repo_names=tuple(sorted(builder.repos)),
                weekly=weekly,
                recent_commits=_most_recent(
                    builder.commit_items, lambda c: c.authored_at, recent_limit
                ),
                recent_pull_requests=_most_recent(
                    builder.pull_items, lambda p: p.activity_at, recent_limit
                ),
                recent_reviews=_most_recent(
                    builder.review_items, lambda r: r.reviewed_at, recent_limit
                ),
            )
        )

    stats.sort(key=lambda s: (-s.net, -s.commits, s.login))
    return stats
