"""Leaderboard ordering, time-range presets and repository filtering."""

from collections.abc import Sequence

from git_leaderboard.services.github.types import Repository
from git_leaderboard.services.stats.types import ContributorStat

# Sortable columns: key -> (label, description)
SORT_KEYS: dict[str, tuple[str, str]] = {
    "net": ("Net Lines", "Lines added minus deleted"),
    "additions": ("Additions", "Total lines added"),
    "deletions": ("Deletions", "Total lines deleted"),
    "commits": ("Commits", "Total commits"),
    "pull_requests": ("PRs", "Pull requests created"),
    "reviews": ("Reviews", "PR reviews submitted"),
}

DEFAULT_SORT_KEY = "net"

# Time-range presets: key -> (label, window in days or None for all time)
TIME_RANGES: dict[str, tuple[str, int | None]] = {
    "all": ("All Time", None),
    "1d": ("Last 24 Hours", 1),
    "7d": ("Last 7 Days", 7),
    "30d": ("Last 30 Days", 30),
    "90d": ("Last 90 Days", 90),
    "180d": ("Last 6 Months", 180),
    "365d": ("Last Year", 365),
}


def window_days_for(time_range: str) -> int | None:
    """Window in days for a preset key; unknown keys mean all time."""
    return TIME_RANGES.get(time_range, TIME_RANGES["all"])[1]


def rank_contributors(
    stats: Sequence[ContributorStat],
    sort_key: str = DEFAULT_SORT_KEY,
    descending: bool = True,
    search: str | None = None,
) -> list[ContributorStat]:
    """
    Order contributors by one of SORT_KEYS, optionally filtering by login.

    Unknown sort keys fall back to net lines. Ties keep login order.
    """
    if sort_key not in SORT_KEYS:
        sort_key = DEFAULT_SORT_KEY

    selected = list(stats)
    if search:
        term = search.lower()
        selected = [s for s in selected if term in s.login.lower()]

    selected.sort(key=lambda s: s.login)
    selected.sort(key=lambda s: getattr(s, sort_key), reverse=descending)
    return selected


def filter_repos(
    repos: Sequence[Repository],
    search: str | None = None,
    include_forks: bool = True,
) -> list[Repository]:
    """Repositories whose name contains ``search`` (case-insensitive)."""
    term = search.lower() if search else None
    return [
        repo
        for repo in repos
        if (include_forks or not repo.is_fork) and (term is None or term in repo.name.lower())
    ]
