"""
Stats aggregation pipeline.

Module structure:
- collector.py: Per-repository collection with commit-derived stats fallback
- aggregator.py: Cross-repository aggregation into ContributorStat records
- orchestrator.py: Sequential run with progress, snapshots and log events
- ranking.py: Sort keys, time-range presets, repository filtering
- weeks.py: Sunday-aligned week helpers
- types.py: Pipeline data types
"""

from git_leaderboard.services.stats.aggregator import aggregate
from git_leaderboard.services.stats.collector import RepoCollector
from git_leaderboard.services.stats.orchestrator import (
    StatsOrchestrator,
    fetch_all_stats,
    progress_percent,
)
from git_leaderboard.services.stats.ranking import (
    SORT_KEYS,
    TIME_RANGES,
    filter_repos,
    rank_contributors,
    window_days_for,
)
from git_leaderboard.services.stats.types import ContributorStat, RepoActivity, WeeklyBucket
from git_leaderboard.services.stats.weeks import week_series, week_start_of, window_size

__all__ = [
    "aggregate",
    "RepoCollector",
    "StatsOrchestrator",
    "fetch_all_stats",
    "progress_percent",
    "SORT_KEYS",
    "TIME_RANGES",
    "filter_repos",
    "rank_contributors",
    "window_days_for",
    "ContributorStat",
    "RepoActivity",
    "WeeklyBucket",
    "week_series",
    "week_start_of",
    "window_size",
]
