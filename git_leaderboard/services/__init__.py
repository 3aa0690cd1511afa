# Services package

from git_leaderboard.services.github import GitHubReadOperations, ResponseCache
from git_leaderboard.services.scheduler import AutoRefreshScheduler
from git_leaderboard.services.stats import RepoCollector, StatsOrchestrator, aggregate

__all__ = [
    "AutoRefreshScheduler",
    "GitHubReadOperations",
    "RepoCollector",
    "ResponseCache",
    "StatsOrchestrator",
    "aggregate",
]
