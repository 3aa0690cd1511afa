"""
Stats orchestrator: runs the collector over a repository selection.

Repositories are processed strictly one at a time to stay within GitHub's
hourly rate budget. After each repository the caller receives a progress
percentage and a full aggregation snapshot over everything processed so far,
so results can be shown before the run completes.
"""

import inspect
import logging
import math
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from git_leaderboard.schemas.progress import (
    RepoCompleteEvent,
    RepoErrorEvent,
    RepoLogEvent,
    RepoStartEvent,
)
from git_leaderboard.services.github import GitHubReadOperations, ResponseCache
from git_leaderboard.services.github.exceptions import GitHubAuthError
from git_leaderboard.services.github.types import Repository
from git_leaderboard.services.stats.aggregator import aggregate
from git_leaderboard.services.stats.collector import RepoCollector
from git_leaderboard.services.stats.types import ContributorStat, RepoActivity
from git_leaderboard.services.stats.weeks import week_start_of

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], Any]
SnapshotCallback = Callable[[list[ContributorStat]], Any]
LogCallback = Callable[[RepoLogEvent], Any]


async def _emit(callback: Callable[[Any], Any] | None, payload: Any) -> None:
    """Call a plain or async callback."""
    if callback is None:
        return
    result = callback(payload)
    if inspect.isawaitable(result):
        await result


def progress_percent(done: int, total: int) -> int:
    """Percentage of repositories processed, rounded half up."""
    if total <= 0:
        return 100
    return math.floor(done / total * 100 + 0.5)


class StatsOrchestrator:
    """
    Sequences the collector across repositories and streams results.

    One instance runs one aggregation at a time; state from a previous run is
    discarded when ``run`` starts.
    """

    def __init__(
        self,
        github: GitHubReadOperations,
        collector: RepoCollector | None = None,
    ) -> None:
        self.github = github
        self.collector = collector or RepoCollector(github)
        self._stop_requested = False

    def request_stop(self) -> None:
        """Stop after the repository currently being collected."""
        self._stop_requested = True

    async def run(
        self,
        org: str,
        repos: Sequence[Repository],
        window_days: int | None = None,
        on_progress: ProgressCallback | None = None,
        on_snapshot: SnapshotCallback | None = None,
        on_log: LogCallback | None = None,
    ) -> list[ContributorStat]:
        """
        Collect and aggregate stats for the selected repositories.

        A failing repository is logged and contributes nothing; only an
        authentication failure aborts the run.

        Args:
            org: Organization that owns the repositories
            repos: Repositories to scan, in order
            window_days: Only count the last N days (None: everything)
            on_progress: Receives an integer percentage after each repository
            on_snapshot: Receives the aggregation so far after each repository
            on_log: Receives start/complete/error events

        Returns:
            Final ContributorStat list

        Raises:
            GitHubAuthError: The token was rejected
        """
        self._stop_requested = False
        now = datetime.now(UTC)
        since = now - timedelta(days=window_days) if window_days else None
        total = len(repos)
        results: list[RepoActivity] = []

        logger.info(f"Collecting stats for {total} repositories in {org}")

        for index, repo in enumerate(repos):
            if self._stop_requested:
                logger.info(f"Stop requested, ending run after {index}/{total} repositories")
                break

            await _emit(on_log, RepoStartEvent(repo=repo.name, index=index, total=total))

            try:
                activity = await self.collector.collect(org, repo, since)
            except GitHubAuthError as e:
                await _emit(
                    on_log,
                    RepoErrorEvent(repo=repo.name, index=index, total=total, error=str(e)),
                )
                raise
            except Exception as e:
                logger.warning(f"Error fetching stats for {repo.name}: {e}")
                activity = RepoActivity(repo_name=repo.name)
                await _emit(
                    on_log,
                    RepoErrorEvent(repo=repo.name, index=index, total=total, error=str(e)),
                )
            else:
                await _emit(on_log, self._complete_event(activity, index, total, since))

            results.append(activity)
            await _emit(on_progress, progress_percent(index + 1, total))
            await _emit(on_snapshot, aggregate(results, window_days, now=now))

        final = aggregate(results, window_days, now=now)
        logger.info(f"Aggregated {len(final)} contributors across {len(results)} repositories")
        return final

    def _complete_event(
        self,
        activity: RepoActivity,
        index: int,
        total: int,
        since: datetime | None,
    ) -> RepoCompleteEvent:
        first_week = week_start_of(since).timestamp() if since is not None else None
        weeks = [
            week
            for entry in activity.contributor_stats
            for week in entry.weeks
            if first_week is None or week.week >= first_week
        ]
        return RepoCompleteEvent(
            repo=activity.repo_name,
            index=index,
            total=total,
            has_stats=activity.has_stats,
            has_prs=bool(activity.pull_requests),
            pr_count=len(activity.pull_requests),
            merged_pr_count=len(activity.merged_pull_requests),
            total_commits=len(activity.commits),
            total_additions=sum(w.additions for w in weeks),
            total_deletions=sum(w.deletions for w in weeks),
        )


async def fetch_all_stats(
    token: str,
    org: str,
    repos: Sequence[Repository],
    window_days: int | None = None,
    on_progress: ProgressCallback | None = None,
    on_snapshot: SnapshotCallback | None = None,
    on_log: LogCallback | None = None,
    cache: ResponseCache | None = None,
) -> list[ContributorStat]:
    """Run a StatsOrchestrator for one token; see StatsOrchestrator.run."""
    github = GitHubReadOperations(token, cache=cache)
    orchestrator = StatsOrchestrator(github)
    return await orchestrator.run(
        org,
        repos,
        window_days,
        on_progress=on_progress,
        on_snapshot=on_snapshot,
        on_log=on_log,
    )
