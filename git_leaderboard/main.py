import asyncio
import logging
import sys

from git_leaderboard.config import Settings, settings
from git_leaderboard.schemas.progress import RepoCompleteEvent, RepoErrorEvent, RepoLogEvent
from git_leaderboard.services.github import (
    GitHubAPIError,
    GitHubReadOperations,
    MemoryStore,
    ResponseCache,
    close_github_client,
)
from git_leaderboard.services.scheduler import AutoRefreshScheduler
from git_leaderboard.services.stats import ContributorStat, StatsOrchestrator, rank_contributors


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging."""
    # Format: timestamp - level - logger name - message
    log_format = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
    date_format = "%H:%M:%S"

    logging.basicConfig(
        level=level.upper(),
        format=log_format,
        datefmt=date_format,
        stream=sys.stdout,
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


def _log_event(event: RepoLogEvent) -> None:
    position = f"[{event.index + 1}/{event.total}]"
    if isinstance(event, RepoCompleteEvent):
        logger.info(
            f"{position} {event.repo}: {event.total_commits} commits, "
            f"{event.pr_count} PRs ({event.merged_pr_count} merged), "
            f"+{event.total_additions}/-{event.total_deletions}"
            f"{'' if event.has_stats else ' (no stats)'}"
        )
    elif isinstance(event, RepoErrorEvent):
        logger.warning(f"{position} {event.repo}: {event.error}")


def _log_leaderboard(stats: list[ContributorStat], limit: int = 10) -> None:
    ranked = rank_contributors(stats)
    logger.info(f"Leaderboard ({len(ranked)} contributors)")
    for rank, entry in enumerate(ranked[:limit], start=1):
        logger.info(
            f"{rank:>3}. {entry.login:<24} net={entry.net:+} commits={entry.commits} "
            f"prs={entry.pull_requests} reviews={entry.reviews} repos={entry.repos_contributed}"
        )


async def run(config: Settings) -> int:
    """Build the leaderboard once, then keep refreshing if the scheduler is enabled."""
    cache = ResponseCache(
        MemoryStore(config.cache_quota_bytes),
        ttl_seconds=config.cache_ttl_seconds,
        max_entry_bytes=config.cache_max_entry_bytes,
        namespace=config.cache_namespace,
    )
    github = GitHubReadOperations(config.github_token, cache=cache, config=config)
    orchestrator = StatsOrchestrator(github)

    async def refresh() -> list[ContributorStat]:
        repos = await github.get_org_repos(config.github_org)
        stats = await orchestrator.run(
            config.github_org,
            repos,
            config.window_days,
            on_log=_log_event,
        )
        _log_leaderboard(stats)
        return stats

    scheduler = AutoRefreshScheduler(
        refresh,
        cache,
        interval_minutes=config.auto_refresh_minutes,
        enabled=config.scheduler_enabled,
    )
    try:
        try:
            await refresh()
        except GitHubAPIError as e:
            logger.error(e.message)
            return 1

        if scheduler.enabled:
            scheduler.start()
            await asyncio.Event().wait()
        return 0
    finally:
        scheduler.stop()
        await close_github_client()


def main() -> int:
    setup_logging(settings.log_level)
    if not settings.has_credentials:
        logger.error("Set GITHUB_TOKEN and GITHUB_ORG to build a leaderboard")
        return 1

    try:
        return asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
