"""
Per-repository collection of commits, pull requests, reviews and stats.

All requests for one repository run sequentially: contributor stats, then
commits, then pull requests, then reviews.
"""

import logging
from dataclasses import asdict
from datetime import UTC, datetime, timedelta

import httpx

from git_leaderboard.config import Settings, settings
from git_leaderboard.services.github import GitHubReadOperations, ResponseCache, make_cache_key
from git_leaderboard.services.github.constants import CACHE_NS_REVIEWS, FALLBACK_LOOKBACK_DAYS
from git_leaderboard.services.github.exceptions import GitHubAPIError
from git_leaderboard.services.github.helpers import parse_iso
from git_leaderboard.services.github.types import (
    ContributorStatsEntry,
    ContributorWeek,
    PullRequest,
    PullRequestRef,
    Repository,
    ReviewRecord,
)
from git_leaderboard.services.stats.types import RepoActivity
from git_leaderboard.services.stats.weeks import week_start_of

logger = logging.getLogger(__name__)


class RepoCollector:
    """Gather one repository's activity for a time window."""

    def __init__(
        self,
        github: GitHubReadOperations,
        cache: ResponseCache | None = None,
        config: Settings | None = None,
    ) -> None:
        self.github = github
        self.cache = cache if cache is not None else github.cache
        self.config = config or settings

    async def collect(
        self,
        org: str,
        repo: Repository,
        since: datetime | None = None,
    ) -> RepoActivity:
        """
        Collect commits, pull requests, reviews and contributor stats.

        Args:
            org: Organization (repository owner)
            repo: Repository to scan
            since: Start of the time window, or None for everything

        Returns:
            RepoActivity; commits without an author login are dropped
        """
        contributor_stats = await self.get_contributor_stats(org, repo)

        commits = await self.github.get_commits(org, repo.name, repo.default_branch, since=since)
        attributed = [c for c in commits if c.author_login]
        if len(attributed) < len(commits):
            logger.debug(
                f"{repo.name}: dropped {len(commits) - len(attributed)} unattributed commits"
            )

        pulls = await self.github.get_pull_requests(org, repo.name, since=since)
        review_map = await self.collect_reviews(org, repo.name, pulls, since)

        return RepoActivity(
            repo_name=repo.name,
            commits=attributed,
            pull_requests=pulls,
            review_map=review_map,
            contributor_stats=contributor_stats,
        )

    async def get_contributor_stats(
        self,
        org: str,
        repo: Repository,
    ) -> list[ContributorStatsEntry]:
        """Native contributor stats, or commit-derived ones when those are unavailable."""
        stats = await self.github.get_contributor_stats(org, repo.name)
        if stats:
            return stats

        logger.info(f"Contributor stats unavailable for {repo.name}, deriving from commits")
        return await self.derive_stats_from_commits(org, repo)

    async def derive_stats_from_commits(
        self,
        org: str,
        repo: Repository,
    ) -> list[ContributorStatsEntry]:
        """
        Build contributor-stats equivalents from the last year of commits.

        Reads at most ``fallback_commit_pages`` pages of commits and fetches
        line changes for the first ``commit_detail_limit`` attributed ones;
        the rest contribute commit counts only.
        """
        since = datetime.now(UTC) - timedelta(days=FALLBACK_LOOKBACK_DAYS)
        commits = await self.github.get_commits(
            org,
            repo.name,
            repo.default_branch,
            since=since,
            max_pages=self.config.fallback_commit_pages,
        )

        weeks_by_login: dict[str, dict[int, ContributorWeek]] = {}
        avatars: dict[str, str | None] = {}
        detailed = 0

        for commit in commits:
            login = commit.author_login
            authored = commit.authored_datetime
            if not login or authored is None:
                continue

            detail = None
            if detailed < self.config.commit_detail_limit:
                detailed += 1
                detail = await self.github.get_commit_detail(org, repo.name, commit.sha)

            week = int(week_start_of(authored).timestamp())
            bucket = weeks_by_login.setdefault(login, {}).setdefault(
                week, ContributorWeek(week=week)
            )
            bucket.commits += 1
            if detail is not None:
                bucket.additions += detail.additions
                bucket.deletions += detail.deletions
            avatars.setdefault(login, commit.author_avatar_url)

        return [
            ContributorStatsEntry(
                login=login,
                avatar_url=avatars.get(login),
                total=sum(w.commits for w in weeks.values()),
                weeks=[weeks[k] for k in sorted(weeks)],
            )
            for login, weeks in weeks_by_login.items()
        ]

    async def collect_reviews(
        self,
        org: str,
        repo_name: str,
        pulls: list[PullRequest],
        since: datetime | None = None,
    ) -> dict[str, ReviewRecord]:
        """
        Fold the reviews of up to ``review_scan_limit`` PRs into per-reviewer records.

        A PR whose reviews cannot be fetched is logged and skipped.
        """
        key = make_cache_key(CACHE_NS_REVIEWS, f"{org}/{repo_name}", since)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return {login: ReviewRecord.from_dict(data) for login, data in cached.items()}

        records: dict[str, ReviewRecord] = {}
        for pull in pulls[: self.config.review_scan_limit]:
            try:
                reviews = await self.github.get_pull_request_reviews(org, repo_name, pull.number)
            except (GitHubAPIError, httpx.HTTPError) as e:
                logger.warning(f"Failed to fetch reviews for {repo_name}#{pull.number}: {e}")
                continue

            for review in reviews:
                login = review.reviewer_login
                if not login or review.state == "PENDING":
                    continue
                submitted = parse_iso(review.submitted_at)
                if since is not None and submitted is not None and submitted < since:
                    continue

                record = records.setdefault(
                    login, ReviewRecord(login=login, avatar_url=review.reviewer_avatar_url)
                )
                record.count += 1
                if review.submitted_at:
                    record.timestamps.append(review.submitted_at)
                _add_reviewed_pull(record, pull, review.submitted_at)

        if self.cache is not None:
            self.cache.set(key, {login: asdict(r) for login, r in records.items()})
        return records


def _add_reviewed_pull(record: ReviewRecord, pull: PullRequest, submitted_at: str | None) -> None:
    """Keep one reference per PR, carrying the reviewer's latest submission."""
    for ref in record.pull_requests:
        if ref.repo_name == pull.repo_name and ref.number == pull.number:
            if submitted_at and (ref.reviewed_at is None or submitted_at > ref.reviewed_at):
                ref.reviewed_at = submitted_at
            return

    record.pull_requests.append(
        PullRequestRef(
            repo_name=pull.repo_name,
            number=pull.number,
            title=pull.title,
            url=pull.url,
            reviewed_at=submitted_at,
        )
    )
