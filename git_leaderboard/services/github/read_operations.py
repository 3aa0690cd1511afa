"""
GitHub API read operations.

Provides all read-only operations the stats pipeline needs:
- Organization repository list
- Default-branch commits and single-commit detail
- Pull requests (date-filtered, with merge stats for a capped subset)
- Pull request reviews
- Contributor statistics (asynchronously computed by GitHub)

Every list operation paginates 100 items per page and stops at the first
short page. Results are cached per logical query when a ResponseCache is given.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

import httpx

from git_leaderboard.config import Settings, settings
from git_leaderboard.services.github.cache import ResponseCache, cached_github_call
from git_leaderboard.services.github.constants import (
    CACHE_NS_COMMITS,
    CACHE_NS_PULLS,
    CACHE_NS_REPOS,
    CACHE_NS_STATS,
    KIND_ORGANIZATION,
    KIND_REPOSITORY,
    STATUS_EMPTY_REPOSITORY,
    STATUS_NO_CONTENT,
    STATUS_STATS_COMPUTING,
)
from git_leaderboard.services.github.exceptions import GitHubAPIError
from git_leaderboard.services.github.helpers import (
    RateLimitInfo,
    format_iso,
    handle_error_response,
)
from git_leaderboard.services.github.http_client import get_github_client
from git_leaderboard.services.github.types import (
    Commit,
    CommitDetail,
    ContributorStatsEntry,
    ContributorWeek,
    PullRequest,
    Repository,
    Review,
)

logger = logging.getLogger(__name__)


class GitHubReadOperations:
    """
    Read-only operations for GitHub API.

    Uses a shared HTTP client singleton for connection pooling. Requests are
    issued one at a time; nothing here fans out concurrently, which keeps a
    full organization scan inside the hourly rate budget.
    """

    def __init__(
        self,
        token: str,
        cache: ResponseCache | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        config: Settings | None = None,
    ):
        self.token = token
        self.cache = cache
        self.config = config or settings
        self._sleep = sleep
        self.base_url = self.config.github_api_base.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self.config.github_api_version,
        }

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def _normalize_repo(self, data: dict[str, Any]) -> Repository:
        """Convert GitHub API response to Repository dataclass."""
        owner = data.get("owner") or {}
        full_name = data.get("full_name") or f"{owner.get('login', '')}/{data['name']}"
        return Repository(
            id=data["id"],
            name=data["name"],
            full_name=full_name,
            owner=owner.get("login") or full_name.split("/")[0],
            default_branch=data.get("default_branch") or "main",
            is_fork=data.get("fork", False),
            description=data.get("description"),
            language=data.get("language"),
            stars_count=data.get("stargazers_count", 0),
            pushed_at=data.get("pushed_at"),
            url=data.get("html_url", ""),
        )

    def _normalize_commit(self, data: dict[str, Any], repo: str) -> Commit:
        author = data.get("author") or {}
        commit = data.get("commit") or {}
        commit_author = commit.get("author") or {}
        message = commit.get("message") or ""
        return Commit(
            sha=data["sha"],
            author_login=author.get("login"),
            author_avatar_url=author.get("avatar_url"),
            message=message.split("\n")[0],
            authored_at=commit_author.get("date") or "",
            url=data.get("html_url", ""),
            repo_name=repo,
        )

    def _normalize_pull(self, data: dict[str, Any], repo: str) -> PullRequest:
        user = data.get("user") or {}
        return PullRequest(
            number=data["number"],
            author_login=user.get("login"),
            author_avatar_url=user.get("avatar_url"),
            title=data.get("title", ""),
            url=data.get("html_url", ""),
            state=data.get("state", "open"),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at"),
            closed_at=data.get("closed_at"),
            merged_at=data.get("merged_at"),
            repo_name=repo,
            # Present on the single-PR endpoint only
            additions=data.get("additions"),
            deletions=data.get("deletions"),
            commits=data.get("commits"),
            changed_files=data.get("changed_files"),
        )

    def _normalize_stats_entry(self, data: dict[str, Any]) -> ContributorStatsEntry | None:
        author = data.get("author") or {}
        login = author.get("login")
        if not login:
            return None
        return ContributorStatsEntry(
            login=login,
            avatar_url=author.get("avatar_url"),
            total=data.get("total", 0),
            weeks=[
                ContributorWeek(
                    week=w.get("w", 0),
                    additions=w.get("a", 0),
                    deletions=w.get("d", 0),
                    commits=w.get("c", 0),
                )
                for w in data.get("weeks", [])
            ],
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _get(self, path: str, params: dict[str, str | int] | None = None) -> httpx.Response:
        client = get_github_client()
        return await client.get(
            f"{self.base_url}{path}",
            headers=self._headers,
            params=params,
        )

    async def _paginate(
        self,
        path: str,
        params: dict[str, str | int],
        resource: str,
        kind: str = KIND_REPOSITORY,
        max_pages: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Fetch every page of a list endpoint.

        Continues while the previous page was full. ``max_pages=None`` means
        until exhaustion.
        """
        per_page = self.config.per_page
        items: list[dict[str, Any]] = []
        page = 1

        while max_pages is None or page <= max_pages:
            response = await self._get(path, {**params, "per_page": per_page, "page": page})

            if response.status_code == STATUS_EMPTY_REPOSITORY:
                logger.debug(f"{resource} is empty (409)")
                break
            handle_error_response(response, resource, kind)

            data: list[dict[str, Any]] = response.json()
            items.extend(data)
            if len(data) < per_page:
                break
            page += 1

        return items

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    @cached_github_call(CACHE_NS_REPOS, Repository)
    async def get_org_repos(self, org: str) -> list[Repository]:
        """
        Fetch every repository of an organization, most recently updated first.

        Raises:
            GitHubAuthError, GitHubNotFoundError, GitHubRateLimitError,
            GitHubForbiddenError, GitHubAPIError
        """
        data = await self._paginate(
            f"/orgs/{org}/repos",
            {"sort": "updated"},
            resource=org,
            kind=KIND_ORGANIZATION,
        )
        repos = [self._normalize_repo(r) for r in data]
        logger.info(f"Found {len(repos)} repositories in {org}")
        return repos

    # ------------------------------------------------------------------
    # Commits
    # ------------------------------------------------------------------

    @cached_github_call(CACHE_NS_COMMITS, Commit)
    async def get_commits(
        self,
        owner: str,
        repo: str,
        branch: str,
        since: datetime | None = None,
        max_pages: int | None = None,
    ) -> list[Commit]:
        """
        Fetch commits on a branch, newest first.

        Without ``since`` every page is fetched; with it, at most
        ``commit_page_cap`` pages unless ``max_pages`` says otherwise.
        """
        params: dict[str, str | int] = {"sha": branch}
        if since is not None:
            params["since"] = format_iso(since)
            if max_pages is None:
                max_pages = self.config.commit_page_cap

        data = await self._paginate(
            f"/repos/{owner}/{repo}/commits",
            params,
            resource=f"{owner}/{repo}",
            max_pages=max_pages,
        )
        return [self._normalize_commit(c, repo) for c in data]

    async def get_commit_detail(self, owner: str, repo: str, sha: str) -> CommitDetail | None:
        """
        Fetch line-change stats for a single commit.

        Returns:
            CommitDetail, or None if the fetch fails for any reason
        """
        try:
            response = await self._get(f"/repos/{owner}/{repo}/commits/{sha}")
        except httpx.HTTPError:
            return None

        if response.status_code != 200:
            return None

        data = response.json()
        stats = data.get("stats") or {}
        return CommitDetail(
            additions=stats.get("additions", 0),
            deletions=stats.get("deletions", 0),
            files_changed=len(data.get("files") or []),
        )

    # ------------------------------------------------------------------
    # Pull requests
    # ------------------------------------------------------------------

    @cached_github_call(CACHE_NS_PULLS, PullRequest)
    async def get_pull_requests(
        self,
        owner: str,
        repo: str,
        since: datetime | None = None,
    ) -> list[PullRequest]:
        """
        Fetch pull requests in any state, most recently updated first.

        With ``since``, a PR is kept when its effective date (merged, closed or
        updated) is on or after the cutoff. Pages are ordered newest first, so
        the first non-empty page that keeps nothing ends pagination.

        Up to ``pr_enrich_limit`` merged PRs are then enriched with
        additions/deletions/commits/changed files.
        """
        per_page = self.config.per_page
        max_pages = self.config.commit_page_cap if since is not None else None
        resource = f"{owner}/{repo}"
        pulls: list[PullRequest] = []
        page = 1

        while max_pages is None or page <= max_pages:
            response = await self._get(
                f"/repos/{owner}/{repo}/pulls",
                {
                    "state": "all",
                    "sort": "updated",
                    "direction": "desc",
                    "per_page": per_page,
                    "page": page,
                },
            )
            handle_error_response(response, resource)

            data: list[dict[str, Any]] = response.json()
            page_pulls = [self._normalize_pull(p, repo) for p in data]

            if since is not None:
                kept = [
                    p
                    for p in page_pulls
                    if (activity := p.activity_datetime) is not None and activity >= since
                ]
                pulls.extend(kept)
                if page_pulls and not kept:
                    break
            else:
                pulls.extend(page_pulls)

            if len(data) < per_page:
                break
            page += 1

        await self._enrich_merged_pulls(owner, repo, pulls)
        return pulls

    async def _enrich_merged_pulls(self, owner: str, repo: str, pulls: list[PullRequest]) -> None:
        """Fill merge stats on the first ``pr_enrich_limit`` merged PRs, in place."""
        merged = [p for p in pulls if p.is_merged][: self.config.pr_enrich_limit]
        for pull in merged:
            try:
                detail = await self.get_pull_request_detail(owner, repo, pull.number)
            except (GitHubAPIError, httpx.HTTPError) as e:
                logger.debug(f"Could not enrich {owner}/{repo}#{pull.number}: {e}")
                continue
            pull.additions = detail.additions
            pull.deletions = detail.deletions
            pull.commits = detail.commits
            pull.changed_files = detail.changed_files

    async def get_pull_request_detail(self, owner: str, repo: str, number: int) -> PullRequest:
        """Fetch a single pull request, including its merge stats."""
        response = await self._get(f"/repos/{owner}/{repo}/pulls/{number}")
        handle_error_response(response, f"{owner}/{repo}#{number}")
        return self._normalize_pull(response.json(), repo)

    async def get_pull_request_reviews(self, owner: str, repo: str, number: int) -> list[Review]:
        """Fetch submitted reviews of a single pull request (first 100)."""
        response = await self._get(
            f"/repos/{owner}/{repo}/pulls/{number}/reviews",
            {"per_page": self.config.per_page},
        )
        handle_error_response(response, f"{owner}/{repo}#{number}")

        reviews: list[Review] = []
        for data in response.json():
            user = data.get("user") or {}
            reviews.append(
                Review(
                    reviewer_login=user.get("login"),
                    reviewer_avatar_url=user.get("avatar_url"),
                    state=data.get("state", ""),
                    submitted_at=data.get("submitted_at"),
                )
            )
        return reviews

    # ------------------------------------------------------------------
    # Contributor statistics
    # ------------------------------------------------------------------

    @cached_github_call(CACHE_NS_STATS, ContributorStatsEntry)
    async def get_contributor_stats(
        self,
        owner: str,
        repo: str,
    ) -> list[ContributorStatsEntry] | None:
        """
        Fetch weekly per-author statistics for a repository.

        GitHub computes these lazily and answers 202 until they are ready; the
        request is retried ``stats_max_retries`` times, ``stats_retry_delay``
        seconds apart.

        Returns:
            List of entries ([] for a repository without commits), or None when
            the statistics are unavailable and a fallback should be used

        Raises:
            GitHubAuthError: Token rejected
            GitHubRateLimitError: Hourly budget exhausted
        """
        resource = f"{owner}/{repo}"
        max_retries = self.config.stats_max_retries

        for attempt in range(max_retries + 1):
            response = await self._get(f"/repos/{owner}/{repo}/stats/contributors")

            if response.status_code == STATUS_STATS_COMPUTING:
                if attempt < max_retries:
                    logger.debug(
                        f"Stats for {resource} still computing, retry {attempt + 1}/{max_retries}"
                    )
                    await self._sleep(self.config.stats_retry_delay)
                continue

            if response.status_code == STATUS_NO_CONTENT:
                return []

            if response.status_code == 401 or (
                response.status_code == 403 and RateLimitInfo(response).is_exhausted
            ):
                handle_error_response(response, resource)

            if response.status_code != 200:
                logger.warning(f"Failed to fetch stats for {resource}: {response.status_code}")
                return None

            data = response.json()
            if not isinstance(data, list):
                return None
            return [
                entry
                for raw in data
                if (entry := self._normalize_stats_entry(raw)) is not None
            ]

        logger.warning(f"Stats not ready for {resource} after {max_retries} retries")
        return None
