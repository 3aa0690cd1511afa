"""
GitHub API helper utilities.

Provides rate limit handling, error response classification and the
ISO-8601 parsing shared by the client and the stats pipeline.
"""

import logging
from datetime import UTC, datetime

import httpx

from git_leaderboard.services.github.constants import KIND_ORGANIZATION, KIND_REPOSITORY
from git_leaderboard.services.github.exceptions import (
    GitHubAPIError,
    GitHubAuthError,
    GitHubForbiddenError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)

logger = logging.getLogger(__name__)


class RateLimitInfo:
    """Rate limit information from GitHub API response."""

    def __init__(self, response: httpx.Response) -> None:
        self.remaining = response.headers.get("X-RateLimit-Remaining")
        self.reset = response.headers.get("X-RateLimit-Reset")

    @property
    def reset_timestamp(self) -> int | None:
        """Get reset timestamp as integer, or None if not available."""
        return int(self.reset) if self.reset else None

    @property
    def is_exhausted(self) -> bool:
        """Check if rate limit is exhausted."""
        return self.remaining is not None and int(self.remaining) == 0


def handle_error_response(
    response: httpx.Response,
    resource: str,
    kind: str = KIND_REPOSITORY,
) -> None:
    """
    Classify a non-successful GitHub API response into an exception.

    Args:
        response: The HTTP response from GitHub API
        resource: Organization name or "owner/repo" for error context
        kind: Whether ``resource`` is an organization or a repository

    Raises:
        GitHubAuthError: 401
        GitHubNotFoundError: 404
        GitHubRateLimitError: 403 with an exhausted budget
        GitHubForbiddenError: any other 403
        GitHubAPIError: any other non-2xx status
    """
    status = response.status_code
    if 200 <= status < 300:
        return

    if status == 401:
        raise GitHubAuthError()
    if status == 404:
        if kind == KIND_ORGANIZATION:
            raise GitHubNotFoundError(f'Organization "{resource}" not found', resource)
        raise GitHubNotFoundError(f"Repository or resource not found: {resource}", resource)
    if status == 403:
        handle_rate_limit_error(response, f"GitHub API forbidden for {resource}")

    raise GitHubAPIError(
        f"GitHub API error: {status} {response.reason_phrase}".rstrip(), status
    )


def handle_rate_limit_error(response: httpx.Response, error_message: str) -> None:
    """
    Handle 403 responses with rate limit check.

    Raises:
        GitHubRateLimitError: If the hourly budget is exhausted
        GitHubForbiddenError: Otherwise, with ``error_message``
    """
    rate_info = RateLimitInfo(response)

    if rate_info.is_exhausted:
        logger.warning(f"GitHub rate limit exhausted, resets at {rate_info.reset_timestamp}")
        raise GitHubRateLimitError(rate_info.reset_timestamp)
    raise GitHubForbiddenError(error_message)


def parse_iso(value: str | None) -> datetime | None:
    """Parse a GitHub ISO 8601 timestamp into an aware UTC datetime."""
    if not value:
        return None
    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def format_iso(value: datetime) -> str:
    """Format a datetime the way GitHub's ``since`` parameter expects."""
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
