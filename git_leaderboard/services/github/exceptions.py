"""Exceptions for GitHub service."""

from datetime import UTC, datetime


class GitHubAPIError(Exception):
    """Error from GitHub API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        rate_limit_reset: int | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.rate_limit_reset = rate_limit_reset  # Unix timestamp when rate limit resets
        super().__init__(message)


class GitHubAuthError(GitHubAPIError):
    """Token is missing, invalid or expired (401). Fatal to a whole run."""

    def __init__(self, message: str = "Invalid or expired GitHub token"):
        super().__init__(message, status_code=401)


class GitHubNotFoundError(GitHubAPIError):
    """Organization or repository does not exist or is not visible (404)."""

    def __init__(self, message: str, resource: str):
        self.resource = resource
        super().__init__(message, status_code=404)


class GitHubForbiddenError(GitHubAPIError):
    """Token lacks the scope needed for the resource (403, budget left)."""

    def __init__(self, message: str = "GitHub API forbidden"):
        super().__init__(message, status_code=403)


class GitHubRateLimitError(GitHubAPIError):
    """Hourly request budget exhausted (403 with zero remaining)."""

    def __init__(self, rate_limit_reset: int | None = None):
        message = "GitHub API rate limit exceeded"
        if rate_limit_reset is not None:
            reset_at = datetime.fromtimestamp(rate_limit_reset, tz=UTC)
            message = f"{message}. Resets at {reset_at.strftime('%H:%M:%S')} UTC"
        super().__init__(message, status_code=403, rate_limit_reset=rate_limit_reset)

    @property
    def reset_at(self) -> datetime | None:
        """Reset time as an aware datetime, for display."""
        if self.rate_limit_reset is None:
            return None
        return datetime.fromtimestamp(self.rate_limit_reset, tz=UTC)
