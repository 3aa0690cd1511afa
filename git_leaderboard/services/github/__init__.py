"""
GitHub service package.

Usage: `from git_leaderboard.services.github import GitHubReadOperations, ResponseCache`

Module structure:
- read_operations.py: All read-only API operations
- cache.py: TTL response cache and the caching decorator
- store.py: Key-value storage behind the cache
- helpers.py: Rate limit handling, error classification, timestamp parsing
- types.py: Data types and response models
- exceptions.py: Custom exceptions
- constants.py: API constants
"""

from git_leaderboard.services.github.cache import ResponseCache, make_cache_key
from git_leaderboard.services.github.exceptions import (
    GitHubAPIError,
    GitHubAuthError,
    GitHubForbiddenError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)
from git_leaderboard.services.github.helpers import RateLimitInfo, handle_error_response, parse_iso
from git_leaderboard.services.github.http_client import close_github_client
from git_leaderboard.services.github.read_operations import GitHubReadOperations
from git_leaderboard.services.github.store import KeyValueStore, MemoryStore, StorageQuotaExceeded
from git_leaderboard.services.github.types import (
    Commit,
    CommitDetail,
    ContributorStatsEntry,
    ContributorWeek,
    PullRequest,
    PullRequestRef,
    Repository,
    Review,
    ReviewRecord,
)

__all__ = [
    # Client
    "GitHubReadOperations",
    # HTTP client lifecycle
    "close_github_client",
    # Cache
    "ResponseCache",
    "make_cache_key",
    "KeyValueStore",
    "MemoryStore",
    "StorageQuotaExceeded",
    # Utilities
    "handle_error_response",
    "parse_iso",
    "RateLimitInfo",
    # Exceptions
    "GitHubAPIError",
    "GitHubAuthError",
    "GitHubForbiddenError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    # Types
    "Commit",
    "CommitDetail",
    "ContributorStatsEntry",
    "ContributorWeek",
    "PullRequest",
    "PullRequestRef",
    "Repository",
    "Review",
    "ReviewRecord",
]
