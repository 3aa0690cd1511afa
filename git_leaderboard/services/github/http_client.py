"""
Process-wide httpx client for the GitHub REST API.

A leaderboard run walks one repository at a time, so the pool stays small. The
client follows redirects because GitHub answers 301 for renamed and transferred
repositories, and the organization listing may still hold the old name.
"""

import logging

import httpx

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = httpx.Timeout(30.0, connect=5.0)
POOL_LIMITS = httpx.Limits(max_connections=10, max_keepalive_connections=5)

_client: httpx.AsyncClient | None = None


def get_github_client() -> httpx.AsyncClient:
    """
    Return the shared client, building a fresh one after close.

    Tokens travel in per-request headers, so any caller can reuse it.
    """
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=REQUEST_TIMEOUT,
            limits=POOL_LIMITS,
            follow_redirects=True,
        )
        logger.debug("Opened GitHub HTTP client")
    return _client


async def close_github_client() -> None:
    """Release pooled connections; safe to call when nothing is open."""
    global _client
    if _client is None:
        return
    if not _client.is_closed:
        await _client.aclose()
        logger.debug("Closed GitHub HTTP client")
    _client = None
