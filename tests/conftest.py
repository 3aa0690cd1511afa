"""Root conftest: shared fixtures for all tests.

Provides:
- anyio backend pinned to asyncio (APScheduler's AsyncIOScheduler needs it)
- Settings instance isolated from the developer's environment and .env
- In-memory response cache with a controllable clock
- Reset of the shared HTTP client singleton between tests
"""

from __future__ import annotations

import pytest

from git_leaderboard.config import Settings
from git_leaderboard.services.github import MemoryStore, ResponseCache
from tests.helpers.github_fakes import FakeClock


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def config() -> Settings:
    """Settings with defaults only, plus a zero retry delay."""
    return Settings(
        _env_file=None,
        github_token="ghp_test_token_12345",
        github_org="acme",
        stats_retry_delay=0,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(start=1_700_000_000.0)


@pytest.fixture
def cache(clock: FakeClock) -> ResponseCache:
    return ResponseCache(
        MemoryStore(quota_bytes=1024 * 1024),
        ttl_seconds=1800,
        max_entry_bytes=500 * 1024,
        namespace="test:",
        clock=clock,
    )


@pytest.fixture(autouse=True)
def _reset_http_client():
    """Never let a real AsyncClient leak from one test into the next."""
    import git_leaderboard.services.github.http_client as mod

    original = mod._client
    mod._client = None
    yield
    mod._client = original
