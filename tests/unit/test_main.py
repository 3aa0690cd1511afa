"""Unit tests for the command-line entry point."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, patch

import pytest

from git_leaderboard import main as entry
from git_leaderboard.config import Settings
from git_leaderboard.services.github.exceptions import GitHubAuthError
from git_leaderboard.services.github.read_operations import GitHubReadOperations
from git_leaderboard.services.github.types import Repository


def test_setup_logging_quiets_http_libraries():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    try:
        entry.setup_logging("debug")

        assert root.level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)


def test_main_requires_credentials():
    unconfigured = Settings(_env_file=None, github_token="", github_org="")
    with (
        patch.object(entry, "settings", unconfigured),
        patch.object(entry, "setup_logging") as setup_logging,
    ):
        assert entry.main() == 1

    setup_logging.assert_called_once_with("INFO")


class TestRun:
    @pytest.mark.anyio
    async def test_single_run_logs_leaderboard(self, config, caplog):
        caplog.set_level(logging.INFO)
        repos = [
            Repository(
                id=1,
                name="api",
                full_name="acme/api",
                owner="acme",
                default_branch="main",
                is_fork=False,
            )
        ]

        with (
            patch.object(
                GitHubReadOperations, "get_org_repos", new_callable=AsyncMock
            ) as get_repos,
            patch(
                "git_leaderboard.services.stats.orchestrator.StatsOrchestrator.run",
                new_callable=AsyncMock,
                return_value=[],
            ) as run,
        ):
            get_repos.return_value = repos
            assert await entry.run(config) == 0

        get_repos.assert_awaited_once_with("acme")
        assert run.await_args.args[:2] == ("acme", repos)
        assert "Leaderboard (0 contributors)" in caplog.text

    @pytest.mark.anyio
    async def test_auth_failure_exits_non_zero(self, config, caplog):
        with patch.object(
            GitHubReadOperations,
            "get_org_repos",
            new_callable=AsyncMock,
            side_effect=GitHubAuthError(),
        ):
            assert await entry.run(config) == 1

        assert "Invalid or expired GitHub token" in caplog.text
