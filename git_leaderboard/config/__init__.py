"""Configuration package."""

from git_leaderboard.config.settings import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
