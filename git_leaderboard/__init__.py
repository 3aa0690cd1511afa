"""Per-contributor activity leaderboard for a GitHub organization."""

__version__ = "0.1.0"
