from git_leaderboard.schemas.progress import (
    RepoCompleteEvent,
    RepoErrorEvent,
    RepoLogEvent,
    RepoStartEvent,
)

__all__ = [
    "RepoCompleteEvent",
    "RepoErrorEvent",
    "RepoLogEvent",
    "RepoStartEvent",
]
