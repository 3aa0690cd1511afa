"""Pydantic schemas for per-repository log events of a stats run.

The orchestrator emits one ``start`` event before fetching a repository and
then exactly one ``complete`` or ``error`` event for it. Consumers switch on
the ``event`` field.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class _RepoEventBase(BaseModel):
    repo: str = Field(description="Repository name, e.g., 'api'")
    index: int = Field(ge=0, description="Zero-based position in the selected repositories")
    total: int = Field(ge=0, description="Number of selected repositories")


class RepoStartEvent(_RepoEventBase):
    """Fetching of a repository has started."""

    event: Literal["start"] = "start"


class RepoCompleteEvent(_RepoEventBase):
    """A repository was collected successfully."""

    event: Literal["complete"] = "complete"

    has_stats: bool = Field(description="Contributor stats (native or derived) were found")
    has_prs: bool = Field(description="At least one pull request is in the window")
    pr_count: int = Field(ge=0)
    merged_pr_count: int = Field(ge=0)
    total_commits: int = Field(ge=0, description="Attributed commits in the window")
    total_additions: int = Field(ge=0, description="Lines added per contributor stats")
    total_deletions: int = Field(ge=0, description="Lines deleted per contributor stats")


class RepoErrorEvent(_RepoEventBase):
    """A repository failed; it contributes nothing to the result."""

    event: Literal["error"] = "error"

    error: str = Field(description="Human-readable error message")


RepoLogEvent = Annotated[
    RepoStartEvent | RepoCompleteEvent | RepoErrorEvent,
    Field(discriminator="event"),
]
