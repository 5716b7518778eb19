"""Data models for geeto."""

from geeto.models.core import (
    AIProvider,
    BranchInfo,
    CommitInfo,
    InProgressOp,
    Issue,
    MergeStrategy,
    PullRequest,
    PullStrategy,
    ReflogAction,
    ReflogEntry,
    StartAt,
    StashEntry,
    TrelloCard,
    UndoCategory,
)
from geeto.models.state import RunConfig, Step, WorkflowContext, WorkflowState

__all__ = [
    # Core
    "AIProvider",
    "MergeStrategy",
    "StartAt",
    "PullStrategy",
    "UndoCategory",
    "ReflogEntry",
    "ReflogAction",
    "InProgressOp",
    "CommitInfo",
    "BranchInfo",
    "StashEntry",
    "TrelloCard",
    "PullRequest",
    "Issue",
    # State
    "Step",
    "WorkflowState",
    "RunConfig",
    "WorkflowContext",
]
