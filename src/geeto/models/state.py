"""Persisted wizard state, CLI run config and the per-run workflow context."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import TYPE_CHECKING, Optional

from geeto.models.core import StartAt

if TYPE_CHECKING:
    from geeto.clients.ai import AIClient
    from geeto.config.credentials import TrelloConfig
    from geeto.git.facts import GitFacts
    from geeto.git.runner import CommandRunner
    from geeto.state.store import StateStore
    from geeto.ui.prompts import Prompter


class Step(IntEnum):
    """Checkpoints of the wizard, in the only order they can be reached."""

    NONE = 0
    STAGED = 1
    BRANCH_CREATED = 2
    COMMITTED = 3
    PUSHED = 4
    MERGED = 5
    CLEANUP = 6

    @classmethod
    def coerce(cls, value: object) -> "Step":
        """Map stored ordinals to a Step; anything unrecognised is NONE."""
        if isinstance(value, bool) or not isinstance(value, int):
            return cls.NONE
        try:
            return cls(value)
        except ValueError:
            return cls.NONE

    @property
    def label(self) -> str:
        return STEP_LABELS[self]


STEP_LABELS: dict[Step, str] = {
    Step.NONE: "Not started",
    Step.STAGED: "Files staged",
    Step.BRANCH_CREATED: "Branch created",
    Step.COMMITTED: "Committed",
    Step.PUSHED: "Pushed",
    Step.MERGED: "Merged",
    Step.CLEANUP: "Cleanup done",
}


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")


@dataclass
class WorkflowState:
    """Checkpoint written to .geeto/state.json after every completed step."""

    step: Step = Step.NONE
    working_branch: str = ""
    current_branch: str = ""
    target_branch: Optional[str] = None
    staged_files: int = 0
    skipped_push: bool = False
    skipped_commit: bool = False
    commit_message: Optional[str] = None
    ai_provider: Optional[str] = None
    timestamp: str = field(default_factory=_now)

    def touch(self) -> None:
        self.timestamp = _now()

    def to_dict(self) -> dict:
        data: dict = {
            "step": int(self.step),
            "workingBranch": self.working_branch,
            "currentBranch": self.current_branch,
            "stagedFiles": self.staged_files,
            "skippedPush": self.skipped_push,
            "skippedCommit": self.skipped_commit,
            "timestamp": self.timestamp,
        }
        if self.target_branch is not None:
            data["targetBranch"] = self.target_branch
        if self.commit_message is not None:
            data["commitMessage"] = self.commit_message
        if self.ai_provider is not None:
            data["aiProvider"] = self.ai_provider
        return data

    @classmethod
    def from_dict(cls, d: dict) -> "WorkflowState":
        staged = d.get("stagedFiles", 0)
        return cls(
            step=Step.coerce(d.get("step", 0)),
            working_branch=str(d.get("workingBranch") or ""),
            current_branch=str(d.get("currentBranch") or ""),
            target_branch=d.get("targetBranch") or None,
            staged_files=staged if isinstance(staged, int) else 0,
            skipped_push=bool(d.get("skippedPush", False)),
            skipped_commit=bool(d.get("skippedCommit", False)),
            commit_message=d.get("commitMessage") or None,
            ai_provider=d.get("aiProvider") or None,
            timestamp=str(d.get("timestamp") or _now()),
        )

    def reset(self, branch: str = "") -> "WorkflowState":
        """Fresh progress that keeps the chosen AI provider."""
        return WorkflowState(
            working_branch=branch,
            current_branch=branch,
            ai_provider=self.ai_provider,
        )


@dataclass
class RunConfig:
    """CLI arguments bundled together."""

    command: Optional[str] = None
    start_at: Optional[StartAt] = None
    stage_all: bool = False
    fresh: bool = False
    resume: bool = False
    dry_run: bool = False
    debug: bool = False
    provider: Optional[str] = None
    yes: bool = False


@dataclass
class WorkflowContext:
    """Everything one wizard run needs, passed explicitly to each step handler."""

    runner: "CommandRunner"
    facts: "GitFacts"
    store: "StateStore"
    prompter: "Prompter"
    ai: "AIClient"
    config: RunConfig
    settings: dict
    state: WorkflowState = field(default_factory=WorkflowState)
    trello: Optional["TrelloConfig"] = None

    def save(self) -> None:
        """Persist the current checkpoint."""
        self.state.touch()
        self.store.save(self.state)
