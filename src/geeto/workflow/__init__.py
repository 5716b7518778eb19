"""Wizard steps, resume logic, recovery commands and the standalone git workflows."""

from geeto.workflow.abort import handle_abort
from geeto.workflow.cherry_pick import handle_cherry_pick
from geeto.workflow.commits import handle_amend, handle_revert, handle_reword
from geeto.workflow.github import handle_issue, handle_pull_request
from geeto.workflow.remote import handle_fetch, handle_prune, handle_pull
from geeto.workflow.session import apply_start_at, prepare_state
from geeto.workflow.stash import handle_stash
from geeto.workflow.status import handle_status
from geeto.workflow.steps import (
    STEP_HANDLERS,
    handle_branch,
    handle_cleanup,
    handle_commit,
    handle_merge,
    handle_push,
    handle_stage,
    push_with_retry,
    run_workflow,
    squash_feature_branch,
)
from geeto.workflow.switch import handle_switch
from geeto.workflow.undo import (
    UNDO_HANDLERS,
    classify_reflog,
    classify_subject,
    detect_last_action,
    handle_undo,
)

__all__ = [
    # Steps
    "STEP_HANDLERS",
    "handle_stage",
    "handle_branch",
    "handle_commit",
    "handle_push",
    "handle_merge",
    "handle_cleanup",
    "push_with_retry",
    "squash_feature_branch",
    "run_workflow",
    # Session
    "prepare_state",
    "apply_start_at",
    # Undo
    "UNDO_HANDLERS",
    "classify_subject",
    "classify_reflog",
    "detect_last_action",
    "handle_undo",
    # Other commands
    "handle_abort",
    "handle_status",
    "handle_pull_request",
    "handle_issue",
    # Git workflows
    "handle_amend",
    "handle_reword",
    "handle_revert",
    "handle_cherry_pick",
    "handle_switch",
    "handle_stash",
    "handle_pull",
    "handle_fetch",
    "handle_prune",
]
