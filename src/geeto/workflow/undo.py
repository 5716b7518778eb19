"""Undo the last git action, chosen by classifying the two newest reflog entries."""

import re
from typing import Callable, Optional

from geeto.config.utils import get_nested
from geeto.errors import GitCommandError
from geeto.models.core import ReflogAction, ReflogEntry, UndoCategory
from geeto.models.state import WorkflowContext
from geeto.ui.output import CYAN, GRAY, GREEN, NC, YELLOW, error, log, success, warn
from geeto.utils.formatting import short_hash
from geeto.workflow.constants import STATUS_PREVIEW_LINES

# First matching prefix wins
SUBJECT_RULES: list[tuple[str, UndoCategory, str]] = [
    ("commit (amend):", UndoCategory.AMEND, "Amend"),
    ("commit (merge):", UndoCategory.MERGE_COMMIT, "Merge commit"),
    ("commit:", UndoCategory.COMMIT, "Commit"),
    ("merge", UndoCategory.MERGE, "Merge"),
    ("checkout:", UndoCategory.CHECKOUT, "Checkout"),
    ("pull", UndoCategory.PULL, "Pull"),
    ("rebase", UndoCategory.REBASE, "Rebase"),
    ("reset:", UndoCategory.RESET, "Reset"),
    ("cherry-pick:", UndoCategory.CHERRY_PICK, "Cherry-pick"),
    ("Branch:", UndoCategory.BRANCH, "Branch"),
]

_CHECKOUT_RE = re.compile(r"moving from (.+?) to (.+)$")


def classify_subject(subject: str) -> tuple[UndoCategory, str]:
    """Category and human description for one reflog subject."""
    for prefix, category, label in SUBJECT_RULES:
        if subject.startswith(prefix):
            rest = subject[len(prefix) :].strip() if prefix.endswith(":") else subject
            return category, f"{label}: {rest}"
    return UndoCategory.UNKNOWN, subject


def classify_reflog(entries: list[ReflogEntry]) -> Optional[ReflogAction]:
    """Classify the newest entry; the one before it is where a reset goes back to."""
    if not entries:
        return None
    latest = entries[0]
    category, description = classify_subject(latest.subject)
    prev_hash = entries[1].hash if len(entries) > 1 else None
    return ReflogAction(
        category=category,
        description=description,
        hash=latest.hash,
        prev_hash=prev_hash,
        selector=latest.selector,
    )


def parse_checkout_source(subject: str) -> Optional[str]:
    """'checkout: moving from main to feat' -> 'main'."""
    match = _CHECKOUT_RE.search(subject)
    return match.group(1).strip() if match else None


def detect_last_action(ctx: WorkflowContext) -> Optional[ReflogAction]:
    return classify_reflog(ctx.facts.reflog(2))


def show_current_state(ctx: WorkflowContext) -> None:
    """Print the working tree status, truncated."""
    limit = get_nested(ctx.settings, "undo.status_preview", STATUS_PREVIEW_LINES)
    lines = ctx.facts.status_short()
    if not lines:
        log("Working tree clean")
        return
    log("Working tree now:")
    for line in lines[:limit]:
        print(f"  {line}")
    if len(lines) > limit:
        print(f"  {GRAY}... and {len(lines) - limit} more{NC}")


def _confirm_hard(ctx: WorkflowContext, what: str) -> bool:
    warn(f"This discards {what} permanently")
    return ctx.prompter.confirm("Are you sure?", default=False)


def _reset(ctx: WorkflowContext, mode: str, ref: str) -> bool:
    """Run `git reset --<mode> <ref>`, asking again first when the mode is hard."""
    if mode == "hard" and not _confirm_hard(ctx, "uncommitted changes and the undone commits"):
        log("Undo cancelled")
        return False
    ctx.runner.git("reset", f"--{mode}", ref)
    success(f"Reset ({mode}) to {short_hash(ref)}")
    return True


RESET_OPTIONS = {
    "soft": "Soft reset (keep changes staged)",
    "mixed": "Mixed reset (keep changes unstaged)",
    "hard": "Hard reset (discard changes)",
}


def choose_reset(ctx: WorkflowContext, ref: str, modes: list[str]) -> bool:
    options: list = [(RESET_OPTIONS[m], m) for m in modes]
    options.append(("Cancel", None))
    mode = ctx.prompter.select("How do you want to undo it?", options)
    if mode is None:
        log("Undo cancelled")
        return False
    return _reset(ctx, mode, ref)


def _require_prev(action: ReflogAction) -> Optional[str]:
    if not action.prev_hash:
        warn("No earlier reflog entry to go back to")
    return action.prev_hash


def undo_commit(ctx: WorkflowContext, action: ReflogAction) -> bool:
    return choose_reset(ctx, "HEAD~1", ["soft", "mixed", "hard"])


def undo_amend(ctx: WorkflowContext, action: ReflogAction) -> bool:
    prev = _require_prev(action)
    return bool(prev) and choose_reset(ctx, prev, ["soft", "mixed"])


def undo_merge(ctx: WorkflowContext, action: ReflogAction) -> bool:
    options: list = []
    if ctx.facts.merge_in_progress():
        options.append(("Abort the merge in progress", "abort"))
    options += [
        ("Hard reset to before the merge", "reset"),
        ("Revert the merge with a new commit", "revert"),
        ("Cancel", None),
    ]
    choice = ctx.prompter.select("How do you want to undo the merge?", options)
    if choice is None:
        log("Undo cancelled")
        return False
    if choice == "abort":
        ctx.runner.git("merge", "--abort")
        success("Merge aborted")
        return True
    if choice == "reset":
        return _reset(ctx, "hard", "HEAD~1")
    ctx.runner.git("revert", "-m", "1", "HEAD")
    success("Merge reverted")
    return True


def undo_checkout(ctx: WorkflowContext, action: ReflogAction) -> bool:
    source = parse_checkout_source(action.description)
    if not source:
        warn("Could not tell which branch you came from")
        log(f"Try: {CYAN}git checkout -{NC}")
        return False
    if not ctx.prompter.confirm(f"Switch back to '{source}'?"):
        log("Undo cancelled")
        return False
    ctx.runner.git("checkout", source)
    success(f"Switched back to {source}")
    return True


def undo_pull(ctx: WorkflowContext, action: ReflogAction) -> bool:
    prev = _require_prev(action)
    return bool(prev) and choose_reset(ctx, prev, ["hard", "mixed"])


def undo_rebase(ctx: WorkflowContext, action: ReflogAction) -> bool:
    if ctx.facts.rebase_in_progress():
        if not ctx.prompter.confirm("A rebase is in progress. Abort it?"):
            log("Undo cancelled")
            return False
        ctx.runner.git("rebase", "--abort")
        success("Rebase aborted")
        return True
    prev = _require_prev(action)
    if not prev:
        return False
    log(f"Rebase already finished; resetting to {short_hash(prev)} restores the branch")
    return _reset(ctx, "hard", prev)


def undo_reset(ctx: WorkflowContext, action: ReflogAction) -> bool:
    prev = _require_prev(action)
    if not prev:
        return False
    warn(f"This moves the branch back to {short_hash(prev)} and discards uncommitted changes")
    if not ctx.prompter.confirm("Undo the reset?", default=False):
        log("Undo cancelled")
        return False
    ctx.runner.git("reset", "--hard", prev)
    success(f"Restored {short_hash(prev)}")
    return True


def undo_generic(ctx: WorkflowContext, action: ReflogAction) -> bool:
    prev = _require_prev(action)
    return bool(prev) and choose_reset(ctx, prev, ["soft", "mixed", "hard"])


UNDO_HANDLERS: dict[UndoCategory, Callable[[WorkflowContext, ReflogAction], bool]] = {
    UndoCategory.COMMIT: undo_commit,
    UndoCategory.CHERRY_PICK: undo_commit,
    UndoCategory.AMEND: undo_amend,
    UndoCategory.MERGE: undo_merge,
    UndoCategory.MERGE_COMMIT: undo_merge,
    UndoCategory.CHECKOUT: undo_checkout,
    UndoCategory.PULL: undo_pull,
    UndoCategory.REBASE: undo_rebase,
    UndoCategory.RESET: undo_reset,
    UndoCategory.BRANCH: undo_generic,
    UndoCategory.UNKNOWN: undo_generic,
}


def handle_undo(ctx: WorkflowContext) -> bool:
    """Show the last action and run the matching reversal. True if something was undone."""
    action = detect_last_action(ctx)
    if action is None:
        warn("No action found in reflog to undo")
        return False

    branch = ctx.facts.current_branch() or "(detached HEAD)"
    log(f"Last action on {GREEN}{branch}{NC}:")
    print(f"  {YELLOW}{short_hash(action.hash)}{NC} {action.description}")
    if action.prev_hash:
        print(f"  {GRAY}previous: {short_hash(action.prev_hash)}{NC}")

    handler = UNDO_HANDLERS[action.category]
    try:
        done = handler(ctx, action)
    except GitCommandError as e:
        error(f"Undo failed: {e}")
        return False
    if done:
        show_current_state(ctx)
    return done
