"""Interactive stash manager: stash changes, browse, apply, pop, drop and clear stashes."""

from typing import Callable

from geeto.errors import GitCommandError
from geeto.models.core import StashEntry
from geeto.models.state import WorkflowContext
from geeto.ui.output import CYAN, GRAY, NC, error, hint, log, success, warn
from geeto.workflow.steps import is_conflict

STASH_MODES: list = [
    ("Tracked changes", []),
    ("Tracked and untracked files", ["--include-untracked"]),
    ("Everything, ignored files too", ["--all"]),
    ("Cancel", None),
]

ENTRY_ACTIONS: list = [
    ("Apply (keep it in the list)", "apply"),
    ("Pop (apply, then drop it)", "pop"),
    ("Show the diff", "show"),
    ("Drop", "drop"),
    ("Back", None),
]


def entry_label(entry: StashEntry) -> str:
    where = f" {GRAY}on {entry.branch}{NC}" if entry.branch else ""
    return f"{entry.ref}{where} {entry.message} {GRAY}({entry.date}){NC}"


def stash_changes(ctx: WorkflowContext, entries: list[StashEntry]) -> bool:
    if not ctx.facts.changed_files():
        warn("Nothing to stash: the working tree is clean")
        return False
    flags = ctx.prompter.select("What should be stashed?", STASH_MODES)
    if flags is None:
        return False
    message = ctx.prompter.ask("Message (optional)")
    ctx.runner.git("stash", "push", *flags, *(["-m", message] if message else []))
    success("Changes stashed")
    return True


def _apply(ctx: WorkflowContext, action: str, ref: str) -> None:
    try:
        ctx.runner.git("stash", action, ref)
    except GitCommandError as e:
        if not is_conflict(e):
            raise
        warn(f"{ref} conflicts with your working tree; it is still in the stash list")
        hint(f"Resolve the conflicts, then drop it with {CYAN}git stash drop {ref}{NC}")
        raise


def browse(ctx: WorkflowContext, entries: list[StashEntry]) -> bool:
    options: list = [(entry_label(e), e) for e in entries]
    options.append(("Back", None))
    entry = ctx.prompter.select("Which stash?", options)
    if entry is None:
        return False
    action = ctx.prompter.select(f"{entry.ref}: {entry.message}", ENTRY_ACTIONS)
    if action is None:
        return False
    if action == "show":
        print(ctx.runner.git("stash", "show", "-p", entry.ref).stdout)
        return False
    if action == "drop":
        if not ctx.prompter.confirm(f"Drop {entry.ref}? It cannot be recovered easily", default=False):
            return False
        ctx.runner.git("stash", "drop", entry.ref)
        success(f"Dropped {entry.ref}")
        return True
    _apply(ctx, action, entry.ref)
    success(f"{'Applied' if action == 'apply' else 'Popped'} {entry.ref}")
    return True


def pop_latest(ctx: WorkflowContext, entries: list[StashEntry]) -> bool:
    _apply(ctx, "pop", entries[0].ref)
    success(f"Popped {entries[0].ref}")
    return True


def clear_all(ctx: WorkflowContext, entries: list[StashEntry]) -> bool:
    warn(f"This deletes every stash ({len(entries)})")
    if not ctx.prompter.confirm("Clear them all?", default=False):
        return False
    ctx.runner.git("stash", "clear")
    success("Stash list cleared")
    return True


STASH_ACTIONS: dict[str, Callable[[WorkflowContext, list[StashEntry]], bool]] = {
    "new": stash_changes,
    "list": browse,
    "pop": pop_latest,
    "clear": clear_all,
}


def handle_stash(ctx: WorkflowContext) -> bool:
    """Menu loop until Exit. True if anything changed."""
    changed = False
    while True:
        entries = ctx.facts.stash_list()
        options: list = [("Stash current changes", "new")]
        if entries:
            options += [
                (f"Browse stashes ({len(entries)})", "list"),
                ("Pop the latest stash", "pop"),
                ("Clear all stashes", "clear"),
            ]
        else:
            log("No stashes yet")
        options.append(("Exit", None))
        choice = ctx.prompter.select("Stash", options)
        if choice is None:
            return changed
        try:
            changed = STASH_ACTIONS[choice](ctx, entries) or changed
        except GitCommandError as e:
            error(f"git stash failed: {e}")
