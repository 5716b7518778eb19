"""Copy commits from another branch onto the current one, or drive a paused cherry-pick."""

from typing import Optional

from geeto.config.utils import get_nested
from geeto.errors import GitCommandError
from geeto.models.core import BranchInfo, CommitInfo
from geeto.models.state import WorkflowContext
from geeto.ui.output import CYAN, GRAY, GREEN, NC, error, hint, log, success, warn
from geeto.utils.formatting import plural
from geeto.workflow.steps import is_conflict

MAX_CANDIDATES = 50

PAUSED_ACTIONS = [
    ("Continue (conflicts resolved and staged)", "--continue"),
    ("Skip this commit", "--skip"),
    ("Abort the cherry-pick", "--abort"),
    ("Leave it for now", None),
]
PAUSED_DONE = {
    "--continue": "Cherry-pick continued",
    "--skip": "Commit skipped",
    "--abort": "Cherry-pick aborted",
}


def branch_ref(branch: BranchInfo) -> str:
    """Revision for a branch; branches that only exist on origin are read from there."""
    return f"origin/{branch.name}" if branch.remote else branch.name


def branch_label(branch: BranchInfo) -> str:
    where = f" {CYAN}(origin){NC}" if branch.remote else ""
    when = f" {GRAY}{branch.last_activity}{NC}" if branch.last_activity else ""
    return f"{branch.name}{where}{when}"


def _conflict_hints() -> None:
    hint("Resolve the conflicts, stage the files, then run geeto cherry-pick again to continue")
    hint(f"Or give up with {CYAN}geeto abort{NC}")


def handle_paused(ctx: WorkflowContext) -> bool:
    action = ctx.prompter.select("A cherry-pick is in progress", PAUSED_ACTIONS)
    if action is None:
        log("Cherry-pick left paused")
        return False
    try:
        if action == "--continue":
            # Keep the original message without opening an editor
            ctx.runner.git("-c", "core.editor=true", "cherry-pick", "--continue")
        else:
            ctx.runner.git("cherry-pick", action)
    except GitCommandError as e:
        error(f"git cherry-pick {action} failed: {e}")
        if is_conflict(e) or "unmerged" in e.output.lower():
            _conflict_hints()
        return False
    success(PAUSED_DONE[action])
    return True


def _choose_source(ctx: WorkflowContext) -> Optional[str]:
    branches = ctx.facts.branches()
    if not branches:
        warn("No other branches to pick from")
        return None
    options: list = [(branch_label(b), branch_ref(b)) for b in branches]
    options.append(("Cancel", None))
    return ctx.prompter.select("Pick commits from which branch?", options)


def apply_commits(ctx: WorkflowContext, commits: list[CommitInfo]) -> bool:
    """Cherry-pick `commits` in order, stopping at the first one that fails."""
    for i, commit in enumerate(commits, 1):
        try:
            ctx.runner.git("cherry-pick", commit.hash)
        except GitCommandError as e:
            error(f"Could not apply {commit.short_hash} {commit.subject}")
            if is_conflict(e):
                _conflict_hints()
            else:
                print(f"  {GRAY}{e}{NC}")
            rest = commits[i:]
            if rest:
                warn(f"{plural(len(rest), 'commit')} not picked yet:")
                for c in rest:
                    print(f"    {c.short_hash} {c.subject}")
            return False
        success(f"Picked {commit.short_hash} {commit.subject}")
    return True


def handle_cherry_pick(ctx: WorkflowContext) -> bool:
    """True if every chosen commit was applied (or a paused pick was resolved)."""
    if ctx.facts.cherry_pick_in_progress():
        return handle_paused(ctx)

    if ctx.facts.has_tracked_changes():
        warn("You have uncommitted changes")
        if not ctx.prompter.confirm("Cherry-pick anyway?", default=False):
            return False

    source = _choose_source(ctx)
    if source is None:
        log("Nothing picked")
        return False
    current = ctx.facts.current_branch() or "HEAD"
    limit = get_nested(ctx.settings, "cherry_pick.max_commits", MAX_CANDIDATES)
    commits = ctx.facts.unique_commits(source, limit)
    if not commits:
        success(f"{current} already has every commit from {source}")
        return False

    options = [(f"{c.short_hash} {c.subject} {GRAY}({c.author}, {c.date}){NC}", c) for c in commits]
    picked: list[CommitInfo] = ctx.prompter.select_many(f"Commits from {source} (newest first)", options)
    if not picked:
        log("Nothing picked")
        return False
    if not ctx.prompter.confirm(f"Cherry-pick {plural(len(picked), 'commit')} onto {GREEN}{current}{NC}?"):
        log("Nothing picked")
        return False

    # git log lists newest first; apply oldest first
    ordered = sorted(picked, key=commits.index, reverse=True)
    return apply_commits(ctx, ordered)
