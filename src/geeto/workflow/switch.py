"""Switch to another local or remote branch, or create a new one."""

from typing import Optional

from geeto.errors import GitCommandError
from geeto.git.branch import validate_branch_name
from geeto.models.core import BranchInfo
from geeto.models.state import WorkflowContext
from geeto.ui.output import CYAN, GRAY, GREEN, NC, YELLOW, error, hint, log, success, warn
from geeto.workflow.cherry_pick import branch_label

NEW_BRANCH = "new"


def _new_branch_name(ctx: WorkflowContext) -> str:
    def _validate(name: str) -> Optional[str]:
        problem = validate_branch_name(name)
        if problem:
            return problem
        return f"Branch '{name}' already exists" if ctx.facts.branch_exists(name) else None

    return ctx.prompter.ask("New branch name", validate=_validate)


def switch_to(ctx: WorkflowContext, branch: BranchInfo) -> None:
    """`git switch`, falling back to `git checkout` for gits without it."""
    if branch.remote:
        args = ["-c", branch.name, "--track", f"origin/{branch.name}"]
        fallback = ["checkout", "-b", branch.name, "--track", f"origin/{branch.name}"]
    else:
        args = [branch.name]
        fallback = ["checkout", branch.name]
    result = ctx.runner.git("switch", *args, check=False)
    if not result.ok:
        ctx.runner.git(*fallback)


def show_position(ctx: WorkflowContext) -> None:
    last = ctx.facts.last_commit()
    if last:
        print(f"  {GRAY}Last commit:{NC} {YELLOW}{last.short_hash}{NC} {last.subject} {GRAY}({last.date}){NC}")
    upstream = ctx.facts.upstream()
    counts = ctx.facts.ahead_behind(upstream) if upstream else None
    if counts:
        ahead, behind = counts
        print(f"  {GRAY}{upstream}:{NC} {ahead} ahead, {behind} behind")
        if behind:
            hint(f"Run {CYAN}geeto pull{NC} to catch up")


def handle_switch(ctx: WorkflowContext) -> bool:
    current = ctx.facts.current_branch()
    log(f"On {GREEN}{current or '(detached HEAD)'}{NC}")
    options: list = [(branch_label(b), b) for b in ctx.facts.branches()]
    options.append(("Create a new branch", NEW_BRANCH))
    options.append(("Cancel", None))
    choice = ctx.prompter.select("Switch to which branch?", options)
    if choice is None:
        log("Staying where you are")
        return False

    if ctx.facts.has_tracked_changes():
        warn("Uncommitted changes come along to the other branch")

    try:
        if choice == NEW_BRANCH:
            name = _new_branch_name(ctx)
            ctx.runner.git("switch", "-c", name)
            target = name
        else:
            switch_to(ctx, choice)
            target = choice.name
    except GitCommandError as e:
        error(f"Could not switch: {e}")
        if "overwritten" in e.output or "local changes" in e.output:
            hint(f"Commit or stash your changes first ({CYAN}geeto stash{NC})")
        return False
    success(f"Switched to {target}")
    show_position(ctx)
    return True
