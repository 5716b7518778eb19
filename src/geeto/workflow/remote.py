"""Talk to remotes outside the wizard: pull, fetch and prune stale remote-tracking refs."""

from typing import Optional

from geeto.config.utils import get_nested
from geeto.errors import GitCommandError
from geeto.models.core import PullStrategy
from geeto.models.state import WorkflowContext
from geeto.ui.output import CYAN, GRAY, GREEN, NC, error, hint, log, success, warn
from geeto.ui.progress import ProgressBar
from geeto.utils.formatting import fmt_file_list, plural
from geeto.workflow.steps import is_auth_failure, is_conflict

AUTO_STASH_MESSAGE = "geeto: auto-stash before pull"

PULL_ARGS: dict[PullStrategy, list[str]] = {
    PullStrategy.MERGE: ["--no-rebase"],
    PullStrategy.REBASE: ["--rebase"],
    PullStrategy.FF_ONLY: ["--ff-only"],
}

PULL_LABELS: dict[PullStrategy, str] = {
    PullStrategy.MERGE: "Merge (keeps both histories)",
    PullStrategy.REBASE: "Rebase (replays your commits on top)",
    PullStrategy.FF_ONLY: "Fast-forward only (fails if you have local commits)",
}


def _choose_remote(ctx: WorkflowContext, remotes: list[str], question: str) -> Optional[str]:
    if len(remotes) == 1:
        return remotes[0]
    default = remotes.index("origin") if "origin" in remotes else 0
    return ctx.prompter.select(question, [(r, r) for r in remotes], default=default)


def _report_remote_error(action: str, e: GitCommandError) -> None:
    error(f"{action} failed: {e}")
    if is_auth_failure(e):
        hint("Check your git credentials (SSH key or token), then try again")


def fetch_remote(ctx: WorkflowContext, *args: str) -> bool:
    try:
        with ProgressBar(f"Fetching {' '.join(a for a in args if not a.startswith('-')) or 'remotes'}"):
            ctx.runner.git("fetch", *args)
    except GitCommandError as e:
        _report_remote_error("Fetch", e)
        return False
    return True


def show_ahead_behind(ctx: WorkflowContext, ref: str) -> Optional[tuple[int, int]]:
    counts = ctx.facts.ahead_behind(ref)
    if counts:
        ahead, behind = counts
        print(f"  {GRAY}{ref}:{NC} {ahead} ahead, {behind} behind")
    return counts


def _default_strategy(ctx: WorkflowContext, ahead: int) -> PullStrategy:
    configured = get_nested(ctx.settings, "pull.strategy", PullStrategy.MERGE.value)
    try:
        strategy = PullStrategy(configured)
    except ValueError:
        warn(f"Unknown pull.strategy '{configured}', using merge")
        strategy = PullStrategy.MERGE
    # Nothing local to combine
    if ahead == 0:
        return PullStrategy.FF_ONLY
    return strategy


def _pull(ctx: WorkflowContext, strategy: PullStrategy, remote: str, branch: str, stashed: bool) -> bool:
    try:
        ctx.runner.git("pull", *PULL_ARGS[strategy], remote, branch)
    except GitCommandError as e:
        error(f"Pull from {remote}/{branch} failed")
        if is_conflict(e):
            hint(f"Resolve the conflicts and commit, or give up with {CYAN}geeto abort{NC}")
        elif strategy == PullStrategy.FF_ONLY and "fast-forward" in e.output.lower():
            hint("Your branch has diverged; pull again and choose merge or rebase")
        else:
            print(f"  {GRAY}{e}{NC}")
        if stashed:
            warn(f"Your changes are still stashed; run {CYAN}git stash pop{NC} once the pull is sorted out")
        return False
    return True


def _restore_stash(ctx: WorkflowContext) -> None:
    result = ctx.runner.git("stash", "pop", check=False)
    if result.ok:
        success("Restored your uncommitted changes")
        return
    warn("Your stashed changes conflict with the pulled code; they are kept in the stash")
    hint(f"Resolve the conflicts, then run {CYAN}git stash drop{NC}")


def handle_pull(ctx: WorkflowContext) -> bool:
    """Fetch, show how far behind the branch is, then pull with the chosen strategy."""
    remotes = ctx.facts.remotes()
    if not remotes:
        warn("No remotes configured")
        return False
    branch = ctx.facts.current_branch()
    if not branch:
        warn("Detached HEAD: switch to a branch before pulling")
        return False

    upstream = ctx.facts.upstream()
    if upstream and "/" in upstream:
        remote, _, remote_branch = upstream.partition("/")
    else:
        remote = _choose_remote(ctx, remotes, "Pull from which remote?")
        remote_branch = branch
    ref = f"{remote}/{remote_branch}"

    if not fetch_remote(ctx, "--quiet", remote):
        return False
    if not ctx.facts.remote_tracking_exists(remote_branch, remote):
        warn(f"{ref} does not exist; push the branch first")
        return False

    counts = show_ahead_behind(ctx, ref)
    ahead, behind = counts or (0, -1)
    if behind == 0:
        success(f"{branch} is already up to date with {ref}")
        return False

    default = _default_strategy(ctx, ahead)
    strategies = list(PullStrategy)
    strategy = ctx.prompter.select(
        "How should the remote changes come in?",
        [(PULL_LABELS[s], s) for s in strategies],
        default=strategies.index(default),
    )

    stashed = False
    if ctx.facts.has_tracked_changes():
        warn("You have uncommitted changes")
        if not ctx.prompter.confirm("Stash them during the pull and restore them afterwards?"):
            log("Pull cancelled")
            return False
        ctx.runner.git("stash", "push", "-m", AUTO_STASH_MESSAGE)
        stashed = True

    if not _pull(ctx, strategy, remote, remote_branch, stashed):
        return False
    success(f"Pulled {plural(behind, 'commit') if behind > 0 else 'changes'} from {GREEN}{ref}{NC}")
    if stashed:
        _restore_stash(ctx)
    return True


def handle_fetch(ctx: WorkflowContext) -> bool:
    remotes = ctx.facts.remotes()
    if not remotes:
        warn("No remotes configured")
        return False
    options: list = [
        ("All remotes", ["--all"]),
        ("All remotes, removing refs deleted upstream", ["--all", "--prune"]),
    ]
    options += [(f"Only {r}", [r]) for r in remotes]
    options.append(("Cancel", None))
    args = ctx.prompter.select("What do you want to fetch?", options)
    if args is None:
        log("Nothing fetched")
        return False
    if not fetch_remote(ctx, *args):
        return False
    success("Fetch complete")
    upstream = ctx.facts.upstream()
    if upstream:
        show_ahead_behind(ctx, upstream)
    return True


def handle_prune(ctx: WorkflowContext) -> bool:
    """Remove remote-tracking refs whose branches were deleted on the remote."""
    remotes = ctx.facts.remotes()
    if not remotes:
        warn("No remotes configured")
        return False
    remote = _choose_remote(ctx, remotes, "Prune which remote?")
    stale = ctx.facts.stale_remote_branches(remote)
    if not stale:
        success(f"No stale refs for {remote}")
        return False
    log(f"{plural(len(stale), 'stale ref')} on {remote}:")
    for line in fmt_file_list(stale):
        print(f"  {line}")
    if not ctx.prompter.confirm("Remove them?"):
        log("Nothing pruned")
        return False
    try:
        ctx.runner.git("remote", "prune", remote)
    except GitCommandError as e:
        _report_remote_error("Prune", e)
        return False
    success(f"Pruned {plural(len(stale), 'ref')} from {remote}")
    return True
