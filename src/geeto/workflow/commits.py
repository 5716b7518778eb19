"""Rewrite recent history: amend the last commit, reword commit messages, or take the last commit back.

History already on the remote can still be rewritten, but each command warns first
and finishes by offering a `--force-with-lease` push.
"""

import json
import tempfile
from pathlib import Path
from typing import Optional

from geeto.config.utils import get_nested
from geeto.errors import GitCommandError
from geeto.git.rebase_todo import sequence_editor_command
from geeto.models.core import CommitInfo
from geeto.models.state import WorkflowContext
from geeto.ui.output import CYAN, GRAY, NC, YELLOW, error, hint, log, success, warn
from geeto.utils.formatting import fmt_file_list, plural
from geeto.workflow.steps import is_auth_failure
from geeto.workflow.undo import choose_reset, show_current_state

RECENT_COMMITS = 20


def show_commit(ctx: WorkflowContext, commit: CommitInfo) -> None:
    print(f"  {YELLOW}{commit.short_hash}{NC} {commit.subject} {GRAY}({commit.author}, {commit.date}){NC}")
    for line in fmt_file_list(ctx.facts.commit_files(commit.hash)):
        print(f"    {GRAY}{line}{NC}")


def is_pushed(ctx: WorkflowContext, branch: str, ref: str = "HEAD") -> bool:
    """Whether `ref` is already contained in origin/<branch>."""
    if not branch or not ctx.facts.remote_tracking_exists(branch):
        return False
    return ctx.facts.commit_count(ref, f"origin/{branch}") == 0


def offer_force_push(ctx: WorkflowContext, branch: str) -> bool:
    if not ctx.prompter.confirm(f"Force push {branch} to origin?", default=False):
        hint(f"Push later with: {CYAN}git push --force-with-lease origin {branch}{NC}")
        return False
    try:
        ctx.runner.git("push", "--force-with-lease", "origin", branch)
    except GitCommandError as e:
        error(f"Force push failed: {e}")
        if is_auth_failure(e):
            hint("Check your git credentials, then push again")
        return False
    success(f"Force pushed {branch}")
    return True


def _warn_rewrite(branch: str) -> None:
    warn(f"This commit is already on origin/{branch}; rewriting it needs a force push")


# Amend


def _pick_files(ctx: WorkflowContext) -> list[str]:
    changes = ctx.facts.changed_files_with_status()
    if not changes:
        return []
    options = [(f"{status:>2} {path}", path) for status, path in changes]
    return ctx.prompter.select_many("Files to add to the commit", options)


def handle_amend(ctx: WorkflowContext) -> bool:
    """Change the last commit's message, its files, or both. True if amended."""
    last = ctx.facts.last_commit()
    if last is None:
        warn("No commits to amend")
        return False
    branch = ctx.facts.current_branch()
    log("Last commit:")
    show_commit(ctx, last)
    pushed = is_pushed(ctx, branch)
    if pushed:
        _warn_rewrite(branch)

    mode = ctx.prompter.select(
        "What do you want to change?",
        [
            ("The message", "message"),
            ("Add changed files", "files"),
            ("Both", "both"),
            ("Cancel", None),
        ],
    )
    if mode is None:
        log("Nothing amended")
        return False

    files: list[str] = []
    if mode in ("files", "both"):
        files = _pick_files(ctx)
        if mode == "files" and not files:
            log("No files picked, nothing amended")
            return False

    message = ""
    if mode in ("message", "both"):
        print(f"  {GRAY}Current: {ctx.facts.commit_message() or last.subject}{NC}")
        message = ctx.prompter.ask("New message (Enter keeps it)")
        if mode == "message" and not message:
            log("Message unchanged, nothing amended")
            return False

    if not ctx.prompter.confirm(f"Amend {last.short_hash}?"):
        log("Nothing amended")
        return False
    try:
        if files:
            ctx.runner.git("add", "--", *files)
        ctx.runner.git("commit", "--amend", *(["-m", message] if message else ["--no-edit"]))
    except GitCommandError as e:
        error(f"Amend failed: {e}")
        return False
    success(f"Amended {last.short_hash}" + (f" with {plural(len(files), 'file')}" if files else ""))
    if pushed:
        offer_force_push(ctx, branch)
    return True


# Reword


def _rebase_base(ctx: WorkflowContext, oldest: CommitInfo) -> str:
    return f"{oldest.hash}^" if ctx.facts.has_parent(oldest.hash) else "--root"


def _rebase_with_messages(ctx: WorkflowContext, messages: dict[str, str], base: str) -> None:
    """One interactive rebase from `base` that re-commits each planned commit with its new message."""
    with tempfile.TemporaryDirectory(prefix="geeto-reword-") as tmp:
        plan = {}
        for i, (full_hash, message) in enumerate(messages.items()):
            path = Path(tmp) / f"message-{i}.txt"
            path.write_text(message + "\n")
            plan[full_hash] = str(path)
        plan_file = Path(tmp) / "plan.json"
        plan_file.write_text(json.dumps(plan))
        ctx.runner.git("-c", f"sequence.editor={sequence_editor_command(plan_file)}", "rebase", "-i", base)


def handle_reword(ctx: WorkflowContext) -> bool:
    """Give one or more recent commits new messages. True if history was rewritten."""
    limit = get_nested(ctx.settings, "reword.recent_commits", RECENT_COMMITS)
    commits = ctx.facts.recent_commits(limit)
    if not commits:
        warn("No commits to reword")
        return False
    if ctx.facts.has_tracked_changes():
        warn("Commit or stash your changes before rewording")
        return False

    options = [(f"{c.short_hash} {c.subject} {GRAY}({c.date}){NC}", c) for c in commits]
    picked: list[CommitInfo] = ctx.prompter.select_many("Commits to reword", options)
    if not picked:
        log("Nothing to reword")
        return False

    messages: dict[str, str] = {}
    for commit in picked:
        new = ctx.prompter.ask(f"New message for {commit.short_hash}", default=commit.subject)
        if new != commit.subject:
            messages[commit.hash] = new
    if not messages:
        log("All messages unchanged")
        return False

    branch = ctx.facts.current_branch()
    pushed = any(is_pushed(ctx, branch, h) for h in messages)
    if pushed:
        warn(f"Some of these commits are already on origin/{branch}; rewording them needs a force push")
    if not ctx.prompter.confirm(f"Reword {plural(len(messages), 'commit')}?"):
        log("Nothing reworded")
        return False

    try:
        if list(messages) == [commits[0].hash]:
            ctx.runner.git("commit", "--amend", "--only", "-m", messages[commits[0].hash])
        else:
            oldest = max((c for c in commits if c.hash in messages), key=commits.index)
            _rebase_with_messages(ctx, messages, _rebase_base(ctx, oldest))
    except GitCommandError as e:
        error(f"Reword failed: {e}")
        if ctx.facts.rebase_in_progress():
            hint(f"Run {CYAN}git rebase --abort{NC} to go back, or {CYAN}geeto abort{NC}")
        return False
    success(f"Reworded {plural(len(messages), 'commit')}")
    if pushed:
        offer_force_push(ctx, branch)
    return True


# Revert


def handle_revert(ctx: WorkflowContext) -> bool:
    """Take the last commit back, either by a reset or with a revert commit."""
    last: Optional[CommitInfo] = ctx.facts.last_commit()
    if last is None:
        warn("No commits to revert")
        return False
    log("Last commit:")
    show_commit(ctx, last)

    branch = ctx.facts.current_branch()
    try:
        if is_pushed(ctx, branch):
            _warn_rewrite(branch)
            if ctx.prompter.confirm("Create a new commit that reverts it instead?"):
                ctx.runner.git("revert", "--no-edit", "HEAD")
                success(f"Reverted {last.short_hash} with a new commit")
                return True
        if not ctx.facts.has_parent():
            warn("This is the first commit; there is nothing to reset to")
            return False
        done = choose_reset(ctx, "HEAD~1", ["soft", "mixed", "hard"])
    except GitCommandError as e:
        error(f"Revert failed: {e}")
        return False
    if done:
        show_current_state(ctx)
    return done
