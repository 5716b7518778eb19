"""Step handlers for the stage -> branch -> commit -> push -> merge -> cleanup wizard.

Each handler is guarded by the checkpoint: when the saved step already covers it,
the handler reports that and issues no git commands. A handler persists the new
checkpoint only after its git commands succeeded; GitCommandError propagates and
leaves the step where it was, so the next run retries it.
"""

from typing import Callable, Optional

from geeto.clients.trello import fetch_cards, fetch_lists
from geeto.config.utils import get_nested
from geeto.errors import GitCommandError, WorkflowCancelled
from geeto.git.branch import (
    branch_name_from_card,
    choose_development_base,
    clean_ai_suffix,
    get_branch_prefix,
    is_protected_branch,
    recommended_prefix_separator,
    sort_merge_targets,
    unique_branch_name,
    validate_branch_name,
)
from geeto.git.commit import COMMIT_TYPES, build_commit_message, clean_ai_message
from geeto.models.core import MergeStrategy, StartAt, TrelloCard
from geeto.models.state import Step, WorkflowContext
from geeto.ui.output import GRAY, GREEN, NC, error, hint, log, step, success, warn
from geeto.ui.progress import ProgressBar
from geeto.utils.formatting import fmt_file_list, plural
from geeto.workflow.constants import (
    AUTH_FAILURE_MARKERS,
    MAX_DIFF_CHARS,
    MAX_PUSH_ATTEMPTS,
    STEP_TITLES,
)


def is_conflict(err: GitCommandError) -> bool:
    return "conflict" in err.output.lower()


def is_auth_failure(err: GitCommandError) -> bool:
    output = err.output.lower()
    return any(marker in output for marker in AUTH_FAILURE_MARKERS)


def _already_done(ctx: WorkflowContext, target: Step, quiet: bool = False) -> bool:
    if ctx.state.step < target:
        return False
    if not quiet:
        log(f"{GRAY}{target.label}: already done, skipping{NC}")
    return True


def _advance(ctx: WorkflowContext, target: Step, **changes) -> None:
    """Record a completed step and persist it."""
    for key, value in changes.items():
        setattr(ctx.state, key, value)
    ctx.state.step = target
    ctx.save()


def _diff_limit(ctx: WorkflowContext) -> int:
    return get_nested(ctx.settings, "ai.max_diff_chars", MAX_DIFF_CHARS)


# --- Stage ---


def handle_stage(ctx: WorkflowContext) -> bool:
    """Stage changes. Advances to STAGED only when something ends up staged."""
    step(STEP_TITLES[Step.STAGED])
    if _already_done(ctx, Step.STAGED):
        return True

    changed = ctx.facts.changed_files()
    staged = ctx.facts.staged_files()
    if not changed and not staged:
        warn("No changes found in the working tree")
        return False

    if ctx.config.stage_all:
        choice = "all"
    else:
        log(f"{plural(len(changed), 'changed file')}, {len(staged)} staged:")
        for line in fmt_file_list(changed):
            print(line)
        choice = ctx.prompter.select(
            "What to stage?",
            [
                ("Stage all changes", "all"),
                ("Already staged", "staged"),
                ("Continue without staging", "skip"),
                ("Cancel", "cancel"),
            ],
        )
    if choice == "cancel":
        raise WorkflowCancelled()

    if choice == "all":
        ctx.runner.git("add", "-A")
        staged = ctx.facts.staged_files()
        if ctx.runner.dry_run and not staged:
            staged = changed
        success(f"Staged {plural(len(staged), 'file')}")

    if not staged:
        warn("Nothing is staged; stage files and run geeto again")
        return False

    _advance(ctx, Step.STAGED, staged_files=len(staged))
    return True


# --- Branch ---


def _ask_branch_name(ctx: WorkflowContext, prefix: str) -> str:
    return ctx.prompter.ask(f"Branch name (e.g. {prefix}my-change)", validate=validate_branch_name)


def _ai_branch_name(ctx: WorkflowContext, prefix: str) -> Optional[str]:
    """Loop on AI suggestions until one is accepted. None means fall back to manual."""
    diff = ctx.facts.staged_diff(_diff_limit(ctx))
    files = ctx.facts.staged_files()
    correction: Optional[str] = None
    while True:
        log(f"Generating branch name with {ctx.ai.name}...")
        suffix = clean_ai_suffix(ctx.ai.generate_branch_name(prefix, diff, files, correction))
        if not suffix:
            warn("No usable suggestion from AI, switching to manual entry")
            return None
        name = f"{prefix}{suffix}"
        log(f"Suggested branch: {GREEN}{name}{NC}")
        choice = ctx.prompter.select(
            "Use this branch name?",
            [
                ("Use it", "accept"),
                ("Regenerate with feedback", "adjust"),
                ("Enter manually", "manual"),
                ("Cancel", "cancel"),
            ],
        )
        if choice == "accept":
            return name
        if choice == "manual":
            return None
        if choice == "cancel":
            raise WorkflowCancelled()
        correction = ctx.prompter.ask("What should change?")


def _ai_card_suffix(ctx: WorkflowContext, card: TrelloCard) -> Optional[str]:
    """Loop on AI-shortened card titles. None means use the full title."""
    correction: Optional[str] = None
    while True:
        log(f"Shortening card title with {ctx.ai.name}...")
        suffix = clean_ai_suffix(ctx.ai.generate_branch_from_title(card.name, correction))
        if not suffix:
            warn("No usable suggestion from AI, using the full card title")
            return None
        log(f"Suggested suffix: {GREEN}{suffix}{NC}")
        choice = ctx.prompter.select(
            "Use this suffix?",
            [("Use it", "accept"), ("Regenerate with feedback", "adjust"), ("Use the full title", "full")],
        )
        if choice == "accept":
            return suffix
        if choice == "full":
            return None
        correction = ctx.prompter.ask("What should change?")


def _choose_trello_list(ctx: WorkflowContext) -> Optional[str]:
    assert ctx.trello is not None
    lists = fetch_lists(ctx.trello)
    if len(lists) < 2:
        return None
    options: list = [("All lists", None)]
    options += [(lst["name"], lst["id"]) for lst in lists]
    return ctx.prompter.select("Cards from which list?", options)


def _trello_branch_name(ctx: WorkflowContext, prefix: str) -> Optional[str]:
    assert ctx.trello is not None
    cards = fetch_cards(ctx.trello, _choose_trello_list(ctx))
    if not cards:
        warn("No open Trello cards found, switching to manual entry")
        return None
    options: list = [(f"#{c.id_short} {c.name}", c) for c in cards]
    options.append(("Enter manually", None))
    card = ctx.prompter.select("Which card is this work for?", options)
    if card is None:
        return None
    suffix = _ai_card_suffix(ctx, card) if ctx.ai.is_available() else None
    separator = get_nested(ctx.settings, "branch.separator", "-")
    return f"{prefix}{branch_name_from_card(card, separator, suffix)}"


def choose_branch_name(ctx: WorkflowContext, prefix: str, existing: list[str]) -> str:
    """Pick a valid, unused branch name via AI, Trello or manual entry."""
    sources: list = []
    if ctx.ai.is_available():
        sources.append((f"Generate with AI ({ctx.ai.name})", "ai"))
    if ctx.trello:
        sources.append(("From a Trello card", "trello"))

    name: Optional[str] = None
    if sources:
        sources += [("Enter manually", "manual"), ("Cancel", "cancel")]
        source = ctx.prompter.select("How should the branch be named?", sources)
        if source == "cancel":
            raise WorkflowCancelled()
        if source == "ai":
            name = _ai_branch_name(ctx, prefix)
        elif source == "trello":
            name = _trello_branch_name(ctx, prefix)

    if name and validate_branch_name(name):
        warn(f"'{name}' is not a valid branch name: {validate_branch_name(name)}")
        name = None
    if not name:
        name = _ask_branch_name(ctx, prefix)

    unique = unique_branch_name(name, existing)
    if unique != name:
        log(f"'{name}' already exists, using '{unique}'")
    return unique


def handle_branch(ctx: WorkflowContext) -> bool:
    """Create the working branch, or adopt the current one."""
    step(STEP_TITLES[Step.BRANCH_CREATED])
    if _already_done(ctx, Step.BRANCH_CREATED):
        return True

    current = ctx.facts.current_branch()
    if not ctx.prompter.confirm(f"Create a new branch from '{current}'?"):
        log(f"Working on current branch {current}")
        _advance(ctx, Step.BRANCH_CREATED, working_branch=current, current_branch=current)
        return True

    branches = ctx.facts.local_branches()
    prefix = get_branch_prefix(current, recommended_prefix_separator(branches))
    name = choose_branch_name(ctx, prefix, branches)
    ctx.runner.git("checkout", "-b", name)
    success(f"Created branch {name}")
    _advance(ctx, Step.BRANCH_CREATED, working_branch=name, current_branch=name)
    return True


# --- Commit ---


def _ai_commit_message(ctx: WorkflowContext) -> Optional[str]:
    diff = ctx.facts.staged_diff(_diff_limit(ctx))
    correction: Optional[str] = None
    while True:
        log(f"Generating commit message with {ctx.ai.name}...")
        message = clean_ai_message(ctx.ai.generate_commit_message(diff, correction))
        if not message:
            warn("No usable commit message from AI, switching to manual entry")
            return None
        print(f"\n  {GREEN}{message}{NC}\n")
        choice = ctx.prompter.select(
            "Use this commit message?",
            [
                ("Use it", "accept"),
                ("Regenerate with feedback", "adjust"),
                ("Write manually", "manual"),
                ("Cancel", "cancel"),
            ],
        )
        if choice == "accept":
            return message
        if choice == "manual":
            return None
        if choice == "cancel":
            raise WorkflowCancelled()
        correction = ctx.prompter.ask("What should change?")


def _manual_commit_message(ctx: WorkflowContext) -> str:
    options: list = [(f"{name:<9}- {desc}", name) for name, desc in COMMIT_TYPES.items()]
    options.append(("cancel", None))
    commit_type = ctx.prompter.select("Commit type", options)
    if commit_type is None:
        raise WorkflowCancelled()
    scope = ctx.prompter.ask("Scope (optional)")
    description = ctx.prompter.ask(
        "Description", validate=lambda s: None if s.strip() else "Description cannot be empty"
    )
    return build_commit_message(commit_type, description, scope)


def handle_commit(ctx: WorkflowContext) -> bool:
    """Commit the staged changes with an AI or hand-written conventional message."""
    step(STEP_TITLES[Step.COMMITTED])
    if _already_done(ctx, Step.COMMITTED, quiet=ctx.state.skipped_commit):
        return True

    staged = ctx.facts.staged_files()
    if not staged and not ctx.runner.dry_run:
        error("Nothing staged to commit")
        return False

    stat = ctx.facts.staged_stat()
    if stat:
        print(f"\n{GRAY}{stat}{NC}\n")

    modes: list = []
    if ctx.ai.is_available():
        modes.append((f"Generate with AI ({ctx.ai.name})", "ai"))
    modes += [("Write manually", "manual"), ("Skip commit", "skip"), ("Cancel", "cancel")]
    mode = ctx.prompter.select(f"Commit {plural(len(staged), 'staged file')}", modes)
    if mode == "cancel":
        raise WorkflowCancelled()
    if mode == "skip":
        warn("Commit skipped")
        _advance(ctx, Step.COMMITTED, skipped_commit=True)
        return True

    message = _ai_commit_message(ctx) if mode == "ai" else None
    if not message:
        message = _manual_commit_message(ctx)

    ctx.runner.git("commit", "-m", message)
    success(f"Committed: {message.splitlines()[0]}")
    _advance(ctx, Step.COMMITTED, commit_message=message, skipped_commit=False)
    return True


# --- Push ---


def _working_branch(ctx: WorkflowContext) -> str:
    return ctx.state.working_branch or ctx.facts.current_branch()


def handle_push(ctx: WorkflowContext) -> bool:
    """Push the working branch to origin with upstream tracking."""
    step(STEP_TITLES[Step.PUSHED])
    if _already_done(ctx, Step.PUSHED, quiet=ctx.state.skipped_push):
        return True

    branch = _working_branch(ctx)
    asked_for_push = ctx.config.start_at == StartAt.PUSH
    if not asked_for_push and not ctx.prompter.confirm(f"Push '{branch}' to origin?"):
        warn("Push skipped")
        _advance(ctx, Step.PUSHED, skipped_push=True)
        return True

    if ctx.facts.has_unpushed_commits(branch):
        log(f"Pushing new commits on {branch}")
    else:
        log(f"{branch} is already up to date with origin")

    try:
        with ProgressBar(f"Pushing {branch}"):
            ctx.runner.git("push", "-u", "origin", branch)
    except GitCommandError as e:
        error(f"Push failed: {e}")
        if is_auth_failure(e):
            hint("Check your git credentials, then run `geeto --push`")
        raise
    _advance(ctx, Step.PUSHED, skipped_push=False)
    return True


def push_with_retry(ctx: WorkflowContext, branch: str) -> bool:
    """`git push origin <branch>`, re-offered after auth failures up to the attempt limit."""
    attempts = get_nested(ctx.settings, "push.max_attempts", MAX_PUSH_ATTEMPTS)
    for attempt in range(1, attempts + 1):
        try:
            ctx.runner.git("push", "origin", branch)
            success(f"Pushed {branch}")
            return True
        except GitCommandError as e:
            error(f"Push of {branch} failed: {e}")
            if not is_auth_failure(e) or attempt == attempts:
                break
            if not ctx.prompter.confirm(f"Authentication failed. Retry? ({attempt}/{attempts})"):
                break
    hint(f"Push it later with: git push origin {branch}")
    return False


# --- Merge ---


def squash_feature_branch(ctx: WorkflowContext, feature: str, target: str) -> None:
    """Fold the feature branch's own commits into one, before it is merged."""
    count = ctx.facts.commit_count(feature, target)
    if count is None:
        warn(f"Could not count commits on {feature}; merging without squashing")
        return
    if count <= 1:
        log(f"{feature} has {plural(count, 'commit')}, nothing to squash")
        return
    ctx.runner.git("reset", "--soft", f"HEAD~{count - 1}")
    ctx.runner.git("commit", "--amend", "--no-edit", "--no-verify")
    success(f"Squashed {count} commits on {feature}")


def development_base(ctx: WorkflowContext, feature: str, branches: list[str]) -> Optional[str]:
    """Base for a new `development` branch, or None when it should not be offered."""
    if not get_nested(ctx.settings, "merge.offer_development", True):
        return None
    if "development" in branches or feature == "development":
        return None
    return choose_development_base(branches, feature)


def _return_to_branch(ctx: WorkflowContext, branch: str) -> None:
    try:
        ctx.runner.git("checkout", branch)
    except GitCommandError as e:
        warn(f"Could not switch back to {branch}: {e}")
        return
    ctx.state.current_branch = branch
    ctx.save()


def handle_merge(ctx: WorkflowContext) -> Optional[str]:
    """Merge the working branch into a chosen target. Returns the target, or None if not merged."""
    step(STEP_TITLES[Step.MERGED])
    if _already_done(ctx, Step.MERGED):
        return ctx.state.target_branch

    if ctx.facts.merge_in_progress():
        error("A merge is still in progress")
        hint("Resolve it and `git commit`, or run `geeto abort`, then run geeto again")
        return None

    feature = _working_branch(ctx)
    branches = ctx.facts.local_branches()
    dev_base = development_base(ctx, feature, branches)

    targets = sort_merge_targets(branches, feature, get_nested(ctx.settings, "merge.priority"))
    options: list = [(t, t) for t in targets]
    if dev_base:
        options.insert(0, (f"development (create from {dev_base})", "development"))
    if not options:
        warn(f"No branch to merge {feature} into")
        return None
    options.append(("Don't merge", None))
    target = ctx.prompter.select(f"Merge '{feature}' into", options)
    if target is None:
        log("Merge skipped")
        return None

    strategy = ctx.prompter.select(
        "Merge strategy",
        [
            ("Merge commit (--no-ff)", MergeStrategy.MERGE_NO_FF),
            ("Squash feature commits, then merge", MergeStrategy.SQUASH),
            ("Cancel", None),
        ],
    )
    if strategy is None or not ctx.prompter.confirm(f"Merge '{feature}' into '{target}'?"):
        log("Merge cancelled")
        return None

    if dev_base and target == "development":
        ctx.runner.git("branch", "development", dev_base)
        success(f"Created development from {dev_base}")

    if strategy == MergeStrategy.SQUASH:
        if ctx.facts.current_branch() != feature:
            ctx.runner.git("checkout", feature)
        squash_feature_branch(ctx, feature, target)

    ctx.runner.git("checkout", target)
    # A conflicted merge leaves the repository on the target branch
    ctx.state.current_branch = target
    ctx.save()
    try:
        ctx.runner.git("merge", "--no-ff", "--no-edit", feature)
    except GitCommandError as e:
        if is_conflict(e):
            error(f"Merge conflict while merging {feature} into {target}")
            hint("Resolve the conflicts, `git add` the files, then `git commit`")
            hint("Or give up on this merge with: git merge --abort")
        else:
            error(f"Merge failed: {e}")
            _return_to_branch(ctx, feature)
        raise
    success(f"Merged {feature} into {target}")
    _advance(ctx, Step.MERGED, target_branch=target, current_branch=target)

    if ctx.prompter.confirm(f"Push '{target}' to origin?"):
        push_with_retry(ctx, target)
    return target


# --- Cleanup ---


def _delete_branch(ctx: WorkflowContext, branch: str) -> bool:
    """Delete the local branch (and its remote). False when the user kept it."""
    try:
        ctx.runner.git("branch", "-d", branch)
    except GitCommandError as e:
        if "not fully merged" not in e.output.lower():
            raise
        warn(f"{branch} is not fully merged")
        if not ctx.prompter.confirm(f"Force delete '{branch}'? Unmerged commits will be lost", default=False):
            log(f"Keeping {branch}")
            return False
        ctx.runner.git("branch", "-D", branch)
    success(f"Deleted local branch {branch}")

    result = ctx.runner.git("push", "origin", "--delete", branch, check=False)
    if result.ok:
        success(f"Deleted origin/{branch}")
    else:
        log(f"{GRAY}No remote branch origin/{branch} deleted{NC}")
    return True


def handle_cleanup(ctx: WorkflowContext) -> bool:
    """Offer to delete the merged working branch. Protected branches are never deleted."""
    step(STEP_TITLES[Step.CLEANUP])
    if _already_done(ctx, Step.CLEANUP):
        return True

    feature = ctx.state.working_branch
    target = ctx.state.target_branch
    current = ctx.state.current_branch
    protected = get_nested(ctx.settings, "cleanup.protected", []) or []

    if not feature or not target or feature == target:
        log("Nothing to clean up")
    elif is_protected_branch(feature, protected):
        log(f"{feature} is protected, keeping it")
    elif ctx.prompter.confirm(f"Delete branch '{feature}'?"):
        _delete_branch(ctx, feature)
    else:
        ctx.runner.git("checkout", feature)
        current = feature
        log(f"Keeping {feature}")

    _advance(ctx, Step.CLEANUP, current_branch=current)
    success("Workflow complete")
    return True


# Handler that produces each checkpoint, in wizard order
STEP_HANDLERS: dict[Step, Callable[[WorkflowContext], object]] = {
    Step.STAGED: handle_stage,
    Step.BRANCH_CREATED: handle_branch,
    Step.COMMITTED: handle_commit,
    Step.PUSHED: handle_push,
    Step.MERGED: handle_merge,
    Step.CLEANUP: handle_cleanup,
}


def run_workflow(ctx: WorkflowContext) -> bool:
    """Drive the handlers in order. True once the checkpoint reaches CLEANUP."""
    for target in sorted(STEP_HANDLERS):
        STEP_HANDLERS[target](ctx)
        if ctx.state.step < target:
            log(f"Stopped before '{target.label}'. Run geeto again to continue.")
            return False
    return ctx.state.step >= Step.CLEANUP
