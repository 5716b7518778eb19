"""`geeto status`: the saved checkpoint next to what git says."""

from geeto.models.state import Step, WorkflowContext
from geeto.ui.output import GRAY, GREEN, NC, YELLOW, log, warn


def handle_status(ctx: WorkflowContext) -> None:
    saved = ctx.store.load()
    if saved is None:
        log("No saved workflow")
    else:
        color = GREEN if saved.step >= Step.CLEANUP else YELLOW
        log(f"Workflow: {color}{saved.step.label}{NC} {GRAY}(saved {saved.timestamp}){NC}")
        if saved.working_branch:
            print(f"  working branch: {saved.working_branch}")
        if saved.target_branch:
            print(f"  merged into:    {saved.target_branch}")
        if saved.skipped_push:
            print(f"  {GRAY}push was skipped{NC}")
        if saved.ai_provider:
            print(f"  ai provider:    {saved.ai_provider}")

    branch = ctx.facts.current_branch() or "(detached HEAD)"
    log(f"Current branch: {GREEN}{branch}{NC}")
    upstream = ctx.facts.upstream()
    if not upstream:
        warn("No upstream configured for this branch")
        return
    counts = ctx.facts.ahead_behind(upstream)
    if counts is None:
        print(f"  tracking {upstream}")
        return
    ahead, behind = counts
    print(f"  tracking {upstream}: {ahead} ahead, {behind} behind")
