"""Decide where a wizard run starts: resume a checkpoint, start fresh, or jump to a step."""

from typing import Optional

from geeto.errors import WorkflowCancelled
from geeto.models.core import StartAt
from geeto.models.state import Step, WorkflowContext, WorkflowState
from geeto.ui.output import GRAY, NC, log, warn
from geeto.workflow.constants import START_AT_FLOORS


def apply_start_at(state: WorkflowState, start_at: Optional[StartAt]) -> WorkflowState:
    """Raise the checkpoint to the floor implied by a --<step> flag. Never lowers it."""
    if start_at is not None:
        state.step = Step(max(state.step, START_AT_FLOORS[start_at]))
    return state


def describe_state(state: WorkflowState) -> str:
    parts = [f"step: {state.step.label}"]
    if state.working_branch:
        parts.append(f"branch: {state.working_branch}")
    if state.target_branch:
        parts.append(f"target: {state.target_branch}")
    parts.append(f"saved: {state.timestamp}")
    return ", ".join(parts)


def _ask_resume(ctx: WorkflowContext, saved: WorkflowState) -> bool:
    log(f"Unfinished run found {GRAY}({describe_state(saved)}){NC}")
    choice = ctx.prompter.select(
        "Continue where you left off?",
        [("Resume", "resume"), ("Start fresh", "fresh"), ("Cancel", "cancel")],
    )
    if choice == "cancel":
        raise WorkflowCancelled()
    return choice == "resume"


def prepare_state(ctx: WorkflowContext) -> WorkflowState:
    """Load or create the checkpoint for this run and store it on the context."""
    current = ctx.facts.current_branch()
    saved = ctx.store.load()

    if saved is None:
        state = WorkflowState(working_branch=current, current_branch=current)
    elif saved.step >= Step.CLEANUP:
        log("Previous run finished, starting a new one")
        state = saved.reset(current)
    elif ctx.config.fresh:
        log("Starting fresh")
        state = saved.reset(current)
    elif saved.step == Step.NONE or ctx.config.resume or ctx.config.start_at is not None:
        state = saved
    elif _ask_resume(ctx, saved):
        state = saved
    else:
        state = saved.reset(current)

    if state is saved and saved.current_branch and saved.current_branch != current:
        warn(
            f"Checkpoint was saved on '{saved.current_branch}' but you are on '{current}'; "
            "starting over on this branch"
        )
        state = saved.reset(current)
    if state is saved and saved.step > Step.NONE:
        log(f"Resuming at: {saved.step.label}")

    if not state.working_branch:
        state.working_branch = current
    if ctx.config.provider:
        state.ai_provider = ctx.config.provider

    ctx.state = apply_start_at(state, ctx.config.start_at)
    ctx.save()
    return ctx.state
