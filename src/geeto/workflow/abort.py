"""Abort a merge, rebase, cherry-pick or revert that git has paused on."""

from typing import Optional

from geeto.models.core import InProgressOp
from geeto.models.state import WorkflowContext
from geeto.ui.output import log, success


def choose_operation(ctx: WorkflowContext, ops: list[InProgressOp]) -> Optional[InProgressOp]:
    if len(ops) == 1:
        op = ops[0]
        return op if ctx.prompter.confirm(f"{op.label} in progress. Abort it?") else None
    options: list = [(f"Abort {op.label.lower()}", op) for op in ops]
    options.append(("Cancel", None))
    return ctx.prompter.select("Several operations are in progress", options)


def handle_abort(ctx: WorkflowContext) -> bool:
    """True if an operation was aborted. GitCommandError from the abort propagates."""
    ops = ctx.facts.in_progress_ops()
    if not ops:
        success("Nothing to abort: no merge, rebase, cherry-pick or revert in progress")
        return False

    op = choose_operation(ctx, ops)
    if op is None:
        log("Nothing aborted")
        return False
    ctx.runner.run(op.abort_args)
    success(f"{op.label} aborted")
    return True
