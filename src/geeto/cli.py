"""CLI entry point for geeto."""

import argparse
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import Callable, Optional

from geeto.clients.ai import UnavailableClient, build_ai_client
from geeto.config.credentials import TrelloConfig
from geeto.config.settings import get_config, get_config_loaded_sources
from geeto.config.utils import GEETO_DIR, get_nested
from geeto.errors import GitCommandError, WorkflowCancelled
from geeto.git.facts import GitFacts
from geeto.git.runner import CommandRunner
from geeto.models.core import AIProvider, StartAt
from geeto.models.state import RunConfig, WorkflowContext
from geeto.state.store import STATE_FILE, StateStore
from geeto.ui.output import GRAY, NC, YELLOW, error, log, success, warn
from geeto.ui.prompts import Prompter
from geeto.utils.debug import debug_log
from geeto.workflow.abort import handle_abort
from geeto.workflow.cherry_pick import handle_cherry_pick
from geeto.workflow.commits import handle_amend, handle_revert, handle_reword
from geeto.workflow.github import handle_issue, handle_pull_request
from geeto.workflow.remote import handle_fetch, handle_prune, handle_pull
from geeto.workflow.session import prepare_state
from geeto.workflow.stash import handle_stash
from geeto.workflow.status import handle_status
from geeto.workflow.steps import run_workflow
from geeto.workflow.switch import handle_switch
from geeto.workflow.undo import handle_undo

DRY_RUN_STATE_FILE = GEETO_DIR / "state.dry-run.json"

COMMANDS = [
    "undo",
    "abort",
    "status",
    "reset",
    "amend",
    "reword",
    "revert",
    "switch",
    "cherry-pick",
    "stash",
    "pull",
    "fetch",
    "prune",
    "pr",
    "issue",
    "init",
]


def get_version() -> str:
    try:
        return version("geeto")
    except PackageNotFoundError:
        return "dev"


def parse_args(argv: Optional[list[str]] = None) -> RunConfig:
    parser = argparse.ArgumentParser(
        prog="geeto",
        description="geeto - git flow wizard: stage, branch, commit, push, merge and clean up.",
        epilog="""
Commands:
  geeto                         Run the wizard (resumes an unfinished run)
  geeto undo                    Undo the last git action (from the reflog)
  geeto abort                   Abort a merge/rebase/cherry-pick/revert in progress
  geeto status                  Show saved progress and upstream ahead/behind
  geeto reset                   Forget saved progress (keeps the AI provider)
  geeto amend                   Change the last commit (message and/or files)
  geeto reword                  Give recent commits new messages
  geeto revert                  Take back the last commit (reset or revert commit)
  geeto switch                  Switch to a local or remote branch, or create one
  geeto cherry-pick             Copy commits from another branch
  geeto stash                   Stash, browse, apply and drop stashes
  geeto pull                    Fetch and pull with merge, rebase or fast-forward
  geeto fetch                   Fetch all or one remote, optionally pruning
  geeto prune                   Remove remote-tracking refs deleted upstream
  geeto pr                      Open a GitHub pull request for this branch
  geeto issue                   Open a GitHub issue
  geeto init                    Configure AI provider, Trello and GitHub

Examples:
  %(prog)s -a                     Stage everything and run the whole flow
  %(prog)s -a -y                  Same, taking the default answer to every yes/no question
  %(prog)s --commit               Start at the commit step
  %(prog)s --merge                Start at the merge step
  %(prog)s --provider gemini      Use Gemini for suggestions
  %(prog)s --dry-run              Show mutating git commands without running them

Progress:
  Each finished step is saved to .geeto/state.json. Running geeto again
  offers to resume from there; --fresh discards it, --resume skips the question.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=COMMANDS,
        metavar="COMMAND",
        help="Optional command (see below); default runs the wizard",
    )
    start = parser.add_mutually_exclusive_group()
    for member in StartAt:
        start.add_argument(
            f"--{member.value}",
            dest="start_at",
            action="store_const",
            const=member,
            help=f"Start at the {member.value} step",
        )
    parser.add_argument(
        "-a",
        "--all",
        dest="stage_all",
        action="store_true",
        help="Stage all changes without asking",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Answer yes/no questions with their default",
    )
    parser.add_argument("--fresh", action="store_true", help="Ignore saved progress")
    parser.add_argument("--resume", action="store_true", help="Resume saved progress without asking")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print mutating commands instead of running them",
    )
    parser.add_argument("--debug", action="store_true", help="Log every git command to .geeto/debug.log")
    parser.add_argument(
        "--provider",
        choices=[p.value for p in AIProvider],
        help="AI provider for this run (default: from config)",
    )
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {get_version()}")

    args = parser.parse_args(argv)
    if args.fresh and args.resume:
        parser.error("--fresh and --resume cannot be combined")

    return RunConfig(
        command=args.command,
        start_at=args.start_at,
        stage_all=args.stage_all,
        yes=args.yes,
        fresh=args.fresh,
        resume=args.resume,
        dry_run=args.dry_run,
        debug=args.debug,
        provider=args.provider,
    )


def build_context(config: RunConfig, prompter: Optional[Prompter] = None) -> WorkflowContext:
    runner = CommandRunner(dry_run=config.dry_run, debug=config.debug)
    return WorkflowContext(
        runner=runner,
        facts=GitFacts(runner),
        store=StateStore(
            DRY_RUN_STATE_FILE if config.dry_run else STATE_FILE,
            manage_gitignore=not config.dry_run,
        ),
        prompter=prompter or Prompter(assume_defaults=config.yes),
        ai=UnavailableClient(),
        config=config,
        settings=get_config(),
        trello=TrelloConfig.load(),
    )


def log_config(ctx: WorkflowContext) -> None:
    sources = get_config_loaded_sources()
    if len(sources) > 1:
        log(f"Config: {GRAY}{' < '.join(sources)}{NC}")
    if ctx.config.dry_run:
        print(f"{YELLOW}[dry-run]{NC} Mutating commands are printed, not executed")
    debug_log(ctx.config.debug, "run config", vars(ctx.config))


def run_wizard(ctx: WorkflowContext) -> bool:
    log_config(ctx)
    prepare_state(ctx)
    provider = ctx.config.provider or ctx.state.ai_provider or get_nested(ctx.settings, "ai.provider")
    ctx.ai = build_ai_client(provider, ctx.settings)
    if provider and not ctx.state.ai_provider:
        ctx.state.ai_provider = provider
    try:
        return run_workflow(ctx)
    finally:
        ctx.runner.print_dry_run_summary()
        if ctx.config.dry_run:
            ctx.store.clear()


def handle_reset(ctx: WorkflowContext) -> bool:
    saved = ctx.store.load()
    if saved is None:
        log("No saved progress")
        return False
    log(f"Saved progress: {saved.step.label} on {saved.working_branch or '?'}")
    if not ctx.prompter.confirm("Forget it?", default=False):
        return False
    ctx.store.reset(saved, ctx.facts.current_branch())
    success("Progress reset")
    return True


COMMAND_HANDLERS: dict[Optional[str], Callable[[WorkflowContext], object]] = {
    None: run_wizard,
    "undo": handle_undo,
    "abort": handle_abort,
    "status": handle_status,
    "reset": handle_reset,
    "amend": handle_amend,
    "reword": handle_reword,
    "revert": handle_revert,
    "switch": handle_switch,
    "cherry-pick": handle_cherry_pick,
    "stash": handle_stash,
    "pull": handle_pull,
    "fetch": handle_fetch,
    "prune": handle_prune,
    "pr": handle_pull_request,
    "issue": handle_issue,
}


def main() -> None:
    config = parse_args()

    if config.command == "init":
        from geeto.init import run_init

        try:
            ok = run_init()
        except (KeyboardInterrupt, EOFError):
            print()
            sys.exit(130)
        sys.exit(0 if ok else 1)

    ctx = build_context(config)
    try:
        if not ctx.facts.is_inside_work_tree():
            error("Not inside a git repository")
            sys.exit(1)
        COMMAND_HANDLERS[config.command](ctx)
        if config.command:
            ctx.runner.print_dry_run_summary()
    except GitCommandError as e:
        error(str(e))
        sys.exit(1)
    except WorkflowCancelled as e:
        warn(str(e))
        sys.exit(0)
    except (KeyboardInterrupt, EOFError):
        print()
        warn("Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
