"""Synchronous git command execution with dry-run simulation."""

import subprocess
from dataclasses import dataclass
from typing import Optional

from geeto.errors import GitCommandError
from geeto.ui.output import GRAY, NC, YELLOW, log
from geeto.utils.debug import debug_log

# git subcommands that never change the repository
READ_ONLY_SUBCOMMANDS = {
    "status",
    "log",
    "diff",
    "rev-parse",
    "config",
    "reflog",
    "show",
    "describe",
    "ls-files",
    "ls-remote",
    "cat-file",
    "name-rev",
    "rev-list",
    "for-each-ref",
    "shortlog",
    "symbolic-ref",
    "merge-base",
    "diff-tree",
}

# `git remote <sub>` forms that only inspect
READ_ONLY_REMOTE_SUBCOMMANDS = {"-v", "--verbose", "show", "get-url"}

MUTATING_BRANCH_FLAGS = {
    "-d",
    "-D",
    "-m",
    "-M",
    "-c",
    "-C",
    "--delete",
    "--move",
    "--copy",
    "--unset-upstream",
}

# Flags that turn `git branch <pattern>` into a listing
BRANCH_LIST_FLAGS = {
    "-l",
    "--list",
    "-a",
    "--all",
    "-r",
    "--remotes",
    "--contains",
    "--no-contains",
    "--merged",
    "--no-merged",
    "--points-at",
    "--show-current",
    "--format",
}

MUTATING_GH_COMMANDS = {
    ("pr", "create"),
    ("pr", "merge"),
    ("issue", "create"),
    ("repo", "edit"),
    ("release", "create"),
}


def _is_read_only_branch(rest: list[str]) -> bool:
    for arg in rest:
        flag = arg.split("=", 1)[0]
        if flag in MUTATING_BRANCH_FLAGS or flag.startswith("--set-upstream"):
            return False
    positional = [a for a in rest if not a.startswith("-")]
    if not positional:
        return True
    return any(a.split("=", 1)[0] in BRANCH_LIST_FLAGS for a in rest)


def _is_read_only_remote(rest: list[str]) -> bool:
    if not rest or rest[0] in READ_ONLY_REMOTE_SUBCOMMANDS:
        return True
    return rest[0] == "prune" and ("--dry-run" in rest or "-n" in rest)


def is_read_only_command(args: list[str]) -> bool:
    """True for git invocations that only inspect the repository."""
    if len(args) < 2 or args[0] != "git":
        return False
    sub, rest = args[1], args[2:]
    if sub in READ_ONLY_SUBCOMMANDS:
        return True
    if sub == "branch":
        return _is_read_only_branch(rest)
    if sub == "remote":
        return _is_read_only_remote(rest)
    if sub == "fetch":
        return not any(a in ("--prune", "-p", "--prune-tags", "-P") for a in rest)
    if sub == "stash":
        return bool(rest) and rest[0] in ("list", "show")
    return False


def is_mutating_command(args: list[str]) -> bool:
    """True for commands a dry run must simulate instead of executing."""
    if not args:
        return False
    if args[0] == "git":
        return not is_read_only_command(args)
    if args[0] == "gh" and len(args) >= 3:
        return (args[1], args[2]) in MUTATING_GH_COMMANDS
    return args[0] in ("open", "xdg-open", "start")


def _is_diff_with_changes(args: list[str], returncode: int) -> bool:
    # `git diff --exit-code/--quiet` exits 1 when there are differences
    return returncode == 1 and len(args) >= 2 and args[:2] == ["git", "diff"]


@dataclass
class CommandResult:
    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def lines(self) -> list[str]:
        return [line for line in self.stdout.splitlines() if line.strip()]


class CommandRunner:
    """Runs git (and a few helper) commands one at a time.

    In dry-run mode mutating commands are recorded and reported instead of
    executed; read-only queries still run so the wizard can make decisions.
    """

    def __init__(self, dry_run: bool = False, debug: bool = False, cwd: Optional[str] = None):
        self.dry_run = dry_run
        self.debug = debug
        self.cwd = cwd
        self.history: list[list[str]] = []
        self.simulated: list[list[str]] = []

    def run(self, args: list[str], check: bool = True) -> CommandResult:
        """Run a command, raising GitCommandError on failure when check is set."""
        args = list(args)
        if self.dry_run and is_mutating_command(args):
            self.simulated.append(args)
            print(f"\r\033[K{YELLOW}[dry-run]{NC} Would run: {GRAY}{' '.join(args)}{NC}")
            return CommandResult(args, 0)

        self.history.append(args)
        proc = subprocess.run(args, capture_output=True, text=True, cwd=self.cwd)
        result = CommandResult(
            args, proc.returncode, (proc.stdout or "").strip(), (proc.stderr or "").strip()
        )
        debug_log(
            self.debug,
            " ".join(args),
            {"exit": result.returncode, "stdout": result.stdout, "stderr": result.stderr},
            echo=False,
        )

        if result.returncode != 0 and not _is_diff_with_changes(args, result.returncode):
            if check:
                raise GitCommandError(args, result.returncode, result.stdout, result.stderr)
        return result

    def git(self, *args: str, check: bool = True) -> CommandResult:
        """Shorthand: runner.git("status", "--short")."""
        return self.run(["git", *args], check=check)

    def print_dry_run_summary(self) -> None:
        if not self.dry_run:
            return
        if not self.simulated:
            log("Dry run: no mutating commands would have been executed")
            return
        log(f"Dry run: {len(self.simulated)} command(s) would have been executed:")
        for args in self.simulated:
            print(f"  {GRAY}{' '.join(args)}{NC}")
