"""Read-only git queries used by the wizard, undo and status commands."""

import re
from pathlib import Path
from typing import Optional

from geeto.errors import GitCommandError
from geeto.git.runner import CommandRunner
from geeto.models.core import BranchInfo, CommitInfo, InProgressOp, ReflogEntry, StashEntry

FIELD_SEPARATOR = "\x1f"
REFLOG_SEPARATOR = FIELD_SEPARATOR
REFLOG_FORMAT = "%H%x1f%gd%x1f%gs"
COMMIT_FORMAT = "%H%x1f%h%x1f%s%x1f%an%x1f%cr"
STASH_FORMAT = "%gd%x1f%gs%x1f%cr"
# for-each-ref spells the separator as a hex escape
BRANCH_FORMAT = "%(refname:short)%1f%(committerdate:relative)%1f%(committerdate:unix)"

_PORCELAIN_RE = re.compile(r"^\s*(\S{1,2})\s+(.+)$")
_STASH_SUBJECT_RE = re.compile(r"^(?:WIP on|On) ([^:]+):\s*(.*)$")
_WOULD_PRUNE_RE = re.compile(r"\[would prune\]\s+(\S+)")

# (marker inside .git, kind, label, abort command)
IN_PROGRESS_MARKERS = [
    ("MERGE_HEAD", "merge", "Merge", ["git", "merge", "--abort"]),
    ("rebase-merge", "rebase", "Rebase", ["git", "rebase", "--abort"]),
    ("rebase-apply", "rebase", "Rebase", ["git", "rebase", "--abort"]),
    ("CHERRY_PICK_HEAD", "cherry-pick", "Cherry-pick", ["git", "cherry-pick", "--abort"]),
    ("REVERT_HEAD", "revert", "Revert", ["git", "revert", "--abort"]),
]


def parse_lines(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


def parse_count(output: str) -> Optional[int]:
    """Parse `rev-list --count` output. None when it is not a number."""
    text = output.strip()
    return int(text) if text.isdigit() else None


def parse_ahead_behind(output: str) -> Optional[tuple[int, int]]:
    """Parse `rev-list --left-right --count` output into (ahead, behind)."""
    parts = output.split()
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        return None
    return int(parts[0]), int(parts[1])


def parse_porcelain_status(output: str) -> list[tuple[str, str]]:
    """(status code, path) pairs from `git status --porcelain`, renames as the new name."""
    entries = []
    for line in output.splitlines():
        match = _PORCELAIN_RE.match(line)
        if not match:
            continue
        entries.append((match.group(1), match.group(2).split(" -> ")[-1].strip('"')))
    return entries


def parse_porcelain_paths(output: str) -> list[str]:
    """File paths from `git status --porcelain`, following renames to the new name."""
    return [path for _, path in parse_porcelain_status(output)]


def parse_commits(output: str) -> list[CommitInfo]:
    """Parse `git log` lines written with COMMIT_FORMAT; malformed lines are skipped."""
    commits = []
    for line in output.splitlines():
        parts = line.split(FIELD_SEPARATOR)
        if len(parts) != 5 or not parts[0].strip():
            continue
        commits.append(CommitInfo(*(p.strip() for p in parts)))
    return commits


def parse_branch_refs(local: str, remote: str, current: str = "") -> list[BranchInfo]:
    """Branches from two `for-each-ref` listings, newest first.

    Origin branches that also exist locally, `origin/HEAD` and the current branch are left out.
    """
    branches: dict[str, BranchInfo] = {}
    for output, is_remote in ((local, False), (remote, True)):
        for line in output.splitlines():
            parts = line.split(FIELD_SEPARATOR)
            if len(parts) != 3 or not parts[0]:
                continue
            name = parts[0]
            if is_remote:
                if not name.startswith("origin/") or name == "origin/HEAD":
                    continue
                name = name[len("origin/") :]
            if name == current or name in branches:
                continue
            timestamp = int(parts[2]) if parts[2].isdigit() else 0
            branches[name] = BranchInfo(name, is_remote, parts[1], timestamp)
    return sorted(branches.values(), key=lambda b: b.timestamp, reverse=True)


def parse_stash_list(output: str) -> list[StashEntry]:
    """Parse `git stash list` lines written with STASH_FORMAT."""
    entries = []
    for line in output.splitlines():
        parts = line.split(FIELD_SEPARATOR)
        if len(parts) != 3 or not parts[0]:
            continue
        match = _STASH_SUBJECT_RE.match(parts[1])
        branch, message = (match.group(1), match.group(2)) if match else ("", parts[1])
        entries.append(StashEntry(ref=parts[0], branch=branch, message=message, date=parts[2]))
    return entries


def parse_prune_dry_run(output: str) -> list[str]:
    """Remote-tracking branches listed by `git remote prune --dry-run`."""
    return [m.group(1) for m in _WOULD_PRUNE_RE.finditer(output)]


def parse_reflog(output: str) -> list[ReflogEntry]:
    """Parse reflog lines written with REFLOG_FORMAT; malformed lines are skipped."""
    entries = []
    for line in output.splitlines():
        parts = line.split(REFLOG_SEPARATOR)
        if len(parts) != 3 or not parts[0].strip():
            continue
        entries.append(ReflogEntry(hash=parts[0].strip(), selector=parts[1], subject=parts[2]))
    return entries


class GitFacts:
    """Queries that never change the repository."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def is_inside_work_tree(self) -> bool:
        result = self.runner.git("rev-parse", "--is-inside-work-tree", check=False)
        return result.ok and result.stdout == "true"

    def current_branch(self) -> str:
        return self.runner.git("branch", "--show-current").stdout

    def local_branches(self) -> list[str]:
        result = self.runner.git("branch", "--format=%(refname:short)")
        return parse_lines(result.stdout)

    def branch_exists(self, name: str) -> bool:
        result = self.runner.git("rev-parse", "--verify", "--quiet", f"refs/heads/{name}", check=False)
        return result.ok

    def changed_files(self) -> list[str]:
        return parse_porcelain_paths(self.runner.git("status", "--porcelain").stdout)

    def changed_files_with_status(self) -> list[tuple[str, str]]:
        return parse_porcelain_status(self.runner.git("status", "--porcelain").stdout)

    def has_tracked_changes(self) -> bool:
        """Uncommitted changes to tracked files; untracked files do not count."""
        result = self.runner.git("status", "--porcelain", "--untracked-files=no")
        return bool(result.stdout)

    def staged_files(self) -> list[str]:
        return parse_lines(self.runner.git("diff", "--cached", "--name-only").stdout)

    def staged_diff(self, max_chars: int = 4000) -> str:
        return self.runner.git("diff", "--cached").stdout[:max_chars]

    def staged_stat(self) -> str:
        return self.runner.git("diff", "--cached", "--stat").stdout

    def last_commit_subject(self) -> str:
        result = self.runner.git("log", "-1", "--format=%s", check=False)
        return result.stdout if result.ok else ""

    def last_commit(self) -> Optional[CommitInfo]:
        result = self.runner.git("log", "-1", f"--format={COMMIT_FORMAT}", check=False)
        commits = parse_commits(result.stdout) if result.ok else []
        return commits[0] if commits else None

    def commit_message(self, ref: str = "HEAD") -> str:
        result = self.runner.git("log", "-1", "--format=%B", ref, check=False)
        return result.stdout if result.ok else ""

    def recent_commits(self, limit: int = 20) -> list[CommitInfo]:
        result = self.runner.git("log", f"-{limit}", f"--format={COMMIT_FORMAT}", check=False)
        return parse_commits(result.stdout) if result.ok else []

    def unique_commits(self, source: str, limit: int = 50) -> list[CommitInfo]:
        """Non-merge commits on `source` that HEAD does not have, newest first."""
        result = self.runner.git(
            "log", "--no-merges", f"--format={COMMIT_FORMAT}", f"-{limit}", f"HEAD..{source}", check=False
        )
        return parse_commits(result.stdout) if result.ok else []

    def has_parent(self, ref: str = "HEAD") -> bool:
        result = self.runner.git("rev-parse", "--verify", "--quiet", f"{ref}^", check=False)
        return result.ok

    def commit_files(self, ref: str = "HEAD") -> list[str]:
        result = self.runner.git("diff-tree", "--no-commit-id", "--name-only", "-r", ref, check=False)
        return parse_lines(result.stdout) if result.ok else []

    def remotes(self) -> list[str]:
        return parse_lines(self.runner.git("remote", check=False).stdout)

    def remote_url(self, remote: str = "origin") -> Optional[str]:
        result = self.runner.git("remote", "get-url", remote, check=False)
        return result.stdout if result.ok and result.stdout else None

    def remote_branch_exists(self, branch: str) -> bool:
        result = self.runner.git("ls-remote", "--heads", "origin", branch, check=False)
        return result.ok and bool(result.stdout)

    def has_unpushed_commits(self, branch: str) -> bool:
        """Whether pushing `branch` would send anything. Errors count as yes."""
        try:
            if not self.remote_branch_exists(branch):
                return True
            result = self.runner.git("rev-list", f"{branch}...origin/{branch}", "--count")
        except GitCommandError:
            return True
        count = parse_count(result.stdout)
        return count is None or count > 0

    def remote_tracking_exists(self, branch: str, remote: str = "origin") -> bool:
        """Whether the local ref `<remote>/<branch>` exists. No network access."""
        result = self.runner.git(
            "rev-parse", "--verify", "--quiet", f"refs/remotes/{remote}/{branch}", check=False
        )
        return result.ok

    def branches(self) -> list[BranchInfo]:
        """Local and origin-only branches other than the current one, most recent first."""
        local = self.runner.git("for-each-ref", f"--format={BRANCH_FORMAT}", "refs/heads", check=False)
        remote = self.runner.git(
            "for-each-ref", f"--format={BRANCH_FORMAT}", "refs/remotes/origin", check=False
        )
        return parse_branch_refs(local.stdout, remote.stdout, self.current_branch())

    def stash_list(self) -> list[StashEntry]:
        result = self.runner.git("stash", "list", f"--format={STASH_FORMAT}", check=False)
        return parse_stash_list(result.stdout) if result.ok else []

    def stale_remote_branches(self, remote: str) -> list[str]:
        result = self.runner.git("remote", "prune", remote, "--dry-run", check=False)
        return parse_prune_dry_run(result.stdout) if result.ok else []

    def upstream(self) -> Optional[str]:
        result = self.runner.git(
            "rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}", check=False
        )
        return result.stdout if result.ok and result.stdout else None

    def ahead_behind(self, upstream: str) -> Optional[tuple[int, int]]:
        result = self.runner.git("rev-list", "--left-right", "--count", f"HEAD...{upstream}", check=False)
        return parse_ahead_behind(result.stdout) if result.ok else None

    def commit_count(self, branch: str, exclude: str) -> Optional[int]:
        """Commits reachable from `branch` but not from `exclude`."""
        result = self.runner.git("rev-list", "--count", branch, f"^{exclude}", check=False)
        return parse_count(result.stdout) if result.ok else None

    def reflog(self, count: int = 2) -> list[ReflogEntry]:
        result = self.runner.git("reflog", f"-{count}", f"--format={REFLOG_FORMAT}", check=False)
        return parse_reflog(result.stdout) if result.ok else []

    def git_dir(self) -> Path:
        path = Path(self.runner.git("rev-parse", "--git-dir").stdout)
        if not path.is_absolute() and self.runner.cwd:
            path = Path(self.runner.cwd) / path
        return path

    def in_progress_ops(self) -> list[InProgressOp]:
        """Paused operations, one entry per kind."""
        git_dir = self.git_dir()
        ops: list[InProgressOp] = []
        seen = set()
        for marker, kind, label, abort_args in IN_PROGRESS_MARKERS:
            if kind in seen or not (git_dir / marker).exists():
                continue
            seen.add(kind)
            ops.append(InProgressOp(kind=kind, label=label, abort_args=abort_args, indicator=marker))
        return ops

    def merge_in_progress(self) -> bool:
        return any(op.kind == "merge" for op in self.in_progress_ops())

    def rebase_in_progress(self) -> bool:
        return any(op.kind == "rebase" for op in self.in_progress_ops())

    def cherry_pick_in_progress(self) -> bool:
        return any(op.kind == "cherry-pick" for op in self.in_progress_ops())

    def status_short(self) -> list[str]:
        result = self.runner.git("status", "--short", check=False)
        return [line for line in result.stdout.splitlines() if line.strip()]
