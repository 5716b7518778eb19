"""Exception types raised across geeto."""

from typing import Optional


class GeetoError(Exception):
    """Base class for geeto errors."""


class GitCommandError(GeetoError):
    """A git command exited with a failing status."""

    def __init__(self, args: list[str], returncode: int, stdout: str = "", stderr: str = ""):
        self.cmd = list(args)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(self._format())

    def _format(self) -> str:
        detail = (self.stderr or self.stdout).strip()
        msg = f"{' '.join(self.cmd)} failed (exit {self.returncode})"
        return f"{msg}: {detail[:500]}" if detail else msg

    @property
    def output(self) -> str:
        """Combined stdout and stderr, for message matching."""
        return f"{self.stdout}\n{self.stderr}"


class WorkflowCancelled(GeetoError):
    """The user chose to stop the wizard."""

    def __init__(self, reason: Optional[str] = None):
        super().__init__(reason or "Cancelled by user")
