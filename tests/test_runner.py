"""Tests for geeto.git.runner."""

import subprocess

import pytest

from geeto.errors import GitCommandError
from geeto.git.runner import CommandRunner, is_mutating_command, is_read_only_command


class TestIsReadOnlyCommand:
    @pytest.mark.parametrize(
        "args",
        [
            ["git", "status", "--porcelain"],
            ["git", "log", "-1", "--format=%s"],
            ["git", "diff", "--cached"],
            ["git", "rev-parse", "--git-dir"],
            ["git", "reflog", "-2"],
            ["git", "branch"],
            ["git", "branch", "--show-current"],
            ["git", "branch", "--format=%(refname:short)"],
            ["git", "branch", "--list", "dev/*"],
            ["git", "stash", "list"],
            ["git", "stash", "show", "-p", "stash@{0}"],
            ["git", "remote"],
            ["git", "remote", "get-url", "origin"],
            ["git", "remote", "prune", "origin", "--dry-run"],
            ["git", "diff-tree", "--no-commit-id", "--name-only", "-r", "HEAD"],
            ["git", "fetch", "--all", "--quiet"],
        ],
    )
    def test_read_only(self, args):
        assert is_read_only_command(args)
        assert not is_mutating_command(args)

    @pytest.mark.parametrize(
        "args",
        [
            ["git", "add", "-A"],
            ["git", "commit", "-m", "x"],
            ["git", "push", "origin", "main"],
            ["git", "checkout", "-b", "feat"],
            ["git", "branch", "development", "main"],
            ["git", "branch", "-d", "feat"],
            ["git", "branch", "--set-upstream-to=origin/main"],
            ["git", "stash"],
            ["git", "reset", "--hard", "HEAD~1"],
            ["git", "stash", "pop", "stash@{0}"],
            ["git", "remote", "prune", "origin"],
            ["git", "remote", "add", "upstream", "git@example.com:x/y.git"],
            ["git", "-c", "sequence.editor=true", "rebase", "-i", "HEAD~2"],
            ["git", "fetch", "--all", "--prune"],
            ["git", "cherry-pick", "abc1234"],
            ["git", "switch", "main"],
        ],
    )
    def test_mutating(self, args):
        assert is_mutating_command(args)

    def test_gh(self):
        assert is_mutating_command(["gh", "pr", "create"])
        assert not is_mutating_command(["gh", "pr", "list"])

    def test_empty(self):
        assert not is_mutating_command([])


class TestCommandRunner:
    def test_success(self, mock_subprocess):
        mock_subprocess.return_value = subprocess.CompletedProcess([], 0, stdout="main\n", stderr="")
        runner = CommandRunner()
        result = runner.git("branch", "--show-current")
        assert result.ok
        assert result.stdout == "main"
        assert runner.history == [["git", "branch", "--show-current"]]
        mock_subprocess.assert_called_once_with(
            ["git", "branch", "--show-current"], capture_output=True, text=True, cwd=None
        )

    def test_failure_raises(self, mock_subprocess):
        mock_subprocess.return_value = subprocess.CompletedProcess([], 1, stdout="", stderr="fatal: nope\n")
        with pytest.raises(GitCommandError) as exc:
            CommandRunner().git("checkout", "missing")
        assert exc.value.returncode == 1
        assert exc.value.stderr == "fatal: nope"
        assert "git checkout missing failed (exit 1): fatal: nope" in str(exc.value)

    def test_failure_without_check(self, mock_subprocess):
        mock_subprocess.return_value = subprocess.CompletedProcess([], 2, stdout="", stderr="bad")
        result = CommandRunner().git("ls-remote", "origin", check=False)
        assert not result.ok
        assert result.stderr == "bad"

    def test_diff_exit_1_is_not_an_error(self, mock_subprocess):
        mock_subprocess.return_value = subprocess.CompletedProcess([], 1, stdout="", stderr="")
        result = CommandRunner().git("diff", "--quiet")
        assert result.returncode == 1

    def test_dry_run_simulates_mutations(self, mock_subprocess, capsys):
        runner = CommandRunner(dry_run=True)
        result = runner.git("push", "origin", "main")
        assert result.ok
        mock_subprocess.assert_not_called()
        assert runner.simulated == [["git", "push", "origin", "main"]]
        out = capsys.readouterr().out
        assert "Would run:" in out
        assert "git push origin main" in out

    def test_dry_run_still_runs_queries(self, mock_subprocess):
        runner = CommandRunner(dry_run=True)
        runner.git("status", "--porcelain")
        mock_subprocess.assert_called_once()
        assert runner.simulated == []

    def test_dry_run_summary(self, mock_subprocess, capsys):
        runner = CommandRunner(dry_run=True)
        runner.git("add", "-A")
        runner.git("commit", "-m", "feat: x")
        capsys.readouterr()
        runner.print_dry_run_summary()
        out = capsys.readouterr().out
        assert "2 command(s)" in out
        assert "git commit -m feat: x" in out

    def test_summary_silent_outside_dry_run(self, capsys):
        CommandRunner().print_dry_run_summary()
        assert capsys.readouterr().out == ""

    def test_debug_logs_commands(self, mock_subprocess, mocker):
        debug = mocker.patch("geeto.git.runner.debug_log")
        CommandRunner(debug=True).git("status")
        debug.assert_called_once()
        assert debug.call_args.args[0] is True
        assert debug.call_args.args[1] == "git status"
        assert debug.call_args.kwargs == {"echo": False}
