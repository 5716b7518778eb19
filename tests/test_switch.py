"""Tests for geeto.workflow.switch."""

from geeto.git.facts import BRANCH_FORMAT, COMMIT_FORMAT
from geeto.workflow.switch import handle_switch

LOCAL = ("git", "for-each-ref", f"--format={BRANCH_FORMAT}", "refs/heads")
REMOTE = ("git", "for-each-ref", f"--format={BRANCH_FORMAT}", "refs/remotes/origin")
CURRENT = ("git", "branch", "--show-current")
UPSTREAM = ("git", "rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}")
AHEAD_BEHIND = ("git", "rev-list", "--left-right", "--count")
LAST = ("git", "log", "-1", f"--format={COMMIT_FORMAT}")

BRANCHES = {
    CURRENT: "main",
    LOCAL: "main\x1fnow\x1f9\nfeat\x1f1 day ago\x1f8",
    REMOTE: "origin/HEAD\x1fnow\x1f9\norigin/hotfix\x1f2 days ago\x1f7",
}


class TestHandleSwitch:
    def test_local_branch(self, make_ctx):
        ctx = make_ctx(answers=["1"], responses=BRANCHES)
        assert handle_switch(ctx) is True
        assert ctx.runner.called("git", "switch", "feat")

    def test_remote_branch_is_tracked(self, make_ctx):
        ctx = make_ctx(answers=["2"], responses=BRANCHES)
        assert handle_switch(ctx) is True
        assert ctx.runner.called("git", "switch", "-c", "hotfix", "--track", "origin/hotfix")

    def test_falls_back_to_checkout(self, make_ctx):
        ctx = make_ctx(
            answers=["1"],
            responses=BRANCHES,
            failures={("git", "switch"): "git: 'switch' is not a git command"},
        )
        assert handle_switch(ctx) is True
        assert ctx.runner.called("git", "checkout", "feat")

    def test_new_branch(self, make_ctx):
        ctx = make_ctx(
            answers=["3", "dev/login"],
            responses=BRANCHES,
            failures={("git", "rev-parse", "--verify", "--quiet", "refs/heads/dev/login"): ""},
        )
        assert handle_switch(ctx) is True
        assert ctx.runner.called("git", "switch", "-c", "dev/login")

    def test_new_branch_name_taken(self, make_ctx, capsys):
        ctx = make_ctx(
            answers=["3", "feat", "dev/login"],
            responses=BRANCHES,
            failures={("git", "rev-parse", "--verify", "--quiet", "refs/heads/dev/login"): ""},
        )
        assert handle_switch(ctx) is True
        assert "'feat' already exists" in capsys.readouterr().out

    def test_cancel(self, make_ctx):
        ctx = make_ctx(answers=["4"], responses=BRANCHES)
        assert handle_switch(ctx) is False
        assert not any(c[:2] == ["git", "switch"] for c in ctx.runner.calls)

    def test_blocked_by_local_changes(self, make_ctx, capsys):
        ctx = make_ctx(
            answers=["1"],
            responses=BRANCHES,
            failures={
                ("git", "switch"): "error: Your local changes to the following files would be overwritten",
                ("git", "checkout"): "error: Your local changes to the following files would be overwritten",
            },
        )
        assert handle_switch(ctx) is False
        assert "geeto stash" in capsys.readouterr().out

    def test_shows_position(self, make_ctx, capsys):
        responses = dict(BRANCHES)
        responses.update(
            {
                UPSTREAM: "origin/feat",
                AHEAD_BEHIND: "1\t3",
                LAST: "\x1f".join(["c" * 40, "ccccccc", "feat: login", "Ana", "1 day ago"]),
            }
        )
        ctx = make_ctx(answers=["1"], responses=responses)
        handle_switch(ctx)
        out = capsys.readouterr().out
        assert "feat: login" in out
        assert "1 ahead, 3 behind" in out
        assert "geeto pull" in out
