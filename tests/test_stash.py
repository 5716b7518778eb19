"""Tests for geeto.workflow.stash."""

from geeto.git.facts import STASH_FORMAT
from geeto.workflow.stash import handle_stash

STASH_LIST = ("git", "stash", "list", f"--format={STASH_FORMAT}")
PORCELAIN = ("git", "status", "--porcelain")

TWO = "stash@{0}\x1fWIP on main: 1a2b3c4 fix: typo\x1f1 hour ago\nstash@{1}\x1fOn feat: half-done login\x1f2 days ago"
ONE = "stash@{0}\x1fOn feat: half-done login\x1f2 days ago"


class TestStashChanges:
    def test_with_message_and_untracked(self, make_ctx):
        ctx = make_ctx(answers=["1", "2", "wip login", "2"], responses={PORCELAIN: "?? new.py"})
        assert handle_stash(ctx) is True
        assert ctx.runner.called("git", "stash", "push", "--include-untracked", "-m", "wip login")

    def test_without_message(self, make_ctx):
        ctx = make_ctx(answers=["1", "1", "", "2"], responses={PORCELAIN: " M app.py"})
        assert handle_stash(ctx) is True
        assert ctx.runner.called("git", "stash", "push")

    def test_clean_tree(self, make_ctx, capsys):
        ctx = make_ctx(answers=["1", "2"])
        assert handle_stash(ctx) is False
        assert "Nothing to stash" in capsys.readouterr().out

    def test_exit(self, make_ctx):
        ctx = make_ctx(answers=["2"])
        assert handle_stash(ctx) is False
        assert ctx.runner.calls == [list(STASH_LIST)]


class TestBrowse:
    def test_apply_keeps_entry(self, make_ctx):
        ctx = make_ctx(answers=["2", "2", "1", "5"], responses={STASH_LIST: TWO})
        assert handle_stash(ctx) is True
        assert ctx.runner.called("git", "stash", "apply", "stash@{1}")

    def test_show(self, make_ctx, capsys):
        ctx = make_ctx(
            answers=["2", "1", "3", "5"],
            responses={STASH_LIST: TWO, ("git", "stash", "show"): "+print('hi')"},
        )
        assert handle_stash(ctx) is False
        assert ctx.runner.called("git", "stash", "show", "-p", "stash@{0}")
        assert "+print('hi')" in capsys.readouterr().out

    def test_drop_needs_confirmation(self, make_ctx):
        ctx = make_ctx(answers=["2", "1", "4", "", "5"], responses={STASH_LIST: TWO})
        assert handle_stash(ctx) is False
        assert not ctx.runner.called("git", "stash", "drop", "stash@{0}")

    def test_drop_then_list_refreshes(self, make_ctx, capsys):
        ctx = make_ctx(answers=["2", "1", "4", "y", "5"], responses={STASH_LIST: [TWO, ONE]})
        assert handle_stash(ctx) is True
        assert ctx.runner.called("git", "stash", "drop", "stash@{0}")
        assert "Browse stashes (1)" in capsys.readouterr().out

    def test_pop_conflict_is_reported(self, make_ctx, capsys):
        ctx = make_ctx(
            answers=["2", "1", "2", "5"],
            responses={STASH_LIST: TWO},
            failures={("git", "stash", "pop"): "CONFLICT (content): Merge conflict in app.py"},
        )
        assert handle_stash(ctx) is False
        out = capsys.readouterr().out
        assert "still in the stash list" in out
        assert "git stash failed" in out


class TestPopAndClear:
    def test_pop_latest(self, make_ctx):
        ctx = make_ctx(answers=["3", "2"], responses={STASH_LIST: [ONE, ""]})
        assert handle_stash(ctx) is True
        assert ctx.runner.called("git", "stash", "pop", "stash@{0}")

    def test_clear_declined_by_default(self, make_ctx):
        ctx = make_ctx(answers=["4", "", "5"], responses={STASH_LIST: TWO})
        assert handle_stash(ctx) is False
        assert not ctx.runner.called("git", "stash", "clear")

    def test_clear(self, make_ctx):
        ctx = make_ctx(answers=["4", "y", "2"], responses={STASH_LIST: [TWO, ""]})
        assert handle_stash(ctx) is True
        assert ctx.runner.called("git", "stash", "clear")
