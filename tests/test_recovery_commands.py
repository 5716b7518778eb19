"""Tests for geeto.workflow.abort and geeto.workflow.status."""

from geeto.models.state import Step, WorkflowState
from geeto.workflow.abort import handle_abort
from geeto.workflow.status import handle_status

GIT_DIR = ("git", "rev-parse", "--git-dir")
UPSTREAM = ("git", "rev-parse", "--abbrev-ref")
AHEAD_BEHIND = ("git", "rev-list", "--left-right")


class TestHandleAbort:
    def test_nothing_in_progress(self, make_ctx, tmp_path):
        ctx = make_ctx(responses={GIT_DIR: str(tmp_path)})
        assert handle_abort(ctx) is False
        assert ctx.runner.calls == [["git", "rev-parse", "--git-dir"]]

    def test_single_operation_confirmed(self, make_ctx, tmp_path):
        (tmp_path / "CHERRY_PICK_HEAD").write_text("abc\n")
        ctx = make_ctx(answers=["y"], responses={GIT_DIR: str(tmp_path)})
        assert handle_abort(ctx) is True
        assert ctx.runner.calls[-1] == ["git", "cherry-pick", "--abort"]

    def test_single_operation_declined(self, make_ctx, tmp_path):
        (tmp_path / "MERGE_HEAD").write_text("abc\n")
        ctx = make_ctx(answers=["n"], responses={GIT_DIR: str(tmp_path)})
        assert handle_abort(ctx) is False
        assert not ctx.runner.called("git", "merge", "--abort")

    def test_choose_among_several(self, make_ctx, tmp_path):
        (tmp_path / "MERGE_HEAD").write_text("abc\n")
        (tmp_path / "rebase-apply").mkdir()
        (tmp_path / "rebase-merge").mkdir()
        ctx = make_ctx(answers=["2"], responses={GIT_DIR: str(tmp_path)})
        assert handle_abort(ctx) is True
        assert ctx.runner.calls[-1] == ["git", "rebase", "--abort"]
        assert ctx.runner.calls.count(["git", "rebase", "--abort"]) == 1


class TestHandleStatus:
    def test_no_saved_workflow_no_upstream(self, make_ctx, capsys):
        ctx = make_ctx(failures={UPSTREAM: "fatal: no upstream configured"})
        handle_status(ctx)
        out = capsys.readouterr().out
        assert "No saved workflow" in out
        assert "No upstream" in out

    def test_saved_workflow_and_counts(self, make_ctx, capsys):
        ctx = make_ctx(
            responses={
                ("git", "branch", "--show-current"): "feat",
                UPSTREAM: "origin/feat",
                AHEAD_BEHIND: "2\t1",
            }
        )
        ctx.store.save(WorkflowState(step=Step.PUSHED, working_branch="feat", skipped_push=True))
        handle_status(ctx)
        out = capsys.readouterr().out
        assert "Pushed" in out
        assert "working branch: feat" in out
        assert "push was skipped" in out
        assert "origin/feat: 2 ahead, 1 behind" in out
