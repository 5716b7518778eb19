"""Tests for geeto.cli."""

import pytest

from geeto.cli import (
    COMMAND_HANDLERS,
    COMMANDS,
    DRY_RUN_STATE_FILE,
    build_context,
    handle_reset,
    main,
    parse_args,
    run_wizard,
)
from geeto.errors import GitCommandError, WorkflowCancelled
from geeto.models.core import StartAt
from geeto.models.state import RunConfig, Step, WorkflowState


class TestParseArgs:
    def test_defaults(self):
        config = parse_args([])
        assert config == RunConfig()

    def test_command(self):
        assert parse_args(["undo"]).command == "undo"

    @pytest.mark.parametrize("flag,start_at", [(f"--{s.value}", s) for s in StartAt])
    def test_start_at_flags(self, flag, start_at):
        assert parse_args([flag]).start_at == start_at

    def test_start_at_flags_exclusive(self):
        with pytest.raises(SystemExit):
            parse_args(["--commit", "--push"])

    def test_fresh_and_resume_conflict(self):
        with pytest.raises(SystemExit):
            parse_args(["--fresh", "--resume"])

    def test_options(self):
        config = parse_args(["-a", "--dry-run", "--debug", "--provider", "gemini"])
        assert config.stage_all is True
        assert config.dry_run is True
        assert config.debug is True
        assert config.provider == "gemini"

    def test_unknown_provider(self):
        with pytest.raises(SystemExit):
            parse_args(["--provider", "nope"])

    def test_unknown_command(self):
        with pytest.raises(SystemExit):
            parse_args(["deploy"])

    @pytest.mark.parametrize("flag", ["-y", "--yes"])
    def test_yes(self, flag):
        assert parse_args([flag]).yes is True

    @pytest.mark.parametrize(
        "command", ["amend", "reword", "revert", "switch", "cherry-pick", "stash", "pull", "fetch", "prune"]
    )
    def test_git_workflow_commands(self, command):
        assert parse_args([command]).command == command


class TestCommandHandlers:
    def test_every_command_dispatches(self):
        assert set(COMMAND_HANDLERS) == (set(COMMANDS) - {"init"}) | {None}


class TestBuildContext:
    @pytest.fixture(autouse=True)
    def isolated(self, mocker, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        mocker.patch("geeto.cli.get_config", return_value={})
        mocker.patch("geeto.cli.TrelloConfig.load", return_value=None)

    def test_dry_run_store_leaves_gitignore_alone(self, tmp_path):
        ctx = build_context(RunConfig(dry_run=True))
        assert ctx.store.path == DRY_RUN_STATE_FILE
        assert ctx.store.manage_gitignore is False
        ctx.store.save(WorkflowState(step=Step.STAGED))
        assert not (tmp_path / ".gitignore").exists()

    def test_real_store_manages_gitignore(self, tmp_path):
        ctx = build_context(RunConfig())
        ctx.store.save(WorkflowState(step=Step.STAGED))
        assert ".geeto" in (tmp_path / ".gitignore").read_text()

    def test_yes_takes_defaults(self):
        assert build_context(RunConfig(yes=True)).prompter.assume_defaults is True
        assert build_context(RunConfig()).prompter.assume_defaults is False


class TestHandleReset:
    def test_nothing_saved(self, make_ctx):
        assert handle_reset(make_ctx()) is False

    def test_reset_keeps_provider(self, make_ctx):
        ctx = make_ctx(answers=["y"], responses={("git", "branch", "--show-current"): "main"})
        ctx.store.save(WorkflowState(step=Step.PUSHED, working_branch="feat", ai_provider="gemini"))
        assert handle_reset(ctx) is True
        saved = ctx.store.load()
        assert saved.step == Step.NONE
        assert saved.working_branch == "main"
        assert saved.ai_provider == "gemini"

    def test_declined(self, make_ctx):
        ctx = make_ctx(answers=[""])
        ctx.store.save(WorkflowState(step=Step.PUSHED))
        assert handle_reset(ctx) is False
        assert ctx.store.load().step == Step.PUSHED


class TestRunWizard:
    def test_dry_run_clears_state_file(self, make_ctx, mocker):
        mocker.patch("geeto.cli.run_workflow", return_value=False)
        ctx = make_ctx(config=RunConfig(dry_run=True))
        run_wizard(ctx)
        assert not ctx.store.exists()

    def test_provider_from_settings(self, make_ctx, mocker):
        mocker.patch("geeto.cli.run_workflow", return_value=True)
        build = mocker.patch("geeto.cli.build_ai_client")
        ctx = make_ctx(settings={"ai": {"provider": "copilot"}})
        run_wizard(ctx)
        build.assert_called_once_with("copilot", ctx.settings)
        assert ctx.state.ai_provider == "copilot"


class TestMain:
    @pytest.fixture
    def ctx(self, mocker):
        ctx = mocker.MagicMock()
        ctx.facts.is_inside_work_tree.return_value = True
        mocker.patch("geeto.cli.build_context", return_value=ctx)
        return ctx

    def _run(self, monkeypatch, *argv):
        monkeypatch.setattr("sys.argv", ["geeto", *argv])
        with pytest.raises(SystemExit) as exc:
            main()
        return exc.value.code

    def test_not_a_repository(self, ctx, monkeypatch):
        ctx.facts.is_inside_work_tree.return_value = False
        assert self._run(monkeypatch, "status") == 1

    def test_git_error_exits_1(self, ctx, mocker, monkeypatch):
        failing = mocker.Mock(side_effect=GitCommandError(["git", "reset"], 128, "", "fatal"))
        mocker.patch.dict("geeto.cli.COMMAND_HANDLERS", {"undo": failing})
        assert self._run(monkeypatch, "undo") == 1

    def test_cancel_exits_0(self, ctx, mocker, monkeypatch):
        mocker.patch.dict("geeto.cli.COMMAND_HANDLERS", {None: mocker.Mock(side_effect=WorkflowCancelled())})
        assert self._run(monkeypatch) == 0

    def test_interrupt_exits_130(self, ctx, mocker, monkeypatch):
        mocker.patch.dict("geeto.cli.COMMAND_HANDLERS", {"abort": mocker.Mock(side_effect=KeyboardInterrupt)})
        assert self._run(monkeypatch, "abort") == 130

    def test_dispatch(self, ctx, mocker, monkeypatch):
        status = mocker.Mock()
        mocker.patch.dict("geeto.cli.COMMAND_HANDLERS", {"status": status})
        monkeypatch.setattr("sys.argv", ["geeto", "status"])
        main()
        status.assert_called_once_with(ctx)

    def test_init(self, mocker, monkeypatch):
        mocker.patch("geeto.init.run_init", return_value=True)
        build = mocker.patch("geeto.cli.build_context")
        assert self._run(monkeypatch, "init") == 0
        build.assert_not_called()
