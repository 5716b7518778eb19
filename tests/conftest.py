"""Shared test fixtures."""

import json
import subprocess

import pytest

from geeto.clients.ai import UnavailableClient
from geeto.errors import GitCommandError
from geeto.git.facts import GitFacts
from geeto.git.runner import CommandResult, CommandRunner, is_mutating_command
from geeto.models.state import RunConfig, Step, WorkflowContext, WorkflowState
from geeto.state.store import StateStore
from geeto.ui.prompts import Prompter

DEFAULT_SETTINGS = {
    "ai": {"provider": "manual", "models": {}, "max_diff_chars": 4000},
    "branch": {"separator": "-"},
    "merge": {
        "priority": ["development", "develop", "dev", "main", "master"],
        "offer_development": True,
    },
    "push": {"max_attempts": 3},
    "cleanup": {"protected": ["main", "master"]},
    "undo": {"status_preview": 10},
}


class FakeRunner(CommandRunner):
    """CommandRunner that never spawns processes.

    `responses` and `failures` are keyed by argv prefixes; the longest matching
    prefix wins. A response may be a list, consumed one item per call (the last
    item repeats). A failure value is the stderr of a GitCommandError.
    """

    def __init__(self, responses=None, failures=None, dry_run=False):
        super().__init__(dry_run=dry_run)
        self.responses = dict(responses or {})
        self.failures = dict(failures or {})
        self.calls: list[list[str]] = []

    @staticmethod
    def _match(table, args):
        best = None
        for key in table:
            if tuple(args[: len(key)]) == key and (best is None or len(key) > len(best)):
                best = key
        return best

    def run(self, args, check=True):
        args = list(args)
        if self.dry_run and is_mutating_command(args):
            self.simulated.append(args)
            return CommandResult(args, 0)
        self.calls.append(args)

        key = self._match(self.failures, args)
        if key is not None:
            stderr = self.failures[key]
            if check:
                raise GitCommandError(args, 1, "", stderr)
            return CommandResult(args, 1, "", stderr)

        key = self._match(self.responses, args)
        out = self.responses[key] if key is not None else ""
        if isinstance(out, list):
            out = out.pop(0) if len(out) > 1 else out[0]
        return CommandResult(args, 0, out)

    def called(self, *args) -> bool:
        return list(args) in self.calls


class RecordingStore(StateStore):
    """StateStore in tmp_path that remembers every checkpoint it was given."""

    def __init__(self, path):
        super().__init__(path, manage_gitignore=False)
        self.saved: list[WorkflowState] = []

    def save(self, state):
        self.saved.append(WorkflowState.from_dict(state.to_dict()))
        super().save(state)

    @property
    def saved_steps(self) -> list[Step]:
        return [s.step for s in self.saved]


def scripted_prompter(*answers) -> Prompter:
    """Prompter fed from a fixed list of answers; an extra prompt fails the test."""
    queue = list(answers)

    def _input(prompt):
        if not queue:
            raise AssertionError(f"Unexpected prompt: {prompt!r}")
        return queue.pop(0)

    return Prompter(input_fn=_input)


@pytest.fixture
def make_ctx(tmp_path):
    """Factory for a WorkflowContext wired to a FakeRunner and scripted answers."""

    def _make(
        answers=(),
        responses=None,
        failures=None,
        config=None,
        settings=None,
        ai=None,
        trello=None,
        **state_fields,
    ):
        config = config or RunConfig()
        runner = FakeRunner(responses, failures, dry_run=config.dry_run)
        return WorkflowContext(
            runner=runner,
            facts=GitFacts(runner),
            store=RecordingStore(tmp_path / "state.json"),
            prompter=scripted_prompter(*answers),
            ai=ai or UnavailableClient(),
            config=config,
            settings=settings if settings is not None else DEFAULT_SETTINGS,
            state=WorkflowState(**state_fields),
            trello=trello,
        )

    return _make


@pytest.fixture
def no_progress(mocker):
    """Replace the threaded progress bar in the step handlers."""
    return mocker.patch("geeto.workflow.steps.ProgressBar")


@pytest.fixture
def reset_config_cache():
    import geeto.config.settings as settings

    settings._config = None
    settings._loaded_sources = []
    yield
    settings._config = None
    settings._loaded_sources = []


@pytest.fixture
def reset_prompts_cache():
    import geeto.config.prompts as prompts

    prompts._prompts = None
    prompts._loaded_sources = []
    yield
    prompts._prompts = None
    prompts._loaded_sources = []


@pytest.fixture
def mock_subprocess(mocker):
    """Mock subprocess.run returning success by default."""
    mock = mocker.patch("subprocess.run")
    mock.return_value = subprocess.CompletedProcess([], 0, stdout="", stderr="")
    return mock


@pytest.fixture
def mock_urlopen(mocker):
    """Factory patching urlopen in a module to return a JSON body."""

    def _patch(target, payload):
        mock_resp = mocker.MagicMock()
        mock_resp.read.return_value = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        mock_resp.__enter__ = mocker.MagicMock(return_value=mock_resp)
        mock_resp.__exit__ = mocker.MagicMock(return_value=False)
        return mocker.patch(target, return_value=mock_resp)

    return _patch
