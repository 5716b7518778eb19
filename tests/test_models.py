"""Tests for geeto.models.core and geeto.models.state."""

import pytest
import time_machine

from geeto.errors import GitCommandError, WorkflowCancelled
from geeto.models.core import AIProvider, Issue, PullRequest, TrelloCard
from geeto.models.state import Step, WorkflowState


class TestStep:
    def test_ordered(self):
        assert list(Step) == sorted(Step)
        assert Step.NONE < Step.STAGED < Step.CLEANUP

    @pytest.mark.parametrize("value,expected", [(3, Step.COMMITTED), (0, Step.NONE), (6, Step.CLEANUP)])
    def test_coerce(self, value, expected):
        assert Step.coerce(value) == expected

    @pytest.mark.parametrize("value", [7, -1, "3", None, True, 2.0])
    def test_coerce_invalid(self, value):
        assert Step.coerce(value) == Step.NONE

    def test_label(self):
        assert Step.PUSHED.label == "Pushed"


class TestWorkflowState:
    def test_to_dict_uses_camel_case(self):
        state = WorkflowState(
            step=Step.MERGED,
            working_branch="feat",
            current_branch="main",
            target_branch="main",
            staged_files=2,
            ai_provider="gemini",
            timestamp="2026-01-01T12:00:00",
        )
        assert state.to_dict() == {
            "step": 5,
            "workingBranch": "feat",
            "currentBranch": "main",
            "targetBranch": "main",
            "stagedFiles": 2,
            "skippedPush": False,
            "skippedCommit": False,
            "aiProvider": "gemini",
            "timestamp": "2026-01-01T12:00:00",
        }

    def test_optional_fields_omitted(self):
        data = WorkflowState().to_dict()
        assert "targetBranch" not in data
        assert "commitMessage" not in data
        assert "aiProvider" not in data

    def test_from_dict_tolerates_bad_values(self):
        state = WorkflowState.from_dict({"step": 99, "stagedFiles": "many", "workingBranch": None})
        assert state.step == Step.NONE
        assert state.staged_files == 0
        assert state.working_branch == ""

    def test_from_dict(self):
        state = WorkflowState.from_dict(
            {"step": 4, "workingBranch": "feat", "skippedPush": True, "commitMessage": "feat: x"}
        )
        assert state.step == Step.PUSHED
        assert state.skipped_push is True
        assert state.commit_message == "feat: x"

    def test_reset_keeps_provider(self):
        state = WorkflowState(step=Step.PUSHED, working_branch="feat", target_branch="main", ai_provider="copilot")
        fresh = state.reset("main")
        assert fresh.step == Step.NONE
        assert fresh.working_branch == "main"
        assert fresh.target_branch is None
        assert fresh.ai_provider == "copilot"

    @time_machine.travel("2026-03-04 12:00:00", tick=False)
    def test_touch(self):
        state = WorkflowState(timestamp="old")
        state.touch()
        assert state.timestamp.startswith("2026-03-04T")


class TestAIProvider:
    def test_parse(self):
        assert AIProvider.parse("Gemini ") == AIProvider.GEMINI
        assert AIProvider.parse("nope") is None
        assert AIProvider.parse(None) is None


class TestRemoteModels:
    def test_trello_card(self):
        card = TrelloCard.from_dict({"id": "c1", "name": "Fix login", "idShort": 42, "idList": "l1"})
        assert card.id_short == 42
        assert card.list_id == "l1"

    def test_pull_request(self):
        pr = PullRequest.from_dict(
            {"number": 5, "title": "x", "html_url": "https://gh/5", "head": {"ref": "feat"}, "base": {"ref": "main"}}
        )
        assert pr.url == "https://gh/5"
        assert (pr.head, pr.base) == ("feat", "main")

    def test_issue_labels(self):
        issue = Issue.from_dict({"number": 1, "title": "t", "labels": [{"name": "bug"}, "weird"]})
        assert issue.labels == ["bug"]


class TestErrors:
    def test_git_command_error_output(self):
        err = GitCommandError(["git", "push"], 1, "out", "err")
        assert err.output == "out\nerr"
        assert err.cmd == ["git", "push"]

    def test_git_command_error_without_detail(self):
        assert str(GitCommandError(["git", "push"], 128)) == "git push failed (exit 128)"

    def test_workflow_cancelled_default(self):
        assert str(WorkflowCancelled()) == "Cancelled by user"
