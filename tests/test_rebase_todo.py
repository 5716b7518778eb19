"""Tests for geeto.git.rebase_todo."""

import json
import sys

from geeto.git.rebase_todo import main, rewrite_todo, sequence_editor_command

TODO = """pick 1a2b3c4 feat: first
pick 5d6e7f8 fix: second

# Rebase 0abc..5d6e7f8 onto 0abc (2 commands)
# pick <commit> = use commit
"""


class TestRewriteTodo:
    def test_adds_amend_after_planned_pick(self):
        plan = {"5d6e7f8" + "0" * 33: "/tmp/msg-0.txt"}
        lines = rewrite_todo(TODO, plan).splitlines()
        assert lines[0] == "pick 1a2b3c4 feat: first"
        assert lines[1] == "pick 5d6e7f8 fix: second"
        assert lines[2] == "exec git commit --amend --no-verify --allow-empty -F /tmp/msg-0.txt"

    def test_comments_untouched(self):
        plan = {"1a2b3c4": "/tmp/a.txt"}
        out = rewrite_todo(TODO, plan)
        assert out.count("exec ") == 1
        assert "# pick <commit> = use commit" in out

    def test_quotes_paths(self):
        out = rewrite_todo("pick 1a2b3c4 x\n", {"1a2b3c4": "/tmp/my dir/msg.txt"})
        assert out.endswith("-F '/tmp/my dir/msg.txt'\n")

    def test_empty_plan(self):
        assert rewrite_todo(TODO, {}).count("exec") == 0


class TestMain:
    def test_rewrites_todo_file(self, tmp_path):
        plan = tmp_path / "plan.json"
        plan.write_text(json.dumps({"1a2b3c4ffff": str(tmp_path / "m.txt")}))
        todo = tmp_path / "git-rebase-todo"
        todo.write_text(TODO)
        assert main([str(plan), str(todo)]) == 0
        assert "exec git commit --amend" in todo.read_text()

    def test_usage(self, capsys):
        assert main(["only-one"]) == 2
        assert "usage" in capsys.readouterr().err


class TestSequenceEditorCommand:
    def test_runs_this_module(self, tmp_path):
        command = sequence_editor_command(tmp_path / "plan.json")
        assert command.startswith(sys.executable) or command.startswith(f"'{sys.executable}")
        assert "-m geeto.git.rebase_todo" in command
        assert command.endswith("plan.json")
