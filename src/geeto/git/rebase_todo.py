"""Sequence editor for `git rebase -i` that gives picked commits new messages.

git runs it as `<python> -m geeto.git.rebase_todo <plan.json> <todo file>`. The plan
maps full commit hashes to files holding their new message. Every matching `pick`
line gets an `exec` line after it that amends the freshly picked commit.
"""

import json
import shlex
import sys
from pathlib import Path
from typing import Optional

PICK_COMMANDS = ("pick", "p")


def sequence_editor_command(plan_file: Path) -> str:
    """Value for `-c sequence.editor=...`; git appends the todo file path."""
    return f"{shlex.quote(sys.executable)} -m geeto.git.rebase_todo {shlex.quote(str(plan_file))}"


def _message_file(abbrev: str, plan: dict[str, str]) -> Optional[str]:
    for full_hash, path in plan.items():
        if full_hash.startswith(abbrev):
            return path
    return None


def rewrite_todo(todo: str, plan: dict[str, str]) -> str:
    lines = []
    for line in todo.splitlines():
        lines.append(line)
        parts = line.split()
        if len(parts) < 2 or parts[0] not in PICK_COMMANDS:
            continue
        path = _message_file(parts[1], plan)
        if path:
            lines.append(f"exec git commit --amend --no-verify --allow-empty -F {shlex.quote(path)}")
    return "\n".join(lines) + "\n"


def main(argv: Optional[list[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 2:
        print("usage: python -m geeto.git.rebase_todo <plan.json> <todo>", file=sys.stderr)
        return 2
    plan = json.loads(Path(args[0]).read_text())
    todo = Path(args[1])
    todo.write_text(rewrite_todo(todo.read_text(), plan))
    return 0


if __name__ == "__main__":
    sys.exit(main())
