"""Conventional commit message helpers."""

import re
from typing import Optional

COMMIT_TYPES: dict[str, str] = {
    "feat": "New feature",
    "fix": "Bug fix",
    "docs": "Documentation",
    "style": "Code style changes",
    "refactor": "Code refactoring",
    "test": "Testing",
    "chore": "Maintenance",
    "perf": "Performance improvement",
    "ci": "CI/CD changes",
    "build": "Build system changes",
    "revert": "Revert changes",
}

MIN_MESSAGE_LENGTH = 8

_FENCE_RE = re.compile(r"```[\w-]*\n?")
_TITLE_RE = re.compile(r"^(?P<type>[a-z]+)(\([^)]*\))?!?:\s*\S")


def build_commit_message(commit_type: str, description: str, scope: str = "") -> str:
    """'feat', 'add login', 'auth' -> 'feat(auth): add login'."""
    scope = scope.strip()
    head = f"{commit_type}({scope})" if scope else commit_type
    return f"{head}: {description.strip()}"


def is_conventional(message: str) -> bool:
    match = _TITLE_RE.match(message.strip())
    return bool(match) and match.group("type") in COMMIT_TYPES


def clean_ai_message(raw: Optional[str]) -> Optional[str]:
    """Strip fences, quotes and preamble from an AI reply.

    Returns None when what remains is too short to be a commit message.
    """
    if not raw:
        return None
    text = _FENCE_RE.sub("", raw).replace("```", "").replace("`", "")
    text = text.strip().strip('"').strip()

    # Drop any explanatory lines before the conventional commit title
    lines = text.splitlines()
    for i, line in enumerate(lines):
        if is_conventional(line):
            lines = lines[i:]
            break
    text = "\n".join(lines).strip()
    text = re.sub(r"\n{3,}", "\n\n", text)

    return text if len(text) >= MIN_MESSAGE_LENGTH else None
