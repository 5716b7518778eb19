"""Shared utilities for config loading and the .geeto directory."""

from pathlib import Path
from typing import Optional

import yaml

GEETO_DIR = Path(".geeto")
GITIGNORE = Path(".gitignore")
IGNORE_ENTRY = ".geeto"


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base. Dicts merge, lists/scalars replace."""
    merged = base.copy()
    for key, val in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(val, dict):
            merged[key] = deep_merge(merged[key], val)
        else:
            merged[key] = val
    return merged


def load_yaml(path: Path) -> Optional[dict]:
    """Load YAML file, return None if missing or empty."""
    if not path.exists():
        return None
    with open(path) as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else None


def get_nested(data: dict, dotted: str, default=None):
    """get_nested(cfg, "push.max_attempts") with a fallback for missing keys."""
    node = data
    for part in dotted.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def ensure_geeto_ignored(gitignore: Path = GITIGNORE) -> bool:
    """Add .geeto to .gitignore unless already listed. Returns True if the file changed."""
    text = gitignore.read_text() if gitignore.exists() else ""
    for line in text.splitlines():
        if line.strip().rstrip("/") in (IGNORE_ENTRY, f"/{IGNORE_ENTRY}"):
            return False
    with open(gitignore, "a") as f:
        if text and not text.endswith("\n"):
            f.write("\n")
        f.write(f"# geeto local state\n{IGNORE_ENTRY}\n")
    return True
