"""Checkpoint persistence in .geeto/state.json."""

import json
from pathlib import Path
from typing import Optional

from geeto.config.utils import GEETO_DIR, ensure_geeto_ignored
from geeto.models.state import WorkflowState
from geeto.ui.output import warn

STATE_FILE = GEETO_DIR / "state.json"


class StateStore:
    """Whole-file JSON read/write of the wizard checkpoint."""

    def __init__(self, path: Path = STATE_FILE, manage_gitignore: bool = True):
        self.path = path
        self.manage_gitignore = manage_gitignore

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Optional[WorkflowState]:
        """Saved checkpoint, or None when there is none or it cannot be read."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            warn(f"Ignoring unreadable {self.path}: {e}")
            return None
        if not isinstance(data, dict):
            warn(f"Ignoring malformed {self.path}")
            return None
        return WorkflowState.from_dict(data)

    def save(self, state: WorkflowState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(state.to_dict(), indent=2) + "\n")
        if self.manage_gitignore:
            ensure_geeto_ignored()

    def reset(self, state: Optional[WorkflowState] = None, branch: str = "") -> WorkflowState:
        """Clear progress but keep the AI provider; writes the fresh state."""
        fresh = (state or WorkflowState()).reset(branch)
        self.save(fresh)
        return fresh

    def clear(self) -> bool:
        """Delete the checkpoint file. True if one existed."""
        if not self.path.exists():
            return False
        self.path.unlink()
        return True
