"""Wizard checkpoint persistence."""

from geeto.state.store import STATE_FILE, StateStore

__all__ = [
    "STATE_FILE",
    "StateStore",
]
