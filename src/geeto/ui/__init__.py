"""Terminal UI: colored output, prompts and progress display."""

from geeto.ui.output import (
    BLUE,
    GRAY,
    GREEN,
    MAGENTA,
    NC,
    RED,
    YELLOW,
    error,
    hint,
    hyperlink,
    log,
    step,
    success,
    warn,
)
from geeto.ui.progress import ProgressBar
from geeto.ui.prompts import Prompter

__all__ = [
    # Colors
    "RED",
    "GREEN",
    "YELLOW",
    "BLUE",
    "GRAY",
    "MAGENTA",
    "NC",
    # Output
    "log",
    "success",
    "warn",
    "error",
    "hint",
    "step",
    "hyperlink",
    # Interactive
    "Prompter",
    "ProgressBar",
]
