"""Debug logging utilities."""

import json
import time
from pathlib import Path

from geeto.ui.output import GRAY, MAGENTA, NC

DEBUG_LOG = Path(".geeto/debug.log")


def debug_log(enabled: bool, label: str, data, echo: bool = True) -> None:
    """Append debug info to log file if debug mode enabled."""
    if not enabled:
        return

    DEBUG_LOG.parent.mkdir(parents=True, exist_ok=True)
    timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
    with open(DEBUG_LOG, "a") as f:
        f.write(f"\n{'=' * 60}\n")
        f.write(f"[{timestamp}] {label}\n")
        f.write(f"{'=' * 60}\n")
        if isinstance(data, str):
            try:
                parsed = json.loads(data)
                f.write(json.dumps(parsed, indent=2))
            except json.JSONDecodeError:
                f.write(data)
        else:
            f.write(json.dumps(data, indent=2, default=str))
        f.write("\n")
    if echo:
        print(f"\r\033[K{MAGENTA}[debug]{NC} {label}  {GRAY}-> {DEBUG_LOG}{NC}")
