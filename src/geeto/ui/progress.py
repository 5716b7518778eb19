"""Live progress bar for long-running git commands such as push."""

import threading
import time
from typing import Optional

from geeto.ui.output import BLUE, GRAY, GREEN, NC, log
from geeto.utils.formatting import fmt_duration

BAR_WIDTH = 30
# The bar never claims completion before the command returns
CEILING = 95


def render_bar(percent: int, width: int = BAR_WIDTH) -> str:
    percent = max(0, min(100, percent))
    filled = width * percent // 100
    return f"[{'█' * filled}{'░' * (width - filled)}] {percent:3d}%"


class ProgressBar:
    """Indeterminate progress bar painted from a background thread. Can be used as context manager."""

    def __init__(self, label: str, interval: float = 0.2, step: int = 3):
        self.label = label
        self.interval = interval
        self.step = step
        self.percent = 0
        self.start_time = time.time()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def __enter__(self) -> "ProgressBar":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.finish(ok=exc_type is None)

    def _paint(self) -> None:
        print(f"\r\033[K{BLUE}[geeto]{NC} {self.label} {render_bar(self.percent)}", end="", flush=True)

    def _run(self) -> None:
        while not self._stop.is_set():
            self._paint()
            self.percent = min(CEILING, self.percent + self.step)
            self._stop.wait(self.interval)

    def start(self) -> None:
        self.start_time = time.time()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def get_elapsed(self) -> str:
        return fmt_duration(time.time() - self.start_time)

    def finish(self, ok: bool = True) -> None:
        """Stop the painter and show the bar at 100%."""
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=0.5)
        self._thread = None
        self.percent = 100
        self._paint()
        print()
        if ok:
            log(f"{self.label} {GREEN}done{NC} {GRAY}in {self.get_elapsed()}{NC}")
