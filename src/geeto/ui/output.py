"""Terminal output helpers with colors and hyperlinks."""

# Colors
RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
BLUE = "\033[0;34m"
CYAN = "\033[0;36m"
GRAY = "\033[90m"
MAGENTA = "\033[0;35m"
BOLD = "\033[1m"
NC = "\033[0m"


def hyperlink(url: str, text: str) -> str:
    """OSC 8 hyperlink - clickable in modern terminals."""
    return f"\033]8;;{url}\007{text}\033]8;;\007"


def log(msg: str) -> None:
    print(f"\r\033[K{BLUE}[geeto]{NC} {msg}")


def success(msg: str) -> None:
    print(f"\r\033[K{GREEN}[geeto]{NC} {msg}")


def warn(msg: str) -> None:
    print(f"\r\033[K{YELLOW}[geeto]{NC} {msg}")


def error(msg: str) -> None:
    print(f"\r\033[K{RED}[geeto]{NC} {msg}")


def hint(msg: str) -> None:
    """Dimmed follow-up line, e.g. a command the user can run."""
    print(f"  {GRAY}{msg}{NC}")


def step(title: str) -> None:
    """Section header announcing a wizard step."""
    print(f"\n{CYAN}{'━' * 50}{NC}")
    print(f"{BOLD}{title}{NC}")
    print(f"{CYAN}{'━' * 50}{NC}")
