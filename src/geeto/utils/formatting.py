"""Formatting utilities for durations, hashes and file lists."""


def fmt_duration(seconds: float) -> str:
    """Format duration as human readable string."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        mins, secs = divmod(int(seconds), 60)
        return f"{mins}m {secs}s"
    else:
        hours, remainder = divmod(int(seconds), 3600)
        mins, secs = divmod(remainder, 60)
        return f"{hours}h {mins}m {secs}s"


def short_hash(sha: str) -> str:
    return sha[:7]


def fmt_file_list(files: list[str], limit: int = 10) -> list[str]:
    """Indented lines for a file listing, truncated with an '... and N more' tail."""
    lines = [f"  {f}" for f in files[:limit]]
    if len(files) > limit:
        lines.append(f"  ... and {len(files) - limit} more")
    return lines


def plural(count: int, word: str) -> str:
    """'1 file', '3 files'."""
    return f"{count} {word}" if count == 1 else f"{count} {word}s"
