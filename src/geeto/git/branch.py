"""Branch naming, validation and merge-target helpers."""

import re
from typing import Iterable, Optional

from geeto.models.core import TrelloCard

DEFAULT_MERGE_PRIORITY = ["development", "develop", "dev", "main", "master"]
DEVELOPMENT_BASE_ORDER = ["develop", "development", "main", "master"]
ALWAYS_PROTECTED = {"development", "develop", "dev"}
RESERVED_NAMES = {"HEAD", "ORIG_HEAD", "FETCH_HEAD", "MERGE_HEAD", "CHERRY_PICK_HEAD"}
MAX_BRANCH_LENGTH = 255

_INVALID_CHARS_RE = re.compile(r"[ *:?\[\\^~]")

# Current branch name -> prefix stem for the next feature branch
PREFIX_MAPPINGS = {
    "development": "dev",
    "develop": "dev",
    "dev": "dev",
    "main": "release",
    "master": "release",
    "staging": "stage",
    "production": "hotfix",
    "prod": "hotfix",
    "testing": "test",
    "test": "test",
    "qa": "qa",
    "feature": "feat",
    "features": "feat",
    "bugfix": "fix",
    "hotfix": "hotfix",
    "release": "release",
}


def recommended_prefix_separator(branches: list[str]) -> str:
    """'#' when the repo mostly uses dev#name style, '/' otherwise."""
    slash = sum(1 for b in branches if "/" in b)
    hashed = sum(1 for b in branches if "#" in b)
    return "#" if hashed > slash else "/"


def get_branch_prefix(current_branch: str, separator: str = "/") -> str:
    """Prefix for a new branch, e.g. 'dev/login' -> 'dev/', 'main' -> 'release/'."""
    slash = current_branch.find("/")
    if slash > 0:
        return current_branch[: slash + 1]
    hashed = current_branch.find("#")
    if hashed > 0:
        return current_branch[: hashed + 1]
    stem = PREFIX_MAPPINGS.get(current_branch.lower(), "dev")
    return f"{stem}{separator}"


def validate_branch_name(name: str) -> Optional[str]:
    """Return why `name` is not a usable branch name, or None when it is."""
    if not name or not name.strip():
        return "Branch name cannot be empty"
    if len(name) > MAX_BRANCH_LENGTH:
        return f"Branch name too long (max {MAX_BRANCH_LENGTH} characters)"
    if _INVALID_CHARS_RE.search(name):
        return "Branch name contains invalid characters"
    if name.upper() in RESERVED_NAMES:
        return "Branch name is reserved by git"
    if (
        name.startswith((".", "/"))
        or name.endswith((".", "/"))
        or ".." in name
        or "@{" in name
    ):
        return "Branch name has invalid format"
    return None


def slugify(text: str, separator: str = "-", max_len: int = 60) -> str:
    """Lowercase kebab slug: 'Fix Login bug!' -> 'fix-login-bug'."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", separator, slug.strip())
    slug = slug.strip(separator)
    return slug[:max_len].rstrip(separator)


def clean_ai_suffix(raw: Optional[str]) -> Optional[str]:
    """Reduce an AI reply to a branch suffix. None if nothing usable remains."""
    if not raw:
        return None
    first = next((line for line in raw.strip().splitlines() if line.strip()), "")
    first = first.strip().strip("`'\"")
    # Models sometimes echo the prefix back
    first = re.sub(r"^[a-z]+[/#]", "", first.lower())
    suffix = slugify(first)
    return suffix if len(suffix) >= 3 else None


def branch_name_from_card(card: TrelloCard, separator: str = "-", suffix: Optional[str] = None) -> str:
    """Branch suffix for a Trello card, e.g. #42 "Fix Login" -> "42-fix-login".

    `suffix` replaces the card title, for a shortened name suggested by the AI provider.
    """
    return f"{card.id_short}{separator}{slugify(suffix or card.name, separator)}"


def get_base_slug(branch: str) -> str:
    """Strip a trailing numeric suffix: 'dev/login-3' -> 'dev/login'."""
    match = re.match(r"^(.+)-(\d+)$", branch)
    return match.group(1) if match else branch


def find_next_suffix(branches: list[str], base: str) -> int:
    """Find next available numeric suffix for base branch name."""
    max_suffix = 1
    for b in branches:
        if b.startswith(f"{base}-"):
            suffix_part = b[len(base) + 1 :]
            if suffix_part.isdigit():
                max_suffix = max(max_suffix, int(suffix_part))
    return max_suffix + 1


def unique_branch_name(name: str, existing: list[str]) -> str:
    """`name` itself if free, else the next '<base>-N' not yet taken."""
    if name not in existing:
        return name
    base = get_base_slug(name)
    return f"{base}-{find_next_suffix(existing, base)}"


def sort_merge_targets(
    branches: list[str], feature: str, priority: Optional[list[str]] = None
) -> list[str]:
    """Merge candidates: priority names first, then the rest alphabetically.

    The feature branch itself and other feature-style names (containing '#' or '/')
    are never offered.
    """
    order = priority or DEFAULT_MERGE_PRIORITY
    candidates = [b for b in branches if b != feature and "#" not in b and "/" not in b]
    ranked = [b for b in order if b in candidates]
    rest = sorted(b for b in candidates if b not in order)
    return ranked + rest


def choose_development_base(branches: list[str], feature: str) -> str:
    """Branch to create `development` from: first existing of develop/development/main/master."""
    for name in DEVELOPMENT_BASE_ORDER:
        if name in branches:
            return name
    return feature


def is_protected_branch(name: str, extra: Iterable[str] = ()) -> bool:
    """Protected branches are never deleted by cleanup. Case-insensitive."""
    protected = ALWAYS_PROTECTED | {e.lower() for e in extra}
    return name.lower() in protected
