"""Core domain models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class UndoCategory(str, Enum):
    """Kinds of git operation recognised from the reflog."""

    COMMIT = "commit"
    AMEND = "amend"
    MERGE = "merge"
    MERGE_COMMIT = "merge-commit"
    CHECKOUT = "checkout"
    PULL = "pull"
    REBASE = "rebase"
    RESET = "reset"
    CHERRY_PICK = "cherry-pick"
    BRANCH = "branch"
    UNKNOWN = "unknown"


class MergeStrategy(str, Enum):
    MERGE_NO_FF = "merge-no-ff"
    SQUASH = "squash"


class AIProvider(str, Enum):
    GEMINI = "gemini"
    COPILOT = "copilot"
    OPENROUTER = "openrouter"
    MANUAL = "manual"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["AIProvider"]:
        """Lenient lookup: None for unknown or empty values."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class StartAt(str, Enum):
    """Entry points selectable from the command line."""

    STAGE = "stage"
    BRANCH = "branch"
    COMMIT = "commit"
    PUSH = "push"
    MERGE = "merge"


@dataclass
class ReflogEntry:
    """One line of `git reflog`."""

    hash: str
    selector: str
    subject: str


@dataclass
class ReflogAction:
    """Classified last action plus what is needed to reverse it."""

    category: UndoCategory
    description: str
    hash: str
    prev_hash: Optional[str] = None
    selector: str = ""


@dataclass
class InProgressOp:
    """A merge/rebase/cherry-pick/revert that git has paused mid-way."""

    kind: str
    label: str
    abort_args: list[str]
    indicator: str


@dataclass
class CommitInfo:
    """One commit as listed by `git log`."""

    hash: str
    short_hash: str
    subject: str
    author: str = ""
    date: str = ""


@dataclass
class BranchInfo:
    """A local branch or an origin branch with no local counterpart."""

    name: str
    remote: bool = False
    last_activity: str = ""
    timestamp: int = 0


@dataclass
class StashEntry:
    ref: str
    branch: str
    message: str
    date: str = ""


class PullStrategy(str, Enum):
    MERGE = "merge"
    REBASE = "rebase"
    FF_ONLY = "ff-only"


@dataclass
class TrelloCard:
    id: str
    name: str
    id_short: int = 0
    short_link: str = ""
    url: str = ""
    desc: str = ""
    list_id: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "TrelloCard":
        return cls(
            id=d["id"],
            name=d.get("name", ""),
            id_short=d.get("idShort", 0),
            short_link=d.get("shortLink", ""),
            url=d.get("url", ""),
            desc=d.get("desc", ""),
            list_id=d.get("idList", ""),
        )


@dataclass
class PullRequest:
    number: int
    title: str
    url: str
    head: str = ""
    base: str = ""
    draft: bool = False

    @classmethod
    def from_dict(cls, d: dict) -> "PullRequest":
        return cls(
            number=d["number"],
            title=d.get("title", ""),
            url=d.get("html_url", ""),
            head=d.get("head", {}).get("ref", ""),
            base=d.get("base", {}).get("ref", ""),
            draft=d.get("draft", False),
        )


@dataclass
class Issue:
    number: int
    title: str
    url: str
    labels: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict) -> "Issue":
        return cls(
            number=d["number"],
            title=d.get("title", ""),
            url=d.get("html_url", ""),
            labels=[lbl["name"] for lbl in d.get("labels", []) if isinstance(lbl, dict)],
        )
