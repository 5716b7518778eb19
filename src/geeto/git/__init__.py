"""Git command execution, queries and naming helpers."""

from geeto.git.branch import (
    branch_name_from_card,
    choose_development_base,
    clean_ai_suffix,
    get_branch_prefix,
    is_protected_branch,
    recommended_prefix_separator,
    sort_merge_targets,
    unique_branch_name,
    validate_branch_name,
)
from geeto.git.commit import COMMIT_TYPES, build_commit_message, clean_ai_message
from geeto.git.facts import GitFacts
from geeto.git.runner import CommandResult, CommandRunner, is_mutating_command

__all__ = [
    # Runner
    "CommandRunner",
    "CommandResult",
    "is_mutating_command",
    # Facts
    "GitFacts",
    # Branch
    "get_branch_prefix",
    "recommended_prefix_separator",
    "validate_branch_name",
    "clean_ai_suffix",
    "branch_name_from_card",
    "unique_branch_name",
    "sort_merge_targets",
    "choose_development_base",
    "is_protected_branch",
    # Commit
    "COMMIT_TYPES",
    "build_commit_message",
    "clean_ai_message",
]
