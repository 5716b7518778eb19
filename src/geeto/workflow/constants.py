"""Constants for the wizard steps and recovery commands."""

from geeto.models.core import StartAt
from geeto.models.state import Step

# Limits
MAX_PUSH_ATTEMPTS = 3  # merge-target push, retried only on auth failures
MAX_DIFF_CHARS = 4000  # staged diff sent to AI providers
STATUS_PREVIEW_LINES = 10  # `git status --short` lines shown after undo

# Lowest checkpoint implied by each --<step> flag
START_AT_FLOORS: dict[StartAt, Step] = {
    StartAt.STAGE: Step.NONE,
    StartAt.BRANCH: Step.STAGED,
    StartAt.COMMIT: Step.BRANCH_CREATED,
    StartAt.PUSH: Step.COMMITTED,
    StartAt.MERGE: Step.PUSHED,
}

STEP_TITLES: dict[Step, str] = {
    Step.STAGED: "Step 1/6 · Stage changes",
    Step.BRANCH_CREATED: "Step 2/6 · Branch",
    Step.COMMITTED: "Step 3/6 · Commit",
    Step.PUSHED: "Step 4/6 · Push",
    Step.MERGED: "Step 5/6 · Merge",
    Step.CLEANUP: "Step 6/6 · Cleanup",
}

# Lowercased substrings of git output that mean the remote rejected our credentials
AUTH_FAILURE_MARKERS = (
    "authentication failed",
    "access denied",
    "could not read username",
    "permission denied",
    "invalid username or password",
)
