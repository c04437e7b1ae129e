"""CLI run configuration and flow state enums."""

from dataclasses import dataclass, field
from enum import Enum, auto


class BranchState(Enum):
    """States of the create-branch-from-base state machine."""

    CHECK_CURRENT = auto()  # Inspect checkout and dirty state
    ON_BASE_CLEAN = auto()  # Offer reset of base before creating
    ON_BASE_DIRTY = auto()  # Stash, reset base, restore
    OFF_BASE = auto()  # Confirmed reset of base, then create
    RESTORE_STASH = auto()  # Re-apply stash, handle conflicts
    CREATE = auto()  # Create the new branch
    CREATED = auto()  # Terminal: success
    ABORTED = auto()  # Terminal: user abort


class PublishState(Enum):
    """States of the publish / merge-request state machine."""

    DIRTY_GUARD = auto()  # Handle uncommitted changes
    SYNC_GUARD = auto()  # Compare with remote
    BUILD_OPTIONS = auto()  # Assemble push options
    UPSTREAM_GUARD = auto()  # Ensure upstream tracking
    PUSH = auto()  # Marker commit + push
    HANDLE_RESULT = auto()  # Extract URL, open, notify
    DONE = auto()  # Terminal: pushed
    ABORTED = auto()  # Terminal: user abort


@dataclass
class RunConfig:
    """CLI arguments bundled together."""

    alias: str
    args: list[str] = field(default_factory=list)
    debug: bool = False
    verbose: bool = False
