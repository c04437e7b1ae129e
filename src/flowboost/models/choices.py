"""Outcomes of each decision point.

Every enum value is the stable key shown to scripts and logs. Unknown keys map
to the enum's safe member through from_key, so a bad answer never selects a
destructive action.
"""

from enum import Enum


class Choice(str, Enum):
    @classmethod
    def safe_default(cls) -> "Choice":
        return cls("abort")

    @classmethod
    def from_key(cls, key: str) -> "Choice":
        try:
            return cls(key)
        except ValueError:
            return cls.safe_default()


class ConfirmChoice(Choice):
    YES = "yes"
    NO = "no"

    @classmethod
    def safe_default(cls) -> "ConfirmChoice":
        return cls.NO


class BaseResetChoice(Choice):
    """Creating a branch while on a clean base branch."""

    RESET_SERVER = "reset-server"
    CREATE = "create"
    ABORT = "abort"


class RestoreConflictChoice(Choice):
    """Stash re-apply left conflict markers."""

    MANUAL = "manual"
    DISCARD_KEEP_STASH = "reset_keep_stash_create"
    DISCARD_DROP_STASH = "reset_remove_stash_create"

    @classmethod
    def safe_default(cls) -> "RestoreConflictChoice":
        # manual resolution is the only option that touches nothing
        return cls.MANUAL


class ManualResolveChoice(Choice):
    DONE = "add_create"
    ABORT = "abort"


class DirtyChangesChoice(Choice):
    """Uncommitted changes found before publishing."""

    RESET_SERVER = "reset-server"
    STASH = "stash"
    COMMIT_SQUASH = "commit-squash"
    COMMIT = "commit"
    ABORT = "abort"


class OutOfSyncChoice(Choice):
    """Branch exists on the remote and is not in sync with local."""

    FORCE = "force"
    ABORT = "abort"

