"""Data models for flowboost."""

from flowboost.models.choices import (
    BaseResetChoice,
    Choice,
    ConfirmChoice,
    DirtyChangesChoice,
    ManualResolveChoice,
    OutOfSyncChoice,
    RestoreConflictChoice,
)
from flowboost.models.config import (
    BranchConvention,
    BranchSettings,
    FlowConfig,
    NotificationSettings,
)
from flowboost.models.git import (
    ConflictReport,
    MergeRequestResult,
    PublishReport,
    PublishRequest,
    PushOptions,
    RepoState,
)
from flowboost.models.state import BranchState, PublishState, RunConfig

__all__ = [
    # Choices
    "Choice",
    "ConfirmChoice",
    "BaseResetChoice",
    "RestoreConflictChoice",
    "ManualResolveChoice",
    "DirtyChangesChoice",
    "OutOfSyncChoice",
    # Config
    "BranchSettings",
    "BranchConvention",
    "NotificationSettings",
    "FlowConfig",
    # Git
    "RepoState",
    "PushOptions",
    "MergeRequestResult",
    "PublishRequest",
    "PublishReport",
    "ConflictReport",
    # State
    "BranchState",
    "PublishState",
    "RunConfig",
]
