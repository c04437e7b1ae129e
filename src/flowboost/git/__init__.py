"""Git gateway, state queries, action catalog and conflict pre-check."""

from flowboost.git.actions import (
    Action,
    ActionExecutor,
    ApplyStash,
    Checkout,
    CommitSquash,
    CreateBranch,
    DeleteLocalBranches,
    ResetHardThenCreate,
    ResetToRemote,
    StageCommit,
    StageThenCreate,
    Stash,
)
from flowboost.git.conflicts import check_for_potential_conflicts, print_conflict_report
from flowboost.git.gateway import GitGateway
from flowboost.git.queries import RepoQueries, require_branch

__all__ = [
    # Gateway
    "GitGateway",
    # Queries
    "RepoQueries",
    "require_branch",
    # Actions
    "Action",
    "ActionExecutor",
    "Stash",
    "ApplyStash",
    "ResetHardThenCreate",
    "CreateBranch",
    "StageThenCreate",
    "Checkout",
    "CommitSquash",
    "StageCommit",
    "ResetToRemote",
    "DeleteLocalBranches",
    # Conflicts
    "check_for_potential_conflicts",
    "print_conflict_report",
]
