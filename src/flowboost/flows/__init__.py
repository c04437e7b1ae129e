"""Interactive git flows: branch creation, publishing, merge requests."""

from flowboost.flows.branching import create_branch_from_base, smart_branch
from flowboost.flows.context import FlowContext, build_context
from flowboost.flows.publish import (
    commit_and_publish_all,
    conflict_check,
    create_merge_request,
    publish_branch,
    publish_to_all_targets,
    push_current,
)

__all__ = [
    "FlowContext",
    "build_context",
    # Branching
    "create_branch_from_base",
    "smart_branch",
    # Publishing
    "publish_branch",
    "push_current",
    "create_merge_request",
    "publish_to_all_targets",
    "commit_and_publish_all",
    "conflict_check",
]
