"""Immutable configuration models built once at startup."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class BranchSettings:
    """A merge-request target branch from mergeRequestOptions.branches."""

    name: str
    is_draft: bool = False
    required_labels: tuple[str, ...] = ()


@dataclass(frozen=True)
class BranchConvention:
    """A branch naming convention, e.g. feature/${ticket}-${title}."""

    type: str
    template: str
    placeholder_validation: tuple[tuple[str, str], ...] = ()
    final_validation_regex: Optional[str] = None
    default_base_branch: Optional[str] = None

    def pattern_for(self, placeholder: str) -> Optional[str]:
        for name, pattern in self.placeholder_validation:
            if name == placeholder:
                return pattern
        return None


@dataclass(frozen=True)
class NotificationSettings:
    enabled: bool = False
    channel: str = ""


@dataclass(frozen=True)
class FlowConfig:
    """Validated configuration threaded through every flow."""

    main_branch: str
    branches: tuple[BranchSettings, ...]
    remote: str = "origin"
    delete_after_main_merge: bool = False
    allow_temp_branches: bool = False
    open_in_browser: bool = True
    conventions: tuple[BranchConvention, ...] = ()
    notifications: NotificationSettings = field(default_factory=NotificationSettings)
    sources: tuple[str, ...] = ()

    def branch_settings(self, name: str) -> Optional[BranchSettings]:
        for branch in self.branches:
            if branch.name == name:
                return branch
        return None

    def is_draft(self, name: str) -> bool:
        settings = self.branch_settings(name)
        return settings.is_draft if settings else False

    def labels_for(self, name: str) -> tuple[str, ...]:
        settings = self.branch_settings(name)
        return settings.required_labels if settings else ()

    def should_delete_after_merge(self, target: str) -> bool:
        """Source-branch deletion only applies to merges into the main branch."""
        return self.delete_after_main_merge and target == self.main_branch

    def convention(self, branch_type: str) -> Optional[BranchConvention]:
        for convention in self.conventions:
            if convention.type == branch_type:
                return convention
        return None
