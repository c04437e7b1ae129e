"""Repository state, push options and publish results."""

from dataclasses import dataclass, field
from typing import Literal, Optional


@dataclass(frozen=True)
class RepoState:
    """Live facts about one branch. Recomputed at every decision point."""

    current_branch: str
    has_uncommitted_changes: bool
    exists_on_remote: bool
    is_synced_with_remote: bool
    has_upstream_set: bool


@dataclass
class PushOptions:
    """Options for one publish attempt. Never reused across branches."""

    target_branch: Optional[str] = None
    is_draft: bool = False
    delete_source_on_merge: bool = False
    force: bool = False
    labels: frozenset[str] = field(default_factory=frozenset)
    create_merge_request: bool = True
    set_upstream: bool = False

    def to_args(self) -> list[str]:
        """Render as `git push` flags and GitLab push options."""
        args: list[str] = []
        if self.force:
            args.append("--force")
        if self.set_upstream:
            args.append("--set-upstream")
        if not self.create_merge_request or not self.target_branch:
            return args

        args += ["-o", "merge_request.create", "-o", f"merge_request.target={self.target_branch}"]
        for label in sorted(self.labels):
            args += ["-o", f"merge_request.label={label}"]
        if self.is_draft:
            args += ["-o", "merge_request.draft"]
        if self.delete_source_on_merge:
            args += ["-o", "merge_request.remove_source_branch"]
        return args


@dataclass(frozen=True)
class MergeRequestResult:
    """Push output and the merge-request URL found in it, if any."""

    raw_output: str
    url: Optional[str] = None


@dataclass
class PublishRequest:
    """What to publish and where. Built by the CLI aliases."""

    branch: str
    target_branch: Optional[str] = None
    is_draft: bool = False
    delete_source_on_merge: bool = False
    is_temp: bool = False
    create_merge_request: bool = True


@dataclass
class PublishReport:
    """Outcome of one publish flow."""

    status: Literal["pushed", "aborted", "failed"]
    branch: str
    result: Optional[MergeRequestResult] = None

    @property
    def pushed(self) -> bool:
        return self.status == "pushed"


@dataclass(frozen=True)
class ConflictReport:
    """Files changed on both sides since the merge-base. Advisory only."""

    current_branch: str
    target_branch: str
    merge_base: str
    files: tuple[str, ...] = ()

    @property
    def has_conflicts(self) -> bool:
        return bool(self.files)
