"""Closed catalog of repository actions.

Flows never build git commands themselves: they describe what should happen
with one of the action types below and hand it to ActionExecutor.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from flowboost.errors import ConflictDuringRestore, InvalidBranchState, VcsError
from flowboost.git.gateway import GitGateway
from flowboost.git.queries import RepoQueries, require_branch
from flowboost.ui.output import log, success, warn
from flowboost.ui.prompts import Prompter

CONFLICT_MARKERS = ("conflict", "<<<<<<<")
NOTHING_TO_STASH = "No local changes to save"


@dataclass(frozen=True)
class Stash:
    """Stash tracked and untracked changes. A clean tree creates no entry."""


@dataclass(frozen=True)
class ApplyStash:
    """Re-apply the latest stash entry, keeping the entry."""


@dataclass(frozen=True)
class ResetHardThenCreate:
    """Discard working-tree changes, optionally drop the stash, then create branch.

    branch=None skips the create step (the branch already exists and is checked out).
    """

    branch: Optional[str] = None
    drop_stash: bool = False


@dataclass(frozen=True)
class CreateBranch:
    branch: str
    start_point: Optional[str] = None


@dataclass(frozen=True)
class StageThenCreate:
    """Stage everything (e.g. after manual conflict resolution), then create branch."""

    branch: Optional[str] = None


@dataclass(frozen=True)
class Checkout:
    branch: str


@dataclass(frozen=True)
class CommitSquash:
    """Prompt for a message, commit all, then squash onto the merge-base with base_branch."""

    base_branch: str


@dataclass(frozen=True)
class StageCommit:
    """Stage all and commit. Prompts for a message when none is given."""

    message: Optional[str] = None


@dataclass(frozen=True)
class ResetToRemote:
    """Make the local branch match the remote tip."""

    branch: str


@dataclass(frozen=True)
class DeleteLocalBranches:
    branches: tuple[str, ...] = field(default_factory=tuple)


Action = Union[
    Stash,
    ApplyStash,
    ResetHardThenCreate,
    CreateBranch,
    StageThenCreate,
    Checkout,
    CommitSquash,
    StageCommit,
    ResetToRemote,
    DeleteLocalBranches,
]


def is_conflict_output(output: str) -> bool:
    lowered = output.lower()
    return any(marker in lowered for marker in CONFLICT_MARKERS)


class ActionExecutor:
    """Executes catalog actions against the repository, one at a time."""

    def __init__(self, gateway: GitGateway, queries: RepoQueries, prompter: Prompter):
        self.git = gateway
        self.queries = queries
        self.prompter = prompter

    @property
    def remote(self) -> str:
        return self.queries.remote

    def execute(self, action: Action) -> None:
        match action:
            case Stash():
                output = self.git.run(["stash", "push", "--include-untracked"])
                if NOTHING_TO_STASH in output:
                    log("Nothing to stash")
                else:
                    success("Stashed uncommitted changes")
            case ApplyStash():
                self._apply_stash()
            case ResetHardThenCreate(branch=branch, drop_stash=drop_stash):
                self.git.run(["reset", "--hard"])
                if drop_stash:
                    self.git.run(["stash", "drop"])
                    warn("Discarded changes and dropped the stash entry")
                else:
                    log("Discarded changes; they are still in the stash (`git stash list`)")
                if branch:
                    self._create(branch)
            case CreateBranch(branch=branch, start_point=start_point):
                self._create(branch, start_point)
            case StageThenCreate(branch=branch):
                self.git.run(["add", "-A"])
                if branch:
                    self._create(branch)
            case Checkout(branch=branch):
                self.git.run(["checkout", require_branch(branch)])
            case CommitSquash(base_branch=base_branch):
                message = self.prompter.ask_text("Commit message:")
                self._stage_and_commit(message)
                self._squash_onto_base(base_branch)
            case StageCommit(message=message):
                self._stage_and_commit(message or self.prompter.ask_text("Commit message:"))
            case ResetToRemote(branch=branch):
                self._reset_to_remote(branch)
            case DeleteLocalBranches(branches=branches):
                self._delete_branches(branches)
            case _:
                warn(f"Unknown action {action!r} ignored")

    def _create(self, branch: str, start_point: Optional[str] = None) -> None:
        args = ["checkout", "-b", require_branch(branch)]
        if start_point:
            args.append(start_point)
        self.git.run(args)
        success(f"Created branch {branch}")

    def _apply_stash(self) -> None:
        log("Applying stashed changes...")
        try:
            self.git.run(["stash", "apply"])
        except VcsError as e:
            if is_conflict_output(e.output):
                raise ConflictDuringRestore(e.output) from e
            raise
        success("Stashed changes re-applied (stash entry kept)")

    def _stage_and_commit(self, message: str) -> None:
        if not message.strip():
            raise InvalidBranchState("Commit message cannot be empty")
        self.git.run(["add", "-A"])
        self.git.run(["commit", "-m", message])
        success(f"Committed: {message}")

    def _squash_onto_base(self, base_branch: str) -> None:
        if self.queries.has_uncommitted_changes():
            raise InvalidBranchState("Commit or stash your changes before squashing")
        current = self.queries.current_branch()
        if current == base_branch:
            raise InvalidBranchState(
                f"Already on the base branch ({base_branch}); nothing to squash", branch=current
            )
        merge_base = self.queries.merge_base(f"{self.remote}/{base_branch}", current)
        self.git.run_interactive(["rebase", "-i", merge_base])
        success(f"Squashed commits since {base_branch}")

    def _reset_to_remote(self, branch: str) -> None:
        require_branch(branch)
        if branch == self.queries.current_branch():
            self.git.run(["fetch", self.remote, branch])
            self.git.run(["reset", "--hard", f"{self.remote}/{branch}"])
        else:
            # Update the ref without touching the current checkout
            self.git.run(["fetch", self.remote, f"+{branch}:{branch}"])
        success(f"Reset {branch} to {self.remote}/{branch}")

    def _delete_branches(self, branches: tuple[str, ...]) -> None:
        for branch in branches:
            try:
                self.git.run(["branch", "-D", branch])
                log(f"Deleted local branch {branch}")
            except VcsError as e:
                warn(f"Failed to delete local branch {branch}: {e.output}")
