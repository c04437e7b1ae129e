"""Create-branch-from-base state machine.

Reaches "new branch checked out from an up-to-date base" from any starting
point (on or off the base, clean or dirty), asking before every destructive
step. Abort ends the flow with no further side effects.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from flowboost.errors import ConflictDuringRestore, FlowboostError, InvalidBranchState, UserAborted
from flowboost.flows.context import FlowContext
from flowboost.flows.naming import ask_for_branch_name, resolve_base_branch
from flowboost.git.actions import (
    ApplyStash,
    Checkout,
    CreateBranch,
    ResetHardThenCreate,
    ResetToRemote,
    StageThenCreate,
    Stash,
)
from flowboost.git.queries import require_branch
from flowboost.models.choices import BaseResetChoice, ManualResolveChoice, RestoreConflictChoice
from flowboost.models.state import BranchState
from flowboost.ui.output import error, log, success, warn
from flowboost.utils.debug import debug_log


@dataclass
class BranchRun:
    """Mutable progress of one create-branch flow."""

    base: str
    new_branch: str
    stash_pending: bool = False  # changes stashed and not yet re-applied
    branch_created: bool = False


def handle_check_current(ctx: FlowContext, run: BranchRun) -> BranchState:
    if ctx.queries.current_branch() != run.base:
        return BranchState.OFF_BASE
    if ctx.queries.has_uncommitted_changes():
        return BranchState.ON_BASE_DIRTY
    return BranchState.ON_BASE_CLEAN


def handle_on_base_clean(ctx: FlowContext, run: BranchRun) -> BranchState:
    choice = ctx.prompter.choose(
        {
            BaseResetChoice.RESET_SERVER: (
                f"Reset {run.base} to the server and create {run.new_branch} from it. "
                "This discards any committed and uncommitted changes on it."
            ),
            BaseResetChoice.CREATE: (
                "Continue without reset (carry local commits that are not on the server "
                "over to the new branch)"
            ),
            BaseResetChoice.ABORT: "Abort the operation and do nothing.",
        },
        f"You are on {run.base}. How should {run.new_branch} be created?",
    )
    if choice is BaseResetChoice.RESET_SERVER:
        # this choice is the confirmation; create without asking again
        ctx.run(ResetToRemote(run.base))
        return BranchState.CREATE
    if choice is BaseResetChoice.CREATE:
        return BranchState.CREATE
    return BranchState.ABORTED


def stash_changes(ctx: FlowContext, run: BranchRun) -> None:
    """Stash, marking a restore pending only if a new entry was created."""
    log("Uncommitted changes detected. Stashing them before creating the new branch.")
    before = ctx.queries.stash_count()
    ctx.run(Stash())
    run.stash_pending = ctx.queries.stash_count() > before


def handle_on_base_dirty(ctx: FlowContext, run: BranchRun) -> BranchState:
    stash_changes(ctx, run)
    # stashing already signaled intent, reset without another confirmation
    ctx.run(ResetToRemote(run.base))
    return BranchState.RESTORE_STASH if run.stash_pending else BranchState.CREATE


def handle_off_base(ctx: FlowContext, run: BranchRun) -> BranchState:
    confirmed = ctx.prompter.confirm(
        "Please confirm:",
        yes_label=f"Confirm reset of {run.base} to the server.",
        no_label="Abort the operation and do nothing.",
    )
    if not confirmed:
        return BranchState.ABORTED
    ctx.run(ResetToRemote(run.base))

    if ctx.queries.has_uncommitted_changes():
        stash_changes(ctx, run)
        ctx.run(Checkout(run.base))
    # reset above was confirmed, create directly
    return BranchState.CREATE


def handle_create(ctx: FlowContext, run: BranchRun) -> BranchState:
    ctx.run(CreateBranch(run.new_branch, start_point=run.base))
    run.branch_created = True
    return BranchState.RESTORE_STASH if run.stash_pending else BranchState.CREATED


def handle_restore_stash(ctx: FlowContext, run: BranchRun) -> BranchState:
    try:
        ctx.run(ApplyStash())
    except ConflictDuringRestore as conflict:
        debug_log(ctx.debug, "stash apply conflict", conflict.output)
        return resolve_restore_conflict(ctx, run)
    run.stash_pending = False
    return BranchState.CREATED if run.branch_created else BranchState.CREATE


def resolve_restore_conflict(ctx: FlowContext, run: BranchRun) -> BranchState:
    """Conflicts cannot be resolved here: the user decides, the stash is kept unless they say otherwise."""
    error(
        "Your changes conflict with the latest from the server. "
        "No worries, they are still stashed."
    )
    create = None if run.branch_created else run.new_branch
    choice = ctx.prompter.choose(
        {
            RestoreConflictChoice.MANUAL: (
                "Manually resolve conflicts (I will wait until you are done)"
            ),
            RestoreConflictChoice.DISCARD_KEEP_STASH: "Discard changes and keep them in the stash",
            RestoreConflictChoice.DISCARD_DROP_STASH: "Discard changes and remove them from the stash",
        },
        "How do you want to continue?",
    )
    if choice is RestoreConflictChoice.DISCARD_KEEP_STASH:
        ctx.run(ResetHardThenCreate(branch=create, drop_stash=False))
        return BranchState.CREATED
    if choice is RestoreConflictChoice.DISCARD_DROP_STASH:
        ctx.run(ResetHardThenCreate(branch=create, drop_stash=True))
        run.stash_pending = False
        return BranchState.CREATED

    resolved = ctx.prompter.choose(
        {
            ManualResolveChoice.DONE: "I resolved and saved the files, continue.",
            ManualResolveChoice.ABORT: "Abort the operation and do nothing.",
        },
        "Waiting for you to resolve the conflicts...",
    )
    if resolved is ManualResolveChoice.DONE:
        ctx.run(StageThenCreate(branch=create))
        return BranchState.CREATED
    return BranchState.ABORTED


# State handler dispatch table
BRANCH_HANDLERS: dict[BranchState, Callable[[FlowContext, BranchRun], BranchState]] = {
    BranchState.CHECK_CURRENT: handle_check_current,
    BranchState.ON_BASE_CLEAN: handle_on_base_clean,
    BranchState.ON_BASE_DIRTY: handle_on_base_dirty,
    BranchState.OFF_BASE: handle_off_base,
    BranchState.CREATE: handle_create,
    BranchState.RESTORE_STASH: handle_restore_stash,
}


def create_branch_from_base(ctx: FlowContext, base: str, new_branch: str) -> bool:
    """Run the create-branch state machine. Returns True if the branch was created."""
    run = BranchRun(base=base, new_branch=new_branch)
    state = BranchState.CHECK_CURRENT

    try:
        require_branch(base)
        require_branch(new_branch)
        while state not in (BranchState.CREATED, BranchState.ABORTED):
            handler = BRANCH_HANDLERS.get(state)
            if handler is None:
                error(f"Unknown state: {state}")
                return False
            state = handler(ctx, run)
    except UserAborted:
        state = BranchState.ABORTED
    except FlowboostError as e:
        error(f"Failed to create {run.new_branch}: {e}")
        if run.stash_pending:
            warn("Your changes are still in the stash (`git stash list`).")
        return False

    if state is BranchState.ABORTED:
        log("Operation aborted.")
        if run.stash_pending:
            warn("Your changes are still in the stash (`git stash list`).")
        return False

    success(f"Branch {run.new_branch} is ready (from {run.base})")
    return True


def smart_branch(ctx: FlowContext, requested_base: Optional[str] = None) -> bool:
    """Ask for a conventional branch name, then create it from its base branch."""
    try:
        convention, new_branch = ask_for_branch_name(ctx.prompter, ctx.config)
        if ctx.queries.exists_locally(new_branch):
            raise InvalidBranchState(f"Branch {new_branch} already exists locally", new_branch)
        base = resolve_base_branch(convention, ctx.config, requested_base)
        if not ctx.queries.exists_on_remote(base):
            raise InvalidBranchState(
                f"Base branch {base} does not exist on {ctx.config.remote}", base
            )
    except UserAborted:
        log("Operation aborted.")
        return False
    except FlowboostError as e:
        error(str(e))
        return False

    log(f"Creating {new_branch} from {base}")
    return create_branch_from_base(ctx, base, new_branch)
