"""Publish / merge-request state machine and the push aliases.

Merge requests are created through GitLab push options, so "opening a merge
request" is a `git push` with `-o merge_request.*` flags.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from flowboost.errors import FlowboostError, UserAborted, VcsError
from flowboost.flows.context import FlowContext
from flowboost.flows.results import handle_result, parse_push_output
from flowboost.git.actions import (
    Checkout,
    CommitSquash,
    CreateBranch,
    DeleteLocalBranches,
    ResetToRemote,
    StageCommit,
    Stash,
)
from flowboost.git.conflicts import check_for_potential_conflicts, print_conflict_report
from flowboost.models.choices import DirtyChangesChoice, OutOfSyncChoice
from flowboost.models.git import (
    ConflictReport,
    MergeRequestResult,
    PublishReport,
    PublishRequest,
    PushOptions,
    RepoState,
)
from flowboost.models.state import PublishState
from flowboost.ui.output import error, log, warn
from flowboost.utils.debug import debug_log

TEMP_BRANCH_MARKER = "-boost-temp-"


@dataclass
class PublishRun:
    """Mutable progress of one publish flow."""

    request: PublishRequest
    force: bool = False
    repo: Optional[RepoState] = None
    options: Optional[PushOptions] = None
    conflicts: Optional[ConflictReport] = None
    result: Optional[MergeRequestResult] = None

    @property
    def target(self) -> Optional[str]:
        if not self.request.create_merge_request:
            return None
        return self.request.target_branch


def temp_branch_name(branch: str, target: str) -> str:
    return f"{branch}{TEMP_BRANCH_MARKER}{target.replace('/', '-')}"


def marker_commit_message(target: str) -> str:
    return f"chore: trigger merge request to {target}"


def handle_dirty_guard(ctx: FlowContext, run: PublishRun) -> PublishState:
    if not ctx.queries.has_uncommitted_changes():
        return PublishState.SYNC_GUARD

    branch = run.request.branch
    base = run.target or ctx.config.main_branch
    choice = ctx.prompter.choose(
        {
            DirtyChangesChoice.RESET_SERVER: (
                f"Reset {branch} to the server (discard all local changes and commits)"
            ),
            DirtyChangesChoice.STASH: "Stash changes and push what is committed",
            DirtyChangesChoice.COMMIT_SQUASH: (
                f"Commit changes and squash all commits since {base} into one"
            ),
            DirtyChangesChoice.COMMIT: "Commit changes",
            DirtyChangesChoice.ABORT: "Abort the operation and do nothing.",
        },
        "You have uncommitted changes. What do you want to do?",
    )
    match choice:
        case DirtyChangesChoice.RESET_SERVER:
            ctx.run(ResetToRemote(branch))
        case DirtyChangesChoice.STASH:
            ctx.run(Stash())
        case DirtyChangesChoice.COMMIT_SQUASH:
            ctx.run(CommitSquash(base))
        case DirtyChangesChoice.COMMIT:
            ctx.run(StageCommit())
        case _:
            return PublishState.ABORTED
    return PublishState.SYNC_GUARD


def handle_sync_guard(ctx: FlowContext, run: PublishRun) -> PublishState:
    branch = run.request.branch
    # Temporary branches are always force-pushed, sync does not matter
    run.repo = ctx.queries.snapshot(branch, check_sync=not run.request.is_temp)
    debug_log(ctx.debug, f"repo state for {branch}", run.repo.__dict__)
    if run.request.is_temp:
        return PublishState.BUILD_OPTIONS
    if not run.repo.exists_on_remote or run.repo.is_synced_with_remote:
        return PublishState.BUILD_OPTIONS

    choice = ctx.prompter.choose(
        {
            OutOfSyncChoice.FORCE: (
                f"Force push (overwrite {ctx.config.remote}/{branch} with your local branch)"
            ),
            OutOfSyncChoice.ABORT: "Abort the operation and do nothing.",
        },
        f"{branch} is not in sync with {ctx.config.remote}/{branch}.",
    )
    if choice is OutOfSyncChoice.FORCE:
        run.force = True
        return PublishState.BUILD_OPTIONS
    return PublishState.ABORTED


def handle_build_options(ctx: FlowContext, run: PublishRun) -> PublishState:
    config = ctx.config
    target = run.target
    request = run.request

    if target and config.branch_settings(target) is None:
        warn(f"{target} is not in mergeRequestOptions.branches; no labels or draft settings apply")

    run.options = PushOptions(
        target_branch=target,
        is_draft=request.is_draft or (config.is_draft(target) if target else False),
        delete_source_on_merge=request.delete_source_on_merge
        or (config.should_delete_after_merge(target) if target else False),
        force=run.force or request.is_temp,
        labels=frozenset(config.labels_for(target)) if target else frozenset(),
        create_merge_request=request.create_merge_request,
    )

    if target:
        try:
            run.conflicts = check_for_potential_conflicts(ctx.queries, target, request.branch)
            print_conflict_report(run.conflicts)
        except VcsError as e:
            warn(f"Conflict pre-check skipped: {e}")
    return PublishState.UPSTREAM_GUARD


def handle_upstream_guard(ctx: FlowContext, run: PublishRun) -> PublishState:
    assert run.repo is not None and run.options is not None
    branch = run.request.branch
    if run.repo.has_upstream_set:
        return PublishState.PUSH
    if run.repo.exists_on_remote:
        ctx.git.run(["branch", f"--set-upstream-to={ctx.config.remote}/{branch}", branch])
        log(f"Upstream of {branch} set to {ctx.config.remote}/{branch}")
    else:
        run.options.set_upstream = True
    return PublishState.PUSH


def handle_push(ctx: FlowContext, run: PublishRun) -> PublishState:
    assert run.repo is not None and run.options is not None
    branch = run.request.branch
    target = run.target

    if target and run.repo.exists_on_remote:
        # An existing branch with nothing new would not open a merge request
        ctx.git.run(["commit", "--allow-empty", "-m", marker_commit_message(target)])

    log(f"Pushing {branch}" + (f" (merge request to {target})" if target else ""))
    output = ctx.git.run(
        ["push", *run.options.to_args(), ctx.config.remote, branch], capture_stderr=True
    )
    debug_log(ctx.debug, f"push {branch}", output)
    run.result = parse_push_output(output)
    return PublishState.HANDLE_RESULT


def handle_handle_result(ctx: FlowContext, run: PublishRun) -> PublishState:
    assert run.result is not None
    handle_result(ctx, run.request.branch, run.target, run.result, run.conflicts)
    return PublishState.DONE


# State handler dispatch table
PUBLISH_HANDLERS: dict[PublishState, Callable[[FlowContext, PublishRun], PublishState]] = {
    PublishState.DIRTY_GUARD: handle_dirty_guard,
    PublishState.SYNC_GUARD: handle_sync_guard,
    PublishState.BUILD_OPTIONS: handle_build_options,
    PublishState.UPSTREAM_GUARD: handle_upstream_guard,
    PublishState.PUSH: handle_push,
    PublishState.HANDLE_RESULT: handle_handle_result,
}


def publish_branch(ctx: FlowContext, request: PublishRequest) -> PublishReport:
    """Push request.branch, opening a merge request when a target is given."""
    run = PublishRun(request=request)
    state = PublishState.DIRTY_GUARD

    try:
        while state not in (PublishState.DONE, PublishState.ABORTED):
            handler = PUBLISH_HANDLERS.get(state)
            if handler is None:
                error(f"Unknown state: {state}")
                return PublishReport("failed", request.branch)
            state = handler(ctx, run)
    except UserAborted:
        state = PublishState.ABORTED
    except FlowboostError as e:
        error(f"Failed to publish {request.branch}: {e}")
        return PublishReport("failed", request.branch)

    if state is PublishState.ABORTED:
        log("Operation aborted.")
        return PublishReport("aborted", request.branch)
    return PublishReport("pushed", request.branch, run.result)


# --- Aliases ---


def push_current(ctx: FlowContext) -> PublishReport:
    """`push`: publish the current branch without a merge request."""
    branch = ctx.queries.current_branch()
    return publish_branch(ctx, PublishRequest(branch=branch, create_merge_request=False))


def create_merge_request(ctx: FlowContext, target: Optional[str] = None) -> PublishReport:
    """`push-mr [target]`: publish the current branch with a merge request to target."""
    branch = ctx.queries.current_branch()
    target = target or ctx.config.main_branch
    if branch == target:
        error(f"Cannot open a merge request from {branch} into itself")
        return PublishReport("failed", branch)
    return publish_branch(ctx, PublishRequest(branch=branch, target_branch=target))


def publish_to_all_targets(ctx: FlowContext) -> bool:
    """`push-mr-all`: merge request to the main branch, then one per other configured branch.

    Non-main targets are published from temporary branches that are deleted
    locally afterwards; the original branch is checked out again at the end.
    """
    config = ctx.config
    if not config.allow_temp_branches:
        log(
            "Creating temp branches is disabled in your config. Enable "
            "mergeRequestOptions.allowToCreateTempBranches to open merge requests "
            "to multiple target branches."
        )
        return False

    try:
        original = ctx.queries.current_branch()
    except FlowboostError as e:
        error(str(e))
        return False

    report = publish_branch(ctx, PublishRequest(branch=original, target_branch=config.main_branch))
    if not report.pushed:
        return False

    created: list[str] = []
    all_pushed = True
    try:
        for settings in config.branches:
            target = settings.name
            if target in (config.main_branch, original):
                continue

            temp = temp_branch_name(original, target)
            try:
                if ctx.queries.exists_locally(temp):
                    ctx.run(DeleteLocalBranches((temp,)))
                ctx.run(CreateBranch(temp, start_point=original))
            except FlowboostError as e:
                error(f"Failed to create temporary branch {temp}: {e}")
                all_pushed = False
                continue
            created.append(temp)

            report = publish_branch(
                ctx,
                PublishRequest(
                    branch=temp,
                    target_branch=target,
                    delete_source_on_merge=True,
                    is_temp=True,
                ),
            )
            ctx.run(Checkout(original))
            if report.status == "aborted":
                all_pushed = False
                break
            all_pushed = all_pushed and report.pushed
    except FlowboostError as e:
        error(f"Multi-branch publish stopped: {e}")
        all_pushed = False
    finally:
        _cleanup_temp_branches(ctx, original, created)

    return all_pushed


def _cleanup_temp_branches(ctx: FlowContext, original: str, created: list[str]) -> None:
    try:
        if ctx.queries.current_branch() != original:
            ctx.run(Checkout(original))
        if created:
            ctx.run(DeleteLocalBranches(tuple(created)))
    except FlowboostError as e:
        error(f"Cleanup failed, remove temporary branches manually: {e}")


def commit_and_publish_all(ctx: FlowContext, message: Optional[str] = None) -> bool:
    """`commit-push-mr-all <message>`: commit everything, then publish to all targets."""
    if not ctx.config.allow_temp_branches:
        return publish_to_all_targets(ctx)
    try:
        if not ctx.queries.has_uncommitted_changes():
            log("No changes to commit.")
            return False
        ctx.run(StageCommit(message))
    except UserAborted:
        log("Operation aborted.")
        return False
    except FlowboostError as e:
        error(str(e))
        return False
    return publish_to_all_targets(ctx)


def conflict_check(ctx: FlowContext, target: Optional[str] = None) -> Optional[ConflictReport]:
    """`conflict-check <target>`: report files changed on both sides. Never mutates."""
    target = target or ctx.config.main_branch
    try:
        report = check_for_potential_conflicts(ctx.queries, target)
    except FlowboostError as e:
        error(f"Conflict check failed: {e}")
        return None
    print_conflict_report(report)
    return report
