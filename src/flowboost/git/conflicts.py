"""Advisory conflict pre-check. Read-only: never mutates the repository."""

from typing import Optional

from flowboost.git.queries import RepoQueries, require_branch
from flowboost.models.git import ConflictReport
from flowboost.ui.output import bullet_list, log, warn


def check_for_potential_conflicts(
    queries: RepoQueries, target_branch: str, current_branch: Optional[str] = None
) -> ConflictReport:
    """Files changed both on the current branch and on the remote target since their merge-base."""
    require_branch(target_branch)
    current = current_branch or queries.current_branch()
    remote_target = f"{queries.remote}/{target_branch}"

    merge_base = queries.merge_base(current, remote_target)
    changed_in_target = set(queries.changed_files(merge_base, remote_target))
    changed_in_current = set(queries.changed_files(merge_base, current))

    return ConflictReport(
        current_branch=current,
        target_branch=target_branch,
        merge_base=merge_base,
        files=tuple(sorted(changed_in_target & changed_in_current)),
    )


def print_conflict_report(report: ConflictReport) -> None:
    if report.has_conflicts:
        warn(
            f"Potential conflicts between {report.current_branch} and {report.target_branch} "
            f"in {len(report.files)} file(s):"
        )
        bullet_list(list(report.files))
    else:
        log(f"No conflicts detected between {report.current_branch} and {report.target_branch}")
