"""Repository state queries. Nothing here is cached: state can change between calls."""

from flowboost.errors import InvalidBranchState, VcsError
from flowboost.git.gateway import GitGateway
from flowboost.models.git import RepoState


def require_branch(branch: str) -> str:
    """Reject empty branch names before they reach a git command."""
    if not branch or not branch.strip():
        raise InvalidBranchState("Branch name is empty", branch=branch)
    return branch


class RepoQueries:
    def __init__(self, gateway: GitGateway, remote: str = "origin"):
        self.git = gateway
        self.remote = remote

    def current_branch(self) -> str:
        return self.git.run(["rev-parse", "--abbrev-ref", "HEAD"])

    def has_uncommitted_changes(self) -> bool:
        return bool(self.git.run(["status", "--porcelain"]))

    def has_tracked_changes(self) -> bool:
        """Like has_uncommitted_changes, ignoring untracked files."""
        return bool(self.git.run(["status", "-uno", "-s"]))

    def exists_locally(self, branch: str) -> bool:
        return bool(self.git.run(["branch", "--list", require_branch(branch)]))

    def exists_on_remote(self, branch: str) -> bool:
        # a bare name would also match refs/heads/<anything>/<branch>
        ref = f"refs/heads/{require_branch(branch)}"
        return bool(self.git.run(["ls-remote", "--heads", self.remote, ref]))

    def is_synced_with_remote(self, branch: str) -> bool:
        """Fetch the branch and report whether local has every commit the remote has.

        False when local is behind (including diverged). Refuses to answer while
        tracked files are modified: sync status mixed with a dirty tree is
        meaningless.
        """
        require_branch(branch)
        self.git.run(["fetch", self.remote, branch])
        if self.has_tracked_changes():
            raise InvalidBranchState(
                f"Cannot check sync of '{branch}' with uncommitted changes in the working tree",
                branch=branch,
            )
        _, behind = self.ahead_behind(branch)
        return behind == 0

    def ahead_behind(self, branch: str) -> tuple[int, int]:
        """Commits (ahead, behind) of local `branch` relative to its remote copy."""
        counts = self.git.run(
            ["rev-list", "--left-right", "--count", f"{branch}...{self.remote}/{branch}"]
        )
        ahead, behind = counts.split()
        return int(ahead), int(behind)

    def has_upstream_set(self, branch: str) -> bool:
        ref = f"refs/heads/{require_branch(branch)}"
        try:
            upstream = self.git.run(["for-each-ref", "--format=%(upstream:short)", ref])
        except VcsError:
            # No upstream, or no such branch
            return False
        return bool(upstream)

    def merge_base(self, first: str, second: str) -> str:
        return self.git.run(["merge-base", first, second])

    def changed_files(self, base: str, ref: str) -> list[str]:
        output = self.git.run(["diff", "--name-only", base, ref])
        return [line.strip() for line in output.split("\n") if line.strip()]

    def last_commit_message(self) -> str:
        return self.git.run(["log", "-1", "--pretty=%B"])

    def stash_count(self) -> int:
        output = self.git.run(["stash", "list"])
        return len([line for line in output.split("\n") if line.strip()])

    def snapshot(self, branch: str, check_sync: bool = True) -> RepoState:
        """Collect the facts the publish flow decides on, for `branch`.

        check_sync=False skips the fetch and reports the branch as synced.
        """
        exists = self.exists_on_remote(branch)
        synced = self.is_synced_with_remote(branch) if exists and check_sync else True
        return RepoState(
            current_branch=self.current_branch(),
            has_uncommitted_changes=self.has_uncommitted_changes(),
            exists_on_remote=exists,
            is_synced_with_remote=synced,
            has_upstream_set=self.has_upstream_set(branch),
        )
