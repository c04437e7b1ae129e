"""The only place that invokes git."""

import subprocess
from typing import Optional

from flowboost.errors import VcsError
from flowboost.ui.output import trace
from flowboost.utils.debug import debug_log


class GitGateway:
    """Run git commands in one repository, sequentially, without retries."""

    def __init__(self, cwd: Optional[str] = None, debug: bool = False, verbose: bool = False):
        self.cwd = cwd
        self.debug = debug
        self.verbose = verbose

    def run(self, args: list[str], capture_stderr: bool = False) -> str:
        """Run `git <args>` and return stripped stdout.

        Some commands (push) report progress and server messages on stderr even
        on success; capture_stderr=True returns stderr instead.
        Raises VcsError on non-zero exit, or when git cannot be started at all.
        """
        command = ["git", *args]
        if self.verbose:
            trace(" ".join(command))
        try:
            result = subprocess.run(command, capture_output=True, text=True, cwd=self.cwd)
        except OSError as e:
            # git missing from PATH, or cwd does not exist
            raise VcsError(command, -1, "", str(e)) from e
        debug_log(
            self.debug,
            " ".join(command),
            {"exit_code": result.returncode, "stdout": result.stdout, "stderr": result.stderr},
        )
        if result.returncode != 0:
            raise VcsError(command, result.returncode, result.stdout, result.stderr)
        return (result.stderr if capture_stderr else result.stdout).strip()

    def run_interactive(self, args: list[str]) -> None:
        """Run a command attached to the terminal (e.g. interactive rebase)."""
        command = ["git", *args]
        if self.verbose:
            trace(" ".join(command))
        try:
            result = subprocess.run(command, cwd=self.cwd)
        except OSError as e:
            raise VcsError(command, -1, "", str(e)) from e
        debug_log(self.debug, " ".join(command), {"exit_code": result.returncode})
        if result.returncode != 0:
            raise VcsError(command, result.returncode)

    def has_remote_url(self) -> bool:
        """True if at least one remote is configured."""
        return bool(self.run(["remote", "-v"]))
