"""Exception taxonomy shared by the gateway, actions and flows."""

from typing import Optional


class FlowboostError(Exception):
    """Base class for expected failures that end a flow without a traceback."""


class VcsError(FlowboostError):
    """A git invocation exited non-zero, or could not be started (exit_code -1)."""

    def __init__(self, command: list[str], exit_code: int, stdout: str = "", stderr: str = ""):
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(self._describe())

    @property
    def command_line(self) -> str:
        return " ".join(self.command)

    @property
    def output(self) -> str:
        """Combined stderr and stdout, stderr first."""
        return "\n".join(part for part in (self.stderr.strip(), self.stdout.strip()) if part)

    def _describe(self) -> str:
        detail = self.output or "no output"
        return f"`{self.command_line}` failed (exit {self.exit_code}): {detail}"


class InvalidBranchState(FlowboostError):
    """A branch precondition (existence, clean tree) does not hold."""

    def __init__(self, message: str, branch: Optional[str] = None):
        self.branch = branch
        super().__init__(message)


class ConfigurationInvalid(FlowboostError):
    """Required configuration keys are missing."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            f"Missing required configuration: {', '.join(missing)}. "
            "Update .flowboost/config.yaml (run `flowboost init` to create one)."
        )


class UserAborted(FlowboostError):
    """The user chose to abort at a decision point. Not a failure."""

    def __init__(self, message: str = "Operation aborted."):
        super().__init__(message)


class ConflictDuringRestore(FlowboostError):
    """Re-applying stashed changes left conflict markers in the tree."""

    def __init__(self, output: str):
        self.output = output
        super().__init__("Stashed changes conflict with the updated branch")
