from __future__ import annotations


class SetupError(Exception):
    """Base class for errors raised while provisioning."""


class FatalError(SetupError):
    """Aborts the whole run. Nothing after the failing step executes."""

    def __init__(self, message: str, *, remediation: str | None = None, exit_code: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.remediation = remediation
        self.exit_code = exit_code

    def __str__(self) -> str:
        if self.remediation:
            return f"{self.message} ({self.remediation})"
        return self.message


class InvalidInputError(FatalError):
    def __init__(self, message: str, *, remediation: str | None = None) -> None:
        super().__init__(message, remediation=remediation, exit_code=100)


class StepWarning(SetupError):
    """An optional step could not finish; the run continues."""


class RestartRequested(SetupError):
    """The run must start again from the first step.

    Raised after handing control to an external installer whose result can
    only be observed by re-evaluating every precondition.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
        # Filled in by the pipeline: the requesting step and the results so far.
        self.step_id: str | None = None
        self.results: list = []


class CommandError(RuntimeError):
    def __init__(self, argv: list[str], returncode: int, stderr: str = "") -> None:
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command failed ({returncode}): {' '.join(argv)}"
        if stderr.strip():
            msg += f"\n{stderr.strip()}"
        super().__init__(msg)
