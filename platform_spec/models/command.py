"""Command execution data models."""

from dataclasses import dataclass

# Exit code used when the remote side never reported one
UNKNOWN_EXIT_CODE = -1


@dataclass(frozen=True)
class ExecResult:
    """Result of running one command through a provider.

    A nonzero ``exit_code`` is a normal outcome; ``error`` is only set
    when the command could not be run or its transport failed.
    """

    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    error: Exception | None = None

    @property
    def failed(self) -> bool:
        """Check if the command hit a transport error."""
        return self.error is not None

    @classmethod
    def from_error(cls, error: Exception) -> "ExecResult":
        """Build a result for a command that never produced output."""
        return cls(exit_code=UNKNOWN_EXIT_CODE, error=error)
