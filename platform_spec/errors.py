"""Error taxonomy for connection, authentication, and command execution.

Every error carries the phase that produced it as a message prefix and
chains the underlying cause via ``raise ... from`` so callers never lose
the original exception.
"""


class PlatformSpecError(Exception):
    """Base class for all platform-spec errors."""

    phase: str = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"{self.phase}: {message}")


class AuthError(PlatformSpecError):
    """No usable credential for a peer (bad key file, no agent, no method)."""

    def __init__(self, peer: str, message: str):
        """Initialize auth error.

        Args:
            peer: Which side failed ("target host" or "jump host")
            message: Human readable reason
        """
        self.peer = peer
        self.phase = "jump-host auth" if peer == "jump host" else "target auth"
        super().__init__(message)


class HostKeyError(PlatformSpecError):
    """Host key verification could not be configured or failed."""

    phase = "host-key check"


class SSHConnectionError(PlatformSpecError):
    """Failed to establish an SSH connection."""

    def __init__(self, phase: str, address: str, original_error: BaseException):
        """Initialize connection error.

        Args:
            phase: Phase that failed (dial, target auth, jump-host auth, ...)
            address: host:port that was being reached
            original_error: Original exception that caused the failure
        """
        self.phase = phase
        self.address = address
        self.original_error = original_error
        super().__init__(f"failed to connect to {address}: {original_error}")


class SessionOpenError(PlatformSpecError):
    """Opening a channel on an existing connection failed."""

    phase = "session"


class CommandError(PlatformSpecError):
    """Transport failure while a command was running."""

    phase = "command execution"


class RetryExhaustedError(PlatformSpecError):
    """A retryable error persisted through every configured attempt."""

    phase = "retry"

    def __init__(self, max_retries: int, last_error: BaseException):
        self.max_retries = max_retries
        self.attempts = max_retries + 1
        self.last_error = last_error
        super().__init__(f"max retries ({max_retries}) exceeded: {last_error}")


class RetryCancelledError(PlatformSpecError):
    """Cancellation was signalled while waiting between attempts."""

    phase = "retry"

    def __init__(self, attempts: int, last_error: BaseException | None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"retry cancelled after {attempts} attempt(s): {last_error}")


__all__ = [
    "AuthError",
    "CommandError",
    "HostKeyError",
    "PlatformSpecError",
    "RetryCancelledError",
    "RetryExhaustedError",
    "SSHConnectionError",
    "SessionOpenError",
]
