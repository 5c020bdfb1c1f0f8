"""Tests for the error taxonomy."""

from platform_spec.errors import (
    AuthError,
    CommandError,
    HostKeyError,
    PlatformSpecError,
    RetryCancelledError,
    RetryExhaustedError,
    SessionOpenError,
    SSHConnectionError,
)


def test_messages_carry_phase() -> None:
    """Every error message starts with its phase."""
    cause = ConnectionRefusedError("Connection refused")
    assert str(AuthError("target host", "no key")) == "target auth: no key"
    assert str(AuthError("jump host", "no key")) == "jump-host auth: no key"
    assert str(HostKeyError("bad")) == "host-key check: bad"
    assert str(SessionOpenError("gone")) == "session: gone"
    assert str(CommandError("lost")) == "command execution: lost"
    assert str(SSHConnectionError("dial", "web1:22", cause)) == (
        "dial: failed to connect to web1:22: Connection refused"
    )


def test_all_errors_share_a_base() -> None:
    """The whole taxonomy shares one base class."""
    cause = TimeoutError()
    for error in (
        AuthError("target host", "x"),
        HostKeyError("x"),
        SSHConnectionError("dial", "h:22", cause),
        SessionOpenError("x"),
        CommandError("x"),
        RetryExhaustedError(2, cause),
        RetryCancelledError(1, cause),
    ):
        assert isinstance(error, PlatformSpecError)


def test_retry_errors_keep_last_error() -> None:
    """Retry errors expose the attempts and the last underlying error."""
    cause = ConnectionRefusedError("Connection refused")
    exhausted = RetryExhaustedError(3, cause)

    assert exhausted.attempts == 4
    assert exhausted.last_error is cause
    assert "max retries (3) exceeded" in str(exhausted)
    assert RetryCancelledError(2, cause).attempts == 2
