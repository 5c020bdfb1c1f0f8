"""Classify errors as transient (worth retrying) or permanent.

This is the only place that inspects error messages. The retry loop
consults the predicates here and nothing else.
"""

import errno
import re
import socket
from collections.abc import Callable, Iterator

import asyncssh

from platform_spec.errors import AuthError, HostKeyError, SessionOpenError

ErrorClassifier = Callable[[BaseException], bool]

_FATAL_TYPES: tuple[type[BaseException], ...] = (
    AuthError,
    HostKeyError,
    asyncssh.PermissionDenied,
    asyncssh.HostKeyNotVerifiable,
    asyncssh.KeyImportError,
    socket.gaierror,
    FileNotFoundError,
    PermissionError,
)

_RETRYABLE_TYPES: tuple[type[BaseException], ...] = (
    SessionOpenError,
    ConnectionRefusedError,
    ConnectionResetError,
    ConnectionAbortedError,
    BrokenPipeError,
    TimeoutError,
    EOFError,
    asyncssh.ConnectionLost,
)

_RETRYABLE_ERRNOS = frozenset({errno.EHOSTUNREACH, errno.ENETUNREACH, errno.ETIMEDOUT})

# A jump host that could not reach the target
_RETRYABLE_CHANNEL_CODES = frozenset({asyncssh.OPEN_CONNECT_FAILED})

# Case-sensitive, whole word only
_EOF = re.compile(r"\bEOF\b")

RETRYABLE_PATTERNS = (
    "connection reset by peer",
    "broken pipe",
    "i/o timeout",
    "connection refused",
    "no route to host",
    "network is unreachable",
    "connection timed out",
    "failed to create session",
    "administratively prohibited",
    "connection lost",
    "connect failed",
    "connect call failed",
)

NON_RETRYABLE_PATTERNS = (
    # authentication
    "unable to authenticate",
    "no supported methods remain",
    "permission denied",
    "authentication failed",
    "no authentication method available",
    # host keys
    "host key verification failed",
    "host key is not trusted",
    "known_hosts",
    "key mismatch",
    # key and config files
    "failed to read private key",
    "failed to parse private key",
    "no such file or directory",
    "passphrase must be specified",
    # dns
    "no such host",
    "name or service not known",
    "nodename nor servname provided",
    "temporary failure in name resolution",
)


def _error_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield ``exc`` and every exception it was raised from."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__


def _message(exc: BaseException) -> str:
    """Lowercased message for substring matching."""
    return str(exc).lower()


def is_non_retryable(exc: BaseException | None) -> bool:
    """Check whether an error is a permanent configuration or auth failure.

    Args:
        exc: Error to classify

    Returns:
        True if retrying cannot help
    """
    if exc is None:
        return False

    for err in _error_chain(exc):
        if isinstance(err, _FATAL_TYPES):
            return True
        text = _message(err)
        if any(pattern in text for pattern in NON_RETRYABLE_PATTERNS):
            return True
    return False


def is_retryable(exc: BaseException | None) -> bool:
    """Check whether an error is a transient network or session failure.

    Permanent failures anywhere in the cause chain win over transient
    ones, so a refused handshake wrapped around an EOF is not retried.

    Args:
        exc: Error to classify

    Returns:
        True if the operation is worth another attempt
    """
    if exc is None or is_non_retryable(exc):
        return False

    for err in _error_chain(exc):
        if isinstance(err, _RETRYABLE_TYPES):
            return True
        if isinstance(err, OSError) and err.errno in _RETRYABLE_ERRNOS:
            return True
        if isinstance(err, asyncssh.ChannelOpenError) and err.code in _RETRYABLE_CHANNEL_CODES:
            return True
        text = _message(err)
        if any(pattern in text for pattern in RETRYABLE_PATTERNS):
            return True
        if _EOF.search(str(err)):
            return True
    return False


def always_retry(exc: BaseException) -> bool:
    """Classifier that retries everything."""
    return True


def never_retry(exc: BaseException) -> bool:
    """Classifier that retries nothing."""
    return False
