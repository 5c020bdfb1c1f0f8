"""SSH connection management, direct or through a jump host."""

import asyncio
import logging
import time
from typing import Any

import asyncssh

from platform_spec.config.host_keys import HostKeyVerifier, resolve_host_key_policy
from platform_spec.config.parser import resolve_hostname
from platform_spec.errors import SSHConnectionError
from platform_spec.models import ConnectionConfig
from platform_spec.retry import is_retryable, retry
from platform_spec.services.auth import (
    JUMP_PEER,
    TARGET_PEER,
    AuthMethod,
    auth_options,
    resolve_auth_methods,
)

logger = logging.getLogger(__name__)


def format_elapsed(seconds: float) -> str:
    """Format elapsed seconds as MM:SS.ss."""
    minutes = int(seconds // 60)
    return f"{minutes:02d}:{seconds - minutes * 60:05.2f}"


async def _close_handle(handle: asyncssh.SSHClientConnection) -> None:
    """Close an asyncssh connection and wait for it to finish closing."""
    handle.close()
    await handle.wait_closed()


class Connection:
    """Live SSH handles for one host.

    Holds the target connection and, when tunneling, the jump connection
    the target was opened through.
    """

    def __init__(
        self,
        target: asyncssh.SSHClientConnection | None = None,
        jump: asyncssh.SSHClientConnection | None = None,
    ) -> None:
        self.target = target
        self.jump = jump

    @property
    def connected(self) -> bool:
        """Check if a target connection is held."""
        return self.target is not None

    def adopt(self, other: "Connection") -> None:
        """Take over the handles of another connection.

        Used after a reconnect so callers holding this object see the
        fresh session.
        """
        self.target, self.jump = other.target, other.jump
        other.target = other.jump = None

    async def close(self) -> None:
        """Close target then jump connection.

        The jump connection is closed even if closing the target fails.

        Raises:
            Exception: The first error encountered while closing
        """
        first_error: Exception | None = None

        target, self.target = self.target, None
        if target is not None:
            try:
                await _close_handle(target)
            except Exception as e:
                logger.debug("Error closing target connection: %s", e)
                first_error = e

        jump, self.jump = self.jump, None
        if jump is not None:
            try:
                await _close_handle(jump)
            except Exception as e:
                logger.debug("Error closing jump connection: %s", e)
                if first_error is None:
                    first_error = e

        if first_error is not None:
            raise first_error

    async def __aenter__(self) -> "Connection":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


def _phase_for(error: BaseException, peer: str) -> str:
    """Name the connection phase an asyncssh error belongs to."""
    if isinstance(error, asyncssh.HostKeyNotVerifiable):
        return "host-key check"
    if isinstance(error, asyncssh.PermissionDenied):
        return "jump-host auth" if peer == JUMP_PEER else "target auth"
    return "jump-host dial" if peer == JUMP_PEER else "dial"


class ConnectionManager:
    """Opens authenticated SSH connections for one ConnectionConfig.

    Aliases, credentials and host key policy are resolved again on every
    attempt so edits to ssh_config or known_hosts apply immediately.
    """

    def __init__(self, config: ConnectionConfig) -> None:
        """Initialize connection manager.

        Args:
            config: Connection configuration (owned by this manager)
        """
        self.config = config
        self._started = 0.0

    async def connect(self, cancel: asyncio.Event | None = None) -> Connection:
        """Connect, retrying transient failures per the config's policy.

        Args:
            cancel: Event that aborts waiting between attempts

        Returns:
            Live connection

        Raises:
            PlatformSpecError: Fatal failure, exhausted retries, or cancellation
        """
        return await retry(self.config.retry_policy, is_retryable, self.connect_once, cancel)

    async def connect_once(self) -> Connection:
        """Perform a single connection attempt without retries.

        Raises:
            HostKeyError: Host key policy could not be resolved
            AuthError: No usable credentials for a peer
            SSHConnectionError: Dialing or handshaking failed
        """
        self._started = time.monotonic()
        config = self.config
        if config.uses_jump_host:
            self._progress("Connecting to %s via jump host %s", config.target, config.jump_host)
        else:
            self._progress("Connecting to %s", config.target)

        host_key = resolve_host_key_policy(config)

        if config.uses_jump_host:
            jump_methods = await resolve_auth_methods(config.jump_identity_file, JUMP_PEER)
            target_methods = await resolve_auth_methods(config.identity_file, TARGET_PEER)
            connection = await self._connect_via_jump_host(jump_methods, target_methods, host_key)
        else:
            target_methods = await resolve_auth_methods(config.identity_file, TARGET_PEER)
            connection = await self._connect_direct(target_methods, host_key)

        self._progress("Connected and authenticated (%.2fs)", self._elapsed())
        return connection

    def _connect_options(
        self,
        user: str,
        methods: list[AuthMethod],
        host_key: HostKeyVerifier,
    ) -> dict[str, Any]:
        """Build asyncssh.connect keyword arguments for one peer."""
        return {
            "username": user,
            "known_hosts": host_key.known_hosts,
            "connect_timeout": self.config.timeout,
            "preferred_auth": "publickey",
            # aliases are resolved by resolve_hostname, not asyncssh
            "config": None,
            **auth_options(methods),
        }

    async def _connect_direct(
        self,
        methods: list[AuthMethod],
        host_key: HostKeyVerifier,
    ) -> Connection:
        config = self.config
        host = resolve_hostname(config.host)
        address = f"{host}:{config.port}"

        try:
            target = await asyncssh.connect(
                host,
                config.port,
                **self._connect_options(config.user, methods, host_key),
            )
        except (OSError, asyncssh.Error) as e:
            raise SSHConnectionError(_phase_for(e, TARGET_PEER), address, e) from e

        return Connection(target=target)

    async def _connect_via_jump_host(
        self,
        jump_methods: list[AuthMethod],
        target_methods: list[AuthMethod],
        host_key: HostKeyVerifier,
    ) -> Connection:
        config = self.config
        # Nothing may raise between opening the jump and the guarded target dial
        jump_host = resolve_hostname(config.jump_host or "")
        jump_address = f"{jump_host}:{config.jump_port}"
        target_host = resolve_hostname(config.host)
        target_address = f"{target_host}:{config.port}"

        try:
            jump = await asyncssh.connect(
                jump_host,
                config.jump_port,
                **self._connect_options(config.effective_jump_user, jump_methods, host_key),
            )
        except (OSError, asyncssh.Error) as e:
            raise SSHConnectionError(_phase_for(e, JUMP_PEER), jump_address, e) from e

        self._progress("Connected to jump host (%.2fs)", self._elapsed())

        try:
            # Opens a direct-tcpip channel through the jump host and runs
            # the target handshake over it
            target = await asyncssh.connect(
                target_host,
                config.port,
                tunnel=jump,
                **self._connect_options(config.user, target_methods, host_key),
            )
        except BaseException as e:
            await self._discard(jump)
            if isinstance(e, (OSError, asyncssh.Error)):
                raise SSHConnectionError(
                    _phase_for(e, TARGET_PEER),
                    f"{target_address} through jump host",
                    e,
                ) from e
            raise

        self._progress("Connected to target through jump host (%.2fs)", self._elapsed())
        return Connection(target=target, jump=jump)

    async def _discard(self, handle: asyncssh.SSHClientConnection) -> None:
        """Close a half-open connection on an error path."""
        try:
            await _close_handle(handle)
        except Exception as e:
            logger.debug("Error closing jump connection after failure: %s", e)

    def _elapsed(self) -> float:
        """Seconds since the current attempt started."""
        return time.monotonic() - self._started

    def _progress(self, message: str, *args: Any) -> None:
        """Emit an elapsed-stamped progress line in verbose mode."""
        if self.config.verbose:
            logger.info("[%s] " + message, format_elapsed(self._elapsed()), *args)
