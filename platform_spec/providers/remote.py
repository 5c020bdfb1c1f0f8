"""SSH-backed provider."""

import asyncio
import logging
from typing import Any

from platform_spec.errors import PlatformSpecError
from platform_spec.models import ConnectionConfig, ExecResult
from platform_spec.retry import is_retryable, retry
from platform_spec.services.connection import Connection, ConnectionManager
from platform_spec.services.runner import CommandRunner

logger = logging.getLogger(__name__)


class RemoteProvider:
    """Runs commands on a remote host over SSH, optionally via a jump host."""

    def __init__(self, config: ConnectionConfig) -> None:
        """Initialize remote provider. No connection is opened yet.

        Args:
            config: Connection configuration for the target
        """
        self.config = config
        self.manager = ConnectionManager(config)
        self.runner = CommandRunner(self.manager)
        self._connection: Connection | None = None

    @property
    def connected(self) -> bool:
        """Check if a connection is open."""
        return self._connection is not None and self._connection.connected

    async def connect(self, cancel: asyncio.Event | None = None) -> Connection:
        """Open the connection, retrying per the configured policy.

        Returns:
            The live connection, also kept for later commands

        Raises:
            PlatformSpecError: Connection could not be established
        """
        connection = await self.manager.connect(cancel)
        self._connection = connection
        logger.debug("Connected to %s", self.config.target)
        return connection

    async def close(self) -> None:
        """Close the connection (target first, then jump host)."""
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        await connection.close()

    async def __aenter__(self) -> "RemoteProvider":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def execute_command(
        self,
        command: str,
        cancel: asyncio.Event | None = None,
    ) -> ExecResult:
        """Execute a command, retrying transient failures per the policy.

        Args:
            command: Shell command to execute
            cancel: Event that aborts retry waits when set

        Returns:
            ExecResult; transport failures land in ``error``
        """
        connection = self._connection
        if connection is None:
            try:
                connection = await self.connect(cancel)
            except PlatformSpecError as e:
                logger.warning("Cannot connect to %s: %s", self.config.target, e)
                return ExecResult.from_error(e)

        async def once() -> ExecResult:
            return await self.runner.run(connection, command)

        try:
            return await retry(self.config.retry_policy, is_retryable, once, cancel)
        except PlatformSpecError as e:
            logger.warning("Command on %s failed: %s", self.config.target, e)
            return ExecResult.from_error(e)
