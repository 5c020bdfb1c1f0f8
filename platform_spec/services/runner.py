"""Run commands over a live SSH connection."""

import logging
import time

import asyncssh

from platform_spec.errors import CommandError, SessionOpenError, SSHConnectionError
from platform_spec.models import UNKNOWN_EXIT_CODE, ExecResult
from platform_spec.services.connection import Connection, ConnectionManager, format_elapsed

logger = logging.getLogger(__name__)


def _text(value: str | bytes | None) -> str:
    """Normalize captured output to str."""
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


class CommandRunner:
    """Executes commands on a connection, reconnecting once if it died."""

    def __init__(self, manager: ConnectionManager) -> None:
        """Initialize command runner.

        Args:
            manager: Manager used to reopen the connection with its original config
        """
        self.manager = manager

    async def run(self, connection: Connection, command: str) -> ExecResult:
        """Run a command and wait for it to finish.

        Each command gets its own channel. If the channel cannot be opened
        the connection is reopened once and the channel retried once.

        Args:
            connection: Live connection; its handles are replaced on reconnect
            command: Shell command to execute

        Returns:
            ExecResult with full stdout/stderr and the exit code

        Raises:
            SessionOpenError: Channel creation failed again after reconnecting
            SSHConnectionError: Reconnecting failed
            CommandError: Transport failed while the command was running
        """
        started = time.monotonic()
        verbose = self.manager.config.verbose
        if verbose:
            logger.info("[%s] Executing: %s", format_elapsed(0), command)

        try:
            process = await self._open_channel(connection, command)
        except SessionOpenError as first_error:
            logger.warning("%s, reconnecting once", first_error)
            await self._reconnect(connection)
            try:
                process = await self._open_channel(connection, command)
            except SessionOpenError as e:
                raise SessionOpenError(f"failed to create session after reconnect: {e.message}") from e

        try:
            completed = await process.wait(check=False)
        except (OSError, asyncssh.Error) as e:
            raise CommandError(f"command execution failed: {e}") from e
        finally:
            process.close()
            await process.wait_closed()

        exit_code = completed.exit_status
        if exit_code is None:
            exit_code = UNKNOWN_EXIT_CODE

        if verbose:
            elapsed = time.monotonic() - started
            logger.info(
                "[%s] Command completed (%.2fs, exit code: %d)",
                format_elapsed(elapsed),
                elapsed,
                exit_code,
            )

        return ExecResult(
            stdout=_text(completed.stdout),
            stderr=_text(completed.stderr),
            exit_code=exit_code,
        )

    async def _open_channel(
        self,
        connection: Connection,
        command: str,
    ) -> asyncssh.SSHClientProcess:
        """Start ``command`` on a new session channel.

        stdin is /dev/null so commands that read it see EOF at once.

        Raises:
            SessionOpenError: The channel could not be opened
        """
        if connection.target is None:
            raise SessionOpenError("failed to create session: not connected")
        try:
            return await connection.target.create_process(
                command,
                stdin=asyncssh.DEVNULL,
                errors="replace",
            )
        except (OSError, asyncssh.Error) as e:
            raise SessionOpenError(f"failed to create session: {e}") from e

    async def _reconnect(self, connection: Connection) -> None:
        """Replace a dead connection's handles with a fresh connection."""
        try:
            await connection.close()
        except Exception as e:
            logger.debug("Ignoring error closing dead connection: %s", e)

        try:
            fresh = await self.manager.connect_once()
        except Exception as e:
            address = f"{self.manager.config.host}:{self.manager.config.port}"
            raise SSHConnectionError("reconnect", address, e) from e

        connection.adopt(fresh)
        logger.info("Reconnected to %s", self.manager.config.target)
