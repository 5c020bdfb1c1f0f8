"""Local shell provider."""

import asyncio
import logging
import os

from platform_spec.errors import CommandError
from platform_spec.models import UNKNOWN_EXIT_CODE, ExecResult

logger = logging.getLogger(__name__)


async def run_shell(command: str, env: dict[str, str] | None = None) -> ExecResult:
    """Run a command through ``sh -c`` and capture its output.

    Args:
        command: Shell command to execute
        env: Full environment for the child, or None to inherit

    Returns:
        ExecResult with output and exit code, or a transport error
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            "sh",
            "-c",
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
        )
    except OSError as e:
        return ExecResult.from_error(CommandError(f"command execution failed: {e}"))

    try:
        stdout, stderr = await proc.communicate()
    except asyncio.CancelledError:
        if proc.returncode is None:
            proc.terminate()
            await proc.wait()
        raise

    exit_code = proc.returncode
    if exit_code is None or exit_code < 0:
        # killed by a signal, no exit status
        exit_code = UNKNOWN_EXIT_CODE

    return ExecResult(
        stdout=stdout.decode(errors="replace") if stdout else "",
        stderr=stderr.decode(errors="replace") if stderr else "",
        exit_code=exit_code,
    )


class LocalProvider:
    """Executes commands on the local machine."""

    def __init__(self, env: dict[str, str] | None = None) -> None:
        """Initialize local provider.

        Args:
            env: Extra environment variables layered over os.environ
        """
        self._env = env

    async def execute_command(
        self,
        command: str,
        cancel: asyncio.Event | None = None,
    ) -> ExecResult:
        """Run a command locally via ``sh -c``."""
        logger.debug("Executing locally: %s", command)
        env = {**os.environ, **self._env} if self._env else None
        return await run_shell(command, env)
