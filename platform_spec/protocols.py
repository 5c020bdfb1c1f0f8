"""Protocol interfaces for dependency inversion.

Every checker runs its commands through a Provider and never learns
whether the target is the local machine, an SSH host, or a cluster.

Usage Example:

    from platform_spec.protocols import Provider

    async def kernel_version(provider: Provider) -> str:
        result = await provider.execute_command("uname -r")
        return result.stdout.strip()

    # Any backend works
    from platform_spec.providers import LocalProvider
    await kernel_version(LocalProvider())
"""

import asyncio
from typing import Protocol, runtime_checkable

from platform_spec.models import ExecResult


@runtime_checkable
class Provider(Protocol):
    """Protocol for running a command against a target environment."""

    async def execute_command(
        self,
        command: str,
        cancel: asyncio.Event | None = None,
    ) -> ExecResult:
        """Execute a shell command.

        Args:
            command: Command to execute
            cancel: Event that aborts any retry waits when set

        Returns:
            ExecResult. A nonzero exit code is not an error; transport
            failures are reported in ``error`` with exit code -1.
        """
        ...


__all__ = ["Provider"]
