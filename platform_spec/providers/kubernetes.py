"""Kubernetes provider driving kubectl on the local machine."""

import asyncio
import logging
import os
import re

from platform_spec.models import ExecResult
from platform_spec.providers.local import run_shell

logger = logging.getLogger(__name__)

_NAMESPACE_FLAG = re.compile(r"(?:^|\s)(?:-n|--namespace|-A|--all-namespaces)(?:[=\s]|$)")
# Only the kubectl invocation itself is searched for namespace flags
_SHELL_SEPARATOR = re.compile(r"[|;&]")


class KubernetesProvider:
    """Runs kubectl commands against a chosen kubeconfig, context and namespace."""

    def __init__(
        self,
        kubeconfig: str | None = None,
        context: str | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize Kubernetes provider.

        Args:
            kubeconfig: Path to kubeconfig (default: kubectl's own default)
            context: Context injected into every kubectl command
            namespace: Namespace injected into kubectl commands that name none
        """
        self.kubeconfig = kubeconfig
        self.context = context
        self.namespace = namespace

    def prepare_command(self, command: str) -> str:
        """Inject ``--context`` and ``--namespace`` into kubectl commands.

        The namespace is left out when the kubectl invocation already
        selects one (``-n``, ``--namespace``, ``-A`` or ``--all-namespaces``).
        """
        if not command.startswith("kubectl"):
            return command
        rest = command[len("kubectl"):]
        if rest and not rest[0].isspace():
            return command

        flags = []
        if self.context:
            flags.append(f"--context={self.context}")
        if self.namespace and not _NAMESPACE_FLAG.search(_SHELL_SEPARATOR.split(rest, 1)[0]):
            flags.append(f"--namespace={self.namespace}")
        if not flags:
            return command
        return f"kubectl {' '.join(flags)}{rest}"

    async def execute_command(
        self,
        command: str,
        cancel: asyncio.Event | None = None,
    ) -> ExecResult:
        """Run a (kubectl) command with KUBECONFIG set."""
        env = dict(os.environ)
        if self.kubeconfig:
            env["KUBECONFIG"] = self.kubeconfig
        command = self.prepare_command(command)
        logger.debug("Executing kubectl: %s", command)
        return await run_shell(command, env)
