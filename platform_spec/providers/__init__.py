"""Execution backends implementing the Provider protocol."""

from platform_spec.providers.kubernetes import KubernetesProvider
from platform_spec.providers.local import LocalProvider, run_shell
from platform_spec.providers.remote import RemoteProvider

__all__ = ["KubernetesProvider", "LocalProvider", "RemoteProvider", "run_shell"]
