"""Tests for the Kubernetes provider."""

from unittest.mock import AsyncMock, patch

import pytest

from platform_spec.models import ExecResult
from platform_spec.providers import KubernetesProvider


class TestPrepareCommand:
    """Tests for context injection."""

    def test_injects_context(self) -> None:
        """--context is added after kubectl."""
        provider = KubernetesProvider(context="prod")
        assert provider.prepare_command("kubectl get pods") == "kubectl --context=prod get pods"

    def test_without_context(self) -> None:
        """Commands pass through without a context."""
        assert KubernetesProvider().prepare_command("kubectl get pods") == "kubectl get pods"

    def test_non_kubectl_untouched(self) -> None:
        """Only kubectl commands are rewritten."""
        provider = KubernetesProvider(context="prod")
        assert provider.prepare_command("helm list") == "helm list"


@pytest.mark.asyncio
async def test_sets_kubeconfig() -> None:
    """KUBECONFIG is exported to the command."""
    provider = KubernetesProvider(kubeconfig="/tmp/kubeconfig", context="dev")

    with patch(
        "platform_spec.providers.kubernetes.run_shell",
        AsyncMock(return_value=ExecResult(stdout="ok")),
    ) as mock_run:
        result = await provider.execute_command("kubectl version")

    assert result.stdout == "ok"
    command, env = mock_run.call_args.args
    assert command == "kubectl --context=dev version"
    assert env["KUBECONFIG"] == "/tmp/kubeconfig"


@pytest.mark.asyncio
async def test_runs_real_shell() -> None:
    """Non-kubectl commands run through the local shell."""
    result = await KubernetesProvider().execute_command("echo cluster")

    assert result.stdout == "cluster\n"


class TestNamespace:
    """Tests for namespace injection."""

    def test_injects_namespace(self) -> None:
        """--namespace is added to kubectl commands."""
        provider = KubernetesProvider(namespace="payments")
        assert provider.prepare_command("kubectl get pods") == "kubectl --namespace=payments get pods"

    def test_context_and_namespace(self) -> None:
        """Context comes first, then namespace."""
        provider = KubernetesProvider(context="prod", namespace="payments")
        assert (
            provider.prepare_command("kubectl get deploy api")
            == "kubectl --context=prod --namespace=payments get deploy api"
        )

    @pytest.mark.parametrize(
        "command",
        [
            "kubectl get pods -n kube-system",
            "kubectl -n kube-system get pods",
            "kubectl get pods --namespace=kube-system",
            "kubectl get pods --namespace kube-system",
            "kubectl get pods -A",
            "kubectl get pods --all-namespaces",
        ],
    )
    def test_explicit_namespace_wins(self, command: str) -> None:
        """Commands that already choose a namespace are left alone."""
        assert KubernetesProvider(namespace="payments").prepare_command(command) == command

    def test_flags_after_pipe_ignored(self) -> None:
        """Flags of piped commands do not count as a namespace choice."""
        provider = KubernetesProvider(namespace="payments")
        assert (
            provider.prepare_command("kubectl logs api | grep -A 3 error")
            == "kubectl --namespace=payments logs api | grep -A 3 error"
        )

    def test_non_kubectl_untouched(self) -> None:
        """Other commands never get a namespace."""
        provider = KubernetesProvider(namespace="payments")
        assert provider.prepare_command("kubectl-neat get pods") == "kubectl-neat get pods"
        assert provider.prepare_command("helm list") == "helm list"


@pytest.mark.asyncio
async def test_namespace_reaches_shell() -> None:
    """The executed command carries the namespace."""
    provider = KubernetesProvider(namespace="payments")

    with patch(
        "platform_spec.providers.kubernetes.run_shell",
        AsyncMock(return_value=ExecResult()),
    ) as mock_run:
        await provider.execute_command("kubectl get svc")

    assert mock_run.call_args.args[0] == "kubectl --namespace=payments get svc"
