"""Tests for the test dispatcher."""

import asyncio
from typing import Any

import pytest

from platform_spec.checks import CheckerPlugin, CheckerRegistry
from platform_spec.models import ExecResult, Result, Status, SuiteSpec
from platform_spec.protocols import Provider
from platform_spec.services.dispatcher import Dispatcher


class FakeProvider:
    """Provider returning canned output and recording commands."""

    def __init__(self, outputs: dict[str, ExecResult] | None = None) -> None:
        self.outputs = outputs or {}
        self.commands: list[str] = []

    async def execute_command(self, command: str, cancel: asyncio.Event | None = None) -> ExecResult:
        self.commands.append(command)
        return self.outputs.get(command, ExecResult())


class CommandChecker(CheckerPlugin):
    """Passes when the declared command exits 0."""

    kind = "commands"

    async def check(
        self,
        provider: Provider,
        test: dict[str, Any],
        cancel: asyncio.Event | None = None,
    ) -> Result:
        result = await provider.execute_command(test["command"], cancel)
        if result.failed:
            return self.result(test, Status.ERROR, str(result.error))
        if result.exit_code != 0:
            return self.result(test, Status.FAIL, f"exit code {result.exit_code}", stderr=result.stderr)
        return self.result(test, Status.PASS, "ok")


class CrashingChecker(CheckerPlugin):
    """Always raises."""

    kind = "crashy"

    async def check(
        self,
        provider: Provider,
        test: dict[str, Any],
        cancel: asyncio.Event | None = None,
    ) -> Result:
        raise RuntimeError("boom")


@pytest.fixture
def registry() -> CheckerRegistry:
    """Registry with the test checkers."""
    return CheckerRegistry([CommandChecker(), CrashingChecker()])


@pytest.fixture
def provider() -> FakeProvider:
    """Provider where `false` exits 1."""
    return FakeProvider({"false": ExecResult(exit_code=1, stderr="nope")})


@pytest.mark.asyncio
async def test_runs_in_declaration_order(registry: CheckerRegistry, provider: FakeProvider) -> None:
    """Every test runs and results keep declaration order."""
    spec = SuiteSpec(
        name="base",
        tests={
            "commands": [
                {"name": "first", "command": "true"},
                {"name": "second", "command": "false"},
                {"name": "third", "command": "uptime"},
            ]
        },
    )

    run = await Dispatcher(registry, provider).execute(spec, target="web1")

    assert [r.name for r in run.results] == ["first", "second", "third"]
    assert [r.status for r in run.results] == [Status.PASS, Status.FAIL, Status.PASS]
    assert provider.commands == ["true", "false", "uptime"]
    assert run.frozen
    assert run.target == "web1"
    assert not run.short_circuited
    assert run.summary().failed == 1
    assert not run.success


@pytest.mark.asyncio
async def test_fail_fast_stops_after_failure(registry: CheckerRegistry, provider: FakeProvider) -> None:
    """With fail-fast, nothing runs after the first failure."""
    spec = SuiteSpec(
        name="base",
        fail_fast=True,
        tests={
            "commands": [
                {"name": "first", "command": "true"},
                {"name": "second", "command": "false"},
                {"name": "third", "command": "uptime"},
            ]
        },
    )

    run = await Dispatcher(registry, provider).execute(spec)

    assert [r.name for r in run.results] == ["first", "second"]
    assert run.short_circuited
    assert run.frozen
    assert "uptime" not in provider.commands


@pytest.mark.asyncio
async def test_errors_do_not_trigger_fail_fast(registry: CheckerRegistry, provider: FakeProvider) -> None:
    """A crashing checker yields an Error result and the run continues."""
    spec = SuiteSpec(
        name="base",
        fail_fast=True,
        tests={
            "crashy": [{"name": "explodes"}],
            "commands": [{"name": "after", "command": "true"}],
        },
    )

    run = await Dispatcher(registry, provider).execute(spec)

    assert [r.status for r in run.results] == [Status.ERROR, Status.PASS]
    assert "boom" in run.results[0].message
    assert not run.short_circuited


@pytest.mark.asyncio
async def test_unknown_kind_is_skipped(registry: CheckerRegistry, provider: FakeProvider) -> None:
    """Tests without a registered checker are skipped."""
    spec = SuiteSpec(name="base", tests={"services": [{"name": "sshd"}]})

    run = await Dispatcher(registry, provider).execute(spec)

    assert run.results[0].status is Status.SKIP
    assert "services" in run.results[0].message
    assert run.success


@pytest.mark.asyncio
async def test_callback_sees_each_result(registry: CheckerRegistry, provider: FakeProvider) -> None:
    """The callback is invoked once per result, in order."""
    seen: list[str] = []
    spec = SuiteSpec(
        name="base",
        tests={"commands": [{"name": "a", "command": "true"}, {"name": "b", "command": "true"}]},
    )

    await Dispatcher(registry, provider, callback=lambda r: seen.append(r.name)).execute(spec)

    assert seen == ["a", "b"]


@pytest.mark.asyncio
async def test_durations_recorded(registry: CheckerRegistry, provider: FakeProvider) -> None:
    """Each result gets a duration stamped."""
    spec = SuiteSpec(name="base", tests={"commands": [{"name": "a", "command": "true"}]})

    run = await Dispatcher(registry, provider).execute(spec)

    assert run.results[0].duration >= 0.0
    assert run.duration >= 0.0


def test_registry_rejects_duplicates() -> None:
    """Two plugins for one kind is an error."""
    registry = CheckerRegistry([CommandChecker()])

    with pytest.raises(ValueError, match="already registered"):
        registry.register(CommandChecker())

    assert "commands" in registry
    assert registry.kinds == ["commands"]
    assert len(registry) == 1


def test_fake_provider_satisfies_protocol() -> None:
    """Duck-typed providers satisfy the Provider protocol."""
    assert isinstance(FakeProvider(), Provider)
