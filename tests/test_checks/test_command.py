"""Tests for the command_content checker."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from platform_spec.checks import CommandContentChecker
from platform_spec.errors import SSHConnectionError
from platform_spec.models import ExecResult, Status


def make_provider(result: ExecResult) -> AsyncMock:
    provider = AsyncMock()
    provider.execute_command = AsyncMock(return_value=result)
    return provider


@pytest.mark.asyncio
async def test_passes_on_expected_exit_code() -> None:
    """The expected exit code passes and details are recorded."""
    provider = make_provider(ExecResult(stdout="ok\n", exit_code=0))
    cancel = asyncio.Event()

    result = await CommandContentChecker().check(
        provider, {"name": "uptime", "command": "uptime", "exit_code": 0}, cancel
    )

    assert result.status is Status.PASS
    assert result.name == "uptime"
    assert result.message == "Command exited with expected code 0"
    assert result.details["exit_code"] == 0
    assert result.details["stdout_length"] == 3
    provider.execute_command.assert_awaited_once_with("uptime", cancel)


@pytest.mark.asyncio
async def test_fails_on_other_exit_code() -> None:
    """Any other exit code fails."""
    provider = make_provider(ExecResult(exit_code=3))

    result = await CommandContentChecker().check(provider, {"name": "t", "command": "x", "exit_code": 0})

    assert result.status is Status.FAIL
    assert result.message == "Command exit code is 3, expected 0"


@pytest.mark.asyncio
async def test_any_exit_code_without_expectation() -> None:
    """Without exit_code any status passes."""
    provider = make_provider(ExecResult(exit_code=3))

    result = await CommandContentChecker().check(provider, {"name": "t", "command": "x"})

    assert result.status is Status.PASS
    assert result.message == "Command executed successfully"


@pytest.mark.asyncio
async def test_contains() -> None:
    """Every expected string must be in stdout; the first missing one is named."""
    provider = make_provider(ExecResult(stdout="nginx active running\n"))
    checker = CommandContentChecker()

    found = await checker.check(provider, {"name": "t", "command": "x", "contains": ["active", "running"]})
    missing = await checker.check(provider, {"name": "t", "command": "x", "contains": ["active", "stopped"]})

    assert found.status is Status.PASS
    assert found.message == "Command output contains all 2 strings"
    assert missing.status is Status.FAIL
    assert missing.details["missing"] == "stopped"


@pytest.mark.asyncio
async def test_transport_error_is_error_status() -> None:
    """A command that could not run is an Error, not a Failure."""
    error = SSHConnectionError("reconnect", "web1:22", OSError("No route to host"))
    provider = make_provider(ExecResult.from_error(error))

    result = await CommandContentChecker().check(provider, {"name": "t", "command": "uptime"})

    assert result.status is Status.ERROR
    assert "No route to host" in result.message


@pytest.mark.asyncio
async def test_missing_command() -> None:
    """A declaration without a command cannot run."""
    provider = make_provider(ExecResult())

    result = await CommandContentChecker().check(provider, {"name": "t"})

    assert result.status is Status.ERROR
    provider.execute_command.assert_not_called()
