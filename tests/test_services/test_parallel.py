"""Tests for multi-host execution."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from platform_spec.checks import CheckerRegistry
from platform_spec.errors import SSHConnectionError
from platform_spec.models import ConnectionConfig, HostResults, SuiteSpec
from platform_spec.services.parallel import HostJob, check_host, parse_workers, run_hosts


def make_jobs(*hosts: str) -> list[HostJob]:
    return [HostJob(target=host, config=ConnectionConfig(host=host)) for host in hosts]


class TestParseWorkers:
    """Tests for parse_workers."""

    def test_integer(self) -> None:
        """Integers are used as-is."""
        assert parse_workers("4") == 4
        assert parse_workers(8) == 8

    def test_capped(self) -> None:
        """Values above the maximum are capped."""
        assert parse_workers(500, max_workers=50) == 50

    def test_auto(self) -> None:
        """auto uses the CPU count."""
        with patch("platform_spec.services.parallel.os.cpu_count", return_value=6):
            assert parse_workers("auto") == 6

    @pytest.mark.parametrize("value", ["0", "-2", "many"])
    def test_invalid(self, value: str) -> None:
        """Zero, negatives and garbage are rejected."""
        with pytest.raises(ValueError):
            parse_workers(value)


class TestRunHosts:
    """Tests for run_hosts."""

    @pytest.mark.asyncio
    async def test_results_in_input_order(self) -> None:
        """Results come back in job order regardless of finishing order."""
        delays = {"a": 0.03, "b": 0.0, "c": 0.01}

        async def test_fn(job: HostJob, cancel: asyncio.Event) -> HostResults:
            await asyncio.sleep(delays[job.target])
            return HostResults(target=job.target, connected=True)

        results = await run_hosts(make_jobs("a", "b", "c"), test_fn, workers=3)

        assert [r.target for r in results] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_worker_limit(self) -> None:
        """No more than `workers` hosts run at once."""
        running = 0
        peak = 0

        async def test_fn(job: HostJob, cancel: asyncio.Event) -> HostResults:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return HostResults(target=job.target, connected=True)

        await run_hosts(make_jobs(*"abcdef"), test_fn, workers=2)

        assert peak == 2

    @pytest.mark.asyncio
    async def test_fail_fast_skips_remaining(self) -> None:
        """With fail-fast, hosts not yet started are skipped after a failure."""

        async def test_fn(job: HostJob, cancel: asyncio.Event) -> HostResults:
            return HostResults(target=job.target, connected=job.target != "b")

        results = await run_hosts(make_jobs("a", "b", "c", "d"), test_fn, workers=1, fail_fast=True)

        assert [r.target for r in results] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_without_fail_fast_all_run(self) -> None:
        """Failures do not stop other hosts by default."""

        async def test_fn(job: HostJob, cancel: asyncio.Event) -> HostResults:
            return HostResults(target=job.target, connected=False)

        results = await run_hosts(make_jobs("a", "b", "c"), test_fn, workers=1)

        assert len(results) == 3


class TestCheckHost:
    """Tests for check_host."""

    @pytest.mark.asyncio
    async def test_connection_failure_recorded(self) -> None:
        """A failed connection is reported without running specs."""
        provider = MagicMock()
        error = SSHConnectionError("dial", "a:22", ConnectionRefusedError("Connection refused"))
        provider.connect = AsyncMock(side_effect=error)
        provider.close = AsyncMock()

        with patch("platform_spec.providers.RemoteProvider", return_value=provider):
            result = await check_host(make_jobs("a")[0], [SuiteSpec(name="s")], CheckerRegistry())

        assert not result.connected
        assert result.connection_error is error
        assert result.suites == []
        assert not result.success

    @pytest.mark.asyncio
    async def test_runs_specs_and_closes(self) -> None:
        """Each spec runs once and the connection is closed."""
        provider = MagicMock()
        provider.connect = AsyncMock()
        provider.close = AsyncMock()
        specs = [SuiteSpec(name="one"), SuiteSpec(name="two")]

        with patch("platform_spec.providers.RemoteProvider", return_value=provider):
            result = await check_host(make_jobs("a")[0], specs, CheckerRegistry())

        assert result.connected
        assert [suite.spec_name for suite in result.suites] == ["one", "two"]
        assert all(suite.target == "a" for suite in result.suites)
        assert result.success
        provider.close.assert_awaited_once()
