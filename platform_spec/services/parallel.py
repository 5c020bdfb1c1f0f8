"""Test many hosts, one connection per host, optionally concurrently."""

import asyncio
import logging
import os
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from platform_spec.checks import CheckerRegistry
from platform_spec.errors import PlatformSpecError
from platform_spec.models import ConnectionConfig, HostResults, SuiteSpec
from platform_spec.services.dispatcher import Dispatcher, ResultCallback

logger = logging.getLogger(__name__)

HostTestFn = Callable[["HostJob", asyncio.Event], Awaitable[HostResults]]


@dataclass(frozen=True)
class HostJob:
    """One host to test."""

    target: str
    config: ConnectionConfig


def parse_workers(value: str | int, max_workers: int = 50) -> int:
    """Parse a worker count: an integer or "auto" (CPU count).

    Args:
        value: "auto" or a positive integer
        max_workers: Upper bound applied to the result

    Returns:
        Worker count between 1 and ``max_workers``

    Raises:
        ValueError: If the value is not "auto" or a positive integer
    """
    if isinstance(value, str) and value.strip().lower() == "auto":
        workers = os.cpu_count() or 1
    else:
        try:
            workers = int(value)
        except ValueError:
            raise ValueError(f"invalid worker count: {value} (must be integer or 'auto')") from None
        if workers < 1:
            raise ValueError(f"worker count must be at least 1, got {workers}")
    return max(1, min(workers, max_workers))


async def check_host(
    job: HostJob,
    specs: list[SuiteSpec],
    registry: CheckerRegistry,
    cancel: asyncio.Event | None = None,
    callback: ResultCallback | None = None,
) -> HostResults:
    """Connect to one host and run every spec against it.

    The connection is closed on every exit path.
    """
    # providers.remote imports this package
    from platform_spec.providers import RemoteProvider

    started = time.monotonic()
    host_results = HostResults(target=job.target)
    provider = RemoteProvider(job.config)

    try:
        await provider.connect(cancel)
    except PlatformSpecError as e:
        logger.error("Connection to %s failed: %s", job.target, e)
        host_results.connection_error = e
        host_results.duration = time.monotonic() - started
        return host_results

    host_results.connected = True
    try:
        dispatcher = Dispatcher(registry, provider, callback)
        for spec in specs:
            run = await dispatcher.execute(spec, target=job.target, cancel=cancel)
            host_results.suites.append(run)
    finally:
        try:
            await provider.close()
        except Exception as e:
            logger.warning("Error closing connection to %s: %s", job.target, e)

    host_results.duration = time.monotonic() - started
    return host_results


async def run_hosts(
    jobs: list[HostJob],
    test_fn: HostTestFn,
    workers: int = 1,
    fail_fast: bool = False,
) -> list[HostResults]:
    """Run ``test_fn`` for each host with at most ``workers`` in flight.

    Args:
        jobs: Hosts to test
        test_fn: Coroutine testing one host; receives the shared cancel event
        workers: Maximum hosts tested at once
        fail_fast: Stop starting new hosts after the first unsuccessful one

    Returns:
        Results for every host that was started, in input order
    """
    semaphore = asyncio.Semaphore(max(1, workers))
    cancel = asyncio.Event()
    completed = 0

    async def run_one(job: HostJob) -> HostResults | None:
        nonlocal completed
        async with semaphore:
            if cancel.is_set():
                return None
            result = await test_fn(job, cancel)
            completed += 1
            logger.info(
                "Tested %d/%d hosts (%s: %s)",
                completed,
                len(jobs),
                job.target,
                "ok" if result.success else "failed",
            )
            if fail_fast and not result.success:
                logger.warning("Fail-fast: %s failed, not starting remaining hosts", job.target)
                cancel.set()
            return result

    results = await asyncio.gather(*(run_one(job) for job in jobs))
    return [result for result in results if result is not None]
