"""Run a spec's declared tests through their checker plugins."""

import asyncio
import dataclasses
import logging
import time
from collections.abc import Callable

from platform_spec.checks import CheckerRegistry
from platform_spec.models import Result, Status, SuiteSpec, TestSuiteRun
from platform_spec.protocols import Provider

logger = logging.getLogger(__name__)

ResultCallback = Callable[[Result], None]


class Dispatcher:
    """Executes tests against a provider and collects their results.

    With fail-fast enabled the run stops at the first Failed result.
    Error results (the check itself could not run) never stop the run.
    """

    def __init__(
        self,
        registry: CheckerRegistry,
        provider: Provider,
        callback: ResultCallback | None = None,
    ) -> None:
        """Initialize dispatcher.

        Args:
            registry: Checker plugins by kind
            provider: Where checkers run their commands
            callback: Called with each result as soon as it exists
        """
        self.registry = registry
        self.provider = provider
        self.callback = callback

    async def execute(
        self,
        spec: SuiteSpec,
        target: str = "",
        cancel: asyncio.Event | None = None,
    ) -> TestSuiteRun:
        """Run every test declared in the spec, in declaration order.

        Args:
            spec: Parsed spec
            target: Label for the target under test
            cancel: Cancellation token forwarded to checkers

        Returns:
            Frozen run with ordered results
        """
        run = TestSuiteRun(spec_name=spec.name, target=target)
        logger.info("Running %d test(s) from %s", spec.count(), spec.name)

        for kind, declarations in spec.tests.items():
            for test in declarations:
                result = await self._run_one(kind, test, cancel)
                run.append(result)
                if self.callback is not None:
                    self.callback(result)

                if spec.fail_fast and result.status is Status.FAIL:
                    logger.info("Fail-fast: stopping after %r failed", result.name)
                    run.short_circuited = True
                    run.freeze()
                    return run

        run.freeze()
        summary = run.summary()
        logger.info(
            "Completed %s: %d passed, %d failed, %d skipped, %d errors",
            spec.name,
            summary.passed,
            summary.failed,
            summary.skipped,
            summary.errors,
        )
        return run

    async def _run_one(
        self,
        kind: str,
        test: dict,
        cancel: asyncio.Event | None,
    ) -> Result:
        name = str(test.get("name", kind))
        plugin = self.registry.get(kind)
        started = time.monotonic()

        if plugin is None:
            logger.warning("No checker registered for %r, skipping %r", kind, name)
            result = Result(
                name=name,
                status=Status.SKIP,
                message=f"No checker registered for test kind {kind!r}",
            )
        else:
            try:
                result = await plugin.check(self.provider, test, cancel)
            except Exception as e:
                logger.exception("Checker %s crashed on %r", plugin.get_name(), name)
                result = Result(
                    name=name,
                    status=Status.ERROR,
                    message=f"Error running {kind} test {name}: {e}",
                )

        return dataclasses.replace(result, duration=time.monotonic() - started)
