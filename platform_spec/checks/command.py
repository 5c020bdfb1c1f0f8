"""Checker for a command's exit code and output."""

import asyncio

from platform_spec.checks.plugin import CheckerPlugin
from platform_spec.models import Result, Status, TestDeclaration
from platform_spec.protocols import Provider


class CommandContentChecker(CheckerPlugin):
    """Runs a command and checks its exit code and stdout.

    Declaration keys:
        command: Shell command to run (required)
        exit_code: Expected exit code; omitted or None accepts any
        contains: Strings that must all appear in stdout
    """

    kind = "command_content"

    async def check(
        self,
        provider: Provider,
        test: TestDeclaration,
        cancel: asyncio.Event | None = None,
    ) -> Result:
        command = test.get("command")
        if not command:
            return self.result(test, Status.ERROR, "command_content test has no command")

        expected = test.get("exit_code")
        contains = list(test.get("contains") or [])

        outcome = await provider.execute_command(command, cancel)
        if outcome.error is not None:
            return self.result(test, Status.ERROR, f"Error executing command '{command}': {outcome.error}")

        details = {
            "exit_code": outcome.exit_code,
            "stdout_length": len(outcome.stdout),
            "stderr_length": len(outcome.stderr),
        }

        if expected is not None and outcome.exit_code != expected:
            return self.result(
                test,
                Status.FAIL,
                f"Command exit code is {outcome.exit_code}, expected {expected}",
                **details,
            )

        for needle in contains:
            if needle not in outcome.stdout:
                return self.result(
                    test,
                    Status.FAIL,
                    f"Command output does not contain '{needle}'",
                    missing=needle,
                    **details,
                )

        if contains:
            message = f"Command output contains all {len(contains)} strings"
        elif expected is not None:
            message = f"Command exited with expected code {expected}"
        else:
            message = "Command executed successfully"
        return self.result(test, Status.PASS, message, **details)
