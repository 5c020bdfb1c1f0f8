"""Checker plugin system.

Each plugin handles one kind of test declaration (packages, files,
deployments, ...) and turns it into a Result by running commands through
a Provider.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any

from platform_spec.models import Result, Status, TestDeclaration
from platform_spec.protocols import Provider


class CheckerPlugin(ABC):
    """Base class for checker plugins."""

    #: Key under which declarations of this kind appear in a spec
    kind: str = ""

    @abstractmethod
    async def check(
        self,
        provider: Provider,
        test: TestDeclaration,
        cancel: asyncio.Event | None = None,
    ) -> Result:
        """Run one declared test.

        Args:
            provider: Where to run commands
            test: The test declaration (has at least a "name")
            cancel: Cancellation token forwarded to the provider

        Returns:
            Result for this test
        """
        pass

    def get_name(self) -> str:
        """Get plugin name for logs."""
        return self.kind or self.__class__.__name__.replace("Checker", "").lower()

    def get_description(self) -> str:
        """Get plugin description."""
        return self.__doc__ or f"{self.get_name()} checker"

    @staticmethod
    def result(
        test: TestDeclaration,
        status: Status,
        message: str,
        **details: Any,
    ) -> Result:
        """Build a Result named after the test declaration."""
        return Result(
            name=str(test.get("name", "")),
            status=status,
            message=message,
            details=details,
        )
