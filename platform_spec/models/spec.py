"""Parsed spec handed to the dispatcher."""

from dataclasses import dataclass, field
from typing import Any

TestDeclaration = dict[str, Any]


@dataclass
class SuiteSpec:
    """Test declarations grouped by checker kind, in declaration order."""

    name: str
    tests: dict[str, list[TestDeclaration]] = field(default_factory=dict)
    fail_fast: bool = False

    def count(self) -> int:
        """Total number of declared tests."""
        return sum(len(declarations) for declarations in self.tests.values())
