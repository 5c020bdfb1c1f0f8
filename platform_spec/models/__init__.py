"""Data models for platform-spec."""

from platform_spec.models.command import UNKNOWN_EXIT_CODE, ExecResult
from platform_spec.models.results import (
    HostResults,
    Result,
    Status,
    Summary,
    TestSuiteRun,
)
from platform_spec.models.spec import SuiteSpec, TestDeclaration
from platform_spec.models.ssh import ConnectionConfig, parse_target

__all__ = [
    "ConnectionConfig",
    "ExecResult",
    "HostResults",
    "Result",
    "Status",
    "SuiteSpec",
    "Summary",
    "TestDeclaration",
    "TestSuiteRun",
    "UNKNOWN_EXIT_CODE",
    "parse_target",
]
