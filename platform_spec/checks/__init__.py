"""Checker plugins and their registry."""

from platform_spec.checks.command import CommandContentChecker
from platform_spec.checks.plugin import CheckerPlugin
from platform_spec.checks.registry import CheckerRegistry

__all__ = ["CheckerPlugin", "CheckerRegistry", "CommandContentChecker"]
