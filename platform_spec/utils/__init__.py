"""Utilities for platform-spec."""

from platform_spec.utils.console import ColorfulFormatter, configure_logging

__all__ = ["ColorfulFormatter", "configure_logging"]
