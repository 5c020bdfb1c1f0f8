"""Shared test fixtures."""

import logging
from collections.abc import Generator

import pytest


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Generator[None, None, None]:
    """Undo configure_logging so caplog keeps seeing package records."""
    package_logger = logging.getLogger("platform_spec")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate
    yield
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate
