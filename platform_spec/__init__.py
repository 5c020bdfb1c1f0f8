"""Remote command execution for infrastructure validation."""

__version__ = "0.1.0"
