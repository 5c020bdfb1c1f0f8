"""Application settings from environment variables.

Centralized environment variable parsing and validation. Command line
flags override these values.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import timedelta

from pytimeparse2 import parse as parse_duration_seconds

from platform_spec.retry.policy import RetryPolicy, Strategy

logger = logging.getLogger(__name__)

ENV_PREFIX = "PLATFORM_SPEC_"


def parse_duration(value: str) -> float:
    """Parse a duration such as "1s", "1.5s" or "2m" into seconds.

    Bare numbers are seconds.

    Raises:
        ValueError: If the duration format is invalid
    """
    seconds = parse_duration_seconds(value.strip())
    if seconds is None:
        raise ValueError(f"Invalid duration format: {value}")
    # pytimeparse2 returns int, float, or timedelta
    return seconds.total_seconds() if isinstance(seconds, timedelta) else float(seconds)


@dataclass
class Settings:
    """Application settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Connection
    port: int = field(default=22)
    user: str = field(default="root")
    timeout: float = field(default=30.0)

    # Host keys
    strict_host_key_checking: bool = field(default=True)
    known_hosts_file: str | None = field(default=None)

    # Retry
    retries: int = field(default=3)
    retry_delay: float = field(default=1.0)
    retry_backoff: Strategy = field(default=Strategy.LINEAR)
    retry_max_delay: float = field(default=30.0)

    # Logging
    log_level: str = field(default="WARNING")
    log_colors: bool = field(default=True)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from PLATFORM_SPEC_* environment variables.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            port=cls._get_int("PORT", 22),
            user=os.getenv(f"{ENV_PREFIX}USER", "root"),
            timeout=cls._get_duration("TIMEOUT", 30.0),
            strict_host_key_checking=cls._get_bool("STRICT_HOST_KEY_CHECKING", True),
            known_hosts_file=os.getenv(f"{ENV_PREFIX}KNOWN_HOSTS") or None,
            retries=cls._get_int("RETRIES", 3),
            retry_delay=cls._get_duration("RETRY_DELAY", 1.0),
            retry_backoff=cls._get_strategy(),
            retry_max_delay=cls._get_duration("RETRY_MAX_DELAY", 30.0),
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "WARNING").upper(),
            log_colors=cls._get_bool("LOG_COLORS", True),
        )

    def retry_policy(self) -> RetryPolicy | None:
        """Build the retry policy, or None when retries are disabled."""
        if self.retries <= 0:
            return None
        return RetryPolicy(
            max_retries=self.retries,
            initial_delay=self.retry_delay,
            max_delay=self.retry_max_delay,
            strategy=self.retry_backoff,
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer from environment.

        Args:
            key: Variable name without the PLATFORM_SPEC_ prefix
            default: Default value if not set

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(f"{ENV_PREFIX}{key}")
        if value is None:
            return default

        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid int for %s%s: %s, using default %d", ENV_PREFIX, key, value, default)
            return default

    @staticmethod
    def _get_duration(key: str, default: float) -> float:
        """Get a duration in seconds from environment."""
        value = os.getenv(f"{ENV_PREFIX}{key}")
        if value is None:
            return default

        try:
            return parse_duration(value)
        except ValueError:
            logger.warning("Invalid duration for %s%s: %s, using default %s", ENV_PREFIX, key, value, default)
            return default

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Variable name without the PLATFORM_SPEC_ prefix
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(f"{ENV_PREFIX}{key}")
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _get_strategy() -> Strategy:
        value = os.getenv(f"{ENV_PREFIX}RETRY_BACKOFF")
        if value is None:
            return Strategy.LINEAR
        try:
            return Strategy.parse(value)
        except ValueError as e:
            logger.warning("%s, using linear", e)
            return Strategy.LINEAR
