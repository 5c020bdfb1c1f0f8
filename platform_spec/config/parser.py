"""SSH config file parser.

Resolves host aliases through ~/.ssh/config and /etc/ssh/ssh_config the
way ssh(1) does for the HostName directive: first matching Host block wins.
"""

import logging
import re
from fnmatch import fnmatchcase
from pathlib import Path

logger = logging.getLogger(__name__)

SYSTEM_CONFIG_PATH = Path("/etc/ssh/ssh_config")


def default_config_paths() -> list[Path]:
    """Get SSH config files in order of precedence."""
    return [Path.home() / ".ssh" / "config", SYSTEM_CONFIG_PATH]


class SSHConfigParser:
    """Parser for SSH config files.

    Reads SSH config format and answers HostName lookups for aliases.
    The file is re-read on every lookup.
    """

    def __init__(self, config_path: Path | str):
        """Initialize SSH config parser.

        Args:
            config_path: Path to SSH config file
        """
        self.config_path = Path(config_path)

    def _read(self) -> str | None:
        if not self.config_path.exists():
            return None
        try:
            return self.config_path.read_text()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot read SSH config %s: %s", self.config_path, e)
            return None

    def get_hostname(self, alias: str) -> str | None:
        """Find the HostName configured for an alias.

        Args:
            alias: Host name as given by the user

        Returns:
            HostName value, or None if no matching block sets one
        """
        content = self._read()
        if content is None:
            return None

        # Options before the first Host line apply to every host
        matching = True
        for raw_line in content.splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue

            # Match blocks stop a Host block; we do not evaluate them
            if re.match(r"^Match\b", line, re.IGNORECASE):
                matching = False
                continue

            host_match = re.match(r"^Host(?:\s+|\s*=\s*)(.+)$", line, re.IGNORECASE)
            if host_match:
                matching = _host_patterns_match(host_match.group(1).split(), alias)
                continue

            kv_match = re.match(r"^HostName(?:\s+|\s*=\s*)(\S+)", line, re.IGNORECASE)
            if kv_match and matching:
                hostname = kv_match.group(1).strip("\"'")
                # %h expands to the name being looked up
                return hostname.replace("%h", alias)

        return None


def _host_patterns_match(patterns: list[str], alias: str) -> bool:
    """Check a Host line's patterns against an alias.

    A negated pattern (``!pattern``) that matches vetoes the whole line.
    """
    matched = False
    for pattern in patterns:
        pattern = pattern.strip("\"'")
        if pattern.startswith("!"):
            if fnmatchcase(alias, pattern[1:]):
                return False
            continue
        if fnmatchcase(alias, pattern):
            matched = True
    return matched


def resolve_hostname(host: str, config_paths: list[Path] | None = None) -> str:
    """Resolve a host alias to its configured HostName.

    Args:
        host: Host name or alias
        config_paths: Config files to consult in order (default: user, system)

    Returns:
        The HostName from the first config that sets one, else ``host``
    """
    for path in config_paths if config_paths is not None else default_config_paths():
        hostname = SSHConfigParser(path).get_hostname(host)
        if hostname:
            if hostname != host:
                logger.debug("Resolved %s to %s via %s", host, hostname, path)
            return hostname
    return host
