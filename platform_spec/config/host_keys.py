"""SSH host key verification.

Decides how a remote host's identity is checked: against a known_hosts
file, or not at all in insecure mode.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import asyncssh

from platform_spec.errors import HostKeyError

if TYPE_CHECKING:
    from platform_spec.models import ConnectionConfig

logger = logging.getLogger(__name__)

# known_hosts paths already warned about, so fallbacks warn once per path
_warned_missing: set[str] = set()


def default_known_hosts_path() -> Path:
    """Get the user-level known_hosts path."""
    return Path.home() / ".ssh" / "known_hosts"


@dataclass(frozen=True)
class HostKeyVerifier:
    """Resolved host key verification policy.

    ``known_hosts`` is passed straight to asyncssh; None accepts any key.
    """

    known_hosts: asyncssh.SSHKnownHosts | None = None
    path: str | None = None

    def is_enabled(self) -> bool:
        """Check if host key verification is enabled.

        Returns:
            True if host keys are checked against known_hosts
        """
        return self.known_hosts is not None


def resolve_host_key_policy(config: "ConnectionConfig") -> HostKeyVerifier:
    """Build a host key verifier from connection settings.

    Args:
        config: Connection configuration

    Returns:
        Verifier to use for both target and jump host

    Raises:
        HostKeyError: If known_hosts is missing in strict mode, or
            unreadable or malformed
    """
    # Insecure mode; the caller is responsible for warning the user once
    if config.insecure_ignore_host_key:
        return HostKeyVerifier()

    if config.known_hosts_file:
        path = Path(config.known_hosts_file).expanduser()
    else:
        path = default_known_hosts_path()

    if not path.exists():
        if config.strict_host_key_checking:
            raise HostKeyError(
                f"known_hosts file not found at {path} (strict host key checking "
                "enabled). Either create the file, disable strict checking, or "
                "use insecure mode (not recommended)"
            )
        if str(path) not in _warned_missing:
            _warned_missing.add(str(path))
            logger.warning(
                "known_hosts file not found at %s, disabling host key verification",
                path,
            )
        return HostKeyVerifier()

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise HostKeyError(f"failed to load known_hosts from {path}: {e}") from e

    validate_known_hosts(text, path)
    try:
        known_hosts = asyncssh.import_known_hosts(text)
    except ValueError as e:
        raise HostKeyError(f"failed to load known_hosts from {path}: {e}") from e

    logger.debug("Host key verification enabled (known_hosts=%s)", path)
    return HostKeyVerifier(known_hosts=known_hosts, path=str(path))


def validate_known_hosts(text: str, path: Path | str) -> None:
    """Reject known_hosts content with any entry that cannot be parsed.

    asyncssh itself skips lines it cannot read. Every non-blank,
    non-comment line must be ``[@marker] patterns key``, where key is a
    public key or certificate.

    Args:
        text: File contents
        path: File path, for the error message

    Raises:
        HostKeyError: On the first malformed line
    """
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        parts = line.split(None, 1)
        marker = None
        if parts[0].startswith("@"):
            marker = parts[0]
            parts = parts[1].split(None, 1) if len(parts) == 2 else []
        if len(parts) != 2:
            raise HostKeyError(f"malformed known_hosts {path} line {number}: missing key")
        patterns, key_data = parts

        if marker is not None and marker not in ("@cert-authority", "@revoked"):
            raise HostKeyError(f"malformed known_hosts {path} line {number}: unknown marker {marker}")
        if patterns.startswith("|") and len(patterns[1:].split("|")) != 3:
            raise HostKeyError(f"malformed known_hosts {path} line {number}: bad hashed host")

        try:
            asyncssh.import_public_key(key_data)
        except ValueError:
            try:
                asyncssh.import_certificate(key_data)
            except ValueError as e:
                raise HostKeyError(f"malformed known_hosts {path} line {number}: {e}") from e
