"""SSH-related data models."""

from dataclasses import dataclass

from platform_spec.retry.policy import RetryPolicy

DEFAULT_USER = "root"


@dataclass(frozen=True)
class ConnectionConfig:
    """Everything needed to reach one target host, optionally via a bastion."""

    host: str
    port: int = 22
    user: str = DEFAULT_USER
    identity_file: str | None = None
    timeout: float = 30.0
    strict_host_key_checking: bool = True
    known_hosts_file: str | None = None
    insecure_ignore_host_key: bool = False
    jump_host: str | None = None
    jump_port: int = 22
    jump_user: str | None = None
    jump_identity_file: str | None = None
    retry_policy: RetryPolicy | None = None
    verbose: bool = False

    @property
    def target(self) -> str:
        """Get user@host:port for display."""
        return f"{self.user}@{self.host}:{self.port}"

    @property
    def uses_jump_host(self) -> bool:
        """Check if connections are tunneled through a jump host."""
        return bool(self.jump_host)

    @property
    def effective_jump_user(self) -> str:
        """Get the jump host user, falling back to the target user."""
        return self.jump_user or self.user


def parse_target(target: str, default_user: str | None = None) -> tuple[str, str]:
    """Split a ``[user@]host`` target string.

    Args:
        target: Target like "deploy@web1" or "web1"
        default_user: User when the target has none (falls back to root)

    Returns:
        Tuple of (user, host)

    Raises:
        ValueError: If the target has more than one '@' or an empty part
    """
    parts = target.split("@")
    if len(parts) == 1:
        user, host = default_user or DEFAULT_USER, parts[0]
    elif len(parts) == 2:
        user, host = parts
    else:
        raise ValueError(f"invalid target format: {target}")

    if not user or not host:
        raise ValueError(f"invalid target format: {target}")
    return user, host
