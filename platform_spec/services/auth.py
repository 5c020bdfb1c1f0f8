"""Build the ordered list of credentials for one SSH peer."""

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import asyncssh

from platform_spec.errors import AuthError

logger = logging.getLogger(__name__)

AGENT_SOCKET_ENV = "SSH_AUTH_SOCK"

TARGET_PEER = "target host"
JUMP_PEER = "jump host"


@dataclass(frozen=True)
class AuthMethod:
    """One way of authenticating: a private key, or the SSH agent."""

    kind: str
    key: asyncssh.SSHKey | None = None
    agent_path: str | None = None
    source: str = ""


async def detect_agent() -> str | None:
    """Check whether an SSH agent is reachable.

    Returns:
        Agent socket path, or None if no agent is available
    """
    socket_path = os.environ.get(AGENT_SOCKET_ENV)
    if not socket_path:
        return None

    try:
        _, writer = await asyncio.open_unix_connection(socket_path)
    except OSError as e:
        logger.debug("SSH agent at %s unavailable: %s", socket_path, e)
        return None

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return socket_path


async def resolve_auth_methods(identity_file: str | None, peer: str) -> list[AuthMethod]:
    """Resolve authentication methods for a peer.

    Args:
        identity_file: Private key path, or None for agent only
        peer: Which side this is for ("target host" or "jump host")

    Returns:
        Key method first (if any), then agent method (if reachable)

    Raises:
        AuthError: If the key cannot be read or parsed, or nothing is available
    """
    methods: list[AuthMethod] = []

    if identity_file:
        path = Path(identity_file).expanduser()
        try:
            key = asyncssh.read_private_key(str(path))
        except OSError as e:
            raise AuthError(peer, f"failed to read private key for {peer}: {e}") from e
        except (asyncssh.KeyImportError, ValueError) as e:
            raise AuthError(peer, f"failed to parse private key for {peer}: {e}") from e
        methods.append(AuthMethod(kind="publickey", key=key, source=str(path)))

    agent_path = await detect_agent()
    if agent_path:
        methods.append(AuthMethod(kind="agent", agent_path=agent_path, source=agent_path))

    if not methods:
        raise AuthError(
            peer,
            f"no authentication method available for {peer} "
            "(no key file provided and no SSH agent found)",
        )

    logger.debug("Auth methods for %s: %s", peer, ", ".join(m.kind for m in methods))
    return methods


def auth_options(methods: list[AuthMethod]) -> dict[str, Any]:
    """Convert auth methods into asyncssh connect keyword arguments."""
    keys = [m.key for m in methods if m.kind == "publickey" and m.key is not None]
    agent_path = next((m.agent_path for m in methods if m.kind == "agent"), None)

    options: dict[str, Any] = {"agent_path": agent_path}
    if keys:
        options["client_keys"] = keys
    return options
