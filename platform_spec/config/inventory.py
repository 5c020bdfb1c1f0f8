"""Inventory files: one ``[user@]host`` per line, ``#`` comments allowed."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_inventory(path: Path | str) -> list[str]:
    """Read the hosts listed in an inventory file.

    Args:
        path: Inventory file

    Returns:
        Host entries in file order

    Raises:
        ValueError: If the file cannot be read, an entry contains
            whitespace, or no hosts are listed
    """
    path = Path(path).expanduser()
    try:
        content = path.read_text()
    except (OSError, UnicodeDecodeError) as e:
        raise ValueError(f"failed to open inventory file {path}: {e}") from e

    hosts = []
    for number, raw_line in enumerate(content.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if any(c.isspace() for c in line):
            raise ValueError(f"invalid entry at line {number}: host {line!r} contains whitespace")
        hosts.append(line)

    if not hosts:
        raise ValueError(f"inventory file {path} is empty (no valid hosts found)")

    logger.debug("Loaded %d host(s) from %s", len(hosts), path)
    return hosts
