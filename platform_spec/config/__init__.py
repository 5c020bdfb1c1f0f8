"""Configuration module for platform-spec.

Provides focused pieces for different configuration concerns:
- HostKeyVerifier / resolve_host_key_policy: host key verification
- SSHConfigParser / resolve_hostname: ~/.ssh/config alias lookup
- Settings: Environment variable configuration
- parse_inventory: host lists for multi-host checks
"""

from platform_spec.config.host_keys import HostKeyVerifier, resolve_host_key_policy
from platform_spec.config.inventory import parse_inventory
from platform_spec.config.parser import SSHConfigParser, resolve_hostname
from platform_spec.config.settings import Settings, parse_duration

__all__ = [
    "HostKeyVerifier",
    "SSHConfigParser",
    "Settings",
    "parse_duration",
    "parse_inventory",
    "resolve_host_key_policy",
    "resolve_hostname",
]
