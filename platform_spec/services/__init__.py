"""Services for platform-spec."""

from platform_spec.services.auth import (
    JUMP_PEER,
    TARGET_PEER,
    AuthMethod,
    auth_options,
    detect_agent,
    resolve_auth_methods,
)
from platform_spec.services.connection import Connection, ConnectionManager
from platform_spec.services.dispatcher import Dispatcher, ResultCallback
from platform_spec.services.parallel import HostJob, check_host, parse_workers, run_hosts
from platform_spec.services.runner import CommandRunner

__all__ = [
    "AuthMethod",
    "CommandRunner",
    "Connection",
    "ConnectionManager",
    "Dispatcher",
    "HostJob",
    "JUMP_PEER",
    "ResultCallback",
    "TARGET_PEER",
    "auth_options",
    "check_host",
    "detect_agent",
    "parse_workers",
    "resolve_auth_methods",
    "run_hosts",
]
