"""CLI entry point for platform-spec using Typer."""

import asyncio
import logging
from functools import partial
from typing import Annotated

import typer

from platform_spec import __version__
from platform_spec.checks import CheckerRegistry, CommandContentChecker
from platform_spec.config import Settings, parse_duration, parse_inventory
from platform_spec.models import (
    ConnectionConfig,
    ExecResult,
    HostResults,
    Result,
    Status,
    SuiteSpec,
    parse_target,
)
from platform_spec.protocols import Provider
from platform_spec.providers import KubernetesProvider, LocalProvider, RemoteProvider
from platform_spec.retry import RetryPolicy, Strategy
from platform_spec.services import HostJob, check_host, parse_workers, run_hosts
from platform_spec.utils import configure_logging

logger = logging.getLogger("platform_spec.cli")

INSECURE_WARNING = (
    "WARNING: host key verification is disabled. "
    "The connection is vulnerable to man-in-the-middle attacks."
)

STATUS_MARKS = {
    Status.PASS: ("✓", typer.colors.GREEN),
    Status.FAIL: ("✗", typer.colors.RED),
    Status.SKIP: ("-", typer.colors.YELLOW),
    Status.ERROR: ("!", typer.colors.RED),
}

app = typer.Typer(
    name="platform-spec",
    help="Run commands on local, remote (SSH) and Kubernetes targets",
    no_args_is_help=True,
)

# SSH options shared by the remote and check commands
IdentityOption = Annotated[
    str | None,
    typer.Option("--identity", "-i", help="Private key file for the target"),
]
PortOption = Annotated[int | None, typer.Option("--port", "-p", help="SSH port")]
TimeoutOption = Annotated[
    str | None,
    typer.Option("--timeout", help="Connection timeout, e.g. 30s or 1m"),
]
StrictOption = Annotated[
    bool | None,
    typer.Option(
        "--strict-host-key-checking/--no-strict-host-key-checking",
        help="Fail when the known_hosts file is missing",
    ),
]
KnownHostsOption = Annotated[
    str | None,
    typer.Option("--known-hosts", help="known_hosts file (default: ~/.ssh/known_hosts)"),
]
InsecureOption = Annotated[
    bool,
    typer.Option("--insecure-ignore-host-key", help="Skip host key verification entirely"),
]
JumpHostOption = Annotated[
    str | None,
    typer.Option("--jump-host", "-J", help="Jump host as [user@]host"),
]
JumpPortOption = Annotated[int, typer.Option("--jump-port", help="Jump host SSH port")]
JumpUserOption = Annotated[
    str | None,
    typer.Option("--jump-user", help="Jump host user (default: from --jump-host, then target user)"),
]
JumpIdentityOption = Annotated[
    str | None,
    typer.Option("--jump-identity", help="Private key file for the jump host (default: --identity)"),
]
RetriesOption = Annotated[
    int | None,
    typer.Option("--retries", help="Retries after the first attempt (0 disables)"),
]
RetryDelayOption = Annotated[
    str | None,
    typer.Option("--retry-delay", help="Initial delay between attempts"),
]
RetryBackoffOption = Annotated[
    str | None,
    typer.Option("--retry-backoff", help="linear, exponential or jittered"),
]
RetryMaxDelayOption = Annotated[
    str | None,
    typer.Option("--retry-max-delay", help="Upper bound for a single delay"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", help="Show timestamped connection progress"),
]


def _version_callback(value: bool) -> None:
    """Print version and exit if --version flag is provided."""
    if value:
        typer.echo(f"platform-spec {__version__}")
        raise typer.Exit()


@app.callback()
def cli(
    version_flag: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version and exit"),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Log level (default: PLATFORM_SPEC_LOG_LEVEL or WARNING)"),
    ] = None,
) -> None:
    """Infrastructure validation command runner."""
    settings = Settings.from_env()
    configure_logging(log_level or settings.log_level, settings.log_colors)


def _duration(value: str | None, default: float, name: str) -> float:
    if value is None:
        return default
    try:
        return parse_duration(value)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint=name) from None


def _build_retry_policy(
    settings: Settings,
    retries: int | None,
    retry_delay: str | None,
    retry_backoff: str | None,
    retry_max_delay: str | None,
) -> RetryPolicy | None:
    """Merge retry flags over environment settings.

    Returns:
        The policy, or None when retries are disabled (0)
    """
    count = settings.retries if retries is None else retries
    if count <= 0:
        return None

    strategy = settings.retry_backoff
    if retry_backoff is not None:
        try:
            strategy = Strategy.parse(retry_backoff)
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--retry-backoff") from None

    try:
        return RetryPolicy(
            max_retries=count,
            initial_delay=_duration(retry_delay, settings.retry_delay, "--retry-delay"),
            max_delay=_duration(retry_max_delay, settings.retry_max_delay, "--retry-max-delay"),
            strategy=strategy,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e)) from None


def _connection_config(
    settings: Settings,
    target: str,
    *,
    identity: str | None,
    port: int | None,
    timeout: str | None,
    strict_host_key_checking: bool | None,
    known_hosts: str | None,
    insecure: bool,
    jump_host: str | None,
    jump_port: int,
    jump_user: str | None,
    jump_identity: str | None,
    retry_policy: RetryPolicy | None,
    verbose: bool,
    param_hint: str = "TARGET",
) -> ConnectionConfig:
    """Build the connection config for one target from CLI flags and settings.

    Raises:
        typer.BadParameter: If the target or jump host is malformed
    """
    try:
        user, host = parse_target(target, settings.user)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint=param_hint) from None

    jump_address = None
    if jump_host:
        try:
            parsed_jump_user, jump_address = parse_target(jump_host, jump_user or user)
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--jump-host") from None
        if jump_user is None and "@" in jump_host:
            jump_user = parsed_jump_user

    return ConnectionConfig(
        host=host,
        port=port if port is not None else settings.port,
        user=user,
        identity_file=identity,
        timeout=_duration(timeout, settings.timeout, "--timeout"),
        strict_host_key_checking=(
            settings.strict_host_key_checking if strict_host_key_checking is None else strict_host_key_checking
        ),
        known_hosts_file=known_hosts or settings.known_hosts_file,
        insecure_ignore_host_key=insecure,
        jump_host=jump_address,
        jump_port=jump_port,
        jump_user=jump_user,
        jump_identity_file=jump_identity or identity,
        retry_policy=retry_policy,
        verbose=verbose,
    )


def _announce(settings: Settings, verbose: bool, insecure: bool) -> None:
    """Raise logging to INFO for verbose runs and warn once about insecure mode."""
    if verbose and logging.getLogger("platform_spec").getEffectiveLevel() > logging.INFO:
        configure_logging("INFO", settings.log_colors)
    if insecure:
        typer.secho(INSECURE_WARNING, fg=typer.colors.YELLOW, err=True)


def _emit(result: ExecResult) -> None:
    """Print command output and exit with the command's status."""
    if result.stdout:
        typer.echo(result.stdout, nl=False)
    if result.stderr:
        typer.echo(result.stderr, nl=False, err=True)

    if result.error is not None:
        typer.secho(f"Error: {result.error}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    # signal deaths and unknown statuses have no shell exit code
    raise typer.Exit(result.exit_code if result.exit_code >= 0 else 1)


async def _execute(provider: Provider, command: str) -> ExecResult:
    """Run one command, closing the provider afterwards if it holds a connection."""
    try:
        return await provider.execute_command(command)
    finally:
        close = getattr(provider, "close", None)
        if close is not None:
            try:
                await close()
            except Exception as e:
                logger.debug("Error closing provider: %s", e)


@app.command()
def remote(
    target: Annotated[str, typer.Argument(help="Target host as [user@]host")],
    command: Annotated[str, typer.Argument(help="Shell command to run")],
    identity: IdentityOption = None,
    port: PortOption = None,
    timeout: TimeoutOption = None,
    strict_host_key_checking: StrictOption = None,
    known_hosts: KnownHostsOption = None,
    insecure: InsecureOption = False,
    jump_host: JumpHostOption = None,
    jump_port: JumpPortOption = 22,
    jump_user: JumpUserOption = None,
    jump_identity: JumpIdentityOption = None,
    retries: RetriesOption = None,
    retry_delay: RetryDelayOption = None,
    retry_backoff: RetryBackoffOption = None,
    retry_max_delay: RetryMaxDelayOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Run a command on a remote host over SSH."""
    settings = Settings.from_env()
    config = _connection_config(
        settings,
        target,
        identity=identity,
        port=port,
        timeout=timeout,
        strict_host_key_checking=strict_host_key_checking,
        known_hosts=known_hosts,
        insecure=insecure,
        jump_host=jump_host,
        jump_port=jump_port,
        jump_user=jump_user,
        jump_identity=jump_identity,
        retry_policy=_build_retry_policy(settings, retries, retry_delay, retry_backoff, retry_max_delay),
        verbose=verbose,
    )

    _announce(settings, verbose, insecure)
    _emit(asyncio.run(_execute(RemoteProvider(config), command)))


def _print_result(target: str, result: Result) -> None:
    """Print one test result prefixed with its host."""
    mark, color = STATUS_MARKS[result.status]
    typer.secho(f"{target}: {mark} {result.name}: {result.message}", fg=color)


async def _check_hosts(
    jobs: list[HostJob],
    specs: list[SuiteSpec],
    registry: CheckerRegistry,
    workers: int,
    fail_fast: bool,
) -> list[HostResults]:
    async def test_host(job: HostJob, cancel: asyncio.Event) -> HostResults:
        host_results = await check_host(job, specs, registry, cancel, partial(_print_result, job.target))
        if host_results.connection_error is not None:
            typer.secho(
                f"{job.target}: ✗ Connection failed: {host_results.connection_error}",
                fg=typer.colors.RED,
            )
        return host_results

    return await run_hosts(jobs, test_host, workers=workers, fail_fast=fail_fast)


@app.command()
def check(
    command: Annotated[str, typer.Argument(help="Shell command to run on every host")],
    hosts: Annotated[
        list[str] | None,
        typer.Option("--host", "-H", help="Target host as [user@]host (repeatable)"),
    ] = None,
    inventory: Annotated[
        str | None,
        typer.Option("--inventory", "-I", help="File listing one [user@]host per line"),
    ] = None,
    exit_code: Annotated[
        int,
        typer.Option("--exit-code", help="Exit code every host must return"),
    ] = 0,
    contains: Annotated[
        list[str] | None,
        typer.Option("--contains", help="Text stdout must contain (repeatable)"),
    ] = None,
    parallel: Annotated[
        str,
        typer.Option("--parallel", help="Hosts checked at once: an integer or 'auto'"),
    ] = "1",
    max_parallel: Annotated[
        int,
        typer.Option("--max-parallel", help="Upper bound for --parallel"),
    ] = 50,
    fail_fast: Annotated[
        bool,
        typer.Option("--fail-fast", help="Stop starting hosts after the first failure"),
    ] = False,
    identity: IdentityOption = None,
    port: PortOption = None,
    timeout: TimeoutOption = None,
    strict_host_key_checking: StrictOption = None,
    known_hosts: KnownHostsOption = None,
    insecure: InsecureOption = False,
    jump_host: JumpHostOption = None,
    jump_port: JumpPortOption = 22,
    jump_user: JumpUserOption = None,
    jump_identity: JumpIdentityOption = None,
    retries: RetriesOption = None,
    retry_delay: RetryDelayOption = None,
    retry_backoff: RetryBackoffOption = None,
    retry_max_delay: RetryMaxDelayOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Run a command on many hosts over SSH and check its result on each."""
    settings = Settings.from_env()

    targets = list(hosts or [])
    if inventory:
        try:
            targets.extend(parse_inventory(inventory))
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--inventory") from None
    if not targets:
        raise typer.BadParameter("at least one --host or an --inventory is required", param_hint="--host")

    try:
        workers = parse_workers(parallel, max_parallel)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--parallel") from None

    retry_policy = _build_retry_policy(settings, retries, retry_delay, retry_backoff, retry_max_delay)
    jobs = []
    for target in targets:
        config = _connection_config(
            settings,
            target,
            identity=identity,
            port=port,
            timeout=timeout,
            strict_host_key_checking=strict_host_key_checking,
            known_hosts=known_hosts,
            insecure=insecure,
            jump_host=jump_host,
            jump_port=jump_port,
            jump_user=jump_user,
            jump_identity=jump_identity,
            retry_policy=retry_policy,
            verbose=verbose,
            param_hint="--host",
        )
        jobs.append(HostJob(target=config.target, config=config))

    spec = SuiteSpec(
        name="check",
        tests={
            CommandContentChecker.kind: [
                {"name": command, "command": command, "exit_code": exit_code, "contains": contains or []}
            ]
        },
    )
    registry = CheckerRegistry([CommandContentChecker()])

    _announce(settings, verbose, insecure)
    results = asyncio.run(_check_hosts(jobs, [spec], registry, workers, fail_fast))

    passed = sum(1 for host_results in results if host_results.success)
    not_started = len(jobs) - len(results)
    summary = f"{passed}/{len(jobs)} host(s) passed"
    if not_started:
        summary += f", {not_started} not started (fail-fast)"
    typer.echo(summary)

    if passed != len(jobs):
        raise typer.Exit(1)


@app.command()
def local(
    command: Annotated[str, typer.Argument(help="Shell command to run")],
) -> None:
    """Run a command on this machine."""
    _emit(asyncio.run(_execute(LocalProvider(), command)))


@app.command()
def kubernetes(
    command: Annotated[str, typer.Argument(help="Command to run, usually kubectl ...")],
    kubeconfig: Annotated[
        str | None,
        typer.Option("--kubeconfig", help="Path to kubeconfig"),
    ] = None,
    context: Annotated[
        str | None,
        typer.Option("--context", help="Context injected into kubectl commands"),
    ] = None,
    namespace: Annotated[
        str | None,
        typer.Option("--namespace", "-n", help="Namespace injected into kubectl commands"),
    ] = None,
) -> None:
    """Run a kubectl command against a cluster."""
    provider = KubernetesProvider(kubeconfig=kubeconfig, context=context, namespace=namespace)
    _emit(asyncio.run(_execute(provider, command)))


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
