"""
CLI Module

Architectural Intent:
- Command-line interface for dockhand
- Resolves the immutable DeploymentConfig, runs the orchestrator through the
  composition root, and maps the terminal state to an exit status
- Supports --verbose/--debug flags for log level control

Exit status: 0 on success or --help, 1 on any configuration, validation,
transfer or health-check failure.
"""

import argparse
import asyncio
import logging
import sys
import traceback
from typing import Optional, Sequence
from dockhand import composition_root
from dockhand.application.dtos.deployment_dtos import (
    DeploymentResult,
    EXIT_FAILURE,
    EXIT_SUCCESS,
)
from dockhand.domain.entities.deployment import DeploymentState
from dockhand.domain.errors import ConfigurationError
from dockhand.domain.value_objects.deployment_config import DeploymentConfig
from dockhand.infrastructure.config import CliOverrides, load_settings, resolve_config
from dockhand.infrastructure.logging import configure_logging
from dockhand.infrastructure.telemetry.tracer import TracingConfig

EPILOG = """\
examples:
  dockhand dev --host 192.168.1.100 --user ubuntu
  dockhand prod --tag v1.0.0 --host prod-server.com --user deploy
  dockhand dev --host example.com --port 2222 --user ubuntu
  dockhand prod --host prod-server.com --rollback

environment variables:
  DOCKER_HUB_USERNAME    registry account (default: sayfops)
  SERVER_HOST            server hostname/IP
  SERVER_USER            SSH username (default: ubuntu)
  SERVER_PORT            SSH port (default: 22)
  SERVER_APP_DIR         application directory (default: /opt/sayf-app)
  DOCKHAND_SECTION_KEY   any dockhand.json setting, e.g. DOCKHAND_HEALTH_URL
"""


class _ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit with status 1 like every other failure."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="dockhand",
        description="Deploy a container image to a remote host with docker-compose",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "environment",
        nargs="?",
        choices=("dev", "prod"),
        default="dev",
        help="Target environment (default: dev)",
    )
    parser.add_argument("--tag", help="Image tag to deploy (default: latest)")
    parser.add_argument("--host", help="Server hostname/IP")
    parser.add_argument("--user", help="SSH username (default: ubuntu)")
    parser.add_argument("--port", type=int, help="SSH port (default: 22)")
    parser.add_argument(
        "--app-dir", dest="app_dir", help="Application directory on the server"
    )
    parser.add_argument(
        "--rollback", action="store_true", help="Roll back to the previous deployment"
    )
    parser.add_argument(
        "--health-timeout",
        dest="health_timeout",
        type=int,
        help="Seconds to wait for the application to become healthy (default: 60)",
    )
    parser.add_argument("--config", "-c", help="Path to dockhand.json")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output with tracebacks"
    )
    parser.add_argument(
        "--json-logs", dest="json_logs", action="store_true", help="Log as JSON lines"
    )
    return parser


def _print_configuration(config: DeploymentConfig) -> None:
    print("[*] Deployment configuration:")
    print(f"      Environment:   {config.environment.value}")
    print(f"      Image:         {config.image}")
    print(f"      Server:        {config.user}@{config.host or '<unset>'}:{config.port}")
    print(f"      App directory: {config.app_dir}")
    if config.rollback:
        print("[!] Rolling back to previous deployment")


def _print_summary(config: DeploymentConfig, result: DeploymentResult) -> None:
    target = f"ssh -p {config.port} {config.user}@{config.host}"
    if result.state is DeploymentState.ROLLED_BACK:
        print(f"[+] Rollback completed successfully (restored {result.backup.filename}).")
    else:
        print("[+] Deployment completed successfully.")
        if result.backup:
            print(f"      Backup:        {result.backup.filename}")
    print(f"      Environment:   {config.environment.value}")
    print(f"      Image:         {config.image}")
    print(f"      Server:        {config.user}@{config.host}:{config.port}")
    print(f"      URL:           {config.application_url}")
    print(f"      App directory: {config.app_dir}")
    if result.verification:
        print()
        print(result.verification)
    print()
    print("[*] Useful commands:")
    print(f"      Logs:    {target} 'cd {config.app_dir} && {config.compose_command} logs -f'")
    print(f"      Restart: {target} 'cd {config.app_dir} && {config.compose_command} restart'")
    print(f"      Stop:    {target} 'cd {config.app_dir} && {config.compose_command} down'")


def _print_failure(result: DeploymentResult) -> None:
    if result.state is DeploymentState.UNHEALTHY:
        print(f"[-] {result.reason} ({result.polls} checks). New services left running.")
    else:
        stage = result.last_completed.value if result.last_completed else "init"
        print(f"[-] Aborted after '{stage}': {result.reason}")
    if result.suggestion:
        print(f"[!] Consider rolling back with: {result.suggestion}")


async def async_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return EXIT_SUCCESS if e.code in (0, None) else EXIT_FAILURE

    verbose = args.verbose or args.debug

    try:
        settings = load_settings(args.config)
    except ConfigurationError as e:
        print(f"[-] Configuration error: {e}")
        return EXIT_FAILURE

    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = settings.log_level
    configure_logging(level=level, json_format=args.json_logs)

    overrides = CliOverrides(
        environment=args.environment,
        tag=args.tag,
        host=args.host,
        user=args.user,
        port=args.port,
        app_dir=args.app_dir,
        rollback=args.rollback,
        health_timeout=args.health_timeout,
    )
    try:
        config = resolve_config(settings, overrides)
        tracing = TracingConfig(
            endpoint=settings.telemetry.endpoint,
            environment=config.environment.value,
            insecure=settings.telemetry.insecure,
        )
    except ConfigurationError as e:
        print(f"[-] Configuration error: {e}")
        return EXIT_FAILURE

    _print_configuration(config)

    container = composition_root.create_container(config, tracing=tracing)
    await container.tracer.initialize()
    try:
        result = await container.orchestrator.run(config)
    except Exception as e:
        print(f"[-] Deployment Failed: {e}")
        if verbose:
            traceback.print_exc()
        return EXIT_FAILURE
    finally:
        container.tracer.shutdown()

    if result.success:
        _print_summary(config, result)
    else:
        _print_failure(result)
    return result.exit_code


def main(argv: Optional[Sequence[str]] = None) -> int:
    # asyncio.run cancels the running task on Ctrl-C and re-raises here
    try:
        return asyncio.run(async_main(argv))
    except KeyboardInterrupt:
        print("\n[-] Interrupted. The server is left at the last completed step.")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
