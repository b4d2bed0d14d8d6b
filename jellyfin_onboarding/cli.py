"""CLI entry point for the onboarding engine.

    jellyfin-onboarding discover [--timeout SEC]
    jellyfin-onboarding connect <address> [--retry N]

Results are printed to stdout as a single JSON object; logs go to stderr.
"""

import json
import logging
import sys
import time
from typing import Any, Optional

import click

from .config import OnboardingConfig, load_config
from .discovery.service import DiscoveryService
from .log import setup_logging
from .onboarding.controller import OnboardingController
from .validation.diagnostics import ValidationResult
from .validation.retry_policy import RetryPolicy
from .validation.validator import ConnectionValidator

logger = logging.getLogger(__name__)


@click.group()
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML config file.",
)
@click.option("--log-level", default=None, help="Override the configured log level.")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], log_level: Optional[str]):
    """Find and validate Jellyfin servers."""
    try:
        config = load_config(config_path) if config_path else OnboardingConfig()
    except (FileNotFoundError, ValueError) as e:
        output_error(ctx.invoked_subcommand or "config", str(e))
        sys.exit(1)

    setup_logging(log_level or config.log_level)
    ctx.obj = config


@main.command()
@click.option("--timeout", default=5.0, type=float, show_default=True, help="Seconds to listen.")
@click.pass_obj
def discover(config: OnboardingConfig, timeout: float):
    """Broadcast on every interface and list the servers that answer."""
    service = DiscoveryService(
        port=config.discovery_port,
        query=config.discovery_query,
        receive_timeout=config.receive_timeout,
    )

    try:
        with service:
            service.start()
            servers = service.wait_for(timeout)
    except KeyboardInterrupt:
        output_error("discover", "Discovery interrupted by user")
        sys.exit(130)

    output(
        "discover",
        True,
        {"servers": [server.to_dict() for server in servers]},
        f"Found {len(servers)} server(s)",
    )


@main.command()
@click.argument("address")
@click.option("--retry", default=0, type=click.IntRange(min=0), help="Retries while unreachable.")
@click.option("--timeout", default=None, type=float, help="Request timeout override in seconds.")
@click.pass_obj
def connect(config: OnboardingConfig, address: str, retry: int, timeout: Optional[float]):
    """Validate ADDRESS and print the resolved server address."""
    validator = ConnectionValidator(
        marker=config.marker,
        max_redirects=config.max_redirects,
        request_timeout=timeout or config.request_timeout,
    )

    try:
        with OnboardingController(validator=validator) as controller:
            result = submit_with_retry(controller, address, RetryPolicy(max_retries=retry))
    except KeyboardInterrupt:
        output_error("connect", "Connection interrupted by user")
        sys.exit(130)

    if not result.valid:
        diagnostic = result.diagnostic
        output_error(
            "connect",
            controller.state.error_message,
            diagnostic=diagnostic.kind.value if diagnostic else None,
            status_code=diagnostic.status_code if diagnostic else None,
            redirects=result.redirects,
        )
        sys.exit(1)

    output(
        "connect",
        True,
        {"uri": result.uri, "redirects": result.redirects},
        f"Connected to {result.uri}",
    )


def submit_with_retry(
    controller: OnboardingController,
    address: str,
    policy: RetryPolicy,
) -> ValidationResult:
    """Submit ``address``, re-submitting while the server is unreachable."""
    result = controller.submit(address)

    for attempt, delay in enumerate(policy.delays(), start=1):
        if not policy.should_retry(result):
            break
        logger.info("Server unreachable, retrying in %.1fs (%d/%d)", delay, attempt, policy.max_retries)
        time.sleep(delay)
        result = controller.submit(address)

    return result


def output(command: str, success: bool, data: Optional[dict[str, Any]], message: str) -> None:
    """Print a result envelope."""
    click.echo(json.dumps({
        "success": success,
        "command": command,
        "data": data,
        "message": message,
    }, ensure_ascii=False))


def output_error(command: str, message: str, **extra) -> None:
    """Print a failure envelope."""
    output(command, False, extra or None, message)


if __name__ == "__main__":
    main()
