"""CLI entry point for surety-deploy.

A single command: load deploy.yaml, deploy both contracts, publish the
configuration and ABIs to every target.
"""

from __future__ import annotations

import click
import rich_click as rclick
from pydantic import ValidationError as PydanticValidationError

from surety_deploy import __version__
from surety_deploy.cli.errors import CLIError, handle_pipeline_error
from surety_deploy.cli.output import info, print_summary, set_no_color, success
from surety_deploy.config import ConfigResolver
from surety_deploy.errors import SuretyError
from surety_deploy.observability import configure_logging
from surety_deploy.pipeline import run_spec

# Configure rich-click for better help formatting
rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True


@click.command(cls=rclick.RichCommand)
@click.version_option(version=__version__, prog_name="surety-deploy")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to deploy.yaml [default: $SURETY_DEPLOY_CONFIG, ./deploy.yaml, ./.surety/deploy.yaml]",
)
@click.option(
    "--network",
    "network_name",
    type=str,
    default=None,
    help="Override the network name written to the config document.",
)
@click.option(
    "--rpc-url",
    "rpc_url",
    type=str,
    default=None,
    help="Override the JSON-RPC endpoint.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Minimum log level.",
)
@click.option(
    "--json-logs",
    is_flag=True,
    default=False,
    help="Emit logs as JSON.",
)
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
def cli(
    config_path: str | None,
    network_name: str | None,
    rpc_url: str | None,
    log_level: str,
    json_logs: bool,
) -> None:
    """Deploy FlightSuretyData and FlightSuretyApp, then publish their metadata.

    The data contract is deployed first; its address is the app contract's
    constructor input. Once both are confirmed, the network config and both
    ABIs are written to every target in deploy.yaml, all or nothing.

    Examples:

        surety-deploy

        surety-deploy --config ops/deploy.yaml --rpc-url http://127.0.0.1:8545
    """
    configure_logging(log_level=log_level, json_format=json_logs)

    try:
        spec = ConfigResolver().load(config_path)
        if network_name is not None or rpc_url is not None:
            try:
                spec = spec.with_network(name=network_name, url=rpc_url)
            except PydanticValidationError as e:
                raise CLIError(f"Invalid --network/--rpc-url override: {e.errors()[0]['msg']}") from None

        info(f"Deploying to {spec.network.name} ({spec.network.url})")
        result = run_spec(spec)
    except SuretyError as e:
        handle_pipeline_error(e)

    print_summary(result)
    success(f"Published to {len(result.publish.targets)} target(s)")


if __name__ == "__main__":
    cli()
