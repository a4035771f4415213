"""turnbridge CLI entrypoint."""

from __future__ import annotations

import logging

import click

from turnbridge import __version__


@click.group()
@click.version_option(version=__version__, prog_name="turnbridge")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option("--trace", is_flag=True, help="Export OpenTelemetry spans to the console.")
def main(verbose: bool, trace: bool) -> None:
    """turnbridge — translate conversations between LLM backends."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    if trace:
        from turnbridge.utils.telemetry import configure_telemetry

        configure_telemetry(service_name="turnbridge-cli")


# Register subcommands
from turnbridge.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
