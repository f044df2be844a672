"""Click commands for running and inspecting podwatch."""

from __future__ import annotations

import asyncio
import dataclasses
import json

import click

from podwatch import __version__
from podwatch.config import load_config, parse_namespaces, validate_log_level
from podwatch.models.config import PodwatchConfig
from podwatch.models.pods import DEFAULT_REFRESH_INTERVAL_MS


def _apply_overrides(
    config: PodwatchConfig,
    port: int | None,
    namespaces: str | None,
    log_level: str | None,
) -> PodwatchConfig:
    if port is not None:
        config = dataclasses.replace(config, api=dataclasses.replace(config.api, port=port))
    if namespaces is not None:
        refresh = DEFAULT_REFRESH_INTERVAL_MS
        if config.monitor.namespaces and config.monitor.namespaces[0].refresh_interval is not None:
            refresh = config.monitor.namespaces[0].refresh_interval
        config = dataclasses.replace(
            config,
            monitor=dataclasses.replace(config.monitor, namespaces=parse_namespaces(namespaces, refresh)),
        )
    if log_level is not None:
        config = dataclasses.replace(config, log=dataclasses.replace(config.log, level=validate_log_level(log_level)))
    return config


@click.group()
@click.version_option(version=__version__, prog_name="podwatch")
def cli() -> None:
    """podwatch: watch pods across namespaces and start, stop or restart them."""


@cli.command()
@click.option("--port", type=click.IntRange(1, 65535), default=None, help="REST/WebSocket port.")
@click.option("--namespaces", default=None, help="Comma-separated namespaces to monitor.")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
)
def serve(port: int | None, namespaces: str | None, log_level: str | None) -> None:
    """Run the poller, broadcaster and API server until interrupted."""
    from podwatch.app import main

    config = _apply_overrides(load_config(), port, namespaces, log_level)
    asyncio.run(main(config))


@cli.command("show-config")
@click.option("--namespaces", default=None, help="Override the namespace list before printing.")
def show_config(namespaces: str | None) -> None:
    """Print the effective configuration as JSON."""
    try:
        config = _apply_overrides(load_config(), None, namespaces, None)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(json.dumps(config.to_dict(), indent=2))
