"""CLI entrypoint for the Tokemak health check."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Annotated

import typer

from .exceptions import TokemakHealthError
from .logger import setup_logging
from .settings import DryRunFormat, HealthSettings
from .state import AppState

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Daily solvency health check of Tokemak strategies.",
)


def _build_logger() -> logging.Logger:
    return logging.getLogger("tokemak_health")


@app.callback(invoke_without_command=True)
def report(
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [tokemak_health] table).",
        ),
    ] = None,
    rpc_url: Annotated[
        str | None,
        typer.Option("--rpc-url", help="Ethereum mainnet RPC endpoint."),
    ] = None,
    block_number: Annotated[
        int | None,
        typer.Option(
            "--block-number",
            help="Block number to use for rpc calls. If not provided, the latest block is pinned at the start of each cycle.",
        ),
    ] = None,
    registry_path: Annotated[
        Path | None,
        typer.Option(
            "--registry",
            help="JSON file mapping asset symbols to strategy addresses.",
        ),
    ] = None,
    dry_run: Annotated[
        bool | None,
        typer.Option(
            "--dry-run/--no-dry-run",
            help="Print the report instead of sending it to Telegram.",
        ),
    ] = None,
    output_format: Annotated[
        DryRunFormat | None,
        typer.Option("--format", help="Dry run output format (table or json)."),
    ] = None,
    loop: Annotated[
        bool,
        typer.Option(
            "--loop/--once",
            help="Keep running, one audit per audit_interval_seconds.",
        ),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Audit every registered asset and publish the health report."""
    if config_path:
        os.environ["TOKEMAK_HEALTH_CONFIG"] = str(config_path)

    init_kwargs: dict[str, object] = {}
    if rpc_url is not None:
        init_kwargs["rpc_url"] = rpc_url
    if block_number is not None:
        init_kwargs["block_number"] = block_number
    if registry_path is not None:
        init_kwargs["registry_path"] = registry_path
    if dry_run is not None:
        init_kwargs["dry_run"] = dry_run
    if output_format is not None:
        init_kwargs["dry_run_format"] = output_format
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()

    settings = HealthSettings(**init_kwargs)  # type: ignore[arg-type]

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    setup_logging(settings.log_level)
    logger = _build_logger()
    state = AppState(settings=settings, logger=logger)

    if settings.using_default_rpc:
        logger.warning(
            "No rpc_url or infura_api_key configured; using public RPC %s",
            settings.resolved_rpc_url,
        )
    if not settings.dry_run and settings.telegram_token is None:
        raise typer.BadParameter(
            "telegram_token is required when running with --no-dry-run.",
            param_hint=["TOKEMAK_HEALTH_TELEGRAM_TOKEN"],
        )

    from .pipeline.run import run_audit, run_forever

    if loop:
        asyncio.run(run_forever(state))
        return

    try:
        asyncio.run(run_audit(state))
    except (TokemakHealthError, asyncio.TimeoutError) as e:
        logger.error("Audit failed: %s", e)
        raise typer.Exit(code=1) from e


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
