"""CLI entry point for stream-provisioner."""

from __future__ import annotations

import json
import signal
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import click

from stream_provisioner import __version__
from stream_provisioner.config.settings import ProvisionerConfig, load_config
from stream_provisioner.provisioner import (
    CancellationToken,
    KinesisStreamClient,
    StreamClient,
    StreamReadinessOrchestrator,
    describe_observation,
    is_valid_stream_name,
)
from stream_provisioner.utils.logging import configure_logging, get_correlation_id, get_logger
from stream_provisioner.utils.result import ExitCode

# Default paths
DEFAULT_CONFIG = "./config"


class Context:
    """CLI context for sharing state between commands."""

    def __init__(self, config: ProvisionerConfig, dry_run: bool) -> None:
        self.config = config
        self.dry_run = dry_run
        self.logger = get_logger("cli")


pass_context = click.make_pass_decorator(Context)


def output_json(data: dict) -> None:
    """Output JSON to stdout."""
    click.echo(json.dumps(data, indent=2, default=str))


def build_client(config: ProvisionerConfig) -> StreamClient:
    """Create the stream-management client for a command."""
    return KinesisStreamClient.from_config(config.aws)


@contextmanager
def cancel_on_signals(token: CancellationToken) -> Iterator[None]:
    """Cancel ``token`` on SIGINT/SIGTERM for the duration of the block."""

    def _handler(signum, frame) -> None:
        token.cancel()

    previous = {
        signum: signal.signal(signum, _handler)
        for signum in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def _validate_stream_name(stream: str) -> None:
    if not is_valid_stream_name(stream):
        output_json({
            "status": "error",
            "message": (
                f"Invalid stream name {stream!r}: use 1-128 characters "
                "from letters, digits, '_', '.' and '-'"
            ),
        })
        sys.exit(ExitCode.GENERAL_ERROR)


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=False, path_type=Path),
    default=DEFAULT_CONFIG,
    help="Path to config directory",
)
@click.option("--region", default=None, help="AWS region")
@click.option(
    "--endpoint-url",
    default=None,
    help="Kinesis endpoint override (e.g. http://localhost:4566 for LocalStack)",
)
@click.option("--profile", default=None, help="AWS credentials profile")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warn", "error"], case_sensitive=False),
    default=None,
    help="Logging level",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "text"], case_sensitive=False),
    default=None,
    help="Log format",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Show what would be done without executing",
)
@click.version_option(version=__version__)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path,
    region: Optional[str],
    endpoint_url: Optional[str],
    profile: Optional[str],
    log_level: Optional[str],
    log_format: Optional[str],
    dry_run: bool,
) -> None:
    """
    Stream Provisioner - make sure Kinesis data streams exist and are ready.

    Creates missing streams, waits out in-flight creation or deletion, and
    reports a distinct exit code for each way a stream can fail to become
    ready.
    """
    config_result = load_config(config)
    if config_result.is_err():
        configure_logging(level=log_level or "info", format_type=log_format or "json")
        get_logger("cli").error("config_load_failed", error=str(config_result.unwrap_err()))
        output_json({
            "status": "error",
            "message": str(config_result.unwrap_err()),
        })
        sys.exit(ExitCode.CONFIG_ERROR)

    loaded = config_result.unwrap().with_overrides(
        region=region,
        endpoint_url=endpoint_url,
        profile=profile,
    )

    configure_logging(
        level=log_level or loaded.logging.level,
        format_type=log_format or loaded.logging.format,
    )
    get_correlation_id()

    ctx.obj = Context(config=loaded, dry_run=dry_run)


@cli.command()
@click.argument("stream")
@click.option(
    "--shards",
    type=click.IntRange(min=1),
    default=None,
    help="Shard count used if the stream has to be created",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds to wait for the stream to become ready",
)
@click.option(
    "--poll-interval",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between status checks",
)
@click.option(
    "--require-active",
    is_flag=True,
    default=False,
    help="Wait for ACTIVE even if the stream is UPDATING",
)
@pass_context
def ensure(
    ctx: Context,
    stream: str,
    shards: Optional[int],
    timeout: Optional[float],
    poll_interval: Optional[float],
    require_active: bool,
) -> None:
    """Create STREAM if needed and wait until it is ready."""
    _validate_stream_name(stream)

    config = ctx.config.with_overrides(
        ready_timeout=timeout,
        poll_interval=poll_interval,
        accept_updating=False if require_active else None,
    )
    validation = config.validate()
    if validation.is_err():
        output_json({
            "status": "error",
            "message": str(validation.unwrap_err()),
        })
        sys.exit(ExitCode.CONFIG_ERROR)

    shard_count = shards or config.default_shard_count

    ctx.logger.info(
        "ensure_started",
        stream=stream,
        shard_count=shard_count,
        ready_timeout=config.timeouts.ready_timeout,
        poll_interval=config.timeouts.poll_interval,
    )

    if ctx.dry_run:
        output_json({
            "status": "dry_run",
            "message": f"Would ensure stream {stream} is ready",
            "stream": stream,
            "shard_count": shard_count,
            "ready_timeout": config.timeouts.ready_timeout,
            "poll_interval": config.timeouts.poll_interval,
            "accept_updating": config.accept_updating,
            "endpoint_url": config.aws.endpoint_url,
        })
        return

    orchestrator = StreamReadinessOrchestrator.from_config(config, build_client(config))
    token = CancellationToken()
    with cancel_on_signals(token):
        result = orchestrator.ensure_ready(stream, shard_count, cancellation=token)

    if result.is_ok():
        output_json({
            "status": "success",
            "message": f"Stream {stream} is ready",
            **result.unwrap().to_dict(),
        })
        return

    error = result.unwrap_err()
    output_json({
        "status": "error",
        "message": error.message,
        "error": error.to_dict(),
    })
    sys.exit(error.exit_code)


@cli.command()
@click.argument("stream")
@pass_context
def status(ctx: Context, stream: str) -> None:
    """Show the current status of STREAM."""
    _validate_stream_name(stream)

    if ctx.dry_run:
        output_json({
            "status": "dry_run",
            "message": f"Would describe stream {stream}",
            "stream": stream,
        })
        return

    orchestrator = StreamReadinessOrchestrator.from_config(ctx.config, build_client(ctx.config))
    result = orchestrator.describe_status(stream)

    if result.is_err():
        error = result.unwrap_err()
        output_json({
            "status": "error",
            "message": error.message,
            "error": error.to_dict(),
        })
        sys.exit(error.exit_code)

    observed = result.unwrap()
    output_json({
        "status": "success",
        "stream": stream,
        "exists": observed is not None,
        "stream_status": describe_observation(observed),
    })


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except Exception as e:
        logger = get_logger("cli")
        logger.error("cli_error", error=str(e))
        sys.exit(ExitCode.GENERAL_ERROR)


if __name__ == "__main__":
    main()
