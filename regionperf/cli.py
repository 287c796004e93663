"""Command-line interface for the region performance dashboard."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from regionperf import __version__
from regionperf.core.config import settings
from regionperf.db.migrate import ensure_schema
from regionperf.db.session import init_engine
from regionperf.repositories import KeyValueRepository
from regionperf.services.metrics.registry import MeasurementRegistry
from regionperf.services.metrics.views import (
    CATEGORIES,
    filter_by_category,
    filter_by_substring,
    format_value,
    group_by_region,
    rate,
    summarize,
)
from regionperf.services.probes import DEFAULT_PROBES, ProbeRunner
from regionperf.services.remote.invoker import HttpInvoker


def _open_store(database_url: Optional[str]) -> KeyValueRepository:
    engine = init_engine(database_url)
    ensure_schema(engine)
    return KeyValueRepository()


def _open_registry(database_url: Optional[str]) -> MeasurementRegistry:
    return MeasurementRegistry(store=_open_store(database_url))


def _echo_summary(label: str, metrics) -> None:
    summary = summarize(metrics)
    if summary.count == 0:
        click.echo(f"{label}: no measurements yet")
        return
    click.echo(
        f"{label}: latest {format_value(summary.latest.value)}, "
        f"average {format_value(summary.average_ms)} ({rate(summary.average_ms)}), "
        f"p95 {format_value(summary.p95_ms)}, samples {summary.count}"
    )


@click.group()
@click.version_option(version=__version__, prog_name="regionperf")
@click.option("--database-url", envvar="DATABASE_URL", default=None, help="SQLAlchemy URL of the metrics store")
@click.option("--key", default=settings.METRICS_STORE_KEY, show_default=True, help="Store key holding the history")
@click.option(
    "--log-level", "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="WARNING",
    help="Logging level"
)
@click.pass_context
def cli(ctx, database_url: Optional[str], key: str, log_level: str):
    """Measure and compare route latency across deployment regions."""
    logging.getLogger().setLevel(getattr(logging, log_level))
    ctx.ensure_object(dict)
    ctx.obj["database_url"] = database_url
    ctx.obj["key"] = key


@cli.command()
@click.option("--host", default=settings.HOST, show_default=True)
@click.option("--port", default=settings.PORT, show_default=True, type=int)
@click.option("--reload/--no-reload", default=settings.DEBUG)
def serve(host: str, port: int, reload: bool):
    """Start the dashboard API server."""
    import uvicorn

    click.echo(f"Starting {settings.PROJECT_NAME} on {host}:{port} (region {settings.REGION})")
    uvicorn.run("regionperf.app:app", host=host, port=port, reload=reload)


@cli.command()
@click.option("--url", "target_url", default=settings.PROBE_TARGET_URL, show_default=True, help="Deployment base URL")
@click.option("--region", default=settings.REGION, show_default=True, help="Region label recorded on each metric")
@click.option("--repeat", "-n", default=1, show_default=True, type=click.IntRange(1, 100))
@click.option("--timeout", default=settings.PROBE_TIMEOUT_S, show_default=True, type=float)
@click.option("--save/--no-save", default=True, help="Append results to the stored history")
@click.pass_context
def probe(ctx, target_url: str, region: str, repeat: int, timeout: float, save: bool):
    """Time the deployment's API routes and pages."""
    registry = _open_registry(ctx.obj["database_url"]) if save else MeasurementRegistry()
    if save:
        registry.load_from_store(ctx.obj["key"])

    async def _run():
        async with HttpInvoker(target_url, timeout=timeout) as invoker:
            return await ProbeRunner(registry, invoker, region=region).run(repeat=repeat)

    click.echo(f"Probing {target_url} as region '{region}' ({repeat}x)...")
    outcomes = asyncio.run(_run())

    for outcome in outcomes:
        if outcome.success:
            value = outcome.metric.value
            click.echo(f"  {outcome.name:<32} {format_value(value):>10}  {rate(value)}")
        else:
            click.echo(f"  {outcome.name:<32} {'FAILED':>10}  {outcome.error}")

    click.echo("")
    for spec in DEFAULT_PROBES:
        _echo_summary(spec.name, [m for m in registry.get_metrics_by_name(spec.name) if m.region == region])

    if save:
        registry.save_to_store(ctx.obj["key"])

    if not any(o.success for o in outcomes):
        sys.exit(1)


@cli.command()
@click.option("--category", "-c", type=click.Choice(CATEGORIES), default=None)
@click.option("--contains", default=None, help="Only metrics whose name contains this text")
@click.option("--by-region", is_flag=True, help="Break the summary down per region")
@click.pass_context
def show(ctx, category: Optional[str], contains: Optional[str], by_region: bool):
    """Summarize the stored history."""
    registry = _open_registry(ctx.obj["database_url"])
    registry.load_from_store(ctx.obj["key"])

    metrics = registry.get_metrics()
    if category:
        metrics = filter_by_category(metrics, category)
    if contains:
        metrics = filter_by_substring(metrics, contains)

    names = list(dict.fromkeys(m.name for m in metrics))
    if not names:
        click.echo("No measurements yet")
        return

    for name in names:
        selected = [m for m in metrics if m.name == name]
        if by_region:
            for region, group in group_by_region(selected).items():
                _echo_summary(f"{name} [{region}]", group)
        else:
            _echo_summary(name, selected)


@cli.command()
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="Output file (default: stdout)")
@click.pass_context
def export(ctx, output: Optional[str]):
    """Export the stored history as JSON."""
    registry = _open_registry(ctx.obj["database_url"])
    registry.load_from_store(ctx.obj["key"])
    data = registry.export_metrics()

    if output is None:
        click.echo(data)
        return

    Path(output).write_text(data, encoding="utf-8")
    click.echo(f"Wrote {len(registry.get_metrics())} metrics to {output}")


@cli.command()
@click.confirmation_option(prompt="Delete the stored metrics history?")
@click.pass_context
def clear(ctx):
    """Delete the stored history."""
    _open_store(ctx.obj["database_url"]).delete(ctx.obj["key"])
    click.echo("Stored metrics cleared")


if __name__ == "__main__":
    cli()
