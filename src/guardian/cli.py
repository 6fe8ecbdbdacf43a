"""Guardian CLI."""

import csv
import json
import logging
from dataclasses import asdict

import click

from guardian.analytics.resampler import RESAMPLERS, resample_analytics
from guardian.analytics.synthetic import SyntheticSeriesGenerator
from guardian.config_loader import AppConfig, load_config
from guardian.constants import (
    DEFAULT_ANALYTICS_PERIOD,
    DEFAULT_BAR_INTERVAL,
    SeriesKind,
)
from guardian.data.bar_aggregator import BarAggregator
from guardian.data.intervals import parse_interval, parse_interval_or_default
from guardian.data.market_data import Tick, coerce_number
from guardian.errors import ParseError
from guardian.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2))


def _point_from_json(item, build, fields):
    """Build a series point, coercing numeric-string fields."""
    values = {}
    for name in ("time", *fields):
        number = coerce_number(item[name])
        if number is None:
            raise ValueError(f"{name} must be a finite number, got {item[name]!r}")
        values[name] = number
    values["time"] = int(values["time"])
    return build(**values)


@click.group()
@click.option("--config", type=click.Path(exists=True), help="Path to configuration file")
@click.option("--log-level", default=None, help="Override log level (DEBUG, INFO, ...)")
@click.pass_context
def cli(ctx, config, log_level):
    """Guardian Command Line Interface."""
    cfg = load_config(config) if config else AppConfig()
    setup_logging(log_level or cfg.environment.log_level, cfg.environment.log_json)
    ctx.obj = cfg


@cli.command()
@click.option("--symbol", help="Symbol used to seed the series")
@click.option("--limit", type=int, help="Points per series")
@click.option("--period", help="Sampling interval, e.g. 1h")
@click.option("--resample", "resample_to", help="Resample to a finer interval, e.g. 15m")
@click.option("--now", "anchor", type=int, help="Anchor timestamp in epoch ms")
@click.pass_obj
def synthetic(cfg, symbol, limit, period, resample_to, anchor):
    """Print the synthetic analytics bundle as JSON."""
    symbol = (symbol or cfg.default_symbol).upper()
    limit = limit if limit is not None else cfg.analytics.limit
    period_ms = parse_interval_or_default(period or cfg.analytics.period, DEFAULT_ANALYTICS_PERIOD)

    bundle = SyntheticSeriesGenerator().generate(symbol, limit, period_ms, anchor_ms=anchor)
    if resample_to:
        try:
            target_ms = parse_interval(resample_to)
        except ParseError as e:
            logger.warning(f"{e.message}; keeping native spacing")
            target_ms = period_ms
        bundle = resample_analytics(bundle, target_ms)

    _echo_json(bundle.to_dict())


@cli.command()
@click.argument("trades_csv", type=click.Path(exists=True))
@click.option("--interval", help="Bar interval, e.g. 15s")
@click.option("--max-bars", type=int, help="Keep at most this many bars")
@click.pass_obj
def aggregate(cfg, trades_csv, interval, max_bars):
    """Build bars from a CSV of trades with price, quantity and time columns."""
    bucket_ms = parse_interval_or_default(interval or cfg.market.bar_interval, DEFAULT_BAR_INTERVAL)

    ticks = []
    with open(trades_csv, newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            tick = Tick.coerce(row.get("price"), row.get("quantity"), row.get("time"))
            if tick is None:
                logger.warning(f"Skipping invalid row: {row}")
                continue
            ticks.append(tick)

    aggregator = BarAggregator(max_bars or cfg.market.max_candles)
    bars = aggregator.build_from_batch(ticks, bucket_ms)
    logger.info(f"Built {len(bars)} bars from {len(ticks)} trades")

    _echo_json([bar.to_dict() for bar in bars])


@cli.command()
@click.argument("series_json", type=click.File("r"))
@click.option(
    "--kind",
    type=click.Choice([k.value for k in SeriesKind]),
    required=True,
    help="Series shape",
)
@click.option("--target", required=True, help="Target interval, e.g. 1m")
def resample(series_json, kind, target):
    """Resample a JSON list of points to a finer interval."""
    try:
        target_ms = parse_interval(target)
    except ParseError as e:
        raise click.BadParameter(e.message, param_hint="--target") from e

    resampler = RESAMPLERS[SeriesKind(kind)]
    build = resampler.shape.build
    fields = resampler.shape.primitives

    raw = json.load(series_json)
    if not isinstance(raw, list):
        raise click.BadParameter("Expected a JSON list of points", param_hint="SERIES_JSON")

    try:
        points = [_point_from_json(item, build, fields) for item in raw]
    except (KeyError, TypeError, ValueError) as e:
        raise click.BadParameter(f"Malformed point: {e}", param_hint="SERIES_JSON") from e

    _echo_json([asdict(p) for p in resampler.resample(points, target_ms)])


if __name__ == "__main__":
    cli()

# Alias for __main__.py
main = cli
