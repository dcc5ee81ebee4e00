"""Terminal front end: fetch weather, locations and news and print them."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import Settings, load_settings
from .exceptions import ConfigError, LocationError, WeatherProviderError
from .location import LocationResolver
from .log_setup import setup_logger
from .news import NewsAggregator, NewsDigest, topic_icon
from .weather import (
    DailyForecast,
    HistoricalSeries,
    HourlyForecast,
    WeatherService,
    WeatherSnapshot,
)

NEWS_FAILURE_MESSAGE = "Failed to load news. Please try again later."


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Show weather conditions, forecasts and weather news."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    current = subparsers.add_parser("current", help="Current conditions.")
    _add_coordinate_args(current)
    current.add_argument("--city", type=str, default=None, help="Place name to look up.")

    for name, help_text in (
        ("hourly", "Forecast for the next hours."),
        ("daily", "7-day forecast."),
        ("history", "Daily observations for the past year."),
    ):
        _add_coordinate_args(subparsers.add_parser(name, help=help_text))

    subparsers.add_parser("locate", help="Detect the current location.")

    news = subparsers.add_parser("news", help="Weather news grouped by country.")
    news.add_argument(
        "--max-print",
        type=int,
        default=None,
        help="Number of articles to print per country.",
    )
    return parser.parse_args(argv)


def _add_coordinate_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--lat", type=float, default=None, help="Latitude.")
    parser.add_argument("--lon", type=float, default=None, help="Longitude.")


def _validate_cli_input(args: argparse.Namespace) -> None:
    if getattr(args, "max_print", None) is not None and args.max_print <= 0:
        raise WeatherProviderError("--max-print must be > 0 when provided.")
    lat = getattr(args, "lat", None)
    lon = getattr(args, "lon", None)
    if (lat is None) != (lon is None):
        raise WeatherProviderError("Provide both --lat and --lon, or neither.")
    if getattr(args, "city", None) and lat is not None:
        raise WeatherProviderError("Use either --city or --lat/--lon, not both.")


async def _coordinates(
    args: argparse.Namespace, settings: Settings, logger: logging.Logger
) -> tuple[float, float]:
    if args.lat is not None and args.lon is not None:
        return args.lat, args.lon
    async with LocationResolver(settings, logger) as resolver:
        location = await resolver.locate()
    return location.latitude, location.longitude


def _print_snapshot(console: Console, snapshot: WeatherSnapshot) -> None:
    place = f"{snapshot.location}, {snapshot.country}" if snapshot.country else snapshot.location
    console.print(f"{escape(place)} | source={snapshot.source}")
    table = Table(title="Current Conditions")
    table.add_column("Field")
    table.add_column("Value", overflow="fold")
    table.add_row("Temperature", f"{snapshot.temperature} °C")
    table.add_row("Feels like", f"{snapshot.feels_like} °C")
    table.add_row("Conditions", escape(snapshot.description))
    table.add_row("Humidity", f"{snapshot.humidity:g} %")
    table.add_row("Pressure", f"{snapshot.pressure:g} hPa")
    table.add_row("Wind", f"{snapshot.wind_speed:g} m/s")
    table.add_row("Visibility", f"{snapshot.visibility} km")
    console.print(table)


def _print_hourly(console: Console, forecast: HourlyForecast) -> None:
    table = Table(title=f"Hourly Forecast ({forecast.source})")
    for column in ("Time", "Temp", "Conditions", "Humidity", "Wind"):
        table.add_column(column)
    for point in forecast.points:
        table.add_row(
            f"{point.time_label}{' (now)' if point.is_now else ''}",
            f"{point.temperature} °C",
            escape(point.description),
            f"{point.humidity:g} %",
            f"{point.wind_speed:g}",
        )
    console.print(table)


def _print_daily(console: Console, forecast: DailyForecast) -> None:
    table = Table(title=f"7-Day Forecast ({forecast.source})")
    for column in ("Day", "Date", "High", "Low", "Conditions"):
        table.add_column(column)
    for day in forecast.days:
        table.add_row(
            day.day,
            day.date_label,
            f"{day.high} °C",
            f"{day.low} °C",
            escape(day.description),
        )
    console.print(table)


def _print_history(console: Console, series: HistoricalSeries) -> None:
    if not series.days:
        console.print("No historical data found.")
        return
    highs = [day.temp_max for day in series.days]
    lows = [day.temp_min for day in series.days]
    total_precip = sum(day.precipitation for day in series.days)
    console.print(
        f"Days={len(series.days)} source={series.source} "
        f"warmest={max(highs)} °C coldest={min(lows)} °C "
        f"precipitation={total_precip:.1f} mm"
    )


def _print_news(console: Console, digest: NewsDigest, max_print: int | None) -> None:
    console.print(
        f"Articles={len(digest.items)} feeds={digest.feeds_succeeded}/{digest.feeds_total}"
    )
    if not digest.items:
        console.print("No weather news found.")
        return
    for group in digest.groups:
        table = Table(title=f"{group.country} ({len(group.items)} articles)")
        table.add_column("", width=3)
        table.add_column("Source")
        table.add_column("Published")
        table.add_column("Title", overflow="fold")
        for item in group.items[:max_print]:
            table.add_row(
                topic_icon(item.title, item.description),
                escape(item.source),
                item.published_at.isoformat() if item.published_at else "-",
                escape(item.title),
            )
        console.print(table)


async def _run(
    args: argparse.Namespace, settings: Settings, logger: logging.Logger, console: Console
) -> int:
    if args.command == "news":
        async with NewsAggregator(settings, logger) as aggregator:
            try:
                digest = await aggregator.aggregate()
            except Exception as exc:  # pragma: no cover - fan-out machinery failure
                logger.exception("News aggregation failed: %s", exc)
                console.print(NEWS_FAILURE_MESSAGE)
                return 4
        _print_news(console, digest, args.max_print)
        return 0

    if args.command == "locate":
        async with LocationResolver(settings, logger) as resolver:
            location = await resolver.locate()
            place = await resolver.place_name(location.latitude, location.longitude)
        console.print(
            f"{place.city} ({location.latitude:.4f}, {location.longitude:.4f}) "
            f"method={location.method} accuracy={location.accuracy or 0:g} m"
        )
        return 0

    async with WeatherService(settings, logger) as service:
        if args.command == "current" and args.city:
            _print_snapshot(console, await service.current_by_city(args.city))
            return 0
        lat, lon = await _coordinates(args, settings, logger)
        if args.command == "current":
            _print_snapshot(console, await service.current_by_coords(lat, lon))
        elif args.command == "hourly":
            _print_hourly(console, await service.hourly_forecast(lat, lon))
        elif args.command == "daily":
            _print_daily(console, await service.seven_day_forecast(lat, lon))
        else:
            _print_history(console, await service.historical_year(lat, lon))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run one CLI command."""
    args = parse_args(argv)
    logger = setup_logger()
    console = Console()

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    logger = setup_logger(level=settings.log_level)

    try:
        _validate_cli_input(args)
        return asyncio.run(_run(args, settings, logger, console))
    except LocationError as exc:
        logger.error("Location failure: %s", exc)
        console.print(str(exc), markup=False)
        if exc.suggestion:
            console.print(exc.suggestion, markup=False)
        return 4
    except WeatherProviderError as exc:
        logger.error("Weather failure: %s", exc)
        console.print(str(exc), markup=False)
        console.print("Try searching for a city instead.")
        return 4


if __name__ == "__main__":
    sys.exit(main())
