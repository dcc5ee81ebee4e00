"""Classification, dedup, ordering and grouping of news items."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import UTC, datetime
from urllib.parse import urlparse

from .models import NewsGroup, NewsItem

WEATHER_RELEVANCE_RE = re.compile(
    r"\b(weather|forecast|imd|rain|rainfall|showers|downpour|monsoon|cyclone|storm|"
    r"thunderstorm|lightning|snow|hail|heatwave|cold\s*wave|coldwave|temperature|"
    r"max\s*temp|min\s*temp|humidity|uv\s*index|aqi|air\s*quality|pollution|smog|"
    r"dust\s*storm|wind\s*speed|winds?\b|gust|barometric|pressure|visibility|alerts?|"
    r"yellow\s*alert|orange\s*alert|red\s*alert|climate|global\s*warming|flood|drought|"
    r"wildfire|hurricane|typhoon|tornado|blizzard|frost|ice|fog|mist|haze|environment|"
    r"meteorology|meteorological)\b",
    re.IGNORECASE,
)
EXCLUSION_RE = re.compile(
    r"(ad\b|sponsored|sleepers|shoulders|iphone|android|gadget|travel|booking|hotel|"
    r"celebrity|bollywood|cricket|football|movie|series|genius|sale|discount|coupon|"
    r"review|gaming|stocks?|crypto)",
    re.IGNORECASE,
)

INTERNATIONAL = "International"
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

# (country, hostname suffixes, hostname substrings); first match wins.
COUNTRY_RULES: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    (
        "India",
        (".in",),
        ("timesofindia", "indiatoday", "hindustantimes", "indianexpress", "mausam.imd"),
    ),
    ("United Kingdom", (".uk",), ("bbc.", "theguardian.", "metoffice.gov.uk")),
    ("Australia", (".au",), ("abc.net.au", "bom.gov.au")),
    ("New Zealand", (".nz",), ("nzherald",)),
    ("Canada", (".ca",), ("cbc.ca",)),
    ("Japan", (".jp",), ("japantimes",)),
    ("Singapore", (".sg",), ("straitstimes",)),
    ("UAE", (".ae",), ("gulfnews",)),
    ("Qatar / Middle East", (), ("aljazeera",)),
    ("Europe", (), ("euronews", "dw.com")),
    ("United States", (), ("noaa.gov", "weather.com", "apnews", "cnn.", "reuters.com")),
)

TOPIC_ICONS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("rain", "shower", "drizzle"), "🌧️"),
    (("storm", "thunder", "lightning"), "⛈️"),
    (("snow", "blizzard", "frost"), "❄️"),
    (("sun", "sunny", "clear"), "☀️"),
    (("cloud", "overcast", "fog"), "☁️"),
    (("wind", "breeze", "gust"), "💨"),
    (("heat", "hot", "warm"), "🌡️"),
    (("cold", "freeze", "chill"), "🧊"),
    (("flood", "drought", "wildfire"), "🌊"),
    (("hurricane", "typhoon", "cyclone"), "🌀"),
    (("tornado", "twister"), "🌪️"),
    (("pollution", "smog", "air quality"), "🌫️"),
)
DEFAULT_TOPIC_ICON = "🌤️"


def is_weather_relevant(item: NewsItem) -> bool:
    """Keep items that mention weather and none of the excluded topics."""
    text = f"{item.title} {item.description}"
    return bool(WEATHER_RELEVANCE_RE.search(text)) and not EXCLUSION_RE.search(text)


def dedupe(items: Iterable[NewsItem]) -> list[NewsItem]:
    """Drop repeats by lower-cased link (or title when there is no link)."""
    seen: set[str] = set()
    unique: list[NewsItem] = []
    for item in items:
        key = (item.link or item.title).lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


def sort_by_published(items: Iterable[NewsItem]) -> list[NewsItem]:
    """Newest first; undated items sort as the epoch. Ties keep input order."""
    return sorted(items, key=lambda item: item.published_at or EPOCH, reverse=True)


def curate(items: Iterable[NewsItem], limit: int) -> list[NewsItem]:
    relevant = [item for item in items if is_weather_relevant(item)]
    return sort_by_published(dedupe(relevant))[:limit]


def infer_country(link: str | None) -> str:
    if not link:
        return INTERNATIONAL
    try:
        host = (urlparse(link).hostname or "").lower()
    except ValueError:
        return INTERNATIONAL
    if not host:
        return INTERNATIONAL
    for country, suffixes, fragments in COUNTRY_RULES:
        if host.endswith(suffixes) or any(fragment in host for fragment in fragments):
            return country
    return INTERNATIONAL


def group_by_country(items: Iterable[NewsItem]) -> list[NewsGroup]:
    """Group items under their inferred country, groups in name order."""
    grouped: dict[str, list[NewsItem]] = {}
    for item in items:
        country = infer_country(item.link)
        grouped.setdefault(country, []).append(item.model_copy(update={"country": country}))
    return [NewsGroup(country=country, items=grouped[country]) for country in sorted(grouped)]


def topic_icon(title: str, description: str) -> str:
    text = f"{title} {description}".lower()
    for keywords, icon in TOPIC_ICONS:
        if any(keyword in text for keyword in keywords):
            return icon
    return DEFAULT_TOPIC_ICON
