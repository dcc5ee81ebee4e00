"""Relevance filtering, dedup, ordering and country grouping."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from weather_aggregator.news.filters import (
    DEFAULT_TOPIC_ICON,
    INTERNATIONAL,
    curate,
    dedupe,
    group_by_country,
    infer_country,
    is_weather_relevant,
    sort_by_published,
    topic_icon,
)
from weather_aggregator.news.models import NewsItem


def _item(
    title: str,
    *,
    link: str | None = None,
    published_at: datetime | None = None,
    description: str = "",
    source: str = "Test Feed",
) -> NewsItem:
    return NewsItem(
        title=title,
        link=link,
        published_at=published_at,
        description=description,
        source=source,
        image="https://img.example.com/x.jpg",
    )


@pytest.mark.parametrize(
    "title",
    [
        "Heavy rain expected in Mumbai",
        "Heatwave grips northern plains",
        "Cyclone makes landfall near the coast",
        "Air quality worsens as smog settles",
        "IMD issues orange alert for districts",
    ],
)
def test_weather_titles_are_relevant(title: str) -> None:
    assert is_weather_relevant(_item(title))


@pytest.mark.parametrize(
    "title",
    [
        "Parliament passes budget bill",
        "Monsoon rain travel guide for families",
        "Sponsored: storm-proof jackets",
        "Cricket match washed out by rain",
    ],
)
def test_irrelevant_or_excluded_titles_are_dropped(title: str) -> None:
    assert not is_weather_relevant(_item(title))


def test_exclusion_applies_to_description_too() -> None:
    item = _item("Storm warning for the weekend", description="Best discount offers inside")
    assert not is_weather_relevant(item)


def test_dedupe_keeps_first_occurrence_case_insensitively() -> None:
    first = _item("Rain in Chennai", link="https://News.example.com/Rain", source="First")
    second = _item("Rain in Chennai again", link="https://news.example.com/rain", source="Second")
    untitled_a = _item("Fog delays flights", source="A")
    untitled_b = _item("FOG DELAYS FLIGHTS", source="B")

    unique = dedupe([first, second, untitled_a, untitled_b])

    assert [item.source for item in unique] == ["First", "A"]


def test_sort_newest_first_with_undated_last() -> None:
    january = _item("Frost in January", published_at=datetime(2024, 1, 1, tzinfo=UTC))
    undated = _item("Undated rain report")
    june = _item("June heatwave", published_at=datetime(2024, 6, 1, tzinfo=UTC))

    ordered = sort_by_published([january, undated, june])

    assert ordered == [june, january, undated]


def test_curate_filters_dedupes_sorts_and_caps() -> None:
    items = [
        _item(f"Rain update {index}", link=f"https://x.example.com/{index}",
              published_at=datetime(2024, 6, 1, index, tzinfo=UTC))
        for index in range(5)
    ]
    items.append(_item("Rain update 4 mirror", link="https://X.example.com/4"))
    items.append(_item("Election results"))

    curated = curate(items, limit=3)

    assert [item.title for item in curated] == ["Rain update 4", "Rain update 3", "Rain update 2"]


@pytest.mark.parametrize(
    ("link", "country"),
    [
        ("https://www.abc.net.au/news/weather", "Australia"),
        ("https://www.bbc.co.uk/weather/news", "United Kingdom"),
        ("https://timesofindia.indiatimes.com/city/rain.cms", "India"),
        ("https://www.nzherald.co.nz/weather/", "New Zealand"),
        ("https://www.cbc.ca/news/climate", "Canada"),
        ("https://www.aljazeera.com/news/flood", "Qatar / Middle East"),
        ("https://www.euronews.com/green", "Europe"),
        ("https://www.noaa.gov/news", "United States"),
        ("https://unknown.example.org/story", INTERNATIONAL),
        (None, INTERNATIONAL),
        ("not a url", INTERNATIONAL),
    ],
)
def test_infer_country_from_host(link: str | None, country: str) -> None:
    assert infer_country(link) == country


def test_group_by_country_sorts_groups_and_tags_items() -> None:
    items = [
        _item("Flood waters rise", link="https://www.bbc.co.uk/news/1"),
        _item("Bushfire weather", link="https://www.abc.net.au/news/2"),
        _item("Global warming report", link="https://unknown.example.org/3"),
        _item("Drought in the south", link="https://www.abc.net.au/news/4"),
    ]

    groups = group_by_country(items)

    assert [group.country for group in groups] == ["Australia", INTERNATIONAL, "United Kingdom"]
    assert [item.title for item in groups[0].items] == ["Bushfire weather", "Drought in the south"]
    assert all(item.country == "Australia" for item in groups[0].items)


def test_topic_icon_matches_keywords() -> None:
    assert topic_icon("Heavy rain", "") == "🌧️"
    assert topic_icon("Quiet day", "") == DEFAULT_TOPIC_ICON
