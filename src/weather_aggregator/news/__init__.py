"""Weather news aggregation."""

from .aggregator import NewsAggregator
from .feeds import FEEDS
from .filters import (
    curate,
    dedupe,
    group_by_country,
    infer_country,
    is_weather_relevant,
    sort_by_published,
    topic_icon,
)
from .models import FeedConfig, FeedOutcome, NewsDigest, NewsGroup, NewsItem
from .parser import parse_feed, parse_published, pick_image

__all__ = [
    "FEEDS",
    "FeedConfig",
    "FeedOutcome",
    "NewsAggregator",
    "NewsDigest",
    "NewsGroup",
    "NewsItem",
    "curate",
    "dedupe",
    "group_by_country",
    "infer_country",
    "is_weather_relevant",
    "parse_feed",
    "parse_published",
    "pick_image",
    "sort_by_published",
    "topic_icon",
]
