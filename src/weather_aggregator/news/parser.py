"""RSS/Atom extraction into NewsItem records."""

from __future__ import annotations

import io
import re
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any

import feedparser

from ..exceptions import NewsFeedError
from .models import NewsItem

_IMG_TAG_RE = re.compile(r"<img[^>]*src=[\"']([^\"']+)[\"'][^>]*>", re.IGNORECASE)
_IMAGE_URL_RE = re.compile(r"https?://[^\s<>\"]+\.(?:jpg|jpeg|png|gif|webp)", re.IGNORECASE)

PLACEHOLDER_KEYWORDS = (
    "rain",
    "storm",
    "snow",
    "sun",
    "cloud",
    "wind",
    "heat",
    "cold",
    "flood",
    "drought",
)
PLACEHOLDER_TEMPLATE = "https://source.unsplash.com/400x200/?{keyword},weather"
DEFAULT_PLACEHOLDER = "https://source.unsplash.com/400x200/?weather,sky"


def parse_feed(document: str, source_name: str) -> list[NewsItem]:
    """Parse feed markup into items; raises NewsFeedError when nothing is readable."""
    parsed = feedparser.parse(
        io.BytesIO(document.encode("utf-8")),
        response_headers={"content-type": "application/xml; charset=utf-8"},
    )
    if parsed.bozo and not parsed.entries:
        raise NewsFeedError(
            f"Could not parse feed from {source_name}: {parsed.get('bozo_exception')}",
            feed=source_name,
        )
    return [_entry_to_item(entry, source_name) for entry in parsed.entries]


def _entry_to_item(entry: Any, source_name: str) -> NewsItem:
    title = (entry.get("title") or "").strip() or "Untitled"
    link = (entry.get("link") or "").strip() or None
    published = entry.get("published") or entry.get("updated") or ""
    description = entry.get("summary") or entry.get("description") or ""
    content = _encoded_content(entry)

    published_at = _struct_time_to_datetime(
        entry.get("published_parsed") or entry.get("updated_parsed")
    )
    if published_at is None:
        published_at = parse_published(published)

    return NewsItem(
        title=title,
        link=link,
        published=published,
        published_at=published_at,
        description=description,
        source=source_name,
        image=pick_image(
            media_urls=_media_urls(entry),
            content=content,
            description=description,
            title=title,
        ),
    )


def pick_image(*, media_urls: list[str], content: str, description: str, title: str) -> str:
    """Choose an illustrative image for an item.

    Preference order: media metadata, first ``<img>`` in the body, first
    image-looking URL in the body, then a keyword-derived placeholder.
    """
    for url in media_urls:
        if url:
            return url

    body = content or description
    tag = _IMG_TAG_RE.search(body)
    if tag:
        return tag.group(1)
    bare = _IMAGE_URL_RE.search(body)
    if bare:
        return bare.group(0)

    text = f"{title} {description}".lower()
    for keyword in PLACEHOLDER_KEYWORDS:
        if keyword in text:
            return PLACEHOLDER_TEMPLATE.format(keyword=keyword)
    return DEFAULT_PLACEHOLDER


def parse_published(value: str | None) -> datetime | None:
    """Parse RFC 822 or ISO-8601 publish dates; None when unparseable."""
    if not value or not value.strip():
        return None
    candidate = value.strip()
    try:
        parsed = parsedate_to_datetime(candidate)
    except (TypeError, ValueError, IndexError):
        parsed = None
    if parsed is None:
        if candidate.endswith("Z"):
            candidate = candidate[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError:
            return None
    return parsed.astimezone(UTC) if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _media_urls(entry: Any) -> list[str]:
    urls: list[str] = []
    for key in ("media_content", "media_thumbnail"):
        media = entry.get(key) or []
        if media and isinstance(media[0], dict):
            urls.append(media[0].get("url") or "")
    for enclosure in entry.get("enclosures") or []:
        if str(enclosure.get("type", "")).startswith("image"):
            urls.append(enclosure.get("href") or enclosure.get("url") or "")
            break
    return urls


def _encoded_content(entry: Any) -> str:
    content = entry.get("content") or []
    if content and isinstance(content[0], dict):
        return content[0].get("value") or ""
    return ""


def _struct_time_to_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime(*value[:6], tzinfo=UTC)
    except (TypeError, ValueError):
        return None
