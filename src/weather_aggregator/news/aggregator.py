"""Concurrent fan-out over all news feeds with settle semantics."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import httpx

from ..config import Settings
from ..exceptions import NewsFeedError
from ..redaction import sanitize_text
from .feeds import FEEDS
from .filters import curate, group_by_country
from .models import FeedConfig, FeedOutcome, NewsDigest, NewsItem
from .parser import parse_feed


class NewsAggregator:
    """Fetches every feed through the CORS proxy and curates the merged items.

    Individual feed failures are logged and dropped; ``aggregate`` only
    raises if the fan-out itself breaks.
    """

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        *,
        feeds: Sequence[FeedConfig] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self.feeds = tuple(feeds) if feeds is not None else FEEDS
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.news_timeout_seconds)

    async def __aenter__(self) -> NewsAggregator:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch_feed(self, feed: FeedConfig) -> list[NewsItem]:
        """Fetch one feed via the proxy's JSON envelope and parse its items."""
        try:
            response = await self._client.get(self.settings.news_proxy_url, params={"url": feed.url})
            response.raise_for_status()
            envelope = response.json()
        except httpx.HTTPError as exc:
            raise NewsFeedError(
                f"Failed to load feed {feed.name}: {sanitize_text(str(exc)) or type(exc).__name__}",
                feed=feed.name,
            ) from exc
        except ValueError as exc:
            raise NewsFeedError(
                f"Feed proxy returned non-JSON response for {feed.name}.", feed=feed.name
            ) from exc

        contents = envelope.get("contents") if isinstance(envelope, dict) else None
        if not isinstance(contents, str) or not contents.strip():
            raise NewsFeedError(f"Feed proxy returned no contents for {feed.name}.", feed=feed.name)
        return parse_feed(contents, feed.name)

    async def fetch_all(self) -> list[FeedOutcome]:
        """Fetch every feed concurrently; one outcome per feed, in feed order."""
        results = await asyncio.gather(
            *(self.fetch_feed(feed) for feed in self.feeds),
            return_exceptions=True,
        )
        outcomes: list[FeedOutcome] = []
        for feed, result in zip(self.feeds, results, strict=True):
            if isinstance(result, Exception):
                self.logger.warning(
                    "Dropping news feed %s: %s", feed.name, result, extra={"feed": feed.name}
                )
                outcomes.append(FeedOutcome(feed=feed, ok=False, reason=str(result)))
            elif isinstance(result, BaseException):
                raise result
            else:
                outcomes.append(FeedOutcome(feed=feed, ok=True, items=result))
        return outcomes

    async def aggregate(self) -> NewsDigest:
        outcomes = await self.fetch_all()
        merged = [item for outcome in outcomes if outcome.ok for item in outcome.items]
        items = curate(merged, self.settings.news_max_items)
        succeeded = sum(1 for outcome in outcomes if outcome.ok)
        self.logger.info(
            "Aggregated %d news items from %d/%d feeds",
            len(items),
            succeeded,
            len(outcomes),
        )
        return NewsDigest(
            items=items,
            groups=group_by_country(items),
            feeds_total=len(outcomes),
            feeds_succeeded=succeeded,
            failed_feeds=[outcome.feed.name for outcome in outcomes if not outcome.ok],
        )
