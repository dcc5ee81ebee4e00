"""Typed models for aggregated weather news."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FeedConfig(BaseModel):
    """One upstream RSS feed."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str


class NewsItem(BaseModel):
    """A single feed entry after extraction."""

    model_config = ConfigDict(frozen=True)

    title: str
    link: str | None = None
    published: str = ""
    published_at: datetime | None = None
    description: str = ""
    source: str
    image: str
    country: str | None = None


class NewsGroup(BaseModel):
    model_config = ConfigDict(frozen=True)

    country: str
    items: list[NewsItem] = Field(default_factory=list)


class FeedOutcome(BaseModel):
    """Settled result of fetching one feed."""

    feed: FeedConfig
    ok: bool
    items: list[NewsItem] = Field(default_factory=list)
    reason: str | None = None


class NewsDigest(BaseModel):
    """Filtered, deduplicated, sorted and grouped news for display."""

    items: list[NewsItem] = Field(default_factory=list)
    groups: list[NewsGroup] = Field(default_factory=list)
    feeds_total: int = 0
    feeds_succeeded: int = 0
    failed_feeds: list[str] = Field(default_factory=list)
