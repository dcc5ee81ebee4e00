"""Fixed list of weather-news RSS feeds, grouped by region."""

from __future__ import annotations

from .models import FeedConfig

FEEDS: tuple[FeedConfig, ...] = (
    # India
    FeedConfig(name="India Today", url="https://www.indiatoday.in/rss/1206584"),
    FeedConfig(
        name="Hindustan Times",
        url="https://www.hindustantimes.com/feeds/rss/cities/delhi-news/rssfeed.xml",
    ),
    FeedConfig(
        name="The Times of India",
        url="https://timesofindia.indiatimes.com/rssfeeds/296589292.cms",
    ),
    FeedConfig(name="The Indian Express", url="https://indianexpress.com/section/india/feed/"),
    FeedConfig(name="IMD", url="https://mausam.imd.gov.in/imd_latest/contents_rss.php"),
    # United Kingdom
    FeedConfig(name="BBC Weather", url="https://feeds.bbci.co.uk/news/uk/rss.xml"),
    FeedConfig(
        name="The Guardian Environment", url="https://www.theguardian.com/uk/environment/rss"
    ),
    FeedConfig(
        name="Met Office",
        url="https://www.metoffice.gov.uk/public/data/PWSCache/WarningsRSS/Region/UK",
    ),
    # United States
    FeedConfig(name="AP Weather", url="https://apnews.com/hub/weather/rss"),
    FeedConfig(name="CNN Weather", url="http://rss.cnn.com/rss/cnn_latest.rss"),
    FeedConfig(name="NOAA News", url="https://www.noaa.gov/rss.xml"),
    FeedConfig(name="Weather Channel", url="https://weather.com/news/rss"),
    # Europe
    FeedConfig(name="Euronews", url="https://www.euronews.com/rss?level=theme&name=weather"),
    FeedConfig(name="DW Environment", url="https://rss.dw.com/rdf/rss-en-env"),
    # Australia / New Zealand
    FeedConfig(name="ABC Weather", url="https://www.abc.net.au/news/feed/2942460/rss.xml"),
    FeedConfig(name="Bureau of Meteorology", url="http://www.bom.gov.au/rss/weather/"),
    FeedConfig(name="NZ Herald", url="https://www.nzherald.co.nz/rss/"),
    # Asia
    FeedConfig(name="Japan Times", url="https://www.japantimes.co.jp/feed/"),
    FeedConfig(name="The Straits Times", url="https://www.straitstimes.com/news/world/rss.xml"),
    # Canada
    FeedConfig(name="CBC Weather", url="https://www.cbc.ca/cmlink/rss-weather"),
    # Global
    FeedConfig(name="Reuters Environment", url="https://feeds.reuters.com/reuters/environment"),
    FeedConfig(name="Al Jazeera", url="https://www.aljazeera.com/xml/rss/all.xml"),
)
