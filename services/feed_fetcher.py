"""RSS feed fetching and parsing service."""
import html
import logging
import xml.sax
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

import feedparser
import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "gator"


class FeedFetchError(Exception):
    """Raised when a feed cannot be fetched or parsed."""


@dataclass
class RSSItem:
    title: str
    link: str
    description: str
    pub_date: str
    published_at: Optional[datetime] = None


@dataclass
class RSSChannel:
    title: str
    link: str
    description: str
    items: List[RSSItem] = field(default_factory=list)


@dataclass
class RSSFeed:
    channel: RSSChannel

    def to_dict(self) -> dict:
        """JSON-serializable form of the feed, keyed like the RSS elements."""
        return {
            "Channel": {
                "Title": self.channel.title,
                "Link": self.channel.link,
                "Description": self.channel.description,
                "Item": [
                    {
                        "Title": item.title,
                        "Link": item.link,
                        "Description": item.description,
                        "PubDate": item.pub_date,
                    }
                    for item in self.channel.items
                ],
            }
        }


class FeedFetcher:
    """Fetch and parse RSS feeds."""

    @staticmethod
    async def fetch_feed(feed_url: str, client: Optional[httpx.AsyncClient] = None) -> RSSFeed:
        """Fetch and parse a single RSS feed.

        Args:
            feed_url: URL of the RSS feed
            client: Optional client to send the request with. When omitted a
                client without a timeout is created for this request only.

        Returns:
            The parsed feed with HTML entities unescaped

        Raises:
            FeedFetchError: On any transport, HTTP status or parse failure
        """
        try:
            body, headers = await FeedFetcher._get(feed_url, client)
            feed = FeedFetcher.parse_feed(body, response_headers=headers)
        except FeedFetchError:
            raise
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.error(f"Failed to fetch feed {feed_url}: {e}")
            raise FeedFetchError(f"failed to fetch {feed_url}: {e}") from e

        logger.info(f"Fetched {len(feed.channel.items)} items from {feed_url}")
        return feed

    @staticmethod
    async def _get(feed_url: str, client: Optional[httpx.AsyncClient]) -> Tuple[bytes, dict]:
        headers = {"User-Agent": USER_AGENT}
        if client is not None:
            response = await client.get(feed_url, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=None, follow_redirects=True) as own_client:
                response = await own_client.get(feed_url, headers=headers)
        response.raise_for_status()
        return response.content, dict(response.headers)

    @staticmethod
    def parse_feed(body: bytes, response_headers: Optional[dict] = None) -> RSSFeed:
        """Parse an RSS document into channel and items.

        Args:
            body: Raw response body
            response_headers: HTTP headers, used for the Content-Type charset

        Raises:
            FeedFetchError: If the body is empty or not well-formed XML
        """
        if not body.strip():
            raise FeedFetchError("empty feed body")

        parsed = feedparser.parse(body, response_headers=response_headers)

        if parsed.bozo and isinstance(parsed.bozo_exception, xml.sax.SAXException):
            raise FeedFetchError(f"malformed feed XML: {parsed.bozo_exception}")

        channel = RSSChannel(
            title=html.unescape(parsed.feed.get("title", "")),
            link=parsed.feed.get("link", ""),
            description=html.unescape(
                parsed.feed.get("description") or parsed.feed.get("subtitle", "")
            ),
        )

        for entry in parsed.entries:
            channel.items.append(RSSItem(
                title=html.unescape(entry.get("title", "")),
                link=entry.get("link", ""),
                description=html.unescape(
                    entry.get("description") or entry.get("summary", "")
                ),
                pub_date=entry.get("published", ""),
                published_at=FeedFetcher._parse_date(entry),
            ))

        return RSSFeed(channel=channel)

    @staticmethod
    def _parse_date(entry) -> Optional[datetime]:
        """Parse published date from feed entry."""
        # feedparser normalizes to UTC
        for key in ("published_parsed", "updated_parsed"):
            parsed_date = entry.get(key)
            if parsed_date:
                try:
                    return datetime(*parsed_date[:6])
                except (TypeError, ValueError):
                    continue

        return None
