import asyncio
import logging
import re
from datetime import datetime, timedelta
from typing import Optional

import httpx
import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import async_sessionmaker

from services.feed_fetcher import FeedFetcher
from services.queries import Queries

logger = logging.getLogger(__name__)

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {
    "h": timedelta(hours=1),
    "m": timedelta(minutes=1),
    "s": timedelta(seconds=1),
    "ms": timedelta(milliseconds=1),
}


def parse_interval(text: str) -> timedelta:
    """Parse a duration such as ``30s``, ``1m`` or ``1h30m``.

    Raises:
        ValueError: If the text is not a positive duration
    """
    text = text.strip()
    if not text or _DURATION_PART.sub("", text):
        raise ValueError(f"invalid duration {text!r}")

    total = timedelta()
    for amount, unit in _DURATION_PART.findall(text):
        total += float(amount) * _DURATION_UNITS[unit]

    if total <= timedelta():
        raise ValueError(f"duration must be positive: {text!r}")
    return total


class AggregationService:
    """Scrape followed feeds into posts."""

    @staticmethod
    async def scrape_next_feed(
        session_maker: async_sessionmaker,
        client: Optional[httpx.AsyncClient] = None,
    ) -> Optional[int]:
        """Fetch the feed that has waited longest and store its new posts.

        Returns:
            Number of posts saved, or None when there are no feeds
        """
        async with session_maker() as session:
            queries = Queries(session)

            feed = await queries.get_next_feed_to_fetch()
            if feed is None:
                logger.info("No feeds to fetch")
                return None

            # Mark first so a failing feed does not block the rest of the rotation
            await queries.mark_feed_fetched(feed.id)
            await session.commit()

            logger.info(f"Fetching feed: {feed.name} ({feed.url})")
            rss = await FeedFetcher.fetch_feed(feed.url, client=client)

            saved = 0
            for item in rss.channel.items:
                if not item.link:
                    continue

                # Check if post already exists
                if await queries.post_exists(item.link):
                    continue

                await queries.create_post(
                    feed_id=feed.id,
                    title=item.title or item.link,
                    url=item.link,
                    description=item.description or None,
                    published_at=item.published_at,
                )
                saved += 1

            await session.commit()
            logger.info(f"✓ {feed.name}: {saved} new of {len(rss.channel.items)} posts")
            return saved

    @staticmethod
    async def run_aggregation(session_maker: async_sessionmaker, interval: timedelta):
        """Scrape one feed every ``interval`` until cancelled.

        The first run starts immediately; a run still in progress when the
        next one is due causes that tick to be skipped.
        """
        scheduler = AsyncIOScheduler(timezone=pytz.utc)
        async with httpx.AsyncClient(timeout=None, follow_redirects=True) as client:
            scheduler.add_job(
                AggregationService.scrape_next_feed,
                IntervalTrigger(seconds=interval.total_seconds(), timezone=pytz.utc),
                args=[session_maker, client],
                id="scrape_feeds",
                next_run_time=datetime.now(pytz.utc),
                max_instances=1,
                coalesce=True,
                replace_existing=True,
            )
            scheduler.start()
            logger.info(f"Collecting feeds every {interval}")

            try:
                await asyncio.Event().wait()
            finally:
                scheduler.shutdown(wait=False)
                logger.info("Aggregation stopped")
