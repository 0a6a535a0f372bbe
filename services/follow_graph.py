"""Follow relationships between users and feeds.

A (user, feed) pair is either followed or not. Following requires the feed
to exist already; unfollowing a pair that is not followed is a no-op.
"""
import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from models.feed import Feed
from models.user import User
from services.queries import FeedFollowDetails, Queries

logger = logging.getLogger(__name__)


class FollowGraph:
    """Create and remove follows for a user."""

    @staticmethod
    async def add_feed(session: AsyncSession, user: User, name: str, url: str) -> Feed:
        """Create a feed and follow it as its creator.

        Both rows are committed together; if either insert fails neither is
        kept.
        """
        queries = Queries(session)
        try:
            feed = await queries.create_feed(name, url, user.id)
            await queries.create_feed_follow(user.id, feed.id)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

        logger.info(f"{user.name} added feed {name} ({url})")
        return feed

    @staticmethod
    async def follow(session: AsyncSession, user: User, url: str) -> FeedFollowDetails:
        """Follow an existing feed by URL.

        Raises:
            NoResultFound: No feed has this URL
            IntegrityError: The user already follows the feed
        """
        queries = Queries(session)
        try:
            feed = await queries.get_feed_by_url(url)
            follow = await queries.create_feed_follow(user.id, feed.id)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

        logger.info(f"{user.name} followed {follow.feed_name}")
        return follow

    @staticmethod
    async def unfollow(session: AsyncSession, user: User, url: str) -> Feed:
        """Stop following a feed by URL. Returns the feed."""
        queries = Queries(session)
        try:
            feed = await queries.get_feed_by_url(url)
            removed = await queries.delete_feed_follow(user.id, feed.id)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

        if not removed:
            logger.info(f"{user.name} was not following {feed.name}")
        return feed

    @staticmethod
    async def following(session: AsyncSession, user: User) -> List[FeedFollowDetails]:
        return await Queries(session).get_feed_follows_for_user(user.id)
