"""Typed database queries for users, feeds, feed follows and posts.

Every method issues a single statement against the session it was built
with and never commits; callers own the transaction.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from models.feed import Feed
from models.feed_follow import FeedFollow
from models.post import Post
from models.user import User


@dataclass
class FeedWithCreator:
    id: uuid.UUID
    name: str
    url: str
    user_name: str


@dataclass
class FeedFollowDetails:
    id: uuid.UUID
    user_id: uuid.UUID
    feed_id: uuid.UUID
    feed_name: str
    user_name: str
    created_at: datetime


class Queries:
    """Single-statement queries bound to one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- Users ---

    async def create_user(self, name: str) -> User:
        user = User(name=name)
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_user(self, name: str) -> User:
        """Raises NoResultFound when no user has this name."""
        result = await self.session.execute(select(User).where(User.name == name))
        return result.scalar_one()

    async def find_user(self, name: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.name == name))
        return result.scalar_one_or_none()

    async def get_users(self) -> List[User]:
        result = await self.session.execute(select(User).order_by(User.name))
        return list(result.scalars().all())

    # --- Feeds ---

    async def create_feed(self, name: str, url: str, user_id: uuid.UUID) -> Feed:
        feed = Feed(name=name, url=url, user_id=user_id)
        self.session.add(feed)
        await self.session.flush()
        return feed

    async def get_feeds(self) -> List[FeedWithCreator]:
        """All feeds joined with the name of the user who added them."""
        result = await self.session.execute(
            select(Feed.id, Feed.name, Feed.url, User.name.label("user_name"))
            .join(User, Feed.user_id == User.id)
            .order_by(Feed.created_at, Feed.name)
        )
        return [FeedWithCreator(**row._mapping) for row in result]

    async def get_feed_by_url(self, url: str) -> Feed:
        """Raises NoResultFound when no feed has this URL."""
        result = await self.session.execute(select(Feed).where(Feed.url == url))
        return result.scalar_one()

    async def get_next_feed_to_fetch(self) -> Optional[Feed]:
        """The feed fetched longest ago, never-fetched feeds first."""
        result = await self.session.execute(
            select(Feed)
            .order_by(Feed.last_fetched_at.asc().nulls_first(), Feed.created_at)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def mark_feed_fetched(self, feed_id: uuid.UUID) -> None:
        await self.session.execute(
            update(Feed)
            .where(Feed.id == feed_id)
            .values(last_fetched_at=func.now(), updated_at=func.now())
        )

    # --- Feed follows ---

    async def create_feed_follow(self, user_id: uuid.UUID, feed_id: uuid.UUID) -> FeedFollowDetails:
        """Insert a follow and return it with the feed and user names."""
        follow = FeedFollow(user_id=user_id, feed_id=feed_id)
        self.session.add(follow)
        await self.session.flush()

        result = await self.session.execute(
            self._follow_details().where(FeedFollow.id == follow.id)
        )
        return FeedFollowDetails(**result.one()._mapping)

    async def delete_feed_follow(self, user_id: uuid.UUID, feed_id: uuid.UUID) -> int:
        """Delete a follow; returns the number of rows removed (0 or 1)."""
        result = await self.session.execute(
            delete(FeedFollow).where(
                FeedFollow.user_id == user_id,
                FeedFollow.feed_id == feed_id,
            )
        )
        return result.rowcount

    async def get_feed_follows_for_user(self, user_id: uuid.UUID) -> List[FeedFollowDetails]:
        result = await self.session.execute(
            self._follow_details()
            .where(FeedFollow.user_id == user_id)
            .order_by(FeedFollow.created_at, Feed.name)
        )
        return [FeedFollowDetails(**row._mapping) for row in result]

    @staticmethod
    def _follow_details():
        return (
            select(
                FeedFollow.id,
                FeedFollow.user_id,
                FeedFollow.feed_id,
                Feed.name.label("feed_name"),
                User.name.label("user_name"),
                FeedFollow.created_at,
            )
            .join(Feed, FeedFollow.feed_id == Feed.id)
            .join(User, FeedFollow.user_id == User.id)
        )

    # --- Posts ---

    async def create_post(
        self,
        feed_id: uuid.UUID,
        title: str,
        url: str,
        description: Optional[str] = None,
        published_at: Optional[datetime] = None,
    ) -> Post:
        post = Post(
            feed_id=feed_id,
            title=title,
            url=url,
            description=description,
            published_at=published_at,
        )
        self.session.add(post)
        await self.session.flush()
        return post

    async def post_exists(self, url: str) -> bool:
        result = await self.session.execute(select(exists().where(Post.url == url)))
        return result.scalar()

    async def get_posts_for_user(self, user_id: uuid.UUID, limit: int) -> List[Post]:
        """Newest posts from the feeds a user follows."""
        result = await self.session.execute(
            select(Post)
            .join(FeedFollow, FeedFollow.feed_id == Post.feed_id)
            .where(FeedFollow.user_id == user_id)
            .order_by(Post.published_at.desc().nulls_last(), Post.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    # --- Maintenance ---

    async def reset(self) -> None:
        """Delete every row. Development and testing only."""
        for model in (Post, FeedFollow, Feed, User):
            await self.session.execute(delete(model))
