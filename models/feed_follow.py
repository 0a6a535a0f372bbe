import uuid

from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from models.database import Base

class FeedFollow(Base):
    __tablename__ = "feed_follows"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    feed_id = Column(Uuid, ForeignKey("feeds.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # A user follows a feed at most once
    __table_args__ = (
        UniqueConstraint("user_id", "feed_id", name="uq_feed_follows_user_feed"),
    )

    # Relationships
    user = relationship("User", back_populates="feed_follows")
    feed = relationship("Feed", back_populates="feed_follows")

    def __repr__(self):
        return f"<FeedFollow(user_id={self.user_id}, feed_id={self.feed_id})>"
