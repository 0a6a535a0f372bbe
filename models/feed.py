import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from models.database import Base

class Feed(Base):
    __tablename__ = "feeds"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    url = Column(Text, unique=True, nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    last_fetched_at = Column(DateTime)  # null until the aggregator first picks it up
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    user = relationship("User", back_populates="feeds")
    feed_follows = relationship("FeedFollow", back_populates="feed", passive_deletes=True)
    posts = relationship("Post", back_populates="feed", passive_deletes=True)

    def __repr__(self):
        return f"<Feed(id={self.id}, name='{self.name}', url='{self.url}')>"
