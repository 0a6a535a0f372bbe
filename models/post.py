import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from models.database import Base

class Post(Base):
    __tablename__ = "posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    feed_id = Column(Uuid, ForeignKey("feeds.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    url = Column(Text, unique=True, nullable=False, index=True)
    description = Column(Text)
    published_at = Column(DateTime, index=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationship
    feed = relationship("Feed", back_populates="posts")

    def __repr__(self):
        return f"<Post(id={self.id}, title='{self.title[:50]}...')>"
