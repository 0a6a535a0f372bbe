import uuid

from sqlalchemy import Column, DateTime, Text, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from models.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, unique=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    feeds = relationship("Feed", back_populates="user", passive_deletes=True)
    feed_follows = relationship("FeedFollow", back_populates="user", passive_deletes=True)

    def __repr__(self):
        return f"<User(id={self.id}, name='{self.name}')>"
