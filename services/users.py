"""User registration and login rules."""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from services.queries import Queries

logger = logging.getLogger(__name__)


class UserAlreadyExistsError(Exception):
    """Raised when registering a name that is already taken."""


class UserNotFoundError(Exception):
    """Raised when logging in as a name that was never registered."""


class UserService:
    """Account operations used by the register, login and reset commands."""

    @staticmethod
    async def register(session: AsyncSession, name: str) -> User:
        queries = Queries(session)
        if await queries.find_user(name) is not None:
            raise UserAlreadyExistsError(name)

        try:
            user = await queries.create_user(name)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

        logger.info(f"Registered user {name} ({user.id})")
        return user

    @staticmethod
    async def login(session: AsyncSession, name: str) -> User:
        user = await Queries(session).find_user(name)
        if user is None:
            raise UserNotFoundError(name)
        return user

    @staticmethod
    async def reset(session: AsyncSession) -> None:
        """Delete all users, feeds, follows and posts."""
        try:
            await Queries(session).reset()
            await session.commit()
        except Exception:
            await session.rollback()
            raise

        logger.warning("Database reset: all rows deleted")
