"""
Current-user resolution for commands that require a login.
"""
import functools
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import async_sessionmaker

from config import Config
from services.queries import Queries


@dataclass
class State:
    """Everything a command handler needs for one invocation."""

    config: Config
    session_maker: async_sessionmaker


def login_required(handler):
    """Resolve the current user from config and pass it to ``handler``.

    An unknown or unset current user raises NoResultFound.
    """
    @functools.wraps(handler)
    async def wrapper(state: State, args):
        async with state.session_maker() as session:
            user = await Queries(session).get_user(state.config.current_user_name)
        return await handler(state, args, user)

    return wrapper
