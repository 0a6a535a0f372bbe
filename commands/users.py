from auth import State
from services.queries import Queries
from services.users import UserAlreadyExistsError, UserNotFoundError, UserService


async def handle_register(state: State, args):
    """Create a user and make it the current user."""
    async with state.session_maker() as session:
        try:
            user = await UserService.register(session, args.name)
        except UserAlreadyExistsError:
            print("User already exists!")
            return 1

    state.config.set_user(user.name)
    print(f"User {user.name} successfully created!")
    print(f"   • ID: {user.id}")


async def handle_login(state: State, args):
    """Switch the current user to an existing user."""
    async with state.session_maker() as session:
        try:
            user = await UserService.login(session, args.name)
        except UserNotFoundError:
            print("User doesn't exist!")
            return 1

    state.config.set_user(user.name)
    print(f"User has been set to {user.name}!")


async def handle_reset(state: State, args):
    async with state.session_maker() as session:
        await UserService.reset(session)
    print("Database reset: all users, feeds, follows and posts deleted.")


async def handle_users(state: State, args):
    async with state.session_maker() as session:
        users = await Queries(session).get_users()

    if not users:
        print("No users in database!")
        return

    for user in users:
        if user.name == state.config.current_user_name:
            print(f"* {user.name} (current)")
        else:
            print(f"* {user.name}")
