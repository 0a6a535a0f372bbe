from auth import State, login_required
from services.follow_graph import FollowGraph
from services.queries import Queries


@login_required
async def handle_addfeed(state: State, args, user):
    """Add a feed and follow it as the current user."""
    async with state.session_maker() as session:
        feed = await FollowGraph.add_feed(session, user, args.name, args.url)

    print("********** NEW FEED **********")
    print(f"ID: {feed.id}")
    print(f"Name: {feed.name}")
    print(f"URL: {feed.url}")
    print(f"User Name: {user.name}")
    print("********** NEW FEED **********")


async def handle_feeds(state: State, args):
    async with state.session_maker() as session:
        feeds = await Queries(session).get_feeds()

    if not feeds:
        print("No feeds available!")
        return

    print("******** FEEDS ********")
    for i, feed in enumerate(feeds):
        print(f"Name: {feed.name}")
        print(f"URL: {feed.url}")
        print(f"User Name: {feed.user_name}")
        if i != len(feeds) - 1:
            print("-------------------------")
    print("******** FEEDS ********")


@login_required
async def handle_follow(state: State, args, user):
    async with state.session_maker() as session:
        follow = await FollowGraph.follow(session, user, args.url)

    print("********** NEW FOLLOW **********")
    print(f"Feed Name: {follow.feed_name}")
    print(f"User Name: {follow.user_name}")
    print("********** NEW FOLLOW **********")


@login_required
async def handle_following(state: State, args, user):
    async with state.session_maker() as session:
        follows = await FollowGraph.following(session, user)

    if not follows:
        print(f"{user.name} isn't following any feeds!")
        return

    print(f"{user.name} is following:")
    for follow in follows:
        print(f"  - {follow.feed_name}")


@login_required
async def handle_unfollow(state: State, args, user):
    async with state.session_maker() as session:
        feed = await FollowGraph.unfollow(session, user, args.url)

    print(f"{user.name} successfully unfollowed {feed.name}!")
