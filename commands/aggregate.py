import json

from auth import State, login_required
from services.aggregator import AggregationService
from services.feed_fetcher import FeedFetcher
from services.queries import Queries

DEMO_FEED_URL = "https://www.wagslane.dev/index.xml"


async def handle_agg(state: State, args):
    """Without an interval, fetch the demo feed once and print it as JSON.

    With an interval, scrape one followed feed per tick until interrupted.
    """
    if args.interval is None:
        feed = await FeedFetcher.fetch_feed(DEMO_FEED_URL)
        print(json.dumps(feed.to_dict(), indent=2, ensure_ascii=False))
        return

    await AggregationService.run_aggregation(state.session_maker, args.interval)


@login_required
async def handle_browse(state: State, args, user):
    """Print the newest posts from the feeds the current user follows."""
    async with state.session_maker() as session:
        posts = await Queries(session).get_posts_for_user(user.id, args.limit)

    if not posts:
        print(f"No posts yet for {user.name}. Run 'agg <interval>' to collect some.")
        return

    for post in posts:
        published = post.published_at.strftime("%Y-%m-%d %H:%M") if post.published_at else "unknown date"
        print(f"📰 {post.title}")
        print(f"   {post.url}")
        print(f"   Published: {published}")
        if post.description:
            print(f"   {post.description}")
        print()
