#!/usr/bin/env python3
"""
Gator: a command-line RSS feed aggregator.

Usage:
    gator register <name>
    gator addfeed <name> <url>
    gator agg 1m
"""
import argparse
import asyncio
import logging
import sys

import config
from auth import State
from commands.aggregate import handle_agg, handle_browse
from commands.feeds import (
    handle_addfeed,
    handle_feeds,
    handle_follow,
    handle_following,
    handle_unfollow,
)
from commands.users import handle_login, handle_register, handle_reset, handle_users
from models.database import create_engine_for, create_session_maker, init_db
from services.aggregator import parse_interval

logger = logging.getLogger("gator")


class ArgumentParser(argparse.ArgumentParser):
    """Report usage errors with exit status 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _interval(text):
    try:
        return parse_interval(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _positive_int(text):
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid limit {text!r}")
    if value < 1:
        raise argparse.ArgumentTypeError("limit must be at least 1")
    return value


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="gator", description="RSS feed aggregator")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.required = True

    register = subparsers.add_parser("register", help="Create a user and log in as it")
    register.add_argument("name")
    register.set_defaults(handler=handle_register)

    login = subparsers.add_parser("login", help="Switch the current user")
    login.add_argument("name")
    login.set_defaults(handler=handle_login)

    reset = subparsers.add_parser("reset", help="Delete every user, feed, follow and post")
    reset.set_defaults(handler=handle_reset)

    users = subparsers.add_parser("users", help="List users")
    users.set_defaults(handler=handle_users)

    addfeed = subparsers.add_parser("addfeed", help="Add a feed and follow it")
    addfeed.add_argument("name")
    addfeed.add_argument("url")
    addfeed.set_defaults(handler=handle_addfeed)

    agg = subparsers.add_parser(
        "agg",
        help="Fetch the demo feed once, or collect followed feeds every INTERVAL",
    )
    agg.add_argument("interval", nargs="?", type=_interval, help="e.g. 30s, 1m, 1h30m")
    agg.set_defaults(handler=handle_agg)

    feeds = subparsers.add_parser("feeds", help="List all feeds")
    feeds.set_defaults(handler=handle_feeds)

    follow = subparsers.add_parser("follow", help="Follow a feed by URL")
    follow.add_argument("url")
    follow.set_defaults(handler=handle_follow)

    following = subparsers.add_parser("following", help="List the feeds you follow")
    following.set_defaults(handler=handle_following)

    unfollow = subparsers.add_parser("unfollow", help="Unfollow a feed by URL")
    unfollow.add_argument("url")
    unfollow.set_defaults(handler=handle_unfollow)

    browse = subparsers.add_parser("browse", help="Show recent posts from followed feeds")
    browse.add_argument("limit", nargs="?", type=_positive_int, default=2)
    browse.set_defaults(handler=handle_browse)

    return parser


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    if not verbose:
        # Quiet noisy loggers
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("apscheduler").setLevel(logging.WARNING)


async def run(cfg: config.Config, args) -> int:
    """Open the database, run one command and return its exit status."""
    engine = None
    try:
        engine = create_engine_for(cfg.database_url)
        await init_db(engine)

        state = State(config=cfg, session_maker=create_session_maker(engine))
        return await args.handler(state, args) or 0
    except Exception as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1
    finally:
        if engine is not None:
            await engine.dispose()


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        cfg = config.read()
    except (OSError, ValueError) as e:
        print(f"❌ Error: could not read {config.CONFIG_FILE_NAME}: {e}", file=sys.stderr)
        return 1

    try:
        return asyncio.run(run(cfg, args))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 0


if __name__ == '__main__':
    sys.exit(main())
