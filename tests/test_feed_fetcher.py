"""
Tests for fetching and parsing RSS feeds.
"""
from datetime import datetime

import httpx
import pytest

from services.feed_fetcher import FeedFetchError, FeedFetcher
from conftest import SAMPLE_FEED_URL, SAMPLE_RSS


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_feed_parses_channel_and_items(feed_client):
    """Test that every <item> becomes one item, in document order."""
    feed = await FeedFetcher.fetch_feed(SAMPLE_FEED_URL, client=feed_client)

    assert feed.channel.link == "https://blog.example.com/"
    assert len(feed.channel.items) == 3
    assert [item.link for item in feed.channel.items] == [
        "https://blog.example.com/tom-and-jerry",
        "https://blog.example.com/fish-and-chips",
        "https://blog.example.com/untimed",
    ]


@pytest.mark.asyncio
async def test_fetch_feed_sends_user_agent(feed_client):
    """Test that the request identifies itself as gator."""
    await FeedFetcher.fetch_feed(SAMPLE_FEED_URL, client=feed_client)

    assert len(feed_client.requests) == 1
    request = feed_client.requests[0]
    assert request.method == "GET"
    assert str(request.url) == SAMPLE_FEED_URL
    assert request.headers["User-Agent"] == "gator"


@pytest.mark.asyncio
async def test_fetch_feed_unescapes_html_entities(feed_client):
    """Test that entities are decoded in channel and item text, even when double-encoded."""
    feed = await FeedFetcher.fetch_feed(SAMPLE_FEED_URL, client=feed_client)

    assert feed.channel.title == "Example & Friends"
    assert feed.channel.description == "Notes on Go & Python"
    assert feed.channel.items[0].title == "Tom & Jerry"
    assert feed.channel.items[0].description == "Cats & mice"
    assert feed.channel.items[1].title == "Fish & Chips"


@pytest.mark.asyncio
async def test_fetch_feed_parses_publish_dates(feed_client):
    feed = await FeedFetcher.fetch_feed(SAMPLE_FEED_URL, client=feed_client)

    first, _, untimed = feed.channel.items
    assert first.pub_date == "Mon, 02 Jan 2006 15:04:05 +0000"
    assert first.published_at == datetime(2006, 1, 2, 15, 4, 5)
    assert untimed.pub_date == ""
    assert untimed.published_at is None


@pytest.mark.asyncio
async def test_fetch_feed_http_error_status():
    """Test that a non-2xx response is a fetch error."""
    async with _client(lambda request: httpx.Response(404, text="not found")) as client:
        with pytest.raises(FeedFetchError):
            await FeedFetcher.fetch_feed(SAMPLE_FEED_URL, client=client)


@pytest.mark.asyncio
async def test_fetch_feed_transport_error():
    """Test that a network failure is a fetch error chained to the cause."""
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(FeedFetchError) as exc_info:
            await FeedFetcher.fetch_feed(SAMPLE_FEED_URL, client=client)

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_fetch_feed_malformed_xml():
    """Test that a body that is not well-formed XML is a fetch error."""
    body = b"<rss><channel><title>Broken</channel></rss>"
    async with _client(lambda request: httpx.Response(200, content=body)) as client:
        with pytest.raises(FeedFetchError):
            await FeedFetcher.fetch_feed(SAMPLE_FEED_URL, client=client)


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"", b"  \n"])
async def test_fetch_feed_empty_body(body):
    """Test that a successful response with no document is a fetch error."""
    async with _client(lambda request: httpx.Response(200, content=body)) as client:
        with pytest.raises(FeedFetchError):
            await FeedFetcher.fetch_feed(SAMPLE_FEED_URL, client=client)


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["http://a.example:abc/", "https://a\x00b.example/"])
async def test_fetch_feed_invalid_url(url, feed_client):
    """Test that a URL httpx cannot build a request for is a fetch error."""
    with pytest.raises(FeedFetchError) as exc_info:
        await FeedFetcher.fetch_feed(url, client=feed_client)

    assert isinstance(exc_info.value.__cause__, httpx.InvalidURL)
    assert feed_client.requests == []


@pytest.mark.asyncio
async def test_fetch_feed_uses_content_type_charset():
    """Test that an encoding declared only in the HTTP header is honoured."""
    body = (
        "<?xml version=\"1.0\"?>\n"
        "<rss version=\"2.0\"><channel><title>Caf\u00e9 Cr\u00e8me</title>"
        "<link>https://cafe.example.com/</link><description>Menu</description>"
        "</channel></rss>"
    ).encode("iso-8859-1")
    headers = {"Content-Type": "application/rss+xml; charset=iso-8859-1"}

    async with _client(lambda request: httpx.Response(200, content=body, headers=headers)) as client:
        feed = await FeedFetcher.fetch_feed(SAMPLE_FEED_URL, client=client)

    assert feed.channel.title == "Caf\u00e9 Cr\u00e8me"


def test_parse_feed_without_items():
    body = b"""<?xml version="1.0"?>
<rss version="2.0"><channel><title>Quiet</title><link>https://quiet.example.com/</link>
<description>Nothing yet</description></channel></rss>"""

    feed = FeedFetcher.parse_feed(body)

    assert feed.channel.title == "Quiet"
    assert feed.channel.items == []


def test_to_dict_uses_rss_element_names():
    feed = FeedFetcher.parse_feed(SAMPLE_RSS)

    data = feed.to_dict()

    assert data["Channel"]["Title"] == "Example & Friends"
    assert data["Channel"]["Link"] == "https://blog.example.com/"
    assert data["Channel"]["Item"][0] == {
        "Title": "Tom & Jerry",
        "Link": "https://blog.example.com/tom-and-jerry",
        "Description": "Cats & mice",
        "PubDate": "Mon, 02 Jan 2006 15:04:05 +0000",
    }
    assert data["Channel"]["Item"][2]["PubDate"] == ""
