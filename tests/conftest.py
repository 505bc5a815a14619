"""Shared fixtures and sample feed documents."""
from datetime import datetime, timezone

import pytest

RSS_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example News</title>
    <link>https://example.com/</link>
    <description>Example feed</description>
    <item>
      <title>First post</title>
      <link>https://example.com/first</link>
      <description>First summary</description>
      <pubDate>Mon, 06 Sep 2021 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Second post</title>
      <link>https://example.com/second</link>
      <description>Second summary</description>
      <pubDate>Mon, 06 Sep 2021 09:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Undated post</title>
      <link>https://example.com/undated</link>
      <description>No date here</description>
    </item>
  </channel>
</rss>
"""

ATOM_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Example</title>
  <id>urn:uuid:60a76c80-d399-11d9-b91C-0003939e0af6</id>
  <updated>2021-09-06T09:30:00Z</updated>
  <entry>
    <title>Atom entry</title>
    <link href="https://atom.example.com/entry"/>
    <id>urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a</id>
    <updated>2021-09-06T09:30:00Z</updated>
    <summary>Atom summary</summary>
  </entry>
</feed>
"""

EMPTY_RSS_FEED = b"""<?xml version="1.0"?>
<rss version="2.0"><channel><title>Empty</title><link>https://empty.example.com/</link>
<description>Nothing yet</description></channel></rss>
"""

HTML_PAGE = b"""<!DOCTYPE html>
<html><head><title>Not a feed</title></head><body><p>Hello</p></body></html>
"""

FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeFetcher:
    """Serves canned bodies by url; anything else is a FetchFailure."""

    def __init__(self, bodies: dict):
        self.bodies = bodies
        self.calls = []

    def fetch(self, url: str) -> bytes:
        from feed_timeline.fetcher import FetchFailure

        self.calls.append(url)
        body = self.bodies.get(url)
        if body is None:
            raise FetchFailure(url, "Connection refused")
        return body


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW
