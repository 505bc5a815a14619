"""Tests for merging sources into one timeline."""
from datetime import datetime, timedelta, timezone

from conftest import FIXED_NOW, FakeFetcher


def _rss(*items):
    """Build an RSS document from (title, pubDate or None) pairs."""
    body = []
    for title, pub_date in items:
        date_tag = f"<pubDate>{pub_date}</pubDate>" if pub_date else ""
        body.append(f"<item><title>{title}</title><link>https://example.com/{title}</link>{date_tag}</item>")
    return (
        '<?xml version="1.0"?><rss version="2.0"><channel><title>t</title>'
        "<link>https://example.com/</link><description>d</description>"
        + "".join(body)
        + "</channel></rss>"
    ).encode()


def _entry(title, published):
    from feed_timeline.models import NormalizedEntry

    return NormalizedEntry(title=title, url=None, summary=None, published=published)


class StubNormalizer:
    """Returns canned SourceResults, records calls."""

    def __init__(self, results):
        self.results = results
        self.calls = []

    def normalize_source(self, url):
        from feed_timeline.models import SourceResult

        self.calls.append(url)
        value = self.results[url]
        if isinstance(value, str):
            return SourceResult(url=url, error=value)
        return SourceResult(url=url, entries=list(value))

    def normalize(self, url):
        return self.normalize_source(url).entries


def _aggregator(bodies, max_workers=4):
    from feed_timeline.aggregator import Aggregator
    from feed_timeline.normalizer import FeedNormalizer

    normalizer = FeedNormalizer(FakeFetcher(bodies), clock=lambda: FIXED_NOW)
    return Aggregator(normalizer, max_workers=max_workers)


def test_three_sources_one_failing():
    """Source 2 fails; the others merge newest first with no error raised."""
    bodies = {
        "https://one.example.com/feed": _rss(
            ("ten", "Mon, 06 Sep 2021 10:00:00 GMT"),
            ("nine", "Mon, 06 Sep 2021 09:00:00 GMT"),
        ),
        "https://three.example.com/feed": _rss(("nine-thirty", "Mon, 06 Sep 2021 09:30:00 GMT")),
    }
    urls = ["https://one.example.com/feed", "https://two.example.com/feed", "https://three.example.com/feed"]

    entries = _aggregator(bodies).aggregate_all(urls)

    assert [e.title for e in entries] == ["ten", "nine-thirty", "nine"]


def test_length_is_sum_of_sources():
    """No entries are dropped or duplicated by the merge."""
    t = datetime(2024, 1, 1, tzinfo=timezone.utc)
    stub = StubNormalizer({
        "a": [_entry("a1", t), _entry("a2", t)],
        "b": [_entry("b1", t)],
        "c": [],
        "d": "Connection refused",
    })
    from feed_timeline.aggregator import Aggregator

    entries = Aggregator(stub).aggregate_all(["a", "b", "c", "d"])

    expected = sum(len(stub.normalize(url)) for url in ["a", "b", "c", "d"])
    assert len(entries) == expected == 3


def test_output_sorted_descending():
    """Every adjacent pair is in non-increasing publish order."""
    from feed_timeline.aggregator import Aggregator

    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    stub = StubNormalizer({
        "a": [_entry(f"a{i}", base + timedelta(hours=i * 3)) for i in range(5)],
        "b": [_entry(f"b{i}", base + timedelta(hours=i * 2)) for i in range(5)],
        "c": [_entry(f"c{i}", base - timedelta(hours=i)) for i in range(5)],
    })

    entries = Aggregator(stub).aggregate_all(["a", "b", "c"])

    assert all(a.published >= b.published for a, b in zip(entries, entries[1:]))


def test_ties_keep_concatenation_order():
    """Equal timestamps keep source order, then feed order."""
    from feed_timeline.aggregator import Aggregator

    t = datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
    stub = StubNormalizer({
        "a": [_entry("a1", t), _entry("a2", t)],
        "b": [_entry("b1", t + timedelta(minutes=1)), _entry("b2", t)],
    })

    entries = Aggregator(stub).aggregate_all(["a", "b"])

    assert [e.title for e in entries] == ["b1", "a1", "a2", "b2"]


def test_ties_stable_with_sequential_workers():
    """Concurrency level does not change tie order."""
    from feed_timeline.aggregator import Aggregator

    t = datetime(2024, 1, 1, tzinfo=timezone.utc)
    results = {url: [_entry(f"{url}{i}", t) for i in range(3)] for url in "abcdef"}

    parallel = Aggregator(StubNormalizer(results), max_workers=6).aggregate_all(list("abcdef"))
    sequential = Aggregator(StubNormalizer(results), max_workers=1).aggregate_all(list("abcdef"))

    assert [e.title for e in parallel] == [e.title for e in sequential]
    assert parallel[0].title == "a0"
    assert parallel[-1].title == "f2"


def test_undated_entries_sort_at_fetch_time():
    """Entries without a date are placed by the normalize time."""
    bodies = {
        "https://a.example.com/feed": _rss(("old", "Mon, 06 Sep 2021 10:00:00 GMT"), ("undated", None)),
    }

    entries = _aggregator(bodies).aggregate_all(["https://a.example.com/feed"])

    assert [e.title for e in entries] == ["undated", "old"]
    assert entries[0].published == FIXED_NOW


def test_aggregate_one_keeps_feed_order():
    """Single-source path does not re-sort."""
    bodies = {
        "https://a.example.com/feed": _rss(
            ("older", "Mon, 06 Sep 2021 08:00:00 GMT"),
            ("newer", "Mon, 06 Sep 2021 11:00:00 GMT"),
        ),
    }

    entries = _aggregator(bodies).aggregate_one("https://a.example.com/feed")

    assert [e.title for e in entries] == ["older", "newer"]


def test_aggregate_one_failure_is_empty():
    """A broken single feed yields no entries."""
    assert _aggregator({}).aggregate_one("https://down.example.com/feed") == []


def test_report_tracks_failed_sources():
    """aggregate_report keeps per-source outcomes in input order."""
    from feed_timeline.aggregator import Aggregator

    t = datetime(2024, 1, 1, tzinfo=timezone.utc)
    stub = StubNormalizer({"a": [_entry("a1", t)], "b": "HTTP 500 Internal Server Error", "c": []})

    report = Aggregator(stub).aggregate_report(["a", "b", "c"])

    assert [s.url for s in report.sources] == ["a", "b", "c"]
    assert [s.url for s in report.failed_sources] == ["b"]
    assert report.failed_sources[0].error == "HTTP 500 Internal Server Error"
    assert [e.title for e in report.entries] == ["a1"]


def test_no_sources_gives_empty_timeline():
    """Nothing registered means nothing fetched."""
    from feed_timeline.aggregator import Aggregator

    stub = StubNormalizer({})

    assert Aggregator(stub).aggregate_all([]) == []
    assert stub.calls == []


def test_every_source_is_fetched_once():
    """Each url is normalized exactly once per aggregate call."""
    from feed_timeline.aggregator import Aggregator

    stub = StubNormalizer({url: [] for url in "abc"})

    Aggregator(stub, max_workers=3).aggregate_all(["a", "b", "c"])

    assert sorted(stub.calls) == ["a", "b", "c"]
