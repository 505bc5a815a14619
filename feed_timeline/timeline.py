"""Read paths: global timeline and single-feed view."""
from .aggregator import Aggregator
from .database import Database, FeedNotFoundError
from .models import Feed, NormalizedEntry, Timeline


def global_timeline(db: Database, aggregator: Aggregator) -> list[NormalizedEntry]:
    """Merged entries of every registered feed, newest first."""
    return aggregator.aggregate_all(db.list_urls())


def global_timeline_report(db: Database, aggregator: Aggregator) -> Timeline:
    return aggregator.aggregate_report(db.list_urls())


def feed_timeline(db: Database, aggregator: Aggregator, feed_id: int) -> tuple[Feed, list[NormalizedEntry]]:
    """Entries of one feed.

    Raises:
        FeedNotFoundError: no feed has this id; nothing is fetched.
    """
    feed = db.find_feed(feed_id)
    if feed is None:
        raise FeedNotFoundError(feed_id)
    return feed, aggregator.aggregate_one(feed.url)
