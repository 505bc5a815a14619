"""Parse fetched feeds into NormalizedEntry lists."""
import calendar
import io
import logging
from datetime import datetime, timezone
from typing import Callable

import feedparser

from .fetcher import FeedError, SourceFetcher
from .models import NormalizedEntry, SourceResult


class ParseFailure(FeedError):
    """Content is not a recognizable RSS/Atom document."""


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_datetime(struct) -> datetime | None:
    # feedparser normalizes *_parsed fields to UTC struct_time
    if not struct:
        return None
    try:
        return datetime.fromtimestamp(calendar.timegm(struct), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None


def parse_document(url: str, content: bytes) -> feedparser.FeedParserDict:
    """Parse raw bytes, raising ParseFailure if no feed format is detected."""
    try:
        # a bare bytes argument may be opened as a local path or url
        parsed = feedparser.parse(io.BytesIO(content), sanitize_html=False, resolve_relative_uris=False)
    except Exception as e:
        raise ParseFailure(url, f"Parser crashed: {e}") from e

    if not parsed.get("version") and (parsed.get("bozo") or not parsed.entries):
        reason = parsed.get("bozo_exception") or "unrecognized document format"
        raise ParseFailure(url, f"Not a valid feed: {reason}")
    return parsed


class FeedNormalizer:
    """Fetch one source and map its entries to NormalizedEntry."""

    def __init__(
        self,
        fetcher: SourceFetcher,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.fetcher = fetcher
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock

    def normalize(self, url: str) -> list[NormalizedEntry]:
        """Return the entries of url, or [] if it could not be fetched or parsed."""
        return self.normalize_source(url).entries

    def normalize_source(self, url: str) -> SourceResult:
        """Like normalize, but keep the failure message for the caller."""
        try:
            parsed = parse_document(url, self.fetcher.fetch(url))
            now = self.clock()
            entries = [self._normalize_entry(item, now) for item in parsed.entries]
        except FeedError as e:
            self.logger.error(f"[PARSE] Failed to fetch feed from {url}: {e}")
            return SourceResult(url=url, error=str(e))
        except Exception as e:
            self.logger.exception(f"[PARSE] Unexpected error for {url}: {e}")
            return SourceResult(url=url, error=f"Unexpected error: {e}")

        self.logger.debug(f"[PARSE] {url}: {len(entries)} entries")
        return SourceResult(url=url, entries=entries)

    def discover_title(self, url: str) -> str | None:
        """Return the feed's own title.

        Raises:
            FeedError: if the feed cannot be fetched or parsed.
        """
        parsed = parse_document(url, self.fetcher.fetch(url))
        title = parsed.feed.get("title", "").strip()
        return title or None

    @staticmethod
    def _normalize_entry(item: feedparser.FeedParserDict, now: datetime) -> NormalizedEntry:
        published = _to_datetime(item.get("published_parsed")) or _to_datetime(item.get("updated_parsed"))
        return NormalizedEntry(
            title=item.get("title"),
            url=item.get("link"),
            summary=item.get("summary"),
            published=published or now,
        )
