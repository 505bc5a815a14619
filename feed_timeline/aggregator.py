"""Merge entries from many sources into one timeline."""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from .models import NormalizedEntry, SourceResult, Timeline
from .normalizer import FeedNormalizer

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


def merge_entries(results: Iterable[list[NormalizedEntry]]) -> list[NormalizedEntry]:
    """Concatenate per-source lists and sort newest first.

    sorted() is stable with reverse=True, so equal timestamps keep
    their concatenation order.
    """
    combined = [entry for entries in results for entry in entries]
    return sorted(combined, key=lambda entry: entry.published, reverse=True)


class Aggregator:
    """Fan out normalize() over sources and join before sorting."""

    def __init__(self, normalizer: FeedNormalizer, max_workers: int = DEFAULT_MAX_WORKERS):
        self.normalizer = normalizer
        self.max_workers = max(1, max_workers)

    def aggregate_one(self, url: str) -> list[NormalizedEntry]:
        """Entries of a single source in the feed's own order."""
        return self.normalizer.normalize(url)

    def aggregate_all(self, urls: Iterable[str]) -> list[NormalizedEntry]:
        return self.aggregate_report(urls).entries

    def aggregate_report(self, urls: Iterable[str]) -> Timeline:
        """Merged timeline plus per-source results in input order."""
        urls = list(urls)
        sources = self._collect(urls)
        entries = merge_entries(source.entries for source in sources)

        failed = sum(1 for source in sources if not source.ok)
        logger.info(f"[MERGE] {len(entries)} entries from {len(urls)} feeds ({failed} failed)")
        return Timeline(entries=entries, sources=sources)

    def _collect(self, urls: list[str]) -> list[SourceResult]:
        if len(urls) <= 1 or self.max_workers == 1:
            return [self.normalizer.normalize_source(url) for url in urls]

        # map() yields in submission order regardless of completion order
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(urls))) as executor:
            return list(executor.map(self.normalizer.normalize_source, urls))
