"""Retrieve raw feed documents over HTTP."""
import logging
import time

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
DEFAULT_USER_AGENT = "feed-timeline/0.1"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024
CHUNK_SIZE = 64 * 1024


class FeedError(Exception):
    """Base class for per-source feed failures."""

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url


class FetchFailure(FeedError):
    """Source could not be reached or answered with a non-2xx status."""

    def __init__(self, url: str, message: str, cause: Exception | None = None, status_code: int | None = None):
        super().__init__(url, message)
        self.cause = cause
        self.status_code = status_code


class SourceFetcher:
    """Fetch feed bodies within a total time and size budget."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        session: requests.Session | None = None,
        max_bytes: int = DEFAULT_MAX_BYTES,
    ):
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = user_agent

    @classmethod
    def from_config(cls, config: dict) -> "SourceFetcher":
        fetch = config.get("fetch", {})
        return cls(
            timeout=fetch.get("timeout", DEFAULT_TIMEOUT),
            user_agent=fetch.get("user_agent", DEFAULT_USER_AGENT),
            max_bytes=fetch.get("max_bytes", DEFAULT_MAX_BYTES),
        )

    def fetch(self, url: str) -> bytes:
        """GET url and return the response body.

        The timeout bounds the whole request, body included, so a server
        trickling bytes is cut off as well.

        Raises:
            FetchFailure: on connection errors, timeouts, invalid URLs,
                non-2xx responses and bodies over max_bytes.
        """
        logger.debug(f"[FETCH] GET {url}")
        deadline = time.monotonic() + self.timeout
        try:
            response = self.session.get(url, timeout=self.timeout, stream=True)
        except requests.Timeout as e:
            raise FetchFailure(url, f"Timed out after {self.timeout}s", cause=e) from e
        except requests.RequestException as e:
            raise FetchFailure(url, str(e) or e.__class__.__name__, cause=e) from e

        try:
            if not 200 <= response.status_code < 300:
                raise FetchFailure(
                    url,
                    f"HTTP {response.status_code} {response.reason or ''}".strip(),
                    status_code=response.status_code,
                )
            content = self._read_body(url, response, deadline)
        finally:
            response.close()

        logger.debug(f"[FETCH] {url}: {len(content)} bytes")
        return content

    def _read_body(self, url: str, response: requests.Response, deadline: float) -> bytes:
        chunks = []
        size = 0
        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                size += len(chunk)
                if size > self.max_bytes:
                    raise FetchFailure(url, f"Response exceeds {self.max_bytes} bytes")
                if time.monotonic() > deadline:
                    raise FetchFailure(url, f"Timed out after {self.timeout}s")
                chunks.append(chunk)
        except requests.Timeout as e:
            raise FetchFailure(url, f"Timed out after {self.timeout}s", cause=e) from e
        except requests.RequestException as e:
            raise FetchFailure(url, str(e) or e.__class__.__name__, cause=e) from e
        return b"".join(chunks)
