"""SQLite store for registered feeds."""
import sqlite3
from pathlib import Path

from .models import Feed


class FeedValidationError(ValueError):
    """Feed record is missing a title or url."""


class DuplicateFeedError(ValueError):
    """A feed with this url is already registered."""


class FeedNotFoundError(LookupError):
    """No feed exists with the requested id."""

    def __init__(self, feed_id: int):
        super().__init__(f"Feed not found: {feed_id}")
        self.feed_id = feed_id


class Database:
    """SQLite database wrapper for feed registrations."""

    SCHEMA = """
    -- Feed subscriptions
    CREATE TABLE IF NOT EXISTS feeds (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        url TEXT UNIQUE NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );
    """

    def __init__(self, db_path: Path):
        """Initialize database, creating tables if needed."""
        self.db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        """Create tables if they don't exist."""
        self.conn.executescript(self.SCHEMA)
        self.conn.commit()

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Execute SQL and return cursor."""
        return self.conn.execute(sql, params)

    def commit(self) -> None:
        """Commit current transaction."""
        self.conn.commit()

    def close(self) -> None:
        """Close database connection."""
        self.conn.close()

    @staticmethod
    def _row_to_feed(row: sqlite3.Row) -> Feed:
        return Feed(
            id=row["id"],
            title=row["title"],
            url=row["url"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def create_feed(self, title: str, url: str) -> Feed:
        """Register a feed.

        Raises:
            FeedValidationError: title or url is blank.
            DuplicateFeedError: url is already registered.
        """
        title = (title or "").strip()
        url = (url or "").strip()
        if not title:
            raise FeedValidationError("Title can't be blank")
        if not url:
            raise FeedValidationError("Url can't be blank")

        try:
            cursor = self.execute(
                "INSERT INTO feeds (title, url) VALUES (?, ?)",
                (title, url),
            )
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            raise DuplicateFeedError(f"Url has already been taken: {url}") from e
        self.commit()
        return self.find_feed(cursor.lastrowid)

    def list_feeds(self) -> list[Feed]:
        cursor = self.execute("SELECT * FROM feeds ORDER BY id")
        return [self._row_to_feed(row) for row in cursor.fetchall()]

    def list_urls(self) -> list[str]:
        cursor = self.execute("SELECT url FROM feeds ORDER BY id")
        return [row["url"] for row in cursor.fetchall()]

    def find_feed(self, feed_id: int) -> Feed | None:
        """Return the feed with this id, or None."""
        cursor = self.execute("SELECT * FROM feeds WHERE id = ?", (feed_id,))
        row = cursor.fetchone()
        return self._row_to_feed(row) if row else None

    def delete_feed(self, feed_id: int) -> None:
        cursor = self.execute("DELETE FROM feeds WHERE id = ?", (feed_id,))
        self.commit()
        if cursor.rowcount == 0:
            raise FeedNotFoundError(feed_id)
