"""CLI entry point for feed-timeline."""
import dataclasses
import json
import logging
from pathlib import Path

import click
import yaml

from feed_timeline.aggregator import Aggregator
from feed_timeline.config import get_db_path, get_project_dir, load_config
from feed_timeline.database import Database, DuplicateFeedError, FeedNotFoundError, FeedValidationError
from feed_timeline.fetcher import FeedError, SourceFetcher
from feed_timeline.logging_config import setup_logging
from feed_timeline.models import NormalizedEntry
from feed_timeline.normalizer import FeedNormalizer
from feed_timeline.timeline import feed_timeline, global_timeline_report


def get_db(config: dict) -> Database:
    """Get database instance."""
    return Database(get_db_path(config))


def get_normalizer(config: dict) -> FeedNormalizer:
    return FeedNormalizer(SourceFetcher.from_config(config))


def get_aggregator(config: dict) -> Aggregator:
    return Aggregator(get_normalizer(config), max_workers=config["fetch"]["max_workers"])


def _init_logging(config: dict, verbose: bool) -> None:
    log_dir = Path(config["logging"].get("dir", "logs"))
    if not log_dir.is_absolute():
        log_dir = get_project_dir() / log_dir
    setup_logging(log_dir, config["logging"]["retention_days"], verbose)


def _entry_to_dict(entry: NormalizedEntry) -> dict:
    data = dataclasses.asdict(entry)
    data["published"] = entry.published.isoformat()
    return data


def _echo_entries(entries: list[NormalizedEntry]) -> None:
    for entry in entries:
        click.echo(f"{entry.published:%Y-%m-%d %H:%M}  {entry.title or '(untitled)'}")
        if entry.url:
            click.echo(f"    {entry.url}")


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(1)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.yaml (default: config/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None):
    """Feed Timeline - register RSS/Atom feeds and read them as one timeline."""
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(config_path)
    except (ValueError, yaml.YAMLError) as e:
        _fail(f"Invalid config: {e}")


# === Timeline ===


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output entries as JSON")
@click.option("--limit", "-n", type=click.IntRange(min=0), default=None, help="Show at most N entries")
@click.option("--verbose", "-v", is_flag=True, help="Show per-feed progress")
@click.pass_context
def timeline(ctx: click.Context, output_json: bool, limit: int | None, verbose: bool):
    """Show entries from all feeds, newest first."""
    config = ctx.obj["config"]
    _init_logging(config, verbose)
    logger = logging.getLogger(__name__)

    db = get_db(config)
    result = global_timeline_report(db, get_aggregator(config))
    entries = result.entries[:limit] if limit is not None else result.entries
    logger.info(f"Timeline: {len(result.entries)} entries, {len(result.failed_sources)} feeds failed")

    if output_json:
        click.echo(json.dumps(
            {
                "entries": [_entry_to_dict(e) for e in entries],
                "failed": [{"url": s.url, "error": s.error} for s in result.failed_sources],
            },
            indent=2,
        ))
        return

    if not result.sources:
        click.echo("No feeds registered. Add one with: feed-timeline feeds add URL")
        return

    _echo_entries(entries)
    for source in result.failed_sources:
        click.echo(f"Warning: {source.url}: {source.error}", err=True)


# === Feed Management Commands ===


@cli.group()
def feeds():
    """Manage feed subscriptions."""
    pass


@feeds.command("add")
@click.argument("url")
@click.option("--title", "-t", default=None, help="Feed title (read from the feed if not given)")
@click.pass_context
def feeds_add(ctx: click.Context, url: str, title: str | None):
    """Register a new feed."""
    config = ctx.obj["config"]
    db = get_db(config)

    if not title:
        try:
            title = get_normalizer(config).discover_title(url)
        except FeedError as e:
            _fail(f"Could not read feed title, pass --title: {e}")
        if not title:
            _fail("Feed has no title, pass --title")

    try:
        feed = db.create_feed(title, url)
    except (FeedValidationError, DuplicateFeedError) as e:
        _fail(str(e))
    click.echo(f"Feed added successfully! [{feed.id}] {feed.title}")


@feeds.command("list")
@click.pass_context
def feeds_list(ctx: click.Context):
    """List registered feeds."""
    db = get_db(ctx.obj["config"])

    feed_list = db.list_feeds()
    if not feed_list:
        click.echo("No feeds registered")
        return
    for feed in feed_list:
        click.echo(f"[{feed.id}] {feed.title}")
        click.echo(f"    {feed.url}")


@feeds.command("show")
@click.argument("feed_id", type=int)
@click.option("--json", "output_json", is_flag=True, help="Output entries as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Show fetch details")
@click.pass_context
def feeds_show(ctx: click.Context, feed_id: int, output_json: bool, verbose: bool):
    """Show entries of one feed."""
    config = ctx.obj["config"]
    _init_logging(config, verbose)
    db = get_db(config)

    try:
        feed, entries = feed_timeline(db, get_aggregator(config), feed_id)
    except FeedNotFoundError:
        _fail("Feed not found.")

    if output_json:
        click.echo(json.dumps(
            {"feed": dataclasses.asdict(feed), "entries": [_entry_to_dict(e) for e in entries]},
            indent=2,
            default=str,
        ))
        return

    click.echo(f"{feed.title} ({feed.url})")
    click.echo()
    if not entries:
        click.echo("No entries available")
        return
    _echo_entries(entries)


@feeds.command("remove")
@click.argument("feed_id", type=int)
@click.pass_context
def feeds_remove(ctx: click.Context, feed_id: int):
    """Delete a feed registration."""
    db = get_db(ctx.obj["config"])

    try:
        db.delete_feed(feed_id)
    except FeedNotFoundError:
        _fail("Feed not found.")
    click.echo("Feed was successfully deleted.")


if __name__ == "__main__":
    cli()
