"""Synchronization of loaded calendar feeds into the Notion calendar database."""
import logging
from typing import Dict, Optional

from config import require
from processor.event_processor import EventProcessor
from processor.models import LoadedFeed, SyncResult
from storage.notion_manager import NotionManager

logger = logging.getLogger(__name__)


def sync_feeds(
    feeds: Dict[str, LoadedFeed],
    notion: NotionManager,
    processor: EventProcessor,
    calendar_database_id: Optional[str]
) -> SyncResult:
    """
    Create a Notion page for every event not yet recorded.

    Events are handled one at a time in feed order. An event is recorded
    when a page with its UID in the ID property exists; such events are
    skipped. Any Notion error aborts the remainder of the pass.

    Args:
        feeds: Mapping of settings entry id to LoadedFeed
        notion: Notion manager
        processor: Builder for page properties and body
        calendar_database_id: Calendar database id

    Returns:
        SyncResult with counts of created and skipped events

    Raises:
        ConfigurationError: If the calendar database id is not configured
    """
    database_id = require(calendar_database_id, 'NOTION_CALENDAR_ID')

    logger.info("Synchronizing...")
    created = 0
    skipped = 0

    for feed in feeds.values():
        logger.info(f'Calendar "{feed.name}"')
        total = len(feed.events)

        for index, event in enumerate(feed.events):
            logger.info(f"Doing {index + 1}/{total}")

            if notion.event_exists(database_id, event.uid):
                skipped += 1
                continue

            notion.create_event_page(
                database_id,
                properties=processor.build_properties(event, feed.name),
                children=processor.build_children(event)
            )
            created += 1

    logger.info(f"Done. {created} created, {skipped} already present")
    return SyncResult(created=created, skipped=skipped)
