"""Loading of calendar feeds listed in the Notion settings database."""
import logging
from typing import Dict, List, Optional

from config import require
from feeds.ical_feed import IcalFeedReader
from processor.models import FeedSource, LoadedFeed
from storage.notion_manager import NotionManager

logger = logging.getLogger(__name__)


def read_feed_sources(notion: NotionManager, database_id: str) -> List[FeedSource]:
    """
    Read (name, URL) entries from the settings database.

    Entries without a URL are skipped.

    Args:
        notion: Notion manager
        database_id: Settings database id

    Returns:
        List of FeedSource objects in query order
    """
    sources = []

    for page in notion.query_all_pages(database_id):
        name_property = page['properties']['Name']['id']
        url_property = page['properties']['URL']['id']

        name = notion.get_title(page['id'], name_property)
        url = notion.get_url(page['id'], url_property)
        if not url:
            logger.warning(f"Settings entry '{name}' has no URL, skipping")
            continue

        sources.append(FeedSource(id=page['id'], name=name, url=url))

    return sources


def load_feeds(
    notion: NotionManager,
    reader: IcalFeedReader,
    settings_database_id: Optional[str]
) -> Dict[str, LoadedFeed]:
    """
    Fetch and parse every feed configured in the settings database.

    Args:
        notion: Notion manager
        reader: Feed reader used to fetch and parse each URL
        settings_database_id: Settings database id

    Returns:
        Fresh mapping of settings entry id to LoadedFeed

    Raises:
        ConfigurationError: If the settings database id is not configured
    """
    database_id = require(settings_database_id, 'NOTION_SETTINGS_ID')

    feeds = {}
    for source in read_feed_sources(notion, database_id):
        logger.info(f"Loading calendar '{source.name}' from {source.url}")
        events = reader.fetch_events(source.url)
        feeds[source.id] = LoadedFeed(name=source.name, events=events)

    logger.info(f"Loaded {len(feeds)} calendars")
    return feeds
