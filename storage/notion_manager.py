"""Notion manager for settings and calendar database operations."""
import logging
from typing import Dict, List, Optional

from notion_client import Client

logger = logging.getLogger(__name__)


class NotionManager:
    """Manager for Notion API operations."""

    BATCH_SIZE = 100  # Notion limit for children per request

    def __init__(self, auth: Optional[str] = None, client: Optional[Client] = None):
        """
        Initialize the Notion client.

        Args:
            auth: Notion integration token
            client: Pre-built client, used instead of creating one
        """
        self.client = client or Client(auth=auth)

    def query_all_pages(self, database_id: str) -> List[Dict]:
        """
        Retrieve every page of a database.

        Args:
            database_id: Notion database id

        Returns:
            List of page objects
        """
        logger.info(f"Querying database {database_id} for all pages")

        response = self.client.databases.query(database_id=database_id)
        pages = response.get('results', [])

        # Handle pagination
        while response.get('has_more'):
            response = self.client.databases.query(
                database_id=database_id,
                start_cursor=response['next_cursor']
            )
            pages.extend(response.get('results', []))

        logger.info(f"Retrieved {len(pages)} pages from database {database_id}")
        return pages

    def get_title(self, page_id: str, property_id: str) -> str:
        """
        Retrieve the plain text of a title property.

        Args:
            page_id: Page id
            property_id: Id of the title property

        Returns:
            Concatenated plain text of the title
        """
        item = self.client.pages.properties.retrieve(
            page_id=page_id,
            property_id=property_id
        )
        return ''.join(
            result['title']['plain_text'] for result in item.get('results', [])
        )

    def get_url(self, page_id: str, property_id: str) -> Optional[str]:
        """
        Retrieve the value of a URL property.

        Args:
            page_id: Page id
            property_id: Id of the URL property

        Returns:
            URL string or None when unset
        """
        item = self.client.pages.properties.retrieve(
            page_id=page_id,
            property_id=property_id
        )
        return item.get('url')

    def event_exists(self, database_id: str, event_id: str) -> bool:
        """
        Check whether a page with the given ID property exists.

        Args:
            database_id: Calendar database id
            event_id: Dedup key of the event

        Returns:
            True if at least one page matches
        """
        response = self.client.databases.query(
            database_id=database_id,
            filter={
                'property': 'ID',
                'rich_text': {'equals': event_id}
            }
        )
        return len(response.get('results', [])) > 0

    def create_event_page(
        self,
        database_id: str,
        properties: Dict,
        children: List[Dict]
    ) -> Dict:
        """
        Create a page in the calendar database.

        Children beyond the per-request limit are appended in batches.

        Args:
            database_id: Calendar database id
            properties: Notion properties of the page
            children: Body blocks of the page

        Returns:
            Created page object
        """
        page = self.client.pages.create(
            parent={
                'type': 'database_id',
                'database_id': database_id
            },
            properties=properties,
            children=children[:self.BATCH_SIZE]
        )

        for i in range(self.BATCH_SIZE, len(children), self.BATCH_SIZE):
            self.client.blocks.children.append(
                block_id=page['id'],
                children=children[i:i + self.BATCH_SIZE]
            )

        return page
