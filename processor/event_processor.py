"""Event processor for building Notion pages from calendar events."""
import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Union

from processor.description_transformer import MAX_TEXT_LENGTH, transform_description
from processor.models import CalendarEvent

logger = logging.getLogger(__name__)


class EventProcessor:
    """Processor mapping calendar events to Notion page content."""

    def build_properties(self, event: CalendarEvent, calendar_name: str) -> Dict:
        """
        Build the Notion property set for an event.

        The URL property is only present when the event has a URL.

        Args:
            event: Parsed calendar event
            calendar_name: Display name of the feed, used as the select value

        Returns:
            Notion properties dictionary
        """
        properties = {
            'Event': {
                'title': [
                    {
                        'type': 'text',
                        'text': {'content': event.summary[:MAX_TEXT_LENGTH]}
                    }
                ]
            },
            'Calendar': {
                'type': 'select',
                'select': {'name': calendar_name}
            },
            'Date': {
                'type': 'date',
                'date': self.build_date(event)
            },
            'ID': {
                'rich_text': [
                    {
                        'type': 'text',
                        'text': {'content': event.uid}
                    }
                ]
            }
        }

        if event.url:
            properties['URL'] = {
                'type': 'url',
                'url': event.url
            }

        return properties

    def build_children(self, event: CalendarEvent) -> List[Dict]:
        """
        Build the page body from the event description.

        Args:
            event: Parsed calendar event

        Returns:
            List of Notion blocks, empty when there is no description
        """
        return transform_description(event.description)

    def build_date(self, event: CalendarEvent) -> Dict:
        """
        Build the Notion date range for an event.

        With a named time zone the timestamps are sent as local wall-clock
        times and Notion applies the zone. Without one they keep their UTC
        offset. All-day events are sent as plain dates.

        Args:
            event: Parsed calendar event

        Returns:
            Dictionary with start, end and time_zone keys
        """
        start = event.start
        end = event.end
        time_zone = event.timezone if isinstance(start, datetime) else None

        if (
            isinstance(start, datetime) and isinstance(end, datetime)
            and start.tzinfo and end.tzinfo
        ):
            end = end.astimezone(start.tzinfo)

        return {
            'start': self._format_timestamp(start, local=bool(time_zone)),
            'end': self._format_timestamp(end, local=bool(time_zone)),
            'time_zone': time_zone
        }

    def _format_timestamp(
        self,
        value: Optional[Union[datetime, date]],
        local: bool
    ) -> Optional[str]:
        """
        Format a date or datetime as ISO 8601.

        Args:
            value: Date, datetime or None
            local: Drop the UTC offset of aware datetimes

        Returns:
            ISO 8601 string or None
        """
        if value is None:
            return None
        if isinstance(value, datetime) and local and value.tzinfo:
            value = value.replace(tzinfo=None)
        return value.isoformat()
