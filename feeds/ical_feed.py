"""iCalendar feed reader: HTTP fetch and VEVENT parsing."""
import logging
import time
from typing import List, Optional

import requests
from icalendar import Calendar

from processor.models import CalendarEvent

logger = logging.getLogger(__name__)


class IcalFeedReader:
    """Reader for remotely hosted iCalendar feeds."""
    
    USER_AGENT = "notion-calendar-sync/1.0"
    
    def __init__(self, timeout: int = 30, max_retries: int = 3, base_delay: float = 1):
        """
        Initialize the feed reader.
        
        Args:
            timeout: HTTP request timeout in seconds (default: 30)
            max_retries: Number of fetch attempts before giving up (default: 3),
                at least one
            base_delay: Initial backoff delay in seconds (default: 1)
        """
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.base_delay = base_delay
    
    def fetch_events(self, url: str) -> List[CalendarEvent]:
        """
        Fetch a feed and parse its events.
        
        Args:
            url: Feed URL (http, https or webcal)
            
        Returns:
            List of CalendarEvent objects in feed order
            
        Raises:
            requests.RequestException: If all fetch attempts fail
            ValueError: If the content is not valid iCalendar data
        """
        ical_text = self.fetch_text(url)
        events = self.parse_events(ical_text)
        logger.info(f"Parsed {len(events)} events from {url}")
        return events
    
    def fetch_text(self, url: str) -> str:
        """
        Fetch raw calendar text with retry logic.
        
        Args:
            url: Feed URL
            
        Returns:
            Calendar text
            
        Raises:
            requests.RequestException: If all retry attempts fail
        """
        if url.startswith('webcal://'):
            url = 'https://' + url[len('webcal://'):]
        
        for attempt in range(self.max_retries):
            try:
                logger.info(f"Fetching feed {url} (attempt {attempt + 1}/{self.max_retries})")
                response = requests.get(
                    url,
                    headers={'User-Agent': self.USER_AGENT},
                    timeout=self.timeout
                )
                response.raise_for_status()
                # iCalendar text is UTF-8 unless the server declares a charset
                if 'charset' not in response.headers.get('Content-Type', '').lower():
                    response.encoding = 'utf-8'
                return response.text
                
            except requests.RequestException as e:
                if attempt < self.max_retries - 1:
                    delay = self.base_delay * (2 ** attempt)
                    logger.warning(
                        f"Request failed (attempt {attempt + 1}/{self.max_retries}): {e}. "
                        f"Retrying in {delay} seconds..."
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"All {self.max_retries} retry attempts failed. Last error: {e}"
                    )
                    raise
    
    def parse_events(self, ical_text: str) -> List[CalendarEvent]:
        """
        Parse VEVENT components from calendar text.
        
        Args:
            ical_text: Raw iCalendar document
            
        Returns:
            List of CalendarEvent objects in document order
            
        Raises:
            ValueError: If the text is not a valid iCalendar document
        """
        calendar = Calendar.from_ical(ical_text)
        events = []
        
        for component in calendar.walk('VEVENT'):
            event = self._parse_event_component(component)
            if event:
                events.append(event)
        
        return events
    
    def _parse_event_component(self, component) -> Optional[CalendarEvent]:
        """
        Parse a single VEVENT component.
        
        Args:
            component: icalendar Event component
            
        Returns:
            CalendarEvent object or None if the event has no UID or start
        """
        uid = component.get('UID')
        if not uid:
            logger.warning(
                f"Skipping event with no identifier: {component.get('SUMMARY', 'unknown')}"
            )
            return None
        
        dtstart = component.get('DTSTART')
        if dtstart is None:
            logger.warning(f"Skipping event {uid} with no start date")
            return None
        
        dtend = component.get('DTEND')
        description = component.get('DESCRIPTION')
        url = component.get('URL')
        
        return CalendarEvent(
            uid=str(uid),
            summary=str(component.get('SUMMARY', '')),
            description=str(description) if description is not None else None,
            start=dtstart.dt,
            end=dtend.dt if dtend is not None else None,
            timezone=self._timezone_name(dtstart),
            url=str(url) if url else None
        )
    
    def _timezone_name(self, dtstart) -> Optional[str]:
        """
        Resolve the time zone name of a start date.
        
        Args:
            dtstart: DTSTART property of the event
            
        Returns:
            IANA zone name when the value carries a TZID, otherwise None
        """
        tzid = dtstart.params.get('TZID')
        if not tzid:
            return None
        
        # Windows zone names are mapped to IANA zones by icalendar
        tzinfo = getattr(dtstart.dt, 'tzinfo', None)
        return getattr(tzinfo, 'key', None) or getattr(tzinfo, 'zone', None) or str(tzid)
