"""Data models for calendar synchronization."""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Union


@dataclass
class FeedSource:
    """Calendar feed entry from the settings database."""
    id: str
    name: str
    url: str


@dataclass(frozen=True)
class CalendarEvent:
    """Event parsed from an iCalendar feed."""
    uid: str
    summary: str
    description: Optional[str]
    start: Union[datetime, date]
    end: Optional[Union[datetime, date]]
    timezone: Optional[str]
    url: Optional[str]


@dataclass
class LoadedFeed:
    """Parsed calendar held in memory for the duration of a cycle."""
    name: str
    events: List[CalendarEvent] = field(default_factory=list)


@dataclass
class SyncResult:
    """Result of sync operation."""
    created: int
    skipped: int


@dataclass
class Status:
    """Liveness status of the sync process."""
    code: int = 200
    message: str = 'OK'
