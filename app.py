"""Entry points for the Notion calendar sync: scheduler, Lambda and status."""
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict

import schedule
from dotenv import load_dotenv

from config import Settings
from feeds.ical_feed import IcalFeedReader
from processor.event_processor import EventProcessor
from processor.models import Status, SyncResult
from storage.notion_manager import NotionManager
from sync.orchestrator import sync_feeds
from sync.settings_loader import load_feeds

logger = logging.getLogger(__name__)

# Status info to be displayed by the HTTP layer
status = Status()


class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def run_cycle(settings: Settings) -> SyncResult:
    """
    Reload the configured calendars and synchronize them into Notion.

    The status is set to Synchronizing at the start and Synchronized on
    success. A failure propagates and leaves the status at Synchronizing.

    Args:
        settings: Runtime settings

    Returns:
        SyncResult of the synchronization pass
    """
    status.message = f"[{_timestamp()}] Synchronizing"

    notion = NotionManager(auth=settings.notion_key)
    reader = IcalFeedReader(
        timeout=settings.timeout_seconds,
        max_retries=settings.fetch_max_retries
    )
    processor = EventProcessor()

    logger.info("Pulling latest calendars")
    feeds = load_feeds(notion, reader, settings.settings_database_id)

    logger.info("Synchronizing calendars with Notion")
    result = sync_feeds(feeds, notion, processor, settings.calendar_database_id)

    logger.info("Cycle finished")
    status.message = f"[{_timestamp()}] Synchronized"
    return result


def scheduled_cycle(settings: Settings) -> None:
    """Run one cycle from the scheduler, logging failures so the next tick still runs."""
    try:
        run_cycle(settings)
    except Exception as e:
        logger.error(
            f"Sync cycle failed: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )


def main() -> None:
    """Run the sync cycle on a fixed interval until interrupted."""
    load_dotenv()
    settings = Settings.from_env()
    setup_logging(settings.log_level)

    schedule.every(settings.sync_interval_minutes).minutes.do(scheduled_cycle, settings)
    logger.info(f"Scheduler started - sync every {settings.sync_interval_minutes} minutes")

    scheduled_cycle(settings)
    while True:
        schedule.run_pending()
        time.sleep(1)


def status_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Report the current sync status.

    Args:
        event: HTTP request payload
        context: Lambda context object

    Returns:
        Response dict with statusCode and the status message
    """
    return {
        'statusCode': status.code,
        'body': json.dumps({
            'code': status.code,
            'message': status.message
        })
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Run a single sync cycle for a scheduled invocation.

    Args:
        event: EventBridge event payload
        context: Lambda context object

    Returns:
        Response dict with statusCode and summary statistics
    """
    settings = Settings.from_env()
    setup_logging(settings.log_level)

    start_time = time.time()
    logger.info("Lambda execution started")

    try:
        result = run_cycle(settings)
    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        return {
            'statusCode': 500,
            'body': json.dumps({
                'message': 'Sync failed',
                'error': str(e),
                'error_type': type(e).__name__,
                'duration_seconds': round(duration, 2)
            })
        }

    duration = time.time() - start_time
    logger.info(
        "Lambda execution completed successfully",
        extra={
            'duration_seconds': round(duration, 2),
            'events_created': result.created,
            'events_skipped': result.skipped
        }
    )

    return {
        'statusCode': 200,
        'body': json.dumps({
            'message': 'Sync completed successfully',
            'statistics': {
                'events_created': result.created,
                'events_skipped': result.skipped,
                'duration_seconds': round(duration, 2)
            }
        })
    }


if __name__ == '__main__':
    main()
