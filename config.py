"""Environment configuration for the calendar sync service."""
import os
from dataclasses import dataclass
from typing import Optional


class ConfigurationError(Exception):
    """Raised when a required setting is missing."""


@dataclass
class Settings:
    """Runtime settings read from environment variables."""
    notion_key: Optional[str]
    calendar_database_id: Optional[str]
    settings_database_id: Optional[str]
    log_level: str = 'INFO'
    sync_interval_minutes: int = 5
    timeout_seconds: int = 30
    fetch_max_retries: int = 3

    @classmethod
    def from_env(cls) -> 'Settings':
        """
        Build settings from the process environment.

        Database ids are not validated here; the operation that needs one
        raises ConfigurationError when it is missing.
        """
        return cls(
            notion_key=os.environ.get('NOTION_KEY'),
            calendar_database_id=os.environ.get('NOTION_CALENDAR_ID') or None,
            settings_database_id=os.environ.get('NOTION_SETTINGS_ID') or None,
            log_level=os.environ.get('LOG_LEVEL', 'INFO'),
            sync_interval_minutes=int(os.environ.get('SYNC_INTERVAL_MINUTES', '5')),
            timeout_seconds=int(os.environ.get('TIMEOUT_SECONDS', '30')),
            fetch_max_retries=int(os.environ.get('FETCH_MAX_RETRIES', '3'))
        )


def require(value: Optional[str], variable: str) -> str:
    """
    Return value or raise ConfigurationError naming the missing variable.

    Args:
        value: Configured value, possibly None
        variable: Environment variable the value comes from

    Returns:
        The value itself
    """
    if not value:
        raise ConfigurationError(
            f"{variable} is not defined in the environment variables"
        )
    return value
