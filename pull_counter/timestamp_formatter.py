"""Parse network log timestamps and format them for converted log lines."""
import re
from datetime import datetime
from typing import Optional
import pytz

from .logger import get_logger

logger = get_logger(__name__)


class TimestampFormatter:
    """Formats network log timestamps with optional timezone conversion."""

    # 2021-04-26T14:11:35.1234567-04:00
    TIMESTAMP_PATTERN = re.compile(
        r'^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})?$'
    )

    def __init__(self, user_timezone: Optional[str] = None):
        """
        Initialize the timestamp formatter.

        Args:
            user_timezone: IANA timezone (e.g. 'US/Central', 'Europe/London').
                          If None or empty, timestamps keep the offset they were logged with.
        """
        self.user_tz = None
        if user_timezone and user_timezone.strip():
            self.set_timezone(user_timezone)

    def set_timezone(self, timezone: str) -> None:
        """Set the display timezone. Pass empty string to keep logged offsets."""
        if not timezone or not timezone.strip():
            self.user_tz = None
            logger.info("Timezone set to log offset")
            return
        try:
            self.user_tz = pytz.timezone(timezone.strip())
            logger.info(f"Timezone set to: {timezone}")
        except pytz.exceptions.UnknownTimeZoneError as e:
            logger.error(f"Unknown timezone '{timezone}': {e}")

    def parse_log_timestamp(self, timestamp_str: str) -> Optional[datetime]:
        """
        Parse a timestamp from a network log record.

        Format: "2021-04-26T14:11:35.1234567-04:00" (up to 7 fractional digits).
        Timestamps without an offset are taken as UTC.

        Returns:
            Timezone-aware datetime, or None if parsing fails
        """
        match = self.TIMESTAMP_PATTERN.match(timestamp_str.strip())
        if not match:
            logger.debug(f"Failed to parse timestamp '{timestamp_str}'")
            return None

        base, fraction, offset = match.groups()
        try:
            dt = datetime.strptime(base, "%Y-%m-%dT%H:%M:%S")
        except ValueError as e:
            logger.debug(f"Failed to parse timestamp '{timestamp_str}': {e}")
            return None
        if fraction:
            # datetime keeps microseconds; the log writes 100ns ticks
            dt = dt.replace(microsecond=int(fraction[:6].ljust(6, '0')))

        if not offset or offset == 'Z':
            return pytz.utc.localize(dt)
        sign = -1 if offset[0] == '-' else 1
        minutes = sign * (int(offset[1:3]) * 60 + int(offset[4:6]))
        return pytz.FixedOffset(minutes).localize(dt)

    def format_line_time(self, timestamp_str: str) -> str:
        """
        Format a log timestamp as the HH:MM:SS.fff prefix of converted lines.

        Returns the original string if it cannot be parsed.
        """
        dt = self.parse_log_timestamp(timestamp_str)
        if not dt:
            return timestamp_str
        if self.user_tz:
            dt = dt.astimezone(self.user_tz)
        return dt.strftime("%H:%M:%S.") + f"{dt.microsecond // 1000:03d}"
