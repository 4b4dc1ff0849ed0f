# --- Standard library imports ---
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from datetime import datetime, timezone


class TimeService:
    """
    Timezone-aware wall clock.

    - TZ loaded once during initialization (UTC on unknown zones)
    - Provides:
        * now()
        * format_local()
        * to_iso() / parse_iso()
    """

    def __init__(self, tz_name: str | None = None):
        tz_name = tz_name or os.getenv("TZ", "UTC")
        try:
            self.tz = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            self.tz = ZoneInfo("UTC")

    # -------------------------
    # Wall clock utilities
    # -------------------------

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def format_local(self, dt: datetime) -> str:
        """Format a datetime as 'MM/DD/YY @ HH:MM:SS TZ' in the local zone."""
        return dt.astimezone(self.tz).strftime("%m/%d/%y @ %H:%M:%S %Z")

    # -------------------------------
    # ISO8601 conversion utilities
    # -------------------------------

    @staticmethod
    def to_iso(dt: datetime) -> str:
        """Serialize as UTC ISO8601 with a trailing 'Z'."""
        return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

    @staticmethod
    def parse_iso(iso_str: str) -> datetime:
        """
        Parse an ISO8601 timestamp into an aware datetime.

        Accepts a trailing 'Z'; naive values are taken as UTC.
        Raises ValueError on malformed input.
        """
        dt = datetime.fromisoformat(iso_str.replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
