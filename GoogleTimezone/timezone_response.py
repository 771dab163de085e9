"""Timezone domain model - derived fields over a raw Time Zone API payload."""
from datetime import datetime
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class TimezoneResponse:
    """
    Read-only view over a decoded Time Zone API payload.

    Expected payload shape (any field may be missing):
        {"status": "OK", "timeZoneId": "America/Los_Angeles",
         "timeZoneName": "Pacific Daylight Time",
         "rawOffset": -28800, "dstOffset": 3600}

    Accessors return None instead of raising when data is missing, so an
    invalid payload can still be wrapped and inspected.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data = dict(data or {})

    @property
    def raw_data(self) -> Dict[str, Any]:
        """Copy of the payload this response wraps."""
        return dict(self._data)

    def timezone_id(self) -> Optional[str]:
        """IANA timezone ID, e.g. "America/New_York"."""
        return self._data.get("timeZoneId")

    def timezone_name(self) -> Optional[str]:
        """Localized human-readable timezone name."""
        return self._data.get("timeZoneName")

    def raw_offset(self) -> Optional[int]:
        """Standard-time offset from UTC in seconds."""
        return self._data.get("rawOffset")

    def dst_offset(self) -> Optional[int]:
        """Daylight saving offset in seconds."""
        return self._data.get("dstOffset")

    def total_offset(self) -> Optional[int]:
        """Raw plus DST offset in seconds, or None if either is missing."""
        raw_offset = self.raw_offset()
        dst_offset = self.dst_offset()
        if raw_offset is None or dst_offset is None:
            return None
        return raw_offset + dst_offset

    def is_dst(self) -> bool:
        """Check if the location is observing daylight saving time."""
        return (self.dst_offset() or 0) > 0

    def formatted_offset(self, include_dst: bool = True) -> Optional[str]:
        """
        Format the UTC offset as "+HH:MM" / "-HH:MM".

        Args:
            include_dst: Use the total offset (True) or the raw offset (False)

        Returns:
            Formatted offset, e.g. "+05:30" or "-08:00", or None
        """
        offset = self.total_offset() if include_dst else self.raw_offset()
        if offset is None:
            return None

        absolute_offset = abs(int(offset))
        hours = absolute_offset // 3600
        minutes = (absolute_offset % 3600) // 60
        sign = "+" if offset >= 0 else "-"
        return f"{sign}{hours:02d}:{minutes:02d}"

    def local_datetime(self, timestamp: Optional[int] = None) -> Optional[datetime]:
        """
        Current time (or the given timestamp) in this response's timezone.

        Returns None when the timezone ID is missing or not a known zone,
        or when the timestamp is outside the platform's supported range.
        """
        timezone_id = self.timezone_id()
        if not timezone_id or not isinstance(timezone_id, str):
            return None

        try:
            tz = ZoneInfo(timezone_id)
        except (ZoneInfoNotFoundError, ValueError):
            return None

        if timestamp is None:
            return datetime.now(tz)
        try:
            return datetime.fromtimestamp(timestamp, tz)
        except (OverflowError, OSError, ValueError):
            return None

    def is_valid(self) -> bool:
        """True if the timezone ID and both offsets are present."""
        return all(
            self._data.get(field) is not None
            for field in ("timeZoneId", "rawOffset", "dstOffset")
        )

    def abbreviated_name(self) -> Optional[str]:
        """Zone abbreviation from tzdata, e.g. "PST" or "CEST"."""
        local = self.local_datetime()
        if local is None:
            return None
        return local.strftime("%Z")

    def to_dict(self, include_datetime: bool = False) -> Dict[str, Any]:
        """
        Serialize the derived fields.

        Args:
            include_datetime: Also add "current_time" and "current_date"
                when the timezone can be resolved
        """
        data = {
            "timezone_id": self.timezone_id(),
            "timezone_name": self.timezone_name(),
            "abbreviated_name": self.abbreviated_name(),
            "raw_offset": self.raw_offset(),
            "dst_offset": self.dst_offset(),
            "total_offset": self.total_offset(),
            "formatted_offset": self.formatted_offset(),
            "is_dst": self.is_dst(),
        }

        if include_datetime:
            local = self.local_datetime()
            if local is not None:
                data["current_time"] = local.strftime("%H:%M:%S")
                data["current_date"] = local.strftime("%Y-%m-%d")

        return data

    def __eq__(self, other) -> bool:
        if not isinstance(other, TimezoneResponse):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"TimezoneResponse(timezone_id={self.timezone_id()!r}, total_offset={self.total_offset()!r})"
