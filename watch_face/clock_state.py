"""Wall-clock time, time zone binding and hand angles."""

import datetime
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_ZONE = "UTC"


@dataclass(frozen=True)
class ClockSnapshot:
    """Time of day bound to a zone, as drawn on one frame."""

    hour: int  # 0-23
    minute: int  # 0-59
    second: int  # 0-59
    zone_id: str

    @property
    def minute_angle(self) -> float:
        return minute_angle(self.minute)

    @property
    def hour_angle(self) -> float:
        return hour_angle(self.hour, self.minute)


def minute_angle(minute: int) -> float:
    """
    Clockwise angle of the minute hand from 12 o'clock.

    Args:
        minute: Minute of the hour, 0-59

    Returns:
        Degrees in [0, 354]
    """
    if not 0 <= minute <= 59:
        raise ValueError(f"Invalid minute {minute}: must be 0-59")
    return minute * 6.0


def hour_angle(hour: int, minute: int) -> float:
    """
    Clockwise angle of the hour hand from 12 o'clock.

    The hand creeps through the minute fraction rather than jumping on the
    hour. 12-hour dial, so 0:00 and 12:00 both give 0.

    Args:
        hour: Hour of the day, 0-23
        minute: Minute of the hour, 0-59

    Returns:
        Degrees in [0, 360)
    """
    if not 0 <= hour <= 23:
        raise ValueError(f"Invalid hour {hour}: must be 0-23")
    if not 0 <= minute <= 59:
        raise ValueError(f"Invalid minute {minute}: must be 0-59")
    return (hour % 12 + minute / 60) * 30.0


def system_zone_id(default: str = DEFAULT_ZONE) -> str:
    """
    Return the IANA identifier of the host's local time zone.

    Checks the TZ environment variable, then /etc/timezone, then the target
    of the /etc/localtime symlink.
    """
    tz_env = os.environ.get("TZ", "").lstrip(":")
    if tz_env:
        return tz_env

    try:
        zone = Path("/etc/timezone").read_text().strip()
        if zone:
            return zone
    except OSError:
        pass

    try:
        target = os.readlink("/etc/localtime")
    except OSError:
        return default
    marker = "zoneinfo/"
    if marker in target:
        return target.split(marker, 1)[1]
    return default


class ClockState:
    """
    Reads the system clock and binds it to the current time zone.

    The time source returns epoch seconds and can be replaced in tests.
    """

    def __init__(
        self,
        zone_id: str = DEFAULT_ZONE,
        time_source: Callable[[], float] = time.time,
    ):
        self._time_source = time_source
        self._zone_id = DEFAULT_ZONE
        self._zone = ZoneInfo(DEFAULT_ZONE)
        self._snapshot: Optional[ClockSnapshot] = None
        self._bind(zone_id)

    @property
    def zone_id(self) -> str:
        return self._zone_id

    @property
    def snapshot(self) -> Optional[ClockSnapshot]:
        """Last snapshot taken, or None after a zone change."""
        return self._snapshot

    def _bind(self, zone_id: str) -> bool:
        if zone_id == self._zone_id:
            return True
        try:
            zone = ZoneInfo(zone_id)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown time zone '{zone_id}', keeping {self._zone_id}")
            return False
        self._zone_id = zone_id
        self._zone = zone
        return True

    def refresh(self, zone_id: Optional[str] = None) -> ClockSnapshot:
        """
        Read the current time.

        Args:
            zone_id: Zone to bind to first; defaults to the current zone

        Returns:
            New snapshot, also cached as ``snapshot``
        """
        if zone_id is not None:
            self._bind(zone_id)

        now = datetime.datetime.fromtimestamp(self._time_source(), self._zone)
        self._snapshot = ClockSnapshot(
            hour=now.hour,
            minute=now.minute,
            second=now.second,
            zone_id=self._zone_id,
        )
        return self._snapshot

    def handle_zone_changed(self, zone_id: str) -> None:
        """Drop the cached snapshot and rebind to ``zone_id`` on the next refresh."""
        if zone_id != self._zone_id:
            logger.info(f"Time zone changed to {zone_id}")
        self._snapshot = None
        self._bind(zone_id)
