"""
Airport Time Resolution
=======================

Converts between UTC instants and airport-local "HH:MM" clock times.

Airport timezones come from the airportsdata package (IATA and ICAO
databases); conversions use pytz so DST is taken at the actual instant.
"""

import logging
from datetime import date, datetime, time
from typing import Dict, Optional

import airportsdata
import pytz

from models.data_models import AcclimatisationState, DutyInputs

logger = logging.getLogger(__name__)

# Module-level load (cached)
_IATA_DB = airportsdata.load('IATA')
_ICAO_DB = airportsdata.load('ICAO')


def parse_hhmm(value: str) -> int:
    """Parse "HH:MM" (optionally suffixed with 'z') into minutes after midnight."""
    cleaned = value.strip().rstrip('zZ')
    hours, sep, minutes = cleaned.partition(':')
    if not sep or not hours.isdigit() or not minutes.isdigit():
        raise ValueError(f"Malformed time string '{value}', expected HH:MM")
    hour, minute = int(hours), int(minutes)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Time '{value}' out of range")
    return hour * 60 + minute


def format_hours_and_minutes(decimal_hours: float) -> str:
    """1.5 -> '1h 30m', 2.0 -> '2h', 0.25 -> '15m'"""
    total_minutes = int(round(decimal_hours * 60))
    hours, minutes = divmod(total_minutes, 60)
    if hours == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"


class AirportTimeResolver:
    """
    Airport code to timezone resolution backed by airportsdata.

    Accepts 3-letter IATA and 4-letter ICAO codes. Unknown codes resolve to
    the fallback timezone (UTC by default) with a warning.
    """

    # Runtime overrides (e.g. for private airfields not in airportsdata)
    _custom_timezones: Dict[str, str] = {}

    def __init__(self, fallback_timezone: str = "UTC"):
        self.fallback_timezone = fallback_timezone

    @classmethod
    def add_custom_airport(cls, code: str, timezone: str):
        """Add/override an airport timezone at runtime."""
        pytz.timezone(timezone)  # raises UnknownTimeZoneError for bad names
        cls._custom_timezones[code.upper()] = timezone
        logger.info(f"Added custom airport {code.upper()} ({timezone})")

    def timezone_name(self, airport_code: str) -> str:
        code = airport_code.strip().upper()

        if code in self._custom_timezones:
            return self._custom_timezones[code]

        entry = _IATA_DB.get(code) if len(code) == 3 else _ICAO_DB.get(code)
        if entry:
            return entry['tz']

        logger.warning(
            f"Airport '{code}' not found in airportsdata. Using {self.fallback_timezone}."
        )
        return self.fallback_timezone

    def airport_record(self, airport_code: str) -> Optional[dict]:
        """Raw airportsdata entry (name, city, country, tz, lat, lon), None if unknown"""
        code = airport_code.strip().upper()
        return _IATA_DB.get(code) if len(code) == 3 else _ICAO_DB.get(code)

    def timezone(self, airport_code: str):
        return pytz.timezone(self.timezone_name(airport_code))

    def is_known(self, airport_code: str) -> bool:
        code = airport_code.strip().upper()
        return (
            code in self._custom_timezones
            or code in _IATA_DB
            or code in _ICAO_DB
        )

    def to_local(self, utc_instant: datetime, airport_code: str) -> datetime:
        return ensure_utc(utc_instant).astimezone(self.timezone(airport_code))

    def local_time(self, utc_instant: datetime, airport_code: str) -> str:
        """UTC instant -> local "HH:MM" at the airport"""
        return self.to_local(utc_instant, airport_code).strftime('%H:%M')

    def utc_offset_hours(self, airport_code: str, at: Optional[datetime] = None) -> float:
        at = at or datetime.now(pytz.utc)
        return self.to_local(at, airport_code).utcoffset().total_seconds() / 3600

    def local_to_utc(self, local_date: date, local_hhmm: str, airport_code: str) -> datetime:
        """Local wall-clock time on a date at the airport -> aware UTC instant"""
        minutes = parse_hhmm(local_hhmm)
        naive = datetime.combine(local_date, time(minutes // 60, minutes % 60))
        local = self.timezone(airport_code).localize(naive)
        return local.astimezone(pytz.utc)

    def utc_time(self, local_hhmm: str, airport_code: str, on_date: Optional[date] = None) -> str:
        """Local "HH:MM" at the airport -> UTC "HH:MM" (inverse of local_time)"""
        on_date = on_date or datetime.now(pytz.utc).date()
        return self.local_to_utc(on_date, local_hhmm, airport_code).strftime('%H:%M')

    def acclimatised_location(self, inputs: DutyInputs, state: AcclimatisationState) -> str:
        """
        Airport whose local time drives the FDP tables and the WOCL.

        B -> home base, D -> departure, X -> departure (Table 3 itself has
        no time dependency).
        """
        if state is AcclimatisationState.HOME_BASE:
            return inputs.home_base
        return inputs.departure


def ensure_utc(instant: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if instant.tzinfo is None:
        return pytz.utc.localize(instant)
    return instant.astimezone(pytz.utc)


def hours_between(start: datetime, end: datetime) -> float:
    return (ensure_utc(end) - ensure_utc(start)).total_seconds() / 3600
