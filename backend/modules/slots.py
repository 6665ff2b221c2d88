"""
Annadanam session labels, time bands and completion marking.

Bookings carry a session label such as "1:00 PM - 1:30 PM". The admin
list groups the fixed half-hour labels into two bands and strikes
through bookings whose session has already ended.
"""
import logging
import re
from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from backend.config import settings

logger = logging.getLogger(__name__)

AFTERNOON_SESSIONS: Tuple[str, ...] = (
    "1:00 PM - 1:30 PM",
    "1:30 PM - 2:00 PM",
    "2:00 PM - 2:30 PM",
    "2:30 PM - 3:00 PM",
)

EVENING_SESSIONS: Tuple[str, ...] = (
    "8:00 PM - 8:30 PM",
    "8:30 PM - 9:00 PM",
    "9:00 PM - 9:30 PM",
    "9:30 PM - 10:00 PM",
)

ALL_SESSIONS: Tuple[str, ...] = AFTERNOON_SESSIONS + EVENING_SESSIONS

# Filter option -> (band name, labels)
BAND_AFTERNOON = "1pm-3pm"
BAND_EVENING = "8pm-10pm"
SESSION_BANDS: Dict[str, Tuple[str, frozenset]] = {
    BAND_AFTERNOON: ("Afternoon", frozenset(AFTERNOON_SESSIONS)),
    BAND_EVENING: ("Evening", frozenset(EVENING_SESSIONS)),
}

ALL_TIMINGS = "all"

# Options in the order the admin filter shows them
SESSION_FILTER_OPTIONS: List[Tuple[str, str]] = [
    (ALL_TIMINGS, "All Timings"),
    (BAND_AFTERNOON, "1:00 PM to 3:00 PM"),
    (BAND_EVENING, "8:00 PM to 10:00 PM"),
] + [(label, label) for label in ALL_SESSIONS]

_END_TIME_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})\s*(AM|PM)$', re.IGNORECASE)


def resolve_session_filter(option: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """Split a filter option into the RPC ``sess`` argument and a band.

    Grouped bands fetch every session and filter locally, so they send
    ``sess=None`` just like "all".

    Returns:
        (sess, band) where at most one is not None
    """
    if not option or option == ALL_TIMINGS:
        return None, None
    if option in SESSION_BANDS:
        return None, option
    return option, None


def filter_rows_by_band(rows: Iterable[Dict[str, Any]], band: Optional[str]) -> List[Dict[str, Any]]:
    """Keep only rows whose session label belongs to the band."""
    rows = list(rows)
    if band is None:
        return rows
    _, labels = SESSION_BANDS[band]
    return [row for row in rows if str(row.get("session") or "") in labels]


def band_for_session(label: Optional[str]) -> Optional[str]:
    """Name of the band a session label falls in ("Afternoon"/"Evening")."""
    for name, labels in SESSION_BANDS.values():
        if label in labels:
            return name
    return None


def parse_session_end(session: Optional[str]) -> Optional[time]:
    """End time of a "H:MM AM - H:MM PM" label, or None."""
    if not session:
        return None
    parts = session.split("-")
    end_part = parts[1].strip() if len(parts) > 1 else ""
    match = _END_TIME_PATTERN.match(end_part)
    if not match:
        return None
    hour = int(match.group(1)) % 12
    if match.group(3).upper() == "PM":
        hour += 12
    minute = int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return time(hour, minute)


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def local_now() -> datetime:
    """Current wall-clock time in the organisation's timezone (naive)."""
    return datetime.now(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)


def has_completed(booking_date: Any, session: Optional[str], now: Optional[datetime] = None) -> bool:
    """Whether a booking's session has already ended.

    The booking is complete once ``now`` reaches the session's end time on
    the booking date. Labels without a readable end time fall back to
    comparing dates only.
    """
    if not booking_date or not session:
        return False
    day = _parse_date(booking_date)
    if day is None:
        return False
    now = now or local_now()

    end = parse_session_end(session)
    if end is None:
        return day < now.date()
    return now >= datetime.combine(day, end)


def annotate_bookings(rows: Iterable[Dict[str, Any]], now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Copy rows adding ``completed`` and ``band``."""
    now = now or local_now()
    annotated = []
    for row in rows:
        item = dict(row)
        item["completed"] = has_completed(row.get("date"), row.get("session"), now=now)
        item["band"] = band_for_session(row.get("session"))
        annotated.append(item)
    return annotated
