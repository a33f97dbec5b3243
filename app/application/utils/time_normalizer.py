from __future__ import annotations

import logging
import re
from datetime import date, datetime, tzinfo

logger = logging.getLogger(__name__)

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

TIME_PATTERNS = [
    re.compile(r"^(\d{1,2})[:.](\d{2})(?::(\d{2}))?\s*(am|pm)?$"),
    re.compile(r"^(\d{1,2})()()\s*(am|pm)$"),
]

# Formats spreadsheets tend to render date cells in.
SHEET_DATE_FORMATS = ("%m/%d/%Y", "%Y/%m/%d", "%d.%m.%Y", "%B %d, %Y", "%b %d, %Y")


def normalize_date(value: str | date | None, timezone: tzinfo | None = None) -> str:
    """
    Canonicalize a date-ish value into a YYYY-MM-DD calendar day.

    Zone-aware inputs are converted to `timezone` (the process local zone when
    None) before the day is read, so an ISO instant that crosses midnight in UTC
    still lands on the caller's calendar day. Never raises: unparseable input
    degrades to slicing on "T" or " ", then to the original string.
    """
    if isinstance(value, datetime):
        return _local_day(value, timezone)
    if isinstance(value, date):
        return value.isoformat()
    if value is None:
        return ""

    text = str(value).strip()
    if ISO_DATE_RE.match(text):
        try:
            date.fromisoformat(text)
            return text
        except ValueError:
            pass

    try:
        return _local_day(datetime.fromisoformat(text.replace("Z", "+00:00")), timezone)
    except ValueError:
        pass

    for fmt in SHEET_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue

    logger.warning("Unparseable date, falling back to string slicing", extra={"date": text})
    if "T" in text:
        return text.split("T")[0]
    if " " in text:
        return text.split(" ")[0]
    return text


def normalize_time(value: str | None) -> str:
    """Canonicalize a time string into zero-padded 24-hour HH:MM. Never raises."""
    if value is None:
        return ""
    text = str(value).strip()
    normalized = text.lower()

    for pattern in TIME_PATTERNS:
        match = pattern.match(normalized)
        if not match:
            continue
        hour = int(match.group(1))
        minute = int(match.group(2)) if match.group(2) else 0
        am_pm = match.group(4)

        if am_pm:
            if not 1 <= hour <= 12:
                break
            if am_pm == "am" and hour == 12:
                hour = 0
            elif am_pm == "pm" and hour < 12:
                hour += 12

        if 0 <= hour <= 23 and 0 <= minute <= 59:
            return f"{hour:02d}:{minute:02d}"
        break

    logger.warning("Unparseable time left unchanged", extra={"time": text})
    return text


def _local_day(moment: datetime, timezone: tzinfo | None) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone)
    return moment.date().isoformat()
