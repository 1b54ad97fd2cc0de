from __future__ import annotations

import re
from datetime import datetime

from macfleet.errors import ScheduleErrorKind, ScheduleFormatError

SCHEDULE_INPUT_FORMAT = "%Y-%m-%d %H:%M:%S"
SCHEDULE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}$")


def parse_schedule(text: str, now: datetime | None = None) -> datetime:
    """Parse ``YYYY-MM-DD HH:MM`` into a timestamp with zero seconds.

    When ``now`` is given the timestamp must lie after it.
    """
    value = text.strip()
    if not SCHEDULE_PATTERN.match(value):
        raise ScheduleFormatError(
            ScheduleErrorKind.MALFORMED,
            f"Invalid date format {text!r}. Please use YYYY-MM-DD HH:MM",
        )

    try:
        scheduled = datetime.strptime(f"{value}:00", SCHEDULE_INPUT_FORMAT)
    except ValueError as exc:
        raise ScheduleFormatError(
            ScheduleErrorKind.INVALID_CALENDAR_DATE,
            f"{value!r} is not a valid calendar date and time",
        ) from exc

    if now is not None and scheduled <= now:
        raise ScheduleFormatError(
            ScheduleErrorKind.NOT_IN_FUTURE,
            f"{value} is not in the future",
        )
    return scheduled
