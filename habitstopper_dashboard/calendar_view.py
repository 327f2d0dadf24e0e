from __future__ import annotations

import calendar as _calendar
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

STATUS_NONE = "none"
STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]
WEEKDAY_HEADERS = ["S", "M", "T", "W", "T", "F", "S"]


@dataclass(frozen=True)
class CalendarCell:
    day: int
    weekday: int
    status: str
    is_today: bool
    date_key: str


def _check_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")


def date_key(year: int, month: int, day: int) -> str:
    return f"{year:04d}-{month:02d}-{day:02d}"


def days_in_month(year: int, month: int) -> int:
    _check_month(month)
    return _calendar.monthrange(year, month)[1]


def first_weekday(year: int, month: int) -> int:
    """Column of the 1st of the month, 0 = Sunday .. 6 = Saturday."""
    _check_month(month)
    # monthrange counts weekdays from Monday.
    return (_calendar.monthrange(year, month)[0] + 1) % 7


def month_title(year: int, month: int) -> str:
    _check_month(month)
    return f"{MONTH_NAMES[month - 1]} {year}"


def _status_by_date(logs) -> dict:
    index = {}
    for log in logs or []:
        if isinstance(log, dict):
            key, status = log.get("date"), log.get("status")
        else:
            key, status = getattr(log, "date", None), getattr(log, "status", None)
        if key:
            index[key] = status
    return index


def classify(status) -> str:
    if status == STATUS_SUCCESS:
        return STATUS_SUCCESS
    if status == STATUS_FAILED:
        return STATUS_FAILED
    return STATUS_NONE


def materialize(year: int, month: int, logs: Iterable = (), today: Optional[date] = None) -> list[Optional[CalendarCell]]:
    """Lay out one month as ``None`` placeholders followed by a cell per day.

    ``month`` is 1-based. Logs are matched to days by exact ``YYYY-MM-DD``
    string equality. ``today`` defaults to the local current date.
    """
    total_days = days_in_month(year, month)
    leading = first_weekday(year, month)
    statuses = _status_by_date(logs)
    today = today or date.today()

    cells: list[Optional[CalendarCell]] = [None] * leading
    for day in range(1, total_days + 1):
        key = date_key(year, month, day)
        cells.append(
            CalendarCell(
                day=day,
                weekday=(leading + day - 1) % 7,
                status=classify(statuses.get(key)),
                is_today=(today.year, today.month, today.day) == (year, month, day),
                date_key=key,
            )
        )
    return cells


def weeks(cells: list) -> list[list]:
    rows = []
    for start in range(0, len(cells), 7):
        row = list(cells[start : start + 7])
        row.extend([None] * (7 - len(row)))
        rows.append(row)
    return rows


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    _check_month(month)
    year_offset, month_index = divmod(month - 1 + int(delta), 12)
    return year + year_offset, month_index + 1