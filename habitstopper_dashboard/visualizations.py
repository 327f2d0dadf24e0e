from __future__ import annotations

import html

from habitstopper_dashboard.calendar_view import WEEKDAY_HEADERS, weeks
from habitstopper_dashboard.constants import STATUS_CLASSES


def build_day_html(cell) -> str:
    if cell is None:
        return "<td></td>"
    classes = ["hs-day", STATUS_CLASSES.get(cell.status, STATUS_CLASSES["none"])]
    if cell.is_today:
        classes.append("hs-day-today")
    return (
        f"<td><span class='{' '.join(classes)}' title='{html.escape(cell.date_key)} • {cell.status}'>"
        f"{cell.day}</span></td>"
    )


def build_month_calendar_html(cells) -> str:
    header_cells = "".join(f"<th>{label}</th>" for label in WEEKDAY_HEADERS)
    body_rows = "".join(
        "<tr>" + "".join(build_day_html(cell) for cell in row) + "</tr>" for row in weeks(cells)
    )
    return (
        "<div class='hs-calendar'>"
        "<table>"
        f"<thead><tr>{header_cells}</tr></thead>"
        f"<tbody>{body_rows}</tbody>"
        "</table>"
        "</div>"
    )
