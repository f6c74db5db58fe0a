"""Calendar date-range selection and filtering.

Everything here works at day granularity: ``datetime`` values are truncated
to their date before being compared or stored.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime

_MONTH_ABBR = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

NO_SELECTION_LABEL = "Select Dates"


def _as_day(value: date) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class DateRange:
    """A start/end pair; ``end`` is only ever set together with ``start``."""

    start: date | None = None
    end: date | None = None

    def __post_init__(self) -> None:
        start = _as_day(self.start) if self.start is not None else None
        end = _as_day(self.end) if self.end is not None else None
        if end is not None:
            if start is None:
                raise ValueError("a range with an end needs a start")
            if end < start:
                raise ValueError(f"range end {end} is before start {start}")
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @property
    def is_empty(self) -> bool:
        return self.start is None

    @property
    def is_complete(self) -> bool:
        return self.start is not None and self.end is not None


def reset() -> DateRange:
    return DateRange()


def select_date(current: DateRange, clicked: date) -> DateRange:
    """Apply one calendar click to ``current``.

    The first click (or any click after a completed range) starts a new
    selection. The second click closes it, swapping endpoints if the click
    lands before the start.
    """
    day = _as_day(clicked)
    if current.start is None or current.end is not None:
        return DateRange(start=day)
    if day < current.start:
        return DateRange(start=day, end=current.start)
    return DateRange(start=current.start, end=day)


def is_in_range(selection: DateRange, value: date) -> bool:
    """Whether a calendar cell should be highlighted."""
    if selection.start is None:
        return False
    day = _as_day(value)
    if selection.end is None:
        return day == selection.start
    return selection.start <= day <= selection.end


def is_start(selection: DateRange, value: date) -> bool:
    return selection.start is not None and _as_day(value) == selection.start


def is_end(selection: DateRange, value: date) -> bool:
    return selection.end is not None and _as_day(value) == selection.end


def matches(selection: DateRange, when: date | None) -> bool:
    """Filter predicate for list items dated ``when``.

    No selection passes everything. An item with no known date only passes
    when nothing is selected.
    """
    if selection.start is None:
        return True
    if when is None:
        return False
    return is_in_range(selection, when)


# --- Month arithmetic ---

def start_of_month(value: date) -> date:
    return date(value.year, value.month, 1)


def add_months(value: date, months: int) -> date:
    """Shift by whole months, anchored to the first of the resulting month."""
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_grid(anchor: date) -> list[list[date | None]]:
    """Sunday-first weeks for the month containing ``anchor``.

    Cells before the 1st and after the last day are ``None``.
    """
    first = start_of_month(anchor)
    # date.weekday(): Monday == 0; shift so Sunday is column 0
    leading = (first.weekday() + 1) % 7
    cells: list[date | None] = [None] * leading
    for day in range(1, days_in_month(first.year, first.month) + 1):
        cells.append(date(first.year, first.month, day))
    while len(cells) % 7:
        cells.append(None)
    return [cells[i:i + 7] for i in range(0, len(cells), 7)]


def format_day(value: date) -> str:
    """e.g. "Nov 5, 2025"."""
    return f"{_MONTH_ABBR[value.month - 1]} {value.day}, {value.year}"


def format_range(selection: DateRange) -> str:
    if selection.start is None:
        return NO_SELECTION_LABEL
    end = selection.end or selection.start
    return f"{format_day(selection.start)} - {format_day(end)}"


class DatePicker:
    """Dual-month picker state: the working range plus the display anchor.

    Navigation only moves ``anchor``; the selected range is untouched.
    """

    def __init__(
        self,
        initial: DateRange | None = None,
        default_anchor: date | None = None,
        months_shown: int = 2,
    ) -> None:
        self._default_anchor = start_of_month(default_anchor or date.today())
        self.range = initial or DateRange()
        self.months_shown = months_shown
        self.anchor = (
            start_of_month(self.range.start)
            if self.range.start is not None
            else self._default_anchor
        )

    def click(self, value: date) -> DateRange:
        self.range = select_date(self.range, value)
        return self.range

    def next_month(self) -> date:
        self.anchor = add_months(self.anchor, 1)
        return self.anchor

    def prev_month(self) -> date:
        self.anchor = add_months(self.anchor, -1)
        return self.anchor

    def set_month(self, month: int) -> date:
        if not 1 <= month <= 12:
            raise ValueError(f"month out of range: {month}")
        self.anchor = date(self.anchor.year, month, 1)
        return self.anchor

    def set_year(self, year: int) -> date:
        self.anchor = date(year, self.anchor.month, 1)
        return self.anchor

    def visible_months(self) -> list[date]:
        return [add_months(self.anchor, i) for i in range(self.months_shown)]

    def reset(self) -> DateRange:
        self.range = reset()
        self.anchor = self._default_anchor
        return self.range

    def label(self) -> str:
        return format_range(self.range)
