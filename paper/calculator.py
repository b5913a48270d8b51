"""
Derived-value calculator.

Pure functions recomputed on every read: total marks, exam category,
duration text and clock arithmetic on "HH:MM" strings. Nothing here is
cached or stored on the model.
"""

from datetime import date
from enum import Enum
from typing import Iterable, Optional, Tuple


# Papers worth at most this many marks are internal assessments
INTERNAL_MARKS_THRESHOLD = 30

MINUTES_PER_DAY = 24 * 60


class ExamCategory(str, Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"


def _parse_clock(value: str) -> Tuple[int, int]:
    hours, minutes = value.split(":")
    return int(hours), int(minutes)


def total_marks(sections: Iterable) -> int:
    """Σ(attempt_count × marks_per_question) over all sections."""
    return sum(s.attempt_count * s.marks_per_question for s in sections)


def exam_category(total: int) -> ExamCategory:
    if total <= INTERNAL_MARKS_THRESHOLD:
        return ExamCategory.INTERNAL
    return ExamCategory.EXTERNAL


def duration_minutes(start: str, end: str) -> int:
    """Minutes from start to end, wrapping forward past midnight."""
    start_h, start_m = _parse_clock(start)
    end_h, end_m = _parse_clock(end)
    diff = (end_h * 60 + end_m) - (start_h * 60 + start_m)
    if diff < 0:
        diff += MINUTES_PER_DAY
    return diff


def duration_text(start: str, end: str) -> str:
    """
    Human-readable exam length, e.g. "1 Hr 30 Mins", "2 Hr" or "45 Mins".

    Returns an empty string when either time is missing or both are equal.
    """
    if not start or not end:
        return ""
    hours, minutes = divmod(duration_minutes(start, end), 60)
    parts = []
    if hours > 0:
        parts.append(f"{hours} Hr")
    if minutes > 0:
        parts.append(f"{minutes} Mins")
    return " ".join(parts)


def add_minutes(start: str, minutes: int) -> str:
    """Clock arithmetic: "23:30" + 60 → "00:30"."""
    if not start:
        return ""
    hours, mins = _parse_clock(start)
    total = (hours * 60 + mins + minutes) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def format_12h(value: str) -> str:
    """"00:00" → "12:00 AM", "13:05" → "1:05 PM", "12:00" → "12:00 PM"."""
    if not value:
        return ""
    hours, minutes = value.split(":")
    h = int(hours)
    suffix = "PM" if h >= 12 else "AM"
    hour12 = h % 12 or 12
    return f"{hour12}:{minutes} {suffix}"


def current_academic_year(today: Optional[date] = None) -> str:
    """January to May belong to the year that started the previous June."""
    today = today or date.today()
    year = today.year
    if today.month < 6:
        return f"{year - 1}-{year}"
    return f"{year}-{year + 1}"
