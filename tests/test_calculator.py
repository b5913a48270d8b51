"""
Unit tests for the derived-value calculator.
"""

from datetime import date

import pytest

from paper.calculator import (
    ExamCategory,
    add_minutes,
    current_academic_year,
    duration_text,
    exam_category,
    format_12h,
    total_marks,
)
from paper.schemas import Section, SectionType


class TestDurationText:
    """Tests for duration_text()."""

    def test_hours_and_minutes(self):
        assert duration_text("09:00", "10:30") == "1 Hr 30 Mins"

    def test_wraps_past_midnight(self):
        assert duration_text("23:00", "01:00") == "2 Hr"

    def test_equal_times_give_empty_string(self):
        assert duration_text("10:00", "10:00") == ""

    def test_minutes_only(self):
        assert duration_text("10:00", "10:45") == "45 Mins"

    @pytest.mark.parametrize("start, end", [("", "10:00"), ("09:00", "")])
    def test_missing_side_gives_empty_string(self, start, end):
        assert duration_text(start, end) == ""


class TestClockHelpers:
    """Tests for format_12h() and add_minutes()."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("00:00", "12:00 AM"),
            ("13:05", "1:05 PM"),
            ("12:00", "12:00 PM"),
            ("23:59", "11:59 PM"),
            ("09:30", "9:30 AM"),
        ],
    )
    def test_format_12h(self, value, expected):
        assert format_12h(value) == expected

    def test_format_12h_empty(self):
        assert format_12h("") == ""

    def test_add_minutes_same_day(self):
        assert add_minutes("09:00", 90) == "10:30"

    def test_add_minutes_wraps_to_midnight(self):
        assert add_minutes("23:30", 60) == "00:30"
        assert add_minutes("22:00", 120) == "00:00"

    def test_add_minutes_without_start(self):
        assert add_minutes("", 60) == ""


class TestMarks:
    """Tests for total_marks() and exam_category()."""

    def test_total_and_internal_category(self):
        sections = [
            Section(id=1, type=SectionType.MCQ, question_count=6, attempt_count=6, marks_per_question=1),
            Section(id=2, question_count=4, attempt_count=2, marks_per_question=3),
        ]
        total = total_marks(sections)
        assert total == 12
        assert exam_category(total) == ExamCategory.INTERNAL

    def test_forty_marks_is_external(self):
        sections = [
            Section(id=1, question_count=5, attempt_count=4, marks_per_question=5),
            Section(id=2, question_count=3, attempt_count=2, marks_per_question=10),
        ]
        assert total_marks(sections) == 40
        assert exam_category(40) == ExamCategory.EXTERNAL

    def test_threshold_is_inclusive(self):
        assert exam_category(30) == ExamCategory.INTERNAL
        assert exam_category(31) == ExamCategory.EXTERNAL


class TestAcademicYear:
    def test_before_june_belongs_to_previous_year(self):
        assert current_academic_year(date(2026, 5, 31)) == "2025-2026"

    def test_from_june_starts_new_year(self):
        assert current_academic_year(date(2026, 6, 1)) == "2026-2027"
