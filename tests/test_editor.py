"""
Unit tests for paper model mutators.

Covers the two attempt-count rules (mcq lock, clamp on shrink) and the
section/question edit contract.
"""

import pytest

from paper import editor
from paper.editor import LastSectionError, PaperEditError, TargetNotFoundError
from paper.schemas import BloomLevel, CourseOutcome, Paper, Phase, Question, SectionType


class TestSectionRules:
    """Attempt-count invariants after section edits."""

    def test_switching_to_mcq_locks_attempt_count(self, paper):
        section = editor.update_section(paper, 2, "type", "mcq")
        assert section.type == SectionType.MCQ
        assert section.attempt_count == section.question_count == 4

    def test_mcq_question_count_change_moves_attempt_count(self, paper):
        section = editor.update_section(paper, 1, "question_count", 10)
        assert section.attempt_count == 10
        section = editor.update_section(paper, 1, "question_count", 3)
        assert section.attempt_count == 3

    def test_mcq_attempt_count_edit_is_overridden(self, paper):
        section = editor.update_section(paper, 1, "attempt_count", 2)
        assert section.attempt_count == section.question_count

    def test_shrinking_clamps_attempt_count(self, paper):
        section = editor.update_section(paper, 2, "attempt_count", 4)
        section = editor.update_section(paper, 2, "question_count", 3)
        assert section.attempt_count == 3

    def test_growing_does_not_raise_attempt_count(self, paper):
        editor.update_section(paper, 2, "question_count", 1)
        section = editor.update_section(paper, 2, "question_count", 6)
        assert section.attempt_count == 1

    def test_shrinking_above_attempt_count_leaves_it(self, paper):
        section = editor.update_section(paper, 2, "question_count", 3)
        assert section.attempt_count == 2

    def test_attempt_count_above_question_count_is_rejected(self, paper):
        with pytest.raises(PaperEditError):
            editor.update_section(paper, 2, "attempt_count", 5)
        assert editor.get_section(paper, 2).attempt_count == 2

    @pytest.mark.parametrize("field", ["question_count", "attempt_count", "marks_per_question"])
    def test_counts_must_be_positive(self, paper, field):
        with pytest.raises(PaperEditError):
            editor.update_section(paper, 2, field, 0)

    def test_question_count_edit_does_not_touch_questions(self, paper):
        paper.sections[1].questions = [Question(text="keep me")]
        editor.update_section(paper, 2, "question_count", 1)
        editor.update_section(paper, 2, "question_count", 8)
        assert [q.text for q in paper.sections[1].questions] == ["keep me"]

    def test_invariant_holds_over_edit_sequence(self, paper):
        edits = [
            ("question_count", 7), ("attempt_count", 5), ("type", "mcq"),
            ("question_count", 2), ("type", "subjective"), ("question_count", 9),
            ("attempt_count", 9), ("question_count", 4), ("type", "fill-blank"),
        ]
        for field, value in edits:
            section = editor.update_section(paper, 2, field, value)
            assert section.attempt_count <= section.question_count
            if section.type == SectionType.MCQ:
                assert section.attempt_count == section.question_count

    def test_unknown_field_and_type_rejected(self, paper):
        with pytest.raises(PaperEditError):
            editor.update_section(paper, 2, "questions", [])
        with pytest.raises(PaperEditError):
            editor.update_section(paper, 2, "type", "essay")

    def test_unknown_section(self, paper):
        with pytest.raises(TargetNotFoundError):
            editor.update_section(paper, 99, "title", "Q9")


class TestSectionLifecycle:
    def test_add_section_defaults(self, paper):
        section = editor.add_section(paper)
        assert section.id == 3
        assert section.title == "Q3"
        assert section.type == SectionType.SUBJECTIVE
        assert (section.question_count, section.attempt_count, section.marks_per_question) == (3, 3, 5)

    def test_add_section_in_builder_activates_it(self, paper):
        paper.phase = Phase.BUILDER
        section = editor.add_section(paper)
        assert paper.active_section_id == section.id

    def test_delete_repairs_active_pointer(self, paper):
        paper.active_section_id = 1
        editor.delete_section(paper, 1)
        assert [s.id for s in paper.sections] == [2]
        assert paper.active_section_id == 2

    def test_cannot_delete_last_section(self, paper):
        editor.delete_section(paper, 1)
        with pytest.raises(LastSectionError):
            editor.delete_section(paper, 2)
        assert len(paper.sections) == 1

    def test_ids_not_reused_after_delete(self, paper):
        editor.delete_section(paper, 1)
        section = editor.add_section(paper)
        assert section.id == 3


class TestNavigation:
    def test_next_then_preview(self, paper):
        paper.phase = Phase.BUILDER
        assert editor.next_section(paper) == Phase.BUILDER
        assert paper.active_section_id == 2
        assert editor.next_section(paper) == Phase.PREVIEW

    def test_previous_stops_at_first(self, paper):
        paper.active_section_id = 2
        assert editor.previous_section(paper).id == 1
        assert editor.previous_section(paper).id == 1


class TestMetadataAndQuestions:
    def test_update_metadata(self, paper):
        editor.update_metadata(paper, "course_name", "Compilers")
        assert paper.metadata.course_name == "Compilers"

    def test_university_name_is_fixed(self, paper):
        with pytest.raises(PaperEditError):
            editor.update_metadata(paper, "university_name", "Elsewhere")

    def test_set_duration_needs_start_time(self):
        paper = Paper()
        with pytest.raises(PaperEditError):
            editor.set_duration(paper, 90)

    def test_set_duration_computes_end_time(self, paper):
        paper.metadata.start_time = "23:00"
        editor.set_duration(paper, 120)
        assert paper.metadata.end_time == "01:00"

    def test_update_question_fields(self, paper):
        paper.sections[0].questions = [Question(options=["a", "b", "c", "d"])]
        editor.update_question(paper, 1, 0, "text", "What is $x^2$?")
        editor.update_question(paper, 1, 0, "co", "CO4")
        editor.update_question(paper, 1, 0, "bloom", "Apply")
        editor.update_question(paper, 1, 0, "image", "data:image/png;base64,AAAA")
        q = paper.sections[0].questions[0]
        assert q.text == "What is $x^2$?"
        assert q.co == CourseOutcome.CO4
        assert q.bloom == BloomLevel.APPLY
        editor.clear_image(paper, 1, 0)
        assert q.image is None

    def test_update_question_out_of_range(self, paper):
        with pytest.raises(TargetNotFoundError):
            editor.update_question(paper, 1, 0, "text", "x")

    def test_preview_settings(self, paper):
        editor.update_preview(paper, show_watermark=True, font_size="compact")
        assert paper.preview.show_watermark is True
        assert paper.preview.font_size == "compact"
        with pytest.raises(PaperEditError):
            editor.update_preview(paper, font_size="huge")


class TestRejectedEditsLeaveModelUnchanged:
    """Multi-field updates are applied as a whole or not at all."""

    def test_section_update_rolls_back_earlier_fields(self, paper):
        before = paper.sections[1].model_dump()
        with pytest.raises(PaperEditError):
            editor.update_section_fields(paper, 2, {"question_count": 9, "type": "bogus"})
        assert paper.sections[1].model_dump() == before

    def test_section_update_applies_all_fields_in_order(self, paper):
        section = editor.update_section_fields(paper, 2, {"question_count": 8, "attempt_count": 6, "title": "Q2 (b)"})
        assert section is paper.sections[1]
        assert (section.question_count, section.attempt_count, section.title) == (8, 6, "Q2 (b)")

    def test_metadata_update_rolls_back(self, paper):
        with pytest.raises(PaperEditError):
            editor.update_metadata_fields(paper, {"course_name": "Compilers", "exam_date": "x", "nope": "y"})
        assert paper.metadata.course_name == "Operating Systems"

    def test_question_update_rolls_back(self, paper):
        paper.sections[1].questions = [Question(text="Define a thread.")]
        with pytest.raises(PaperEditError):
            editor.update_question_fields(paper, 2, 0, {"text": "changed", "bloom": "Memorise"})
        assert paper.sections[1].questions[0].text == "Define a thread."


class TestValueDomains:
    @pytest.mark.parametrize("field", ["start_time", "end_time"])
    @pytest.mark.parametrize("value", ["9am", "24:00", "9:00", "12:60", "noon"])
    def test_bad_clock_values_rejected(self, paper, field, value):
        before = getattr(paper.metadata, field)
        with pytest.raises(PaperEditError):
            editor.update_metadata(paper, field, value)
        assert getattr(paper.metadata, field) == before

    @pytest.mark.parametrize("value", ["00:00", "23:59", ""])
    def test_good_clock_values_accepted(self, paper, value):
        assert editor.update_metadata(paper, "start_time", value).start_time == value

    @pytest.mark.parametrize("value", [2.7, True, "2.5", None])
    def test_non_integral_counts_rejected(self, paper, value):
        with pytest.raises(PaperEditError):
            editor.update_section(paper, 2, "marks_per_question", value)
        assert paper.sections[1].marks_per_question == 3

    @pytest.mark.parametrize("value", [4.0, "4", 4])
    def test_integral_counts_accepted(self, paper, value):
        assert editor.update_section(paper, 2, "marks_per_question", value).marks_per_question == 4
