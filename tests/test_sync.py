"""
Tests for the blueprint → builder transition.
"""

import pytest

from paper import editor
from paper.schemas import DEFAULT_MCQ_OPTIONS, Paper, Phase, Question, Section, SectionType
from paper.sync import (
    MISSING_FIELDS_MESSAGE,
    MissingMetadataError,
    enter_builder,
    missing_required_fields,
    reconcile_section,
    return_to_blueprint,
)


def test_sync_grows_both_default_sections(paper):
    enter_builder(paper)
    mcq, subjective = paper.sections
    assert len(mcq.questions) == 6
    assert len(subjective.questions) == 4
    assert all(q.options == DEFAULT_MCQ_OPTIONS for q in mcq.questions)
    assert all(q.options == [] for q in subjective.questions)
    assert all(q.text == "" and q.co.value == "CO1" and q.bloom.value == "Remember"
               for q in mcq.questions + subjective.questions)
    assert paper.phase == Phase.BUILDER


def test_blank_questions_get_distinct_ids(paper):
    enter_builder(paper)
    ids = [q.id for s in paper.sections for q in s.questions]
    assert len(ids) == len(set(ids))


def test_shrink_keeps_leading_questions(paper):
    enter_builder(paper)
    section = paper.sections[1]
    for i, q in enumerate(section.questions):
        q.text = f"question {i}"
    kept_ids = [q.id for q in section.questions[:2]]

    return_to_blueprint(paper)
    editor.update_section(paper, section.id, "question_count", 2)
    enter_builder(paper)

    assert [q.id for q in section.questions] == kept_ids
    assert [q.text for q in section.questions] == ["question 0", "question 1"]


def test_grow_keeps_existing_questions_in_place(paper):
    enter_builder(paper)
    section = paper.sections[1]
    section.questions[0].text = "first"
    before = [q.model_copy() for q in section.questions]

    return_to_blueprint(paper)
    editor.update_section(paper, section.id, "question_count", 7)
    enter_builder(paper)

    assert len(section.questions) == 7
    assert section.questions[:4] == before
    assert all(q.text == "" for q in section.questions[4:])


def test_sync_is_idempotent(paper):
    enter_builder(paper)
    snapshot = paper.model_dump()
    enter_builder(paper)
    assert paper.model_dump() == snapshot


def test_reconcile_returns_delta():
    section = Section(id=1, type=SectionType.FILL_BLANK, question_count=3, attempt_count=3)
    assert reconcile_section(section) == 3
    assert reconcile_section(section) == 0
    section.question_count = 1
    assert reconcile_section(section) == -2
    assert len(section.questions) == 1


def test_missing_metadata_blocks_and_leaves_paper_untouched():
    paper = Paper()
    paper.metadata.course_name = "Operating Systems"
    snapshot = paper.model_dump()

    with pytest.raises(MissingMetadataError) as exc:
        enter_builder(paper)

    assert str(exc.value) == MISSING_FIELDS_MESSAGE
    assert "course_name" not in exc.value.missing
    assert "start_time" in exc.value.missing
    assert paper.model_dump() == snapshot
    assert paper.phase == Phase.BLUEPRINT


def test_single_missing_field_is_enough(paper):
    paper.metadata.specializations = ""
    assert missing_required_fields(paper.metadata) == ["specializations"]
    with pytest.raises(MissingMetadataError):
        enter_builder(paper)


def test_active_pointer_repaired(paper):
    paper.active_section_id = 42
    enter_builder(paper)
    assert paper.active_section_id == paper.sections[0].id


def test_active_pointer_kept_when_valid(paper):
    paper.active_section_id = 2
    enter_builder(paper)
    assert paper.active_section_id == 2


def test_return_to_blueprint_keeps_questions(paper):
    enter_builder(paper)
    paper.sections[0].questions[0] = Question(text="kept", options=["a", "b", "c", "d"])
    return_to_blueprint(paper)
    assert paper.phase == Phase.BLUEPRINT
    assert paper.sections[0].questions[0].text == "kept"
