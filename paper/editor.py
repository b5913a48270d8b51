"""
Paper model mutators.

Field-level setters for metadata, sections and questions. Each setter only
touches its own target, except for the two section rules:

  - an mcq section always has attempt_count == question_count
  - lowering question_count below attempt_count clamps attempt_count down
    (it is never raised again when the count grows back)

Multi-field updates are all-or-nothing: they are applied to a copy first.
Cross-field validation of the metadata is left to the builder transition in
paper.sync.
"""

import logging
from typing import Any, Dict, List, Optional

from paper.calculator import add_minutes
from paper.schemas import (
    BloomLevel,
    CourseOutcome,
    Difficulty,
    Metadata,
    Paper,
    Phase,
    PreviewSettings,
    Question,
    Section,
    SectionType,
    is_clock_time,
)

log = logging.getLogger(__name__)


class PaperEditError(ValueError):
    """An edit was rejected; the model is unchanged."""


class TargetNotFoundError(LookupError):
    """The section id or question index does not exist."""


class LastSectionError(PaperEditError):
    """A paper must keep at least one section."""


class PhaseError(PaperEditError):
    """The operation is not available in the current phase."""


METADATA_FIELDS = set(Metadata.model_fields) - {"university_name"}
SECTION_FIELDS = {
    "title",
    "description",
    "type",
    "question_count",
    "attempt_count",
    "marks_per_question",
}
QUESTION_FIELDS = {"text", "options", "image", "co", "bloom"}
PREVIEW_FIELDS = set(PreviewSettings.model_fields)


# ─── Lookups ───────────────────────────────────────────────────────────────────

def find_section(paper: Paper, section_id: int) -> Optional[Section]:
    return next((s for s in paper.sections if s.id == section_id), None)


def get_section(paper: Paper, section_id: int) -> Section:
    section = find_section(paper, section_id)
    if section is None:
        raise TargetNotFoundError(f"Section {section_id} not found")
    return section


def get_question(paper: Paper, section_id: int, index: int) -> Question:
    section = get_section(paper, section_id)
    if not 0 <= index < len(section.questions):
        raise TargetNotFoundError(f"Section {section_id} has no question at index {index}")
    return section.questions[index]


def _positive_int(field: str, value: Any) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise PaperEditError(f"{field} must be a whole number, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise PaperEditError(f"{field} must be a whole number, got {value!r}")
    if number < 1:
        raise PaperEditError(f"{field} must be at least 1, got {number}")
    return number


# ─── Metadata ──────────────────────────────────────────────────────────────────

def _set_metadata_field(metadata: Metadata, field: str, value: Any) -> None:
    if field not in METADATA_FIELDS:
        raise PaperEditError(f"Unknown metadata field: {field}")
    value = "" if value is None else str(value)
    if field in ("start_time", "end_time") and not is_clock_time(value):
        raise PaperEditError(f"{field} must be HH:MM on a 24-hour clock, got {value!r}")
    setattr(metadata, field, value)


def update_metadata_fields(paper: Paper, updates: Dict[str, Any]) -> Metadata:
    """Apply every update to a copy; the paper only sees the result if all pass."""
    draft = paper.metadata.model_copy()
    for field, value in updates.items():
        _set_metadata_field(draft, field, value)
    paper.metadata = draft
    return paper.metadata


def update_metadata(paper: Paper, field: str, value: str) -> Metadata:
    return update_metadata_fields(paper, {field: value})


def set_duration(paper: Paper, minutes: int) -> Metadata:
    """Derive the end time from the start time and a duration preset."""
    if not paper.metadata.start_time:
        raise PaperEditError("Please select a Start Time first.")
    paper.metadata.end_time = add_minutes(paper.metadata.start_time, int(minutes))
    return paper.metadata


def set_knowledge_context(paper: Paper, text: str) -> None:
    paper.knowledge_context = text or ""


def set_difficulty(paper: Paper, difficulty: str) -> None:
    try:
        paper.difficulty = Difficulty(difficulty)
    except ValueError:
        raise PaperEditError(f"Unknown difficulty: {difficulty}")


def update_preview(paper: Paper, **settings: Any) -> PreviewSettings:
    unknown = set(settings) - PREVIEW_FIELDS
    if unknown:
        raise PaperEditError(f"Unknown preview settings: {', '.join(sorted(unknown))}")
    merged = paper.preview.model_dump()
    merged.update(settings)
    try:
        paper.preview = PreviewSettings(**merged)
    except ValueError as e:
        raise PaperEditError(str(e))
    return paper.preview


# ─── Sections ──────────────────────────────────────────────────────────────────

def add_section(paper: Paper) -> Section:
    new_id = max([0] + [s.id for s in paper.sections]) + 1
    section = Section(
        id=new_id,
        title=f"Q{len(paper.sections) + 1}",
        description="Subjective Questions",
        type=SectionType.SUBJECTIVE,
        question_count=3,
        attempt_count=3,
        marks_per_question=5,
    )
    paper.sections.append(section)
    if paper.phase == Phase.BUILDER:
        paper.active_section_id = new_id
    return section


def update_section_fields(paper: Paper, section_id: int, updates: Dict[str, Any]) -> Section:
    """
    Set section attributes in order, re-applying the attempt-count rules
    after each one.

    The edits run against a copy whose fields are written back only when
    every one is accepted, so a rejected edit leaves the section exactly
    as it was.
    """
    section = get_section(paper, section_id)
    draft = section.model_copy()
    for field, value in updates.items():
        _set_section_field(draft, field, value)
    for field in SECTION_FIELDS:
        setattr(section, field, getattr(draft, field))
    return section


def update_section(paper: Paper, section_id: int, field: str, value: Any) -> Section:
    return update_section_fields(paper, section_id, {field: value})


def _set_section_field(section: Section, field: str, value: Any) -> None:
    if field not in SECTION_FIELDS:
        raise PaperEditError(f"Unknown section field: {field}")

    if field == "type":
        try:
            value = SectionType(value)
        except ValueError:
            raise PaperEditError(f"Unknown section type: {value}")
    elif field in ("question_count", "attempt_count", "marks_per_question"):
        value = _positive_int(field, value)
        if field == "attempt_count" and value > section.question_count:
            raise PaperEditError(
                f"attempt_count ({value}) cannot exceed question_count ({section.question_count})"
            )
    else:
        value = "" if value is None else str(value)

    previous_count = section.question_count
    setattr(section, field, value)

    if section.type == SectionType.MCQ:
        section.attempt_count = section.question_count
    elif field == "question_count" and value < section.attempt_count:
        section.attempt_count = value

    if field == "question_count" and value != previous_count:
        log.debug(f"[EDIT] section={section.id} question_count {previous_count} → {value} (sync pending)")


def delete_section(paper: Paper, section_id: int) -> List[Section]:
    if len(paper.sections) <= 1:
        raise LastSectionError("Cannot delete the last remaining section")
    get_section(paper, section_id)
    paper.sections = [s for s in paper.sections if s.id != section_id]
    if paper.active_section_id == section_id:
        paper.active_section_id = paper.sections[0].id
    return paper.sections


def set_active_section(paper: Paper, section_id: int) -> Section:
    section = get_section(paper, section_id)
    paper.active_section_id = section.id
    return section


def _active_index(paper: Paper) -> int:
    ids = [s.id for s in paper.sections]
    return ids.index(paper.active_section_id) if paper.active_section_id in ids else 0


def previous_section(paper: Paper) -> Section:
    index = _active_index(paper)
    if index > 0:
        paper.active_section_id = paper.sections[index - 1].id
    return get_section(paper, paper.active_section_id)


def next_section(paper: Paper) -> Phase:
    """Move to the following section; past the last one, open the preview."""
    index = _active_index(paper)
    if index >= len(paper.sections) - 1:
        paper.phase = Phase.PREVIEW
    else:
        paper.active_section_id = paper.sections[index + 1].id
    return paper.phase


# ─── Questions ─────────────────────────────────────────────────────────────────

def update_question_fields(paper: Paper, section_id: int, index: int, updates: Dict[str, Any]) -> Question:
    """All-or-nothing, like update_section_fields."""
    question = get_question(paper, section_id, index)
    draft = question.model_copy()
    for field, value in updates.items():
        _set_question_field(draft, field, value)
    for field in QUESTION_FIELDS:
        setattr(question, field, getattr(draft, field))
    return question


def update_question(paper: Paper, section_id: int, index: int, field: str, value: Any) -> Question:
    return update_question_fields(paper, section_id, index, {field: value})


def _set_question_field(question: Question, field: str, value: Any) -> None:
    if field not in QUESTION_FIELDS:
        raise PaperEditError(f"Unknown question field: {field}")

    if field == "co":
        try:
            value = CourseOutcome(value)
        except ValueError:
            raise PaperEditError(f"Unknown course outcome: {value}")
    elif field == "bloom":
        try:
            value = BloomLevel(value)
        except ValueError:
            raise PaperEditError(f"Unknown Bloom level: {value}")
    elif field == "options":
        if not isinstance(value, list) or not all(isinstance(o, str) for o in value):
            raise PaperEditError("options must be a list of strings")
        value = list(value)
    elif field == "image":
        value = value or None
    else:
        value = "" if value is None else str(value)

    setattr(question, field, value)


def clear_image(paper: Paper, section_id: int, index: int) -> Question:
    return update_question(paper, section_id, index, "image", None)
