"""
Structural sync engine.

The blueprint → builder transition is the single moment where each
section's question list is reconciled with its configured question_count:

    guard:  every required metadata field is filled
    effect: grow with blank questions / truncate from the end,
            repair the active section pointer, switch to the builder phase

The guard runs before anything is touched, so a failed transition leaves
the paper exactly as it was. Reconciling an already-synced paper is a no-op.
"""

import logging
from typing import List

from paper.schemas import (
    DEFAULT_MCQ_OPTIONS,
    REQUIRED_METADATA_FIELDS,
    BloomLevel,
    CourseOutcome,
    Metadata,
    Paper,
    Phase,
    Question,
    Section,
    SectionType,
)

log = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Please fill in all required fields marked with *"


class MissingMetadataError(ValueError):
    """Raised when the builder phase is entered with required fields empty."""

    def __init__(self, missing: List[str]):
        super().__init__(MISSING_FIELDS_MESSAGE)
        self.missing = missing


def missing_required_fields(metadata: Metadata) -> List[str]:
    return [f for f in REQUIRED_METADATA_FIELDS if not getattr(metadata, f)]


def blank_question(section_type: SectionType) -> Question:
    return Question(
        text="",
        options=list(DEFAULT_MCQ_OPTIONS) if section_type == SectionType.MCQ else [],
        image=None,
        co=CourseOutcome.CO1,
        bloom=BloomLevel.REMEMBER,
    )


def reconcile_section(section: Section) -> int:
    """
    Make len(section.questions) == section.question_count.

    Shrinking discards the excess questions from the end; growing appends
    blank questions and keeps the existing ones in place.

    Returns:
        The change in question count (negative when questions were dropped).
    """
    current = len(section.questions)
    target = section.question_count
    if current < target:
        section.questions.extend(blank_question(section.type) for _ in range(target - current))
    elif current > target:
        del section.questions[target:]
    return target - current


def enter_builder(paper: Paper) -> Paper:
    """
    Blueprint → builder transition.

    Raises:
        MissingMetadataError: if any required metadata field is empty
    """
    missing = missing_required_fields(paper.metadata)
    if missing:
        log.info(f"[SYNC] Builder blocked, missing fields: {', '.join(missing)}")
        raise MissingMetadataError(missing)

    for section in paper.sections:
        delta = reconcile_section(section)
        if delta:
            log.info(f"[SYNC] section={section.id} questions {'+' if delta > 0 else ''}{delta}")

    if not any(s.id == paper.active_section_id for s in paper.sections):
        paper.active_section_id = paper.sections[0].id
    paper.phase = Phase.BUILDER
    return paper


def return_to_blueprint(paper: Paper) -> Paper:
    """Going back never touches the question lists."""
    paper.phase = Phase.BLUEPRINT
    return paper


def open_preview(paper: Paper) -> Paper:
    paper.phase = Phase.PREVIEW
    return paper
