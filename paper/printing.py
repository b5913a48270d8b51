"""
Print / render boundary.

Builds the read-only PaperView handed to the renderer and the filename used
by the "commit to print" action.
"""

import re
from typing import Dict, List

from pydantic import BaseModel, Field

from paper.calculator import ExamCategory, duration_text, exam_category, format_12h, total_marks
from paper.schemas import Difficulty, Metadata, Paper, Phase, PreviewSettings, Section


class PaperView(BaseModel):
    """Fully reconciled model plus derived values; read-only for the renderer."""
    metadata: Metadata
    sections: List[Section]
    total_marks: int
    category: ExamCategory
    duration: str
    schedule: str
    print_filename: str
    phase: Phase
    active_section_id: int
    difficulty: Difficulty
    preview: PreviewSettings
    has_knowledge: bool = False
    generation: Dict[str, str] = Field(default_factory=dict, description="target → idle|running|succeeded|failed")


def schedule_text(metadata: Metadata) -> str:
    """"9:00 AM to 10:30 AM", or empty until both times are set."""
    if not metadata.start_time or not metadata.end_time:
        return ""
    return f"{format_12h(metadata.start_time)} to {format_12h(metadata.end_time)}"


def _safe_segment(value: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", value)


def print_filename(metadata: Metadata) -> str:
    """
    e.g. "CSE_SEM5_Operating_Systems_CET_1".

    Course name and branch have every non-alphanumeric character replaced
    by "_"; the exam type only has its spaces replaced.
    """
    branch = _safe_segment(metadata.branch) if metadata.branch else "EXAM"
    semester = f"SEM{metadata.semester}" if metadata.semester else ""
    course = _safe_segment(metadata.course_name) if metadata.course_name else "PAPER"
    exam_type = metadata.exam_type.replace(" ", "_") if metadata.exam_type else "TEST"
    return f"{branch}_{semester}_{course}_{exam_type}"


def build_view(paper: Paper, generation: Dict[str, str] = None) -> PaperView:
    total = total_marks(paper.sections)
    return PaperView(
        metadata=paper.metadata.model_copy(),
        sections=[s.model_copy(deep=True) for s in paper.sections],
        total_marks=total,
        category=exam_category(total),
        duration=duration_text(paper.metadata.start_time, paper.metadata.end_time),
        schedule=schedule_text(paper.metadata),
        print_filename=print_filename(paper.metadata),
        phase=paper.phase,
        active_section_id=paper.active_section_id,
        difficulty=paper.difficulty,
        preview=paper.preview.model_copy(),
        has_knowledge=bool(paper.knowledge_context),
        generation=dict(generation or {}),
    )
