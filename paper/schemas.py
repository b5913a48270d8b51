"""
Pydantic schemas for the exam paper model.

Metadata → Section → Question, plus the workspace-level Paper that carries
the active section pointer, the phase and the UI preferences.
"""

import re
import secrets
import time
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from paper.calculator import current_academic_year


# ─── Fixed policy constants ────────────────────────────────────────────────────

UNIVERSITY_NAME = "ITM (SLS) BARODA UNIVERSITY"

DEFAULT_INSTRUCTIONS = (
    "· All questions are mandatory. There are no external options.\n"
    "· Make suitable assumptions, wherever necessary, and state them clearly.\n"
    "· Use of Non-Programmable Calculator is allowed/Not allowed.\n"
    "· Figures to the right indicate maximum marks."
)

EXAM_TYPES = ["MST", "CET 1", "CET 2", "REMEDIAL", "EXTERNAL", "EXTERNAL REMEDIAL"]
SEMESTERS = [1, 2, 3, 4, 5, 6, 7, 8]

# label → minutes offset from the start time
DURATION_PRESETS = {
    "1 Hr": 60,
    "1.5 Hrs": 90,
    "2 Hrs": 120,
    "2.5 Hrs": 150,
    "3 Hrs": 180,
}

# HH:MM on a 24-hour clock
CLOCK_PATTERN = re.compile(r"([01]\d|2[0-3]):[0-5]\d")

DEFAULT_MCQ_OPTIONS = ["Option A", "Option B", "Option C", "Option D"]
MCQ_OPTION_SLOTS = 4

# Fields that must be filled before the builder phase can be entered
REQUIRED_METADATA_FIELDS = [
    "school_name",
    "branch",
    "semester",
    "academic_year",
    "exam_type",
    "course_code",
    "course_name",
    "exam_date",
    "start_time",
    "end_time",
    "specializations",
]


# ─── Enums ─────────────────────────────────────────────────────────────────────

class SectionType(str, Enum):
    MCQ = "mcq"
    SUBJECTIVE = "subjective"
    FILL_BLANK = "fill-blank"


class CourseOutcome(str, Enum):
    CO1 = "CO1"
    CO2 = "CO2"
    CO3 = "CO3"
    CO4 = "CO4"
    CO5 = "CO5"
    CO6 = "CO6"


class BloomLevel(str, Enum):
    REMEMBER = "Remember"
    UNDERSTAND = "Understand"
    APPLY = "Apply"
    ANALYZE = "Analyze"
    EVALUATE = "Evaluate"
    CREATE = "Create"

    @property
    def code(self) -> str:
        """Short label printed next to each question."""
        return BLOOM_CODES[self]


BLOOM_CODES = {
    BloomLevel.REMEMBER: "R",
    BloomLevel.UNDERSTAND: "U",
    BloomLevel.APPLY: "AP",
    BloomLevel.ANALYZE: "AN",
    BloomLevel.EVALUATE: "E",
    BloomLevel.CREATE: "C",
}


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class RevisionAction(str, Enum):
    REPHRASE = "rephrase"
    SIMPLIFY = "simplify"
    INTENSIFY = "intensify"


class Phase(str, Enum):
    BLUEPRINT = "blueprint"
    BUILDER = "builder"
    PREVIEW = "preview"


# ─── Entities ──────────────────────────────────────────────────────────────────

def new_question_id() -> str:
    """Millisecond timestamp plus a random suffix; safe for rapid creation."""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}"


class Question(BaseModel):
    """One question owned by exactly one section."""
    id: str = Field(default_factory=new_question_id)
    text: str = ""
    options: List[str] = Field(default_factory=list)
    image: Optional[str] = Field(None, description="Opaque data-URL produced by the upload collaborator")
    co: CourseOutcome = CourseOutcome.CO1
    bloom: BloomLevel = BloomLevel.REMEMBER


class Section(BaseModel):
    """A scored group of questions: attempt `attempt_count` out of `question_count`."""
    id: int
    title: str = ""
    description: str = ""
    type: SectionType = SectionType.SUBJECTIVE
    question_count: int = Field(1, ge=1)
    attempt_count: int = Field(1, ge=1)
    marks_per_question: int = Field(1, ge=1)
    questions: List[Question] = Field(default_factory=list)

    @property
    def section_marks(self) -> int:
        """Marks contributed by this section = attempt × marks_per_question."""
        return self.attempt_count * self.marks_per_question


class Metadata(BaseModel):
    """Paper header: institution, course and scheduling fields."""
    university_name: str = UNIVERSITY_NAME
    school_name: str = ""
    branch: str = ""
    semester: str = ""
    specializations: str = ""
    academic_year: str = Field(default_factory=current_academic_year)
    exam_type: str = ""
    course_code: str = ""
    course_name: str = ""
    exam_date: str = ""
    start_time: str = Field("", description="HH:MM, 24-hour clock")
    end_time: str = Field("", description="HH:MM, 24-hour clock")
    instructions: str = DEFAULT_INSTRUCTIONS

    @field_validator("start_time", "end_time")
    @classmethod
    def _clock_time(cls, value):
        if not is_clock_time(value):
            raise ValueError(f"expected HH:MM on a 24-hour clock, got {value!r}")
        return value


def is_clock_time(value: str) -> bool:
    """Empty (not chosen yet) or a valid 24-hour HH:MM."""
    return not value or CLOCK_PATTERN.fullmatch(value) is not None


class PreviewSettings(BaseModel):
    show_co: bool = True
    show_bloom: bool = True
    show_watermark: bool = False
    font_size: str = Field("normal", pattern="^(normal|compact)$")


def default_sections() -> List[Section]:
    return [
        Section(
            id=1,
            title="Q1",
            description="Multiple Choice Questions",
            type=SectionType.MCQ,
            question_count=6,
            attempt_count=6,
            marks_per_question=1,
        ),
        Section(
            id=2,
            title="Q2",
            description="Short Notes / Answer",
            type=SectionType.SUBJECTIVE,
            question_count=4,
            attempt_count=2,
            marks_per_question=3,
        ),
    ]


class Paper(BaseModel):
    """Everything the workspace holds for the paper being edited."""
    metadata: Metadata = Field(default_factory=Metadata)
    sections: List[Section] = Field(default_factory=default_sections)
    knowledge_context: str = ""
    active_section_id: int = 1
    phase: Phase = Phase.BLUEPRINT
    difficulty: Difficulty = Difficulty.MEDIUM
    preview: PreviewSettings = Field(default_factory=PreviewSettings)
