"""
Reply sanitiser and validator.

Every reply from the text service is untrusted. Structured replies are
stripped of code fences, parsed with json.loads and checked against the
item schemas below before a single field reaches the paper model; any
mismatch fails the whole call. Subjective revisions are plain text and only
get quote / bold cleanup.
"""

import json
import re
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError, field_validator

from paper.schemas import MCQ_OPTION_SLOTS, BloomLevel, CourseOutcome, SectionType


class MalformedReplyError(ValueError):
    """The reply could not be parsed into the shape the prompt asked for."""


# ─── Reply schemas ─────────────────────────────────────────────────────────────

class GeneratedItem(BaseModel):
    """One question from a bulk-fill reply. Only `text` is required."""
    model_config = ConfigDict(extra="ignore")

    text: StrictStr
    options: Optional[List[StrictStr]] = None
    bloom: Any = None
    co: Any = None

    @field_validator("options")
    @classmethod
    def _four_options(cls, value):
        if value is not None and len(value) != MCQ_OPTION_SLOTS:
            raise ValueError(f"expected {MCQ_OPTION_SLOTS} options, got {len(value)}")
        return value


class RevisedMCQ(BaseModel):
    """Reply shape for a multiple-choice revision."""
    model_config = ConfigDict(extra="ignore")

    text: StrictStr
    options: Optional[List[StrictStr]] = None

    @field_validator("options")
    @classmethod
    def _four_options(cls, value):
        if value is not None and len(value) != MCQ_OPTION_SLOTS:
            raise ValueError(f"expected {MCQ_OPTION_SLOTS} options, got {len(value)}")
        return value


# ─── Tag normalisation ─────────────────────────────────────────────────────────

# Short codes and common variations → BloomLevel
BLOOM_ALIASES = {
    "r": BloomLevel.REMEMBER,
    "remember": BloomLevel.REMEMBER,
    "recall": BloomLevel.REMEMBER,
    "knowledge": BloomLevel.REMEMBER,
    "u": BloomLevel.UNDERSTAND,
    "understand": BloomLevel.UNDERSTAND,
    "comprehension": BloomLevel.UNDERSTAND,
    "ap": BloomLevel.APPLY,
    "apply": BloomLevel.APPLY,
    "application": BloomLevel.APPLY,
    "an": BloomLevel.ANALYZE,
    "analyze": BloomLevel.ANALYZE,
    "analyse": BloomLevel.ANALYZE,
    "analysis": BloomLevel.ANALYZE,
    "e": BloomLevel.EVALUATE,
    "evaluate": BloomLevel.EVALUATE,
    "evaluation": BloomLevel.EVALUATE,
    "c": BloomLevel.CREATE,
    "create": BloomLevel.CREATE,
    "synthesis": BloomLevel.CREATE,
}


def normalise_bloom(raw: Any) -> Optional[BloomLevel]:
    if not isinstance(raw, str):
        return None
    return BLOOM_ALIASES.get(raw.strip().lower())


def normalise_co(raw: Any) -> Optional[CourseOutcome]:
    if not isinstance(raw, str):
        return None
    try:
        return CourseOutcome(raw.strip().upper())
    except ValueError:
        return None


# ─── Cleanup steps ─────────────────────────────────────────────────────────────

def strip_code_fences(raw: str) -> str:
    """Drop every ```json and ``` token, then trim."""
    return raw.replace("```json", "").replace("```", "").strip()


def _load_json(raw: str) -> Any:
    cleaned = strip_code_fences(raw or "")
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedReplyError(f"Reply is not valid JSON: {e}")


def parse_section_reply(raw: str, section_type: SectionType = SectionType.MCQ) -> List[GeneratedItem]:
    """
    Validate a bulk-fill reply.

    Options are only checked for mcq sections; for other types a stray
    `options` key is dropped before validation.

    Raises:
        MalformedReplyError: unparseable text, not a non-empty array, or any
                             item failing the GeneratedItem schema
    """
    data = _load_json(raw)
    if not isinstance(data, list):
        raise MalformedReplyError(f"Expected a JSON array, got {type(data).__name__}")
    if not data:
        raise MalformedReplyError("Reply contained no questions")
    items = []
    for position, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise MalformedReplyError(f"Item {position} is not an object")
        if section_type != SectionType.MCQ:
            entry = {k: v for k, v in entry.items() if k != "options"}
        try:
            items.append(GeneratedItem.model_validate(entry))
        except ValidationError as e:
            raise MalformedReplyError(f"Item {position} failed validation: {e.errors()[0]['msg']}")
    return items


def parse_mcq_revision(raw: str) -> RevisedMCQ:
    data = _load_json(raw)
    if not isinstance(data, dict):
        raise MalformedReplyError(f"Expected a JSON object, got {type(data).__name__}")
    try:
        return RevisedMCQ.model_validate(data)
    except ValidationError as e:
        raise MalformedReplyError(f"Revision failed validation: {e.errors()[0]['msg']}")


def clean_text_revision(raw: str) -> str:
    """
    Plain-text revision: one leading and one trailing double quote removed,
    every ** bold token removed, whitespace trimmed.
    """
    text = strip_code_fences(raw or "")
    text = re.sub(r'^"|"$', "", text)
    text = text.replace("**", "").strip()
    if not text:
        raise MalformedReplyError("Revision reply was empty")
    return text
