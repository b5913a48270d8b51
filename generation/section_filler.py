"""
Generation pipelines: bulk section fill and single-question revision.

Each pipeline is split into a network half (build prompt → call_gemini →
sanitise/validate) that never touches the model, and a merge half that
applies an already-validated result. The caller runs the merge only after
re-resolving its target, so a result for a section deleted mid-call is
simply dropped, and a failed call leaves the section untouched.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from generation.gemini_client import call_gemini
from generation.prompts import build_revision_prompt, build_section_prompt
from generation.sanitizer import (
    GeneratedItem,
    clean_text_revision,
    normalise_bloom,
    normalise_co,
    parse_mcq_revision,
    parse_section_reply,
)
from paper.schemas import Difficulty, Metadata, Question, RevisionAction, Section, SectionType

log = logging.getLogger("generation.pipeline")

TextCall = Callable[[str], Awaitable[str]]


@dataclass
class Revision:
    """Validated replacement for one question."""
    text: str
    options: Optional[List[str]] = None


# ─── Bulk fill ─────────────────────────────────────────────────────────────────

async def generate_section_items(
    section: Section,
    metadata: Metadata,
    knowledge: str,
    difficulty: Difficulty,
    use_knowledge: bool,
    call: TextCall = call_gemini,
) -> List[GeneratedItem]:
    """
    Ask the service for question_count items and validate the reply.

    Raises:
        httpx.HTTPError / MalformedBodyError: transport failed after all retries
        MalformedReplyError: reply not parseable or not the requested shape
    """
    prompt = build_section_prompt(section, metadata, knowledge, difficulty, use_knowledge)
    log.info(
        f"[FILL] section={section.id} type={section.type.value} count={section.question_count} "
        f"marks={section.marks_per_question} knowledge={'yes' if use_knowledge and knowledge else 'no'}"
    )
    raw = await call(prompt)
    items = parse_section_reply(raw, section.type)
    log.info(f"[FILL] section={section.id} OK: {len(items)} item(s) parsed")
    return items


def merge_section_items(section: Section, items: List[GeneratedItem]) -> int:
    """
    Apply item i onto question i. Questions past the reply keep their
    content; missing or unrecognised bloom/co and missing options keep the
    existing value. Options are only taken for mcq sections.

    Returns:
        Number of questions updated
    """
    updated = 0
    for question, item in zip(section.questions, items):
        question.text = item.text
        if section.type == SectionType.MCQ and item.options is not None:
            question.options = list(item.options)
        question.bloom = normalise_bloom(item.bloom) or question.bloom
        question.co = normalise_co(item.co) or question.co
        updated += 1
    if len(items) > len(section.questions):
        log.info(f"[FILL] section={section.id} ignored {len(items) - len(section.questions)} surplus item(s)")
    return updated


# ─── Single-question revision ──────────────────────────────────────────────────

async def generate_revision(
    section: Section,
    question: Question,
    action: RevisionAction,
    metadata: Metadata,
    call: TextCall = call_gemini,
) -> Optional[Revision]:
    """
    Rephrase, simplify or intensify one question.

    Returns:
        None when the question has no text yet (nothing to revise)
    """
    if not question.text:
        return None
    action = RevisionAction(action)
    prompt = build_revision_prompt(section, question, action, metadata)
    log.info(f"[REVISE] section={section.id} question={question.id} action={action.value}")
    raw = await call(prompt)

    if section.type == SectionType.MCQ:
        reply = parse_mcq_revision(raw)
        return Revision(text=reply.text, options=reply.options)
    return Revision(text=clean_text_revision(raw))


def apply_revision(question: Question, revision: Revision) -> Question:
    question.text = revision.text
    if revision.options is not None:
        question.options = list(revision.options)
    return question
