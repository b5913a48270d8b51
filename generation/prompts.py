"""
Prompt builders for bulk section fill and single-question revision.

Both prompts ask for math in $inline$ / $$block$$ LaTeX (the same convention
stored question text uses) with backslashes doubled, so the reply survives
json.loads.
"""

import json

from paper.schemas import Difficulty, Metadata, Question, RevisionAction, Section, SectionType


# Knowledge bank text beyond this is cut before it goes into the prompt
KNOWLEDGE_CHAR_LIMIT = 3000


# ─── Bulk fill prompt ──────────────────────────────────────────────────────────

SECTION_PROMPT = """You are an expert professor preparing a {exam_type} exam paper for {branch}.
Task: Generate {count} {section_type} questions.
Difficulty: {difficulty}
{context_instruction}
Marking Constraint: Each question is worth {marks} marks. {complexity_instruction}

IMPORTANT: Use LaTeX for ANY mathematical notation. Wrap inline math in single $ signs (e.g. $E=mc^2$) and display math in double $$ signs.

CRITICAL FOR JSON: You MUST escape all backslashes in LaTeX commands. For example, output "\\\\frac{{a}}{{b}}" instead of "\\frac{{a}}{{b}}". This is required for valid JSON.

Strictly return ONLY a valid JSON array of exactly {count} objects. No markdown, no commentary before or after the array.
Schema: {schema}
"""

MCQ_ITEM_SCHEMA = (
    '{ "text": "Question text with LaTeX", '
    '"options": ["Option with $LaTeX$", "Option B", "Option C", "Option D"], '
    '"bloom": "R", "co": "CO1" }'
)

TEXT_ITEM_SCHEMA = '{ "text": "Question text with LaTeX", "bloom": "R", "co": "CO1" }'

BLOOM_INSTRUCTION = (
    'bloom must be one of R, U, AP, AN, E, C (Remember, Understand, Apply, Analyze, Evaluate, Create); '
    'co must be one of CO1 to CO6.'
)

SECTION_TYPE_LABELS = {
    SectionType.MCQ: "multiple-choice (exactly 4 options each)",
    SectionType.SUBJECTIVE: "subjective",
    SectionType.FILL_BLANK: "fill-in-the-blank",
}


def complexity_instruction(marks: int) -> str:
    """Three depth tiers keyed on marks per question."""
    if marks <= 2:
        return "Questions should be brief, definitions, or direct concepts suitable for 1-2 marks."
    if marks <= 5:
        return "Questions should be analytical or require short explanations suitable for 3-5 marks."
    return "Questions should be detailed, descriptive, or scenario-based suitable for long answers (6+ marks)."


def context_instruction(metadata: Metadata, knowledge: str, use_knowledge: bool) -> str:
    if use_knowledge and knowledge:
        return (
            f'SOURCE MATERIAL: "{knowledge[:KNOWLEDGE_CHAR_LIMIT]}..." '
            "(Use this material primarily)."
        )
    return (
        "NO SPECIFIC SYLLABUS PROVIDED. Generate relevant questions based on standard academic "
        f'curriculum for COURSE: "{metadata.course_name}", BRANCH: "{metadata.branch}", '
        f'SEMESTER: "{metadata.semester}", SPECIALIZATION: "{metadata.specializations}".'
    )


def build_section_prompt(
    section: Section,
    metadata: Metadata,
    knowledge: str,
    difficulty: Difficulty,
    use_knowledge: bool,
) -> str:
    """
    One flat prompt asking for question_count items of the section's type.

    Args:
        section:       Target section (type, count and marks drive the prompt)
        metadata:      Paper header; exam type/branch always, course fields when
                       no knowledge context is used
        knowledge:     Knowledge bank text (may be empty)
        difficulty:    Global difficulty setting
        use_knowledge: Whether the caller chose to ground on the knowledge text
    """
    is_mcq = section.type == SectionType.MCQ
    prompt = SECTION_PROMPT.format(
        exam_type=metadata.exam_type,
        branch=metadata.branch,
        count=section.question_count,
        section_type=SECTION_TYPE_LABELS[section.type],
        difficulty=Difficulty(difficulty).value,
        context_instruction=context_instruction(metadata, knowledge, use_knowledge),
        marks=section.marks_per_question,
        complexity_instruction=complexity_instruction(section.marks_per_question),
        schema=MCQ_ITEM_SCHEMA if is_mcq else TEXT_ITEM_SCHEMA,
    )
    return f"{prompt}{BLOOM_INSTRUCTION}\n"


# ─── Revision prompt ───────────────────────────────────────────────────────────

MCQ_ADJUSTMENTS = {
    RevisionAction.REPHRASE: "Rephrase the question and options for better clarity and academic tone.",
    RevisionAction.SIMPLIFY: "Simplify the question concept and make options more distinct.",
    RevisionAction.INTENSIFY: "Make the question more analytical/application-based and options closer/trickier.",
}

TEXT_ADJUSTMENTS = {
    RevisionAction.REPHRASE: "Rephrase for better academic clarity.",
    RevisionAction.SIMPLIFY: "Simplify the concept being asked.",
    RevisionAction.INTENSIFY: "Make it more analytical or detailed.",
}

MCQ_REVISION_PROMPT = """Context: {course_name} ({branch}). Difficulty Level adjustment: {action}. {adjustment}
Original Question: "{text}"
Original Options: {options}

IMPORTANT: Use LaTeX for math. Escape backslashes like "\\\\frac".
Constraint: Return strictly valid JSON format ONLY. No markdown.
Format: {{ "text": "New Question Text", "options": ["Opt A", "Opt B", "Opt C", "Opt D"] }}
"""

TEXT_REVISION_PROMPT = """Context: {course_name} ({branch}). Difficulty Level adjustment: {action}. {adjustment}
Original Question: "{text}"

Constraint: Return ONLY the new question text string. Do NOT provide the answer. No quotes. Do NOT use markdown bold (**).
"""


def build_revision_prompt(
    section: Section,
    question: Question,
    action: RevisionAction,
    metadata: Metadata,
) -> str:
    action = RevisionAction(action)
    if section.type == SectionType.MCQ:
        return MCQ_REVISION_PROMPT.format(
            course_name=metadata.course_name,
            branch=metadata.branch,
            action=action.value,
            adjustment=MCQ_ADJUSTMENTS[action],
            text=question.text,
            options=json.dumps(question.options, ensure_ascii=False),
        )
    return TEXT_REVISION_PROMPT.format(
        course_name=metadata.course_name,
        branch=metadata.branch,
        action=action.value,
        adjustment=TEXT_ADJUSTMENTS[action],
        text=question.text,
    )
