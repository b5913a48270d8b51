"""
Paper workspace: the owning data context for one editing session.

Holds the in-memory Paper, the generation status tracker and the session
store. Every successful mutation is followed by a fire-and-forget save of the
record it touched, except while a previous session is waiting to be
restored or discarded.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from database.redis_client import get_redis
from database.session_store import SessionStore
from generation.gemini_client import call_gemini
from generation.section_filler import (
    apply_revision,
    generate_revision,
    generate_section_items,
    merge_section_items,
)
from generation.status import GenerationTracker, fill_target, revision_target
from paper import editor, sync
from paper.printing import PaperView, build_view
from paper.schemas import Paper, Phase, Question, RevisionAction, Section

log = logging.getLogger(__name__)


class PaperWorkspace:
    def __init__(
        self,
        store: SessionStore,
        call: Optional[Callable[[str], Awaitable[str]]] = None,
    ):
        self.store = store
        self.paper = Paper()
        self.tracker = GenerationTracker()
        self.restore_pending = False
        self._call = call or call_gemini

    # ── Session lifecycle ──────────────────────────────────────────────────────

    def startup(self) -> bool:
        """Flag a pending restore when any saved record exists."""
        self.restore_pending = self.store.has_saved_session()
        if self.restore_pending:
            log.info("[SESSION] Previous session found; waiting for restore or discard")
        return self.restore_pending

    def restore(self) -> Paper:
        saved = self.store.load()
        self.paper = Paper(
            metadata=saved.metadata,
            sections=saved.sections,
            knowledge_context=saved.knowledge_context,
            active_section_id=saved.sections[0].id,
        )
        self.restore_pending = False
        log.info(f"[SESSION] Restored {len(saved.sections)} section(s)")
        return self.paper

    def discard(self) -> Paper:
        """Clear all saved records and keep the current (default) paper."""
        self.store.discard()
        self.restore_pending = False
        log.info("[SESSION] Saved session discarded")
        return self.paper

    def reset(self) -> Paper:
        """Wipe storage and start over with a default paper."""
        self.store.discard()
        self.paper = Paper()
        self.tracker.clear()
        self.restore_pending = False
        log.info("[SESSION] Workspace reset")
        return self.paper

    # ── Persistence ────────────────────────────────────────────────────────────

    def _save_metadata(self) -> None:
        if not self.restore_pending:
            self.store.save_metadata(self.paper.metadata)

    def _save_sections(self) -> None:
        if not self.restore_pending:
            self.store.save_sections(self.paper.sections)

    def _save_knowledge(self) -> None:
        if not self.restore_pending:
            self.store.save_knowledge(self.paper.knowledge_context)

    # ── Read side ──────────────────────────────────────────────────────────────

    def view(self) -> PaperView:
        return build_view(self.paper, self.tracker.snapshot())

    # ── Metadata / settings ────────────────────────────────────────────────────

    def update_metadata(self, field: str, value: str):
        return self.update_metadata_fields({field: value})

    def update_metadata_fields(self, updates: Dict[str, Any]):
        metadata = editor.update_metadata_fields(self.paper, updates)
        self._save_metadata()
        return metadata

    def set_duration(self, minutes: int):
        metadata = editor.set_duration(self.paper, minutes)
        self._save_metadata()
        return metadata

    def set_knowledge_context(self, text: str) -> str:
        editor.set_knowledge_context(self.paper, text)
        self._save_knowledge()
        return self.paper.knowledge_context

    def set_difficulty(self, difficulty: str) -> None:
        editor.set_difficulty(self.paper, difficulty)

    def update_preview(self, **settings: Any):
        return editor.update_preview(self.paper, **settings)

    # ── Sections / questions ───────────────────────────────────────────────────

    def add_section(self) -> Section:
        section = editor.add_section(self.paper)
        self._save_sections()
        return section

    def update_section(self, section_id: int, field: str, value: Any) -> Section:
        return self.update_section_fields(section_id, {field: value})

    def update_section_fields(self, section_id: int, updates: Dict[str, Any]) -> Section:
        section = editor.update_section_fields(self.paper, section_id, updates)
        self._save_sections()
        return section

    def delete_section(self, section_id: int) -> None:
        editor.delete_section(self.paper, section_id)
        self._save_sections()

    def update_question(self, section_id: int, index: int, field: str, value: Any) -> Question:
        return self.update_question_fields(section_id, index, {field: value})

    def update_question_fields(self, section_id: int, index: int, updates: Dict[str, Any]) -> Question:
        question = editor.update_question_fields(self.paper, section_id, index, updates)
        self._save_sections()
        return question

    def clear_image(self, section_id: int, index: int) -> Question:
        question = editor.clear_image(self.paper, section_id, index)
        self._save_sections()
        return question

    # ── Phase transitions / navigation ─────────────────────────────────────────

    def enter_builder(self) -> Paper:
        sync.enter_builder(self.paper)
        self._save_sections()
        return self.paper

    def return_to_blueprint(self) -> Paper:
        return sync.return_to_blueprint(self.paper)

    def open_preview(self) -> Paper:
        return sync.open_preview(self.paper)

    def select_section(self, section_id: int) -> Section:
        return editor.set_active_section(self.paper, section_id)

    def previous_section(self) -> Section:
        return editor.previous_section(self.paper)

    def next_section(self):
        return editor.next_section(self.paper)

    # ── Generation ─────────────────────────────────────────────────────────────

    async def fill_section(self, section_id: int, use_knowledge: bool) -> Optional[Section]:
        """
        Bulk-fill one section.

        Only available once the builder phase has sized the question lists.
        Returns the updated section, or None when the section was deleted
        while the call was in flight (the result is dropped).

        Raises:
            PhaseError: the paper is still in the blueprint phase
        """
        section = editor.get_section(self.paper, section_id)
        if self.paper.phase == Phase.BLUEPRINT:
            raise editor.PhaseError("Open the builder before generating questions")
        target = fill_target(section_id)
        self.tracker.begin(target)
        succeeded = False
        try:
            items = await generate_section_items(
                section,
                self.paper.metadata,
                self.paper.knowledge_context,
                self.paper.difficulty,
                use_knowledge,
                call=self._call,
            )
            succeeded = True
        finally:
            self.tracker.finish(target, succeeded)

        current = editor.find_section(self.paper, section_id)
        if current is None:
            log.warning(f"[FILL] section={section_id} no longer exists; result dropped")
            return None
        merged = merge_section_items(current, items)
        log.info(f"[FILL] section={section_id} merged {merged} of {len(current.questions)} question(s)")
        self._save_sections()
        return current

    async def revise_question(self, section_id: int, index: int, action: RevisionAction) -> Optional[Question]:
        """
        Revise one question. Returns the question unchanged when it has no
        text, or None when its section or slot disappeared during the call.
        """
        section = editor.get_section(self.paper, section_id)
        question = editor.get_question(self.paper, section_id, index)
        if not question.text:
            return question

        target = revision_target(section_id, index)
        self.tracker.begin(target)
        succeeded = False
        try:
            revision = await generate_revision(
                section, question, action, self.paper.metadata, call=self._call
            )
            succeeded = True
        finally:
            self.tracker.finish(target, succeeded)

        current = editor.find_section(self.paper, section_id)
        if current is None or index >= len(current.questions):
            log.warning(f"[REVISE] section={section_id} index={index} no longer exists; result dropped")
            return None
        if revision is None:
            return current.questions[index]
        apply_revision(current.questions[index], revision)
        self._save_sections()
        return current.questions[index]


# Lazy singleton
_workspace: Optional[PaperWorkspace] = None


def get_workspace() -> PaperWorkspace:
    """FastAPI dependency; one workspace per process."""
    global _workspace
    if _workspace is None:
        _workspace = PaperWorkspace(SessionStore(get_redis))
    return _workspace
