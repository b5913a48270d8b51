"""
Durable paper state.

Three independently keyed records, each stored as JSON text:

    qpf_meta       Metadata
    qpf_sections   list of Section (questions nested)
    qpf_knowledge  knowledge bank string

Storage failures never reach the caller: reads fall back to defaults and
writes are dropped, both with an error logged.
"""

import json
import logging
from typing import Callable, List, Optional

import redis
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from paper.schemas import Metadata, Section, default_sections

log = logging.getLogger(__name__)

META_KEY = "qpf_meta"
SECTIONS_KEY = "qpf_sections"
KNOWLEDGE_KEY = "qpf_knowledge"
ALL_KEYS = (META_KEY, SECTIONS_KEY, KNOWLEDGE_KEY)

_sections_adapter = TypeAdapter(List[Section])


class SavedSession(BaseModel):
    metadata: Metadata = Field(default_factory=Metadata)
    sections: List[Section] = Field(default_factory=default_sections)
    knowledge_context: str = ""


class SessionStore:
    """Read/write contract over a Redis connection (or anything with get/set/delete/exists)."""

    def __init__(self, connection_factory: Callable[[], "redis.Redis"]):
        self._connection_factory = connection_factory

    @property
    def _redis(self) -> "redis.Redis":
        return self._connection_factory()

    # ── Reads ──────────────────────────────────────────────────────────────────

    def has_saved_session(self) -> bool:
        try:
            return self._redis.exists(*ALL_KEYS) > 0
        except redis.RedisError as e:
            log.error(f"[STORE] Failed to check for saved session: {e}")
            return False

    def _read(self, key: str) -> Optional[str]:
        try:
            return self._redis.get(key)
        except redis.RedisError as e:
            log.error(f"[STORE] Failed to load {key}: {e}")
            return None

    def load_metadata(self) -> Metadata:
        raw = self._read(META_KEY)
        if raw is None:
            return Metadata()
        try:
            return Metadata.model_validate_json(raw)
        except ValidationError as e:
            log.warning(f"[STORE] Discarding unreadable {META_KEY}: {e.error_count()} error(s)")
            return Metadata()

    def load_sections(self) -> List[Section]:
        raw = self._read(SECTIONS_KEY)
        if raw is None:
            return default_sections()
        try:
            sections = _sections_adapter.validate_json(raw)
        except ValidationError as e:
            log.warning(f"[STORE] Discarding unreadable {SECTIONS_KEY}: {e.error_count()} error(s)")
            return default_sections()
        return sections or default_sections()

    def load_knowledge(self) -> str:
        raw = self._read(KNOWLEDGE_KEY)
        if raw is None:
            return ""
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            log.warning(f"[STORE] Discarding unreadable {KNOWLEDGE_KEY}: {e}")
            return ""
        return value if isinstance(value, str) else ""

    def load(self) -> SavedSession:
        return SavedSession(
            metadata=self.load_metadata(),
            sections=self.load_sections(),
            knowledge_context=self.load_knowledge(),
        )

    # ── Writes (fire-and-forget) ───────────────────────────────────────────────

    def _write(self, key: str, payload: str) -> None:
        try:
            self._redis.set(key, payload)
        except redis.RedisError as e:
            log.error(f"[STORE] Failed to save {key}: {e}")

    def save_metadata(self, metadata: Metadata) -> None:
        self._write(META_KEY, metadata.model_dump_json())

    def save_sections(self, sections: List[Section]) -> None:
        self._write(SECTIONS_KEY, _sections_adapter.dump_json(sections).decode("utf-8"))

    def save_knowledge(self, knowledge: str) -> None:
        self._write(KNOWLEDGE_KEY, json.dumps(knowledge or ""))

    def discard(self) -> None:
        """Delete all three records so a fresh load sees none of them."""
        try:
            self._redis.delete(*ALL_KEYS)
        except redis.RedisError as e:
            log.error(f"[STORE] Failed to discard saved session: {e}")
