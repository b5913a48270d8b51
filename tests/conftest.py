"""Shared fixtures: in-memory Redis stand-in, store, workspace and a filled-in paper."""

import pytest
import redis

from database.session_store import SessionStore
from paper.schemas import Metadata, Paper
from services.workspace import PaperWorkspace


class InMemoryRedis:
    """The handful of string commands SessionStore uses."""

    def __init__(self):
        self.data = {}
        self.fail = False

    def _check(self):
        if self.fail:
            raise redis.ConnectionError("redis unavailable")

    def get(self, key):
        self._check()
        return self.data.get(key)

    def set(self, key, value):
        self._check()
        self.data[key] = value
        return True

    def delete(self, *keys):
        self._check()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    def exists(self, *keys):
        self._check()
        return sum(1 for key in keys if key in self.data)


class ScriptedCall:
    """Async stand-in for call_gemini returning queued replies (or raising queued errors)."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    async def __call__(self, prompt):
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def complete_metadata() -> Metadata:
    return Metadata(
        school_name="SOCSET",
        branch="CSE",
        semester="5",
        specializations="AI/ML",
        academic_year="2025-2026",
        exam_type="CET 1",
        course_code="CS501",
        course_name="Operating Systems",
        exam_date="2026-03-10",
        start_time="09:00",
        end_time="10:30",
    )


@pytest.fixture
def fake_redis():
    return InMemoryRedis()


@pytest.fixture
def store(fake_redis):
    return SessionStore(lambda: fake_redis)


@pytest.fixture
def paper():
    return Paper(metadata=complete_metadata())


@pytest.fixture
def workspace(store):
    ws = PaperWorkspace(store, call=ScriptedCall())
    ws.paper = Paper(metadata=complete_metadata())
    return ws
