"""
Per-target status of long-running generation calls.

A target is either a whole section (bulk fill) or one question in a section
(revision). At most one call may be running per target; the tracker is a
plain map and does not queue anything, callers are expected to reject a
second trigger while the first is running.
"""

from enum import Enum
from typing import Dict


class OperationStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class GenerationBusyError(RuntimeError):
    """A generation call for this target is already in flight."""

    def __init__(self, target: str):
        super().__init__(f"Generation already running for {target}")
        self.target = target


def fill_target(section_id: int) -> str:
    return f"fill:{section_id}"


def revision_target(section_id: int, index: int) -> str:
    return f"revise:{section_id}:{index}"


class GenerationTracker:
    def __init__(self):
        self._statuses: Dict[str, OperationStatus] = {}

    def status(self, target: str) -> OperationStatus:
        return self._statuses.get(target, OperationStatus.IDLE)

    def is_running(self, target: str) -> bool:
        return self.status(target) == OperationStatus.RUNNING

    @property
    def busy(self) -> bool:
        return any(s == OperationStatus.RUNNING for s in self._statuses.values())

    def begin(self, target: str) -> None:
        if self.is_running(target):
            raise GenerationBusyError(target)
        self._statuses[target] = OperationStatus.RUNNING

    def finish(self, target: str, succeeded: bool) -> None:
        self._statuses[target] = OperationStatus.SUCCEEDED if succeeded else OperationStatus.FAILED

    def snapshot(self) -> Dict[str, str]:
        return {target: status.value for target, status in self._statuses.items()}

    def clear(self) -> None:
        """Forget finished calls; running ones stay tracked."""
        self._statuses = {
            t: s for t, s in self._statuses.items() if s == OperationStatus.RUNNING
        }
