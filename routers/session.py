"""
Session Router — /session

Restore-or-discard choice for a previous autosaved paper.
Endpoints:
  GET  /session          — whether a restore decision is pending
  POST /session/restore  — load the saved paper
  POST /session/discard  — delete the saved records, keep a fresh paper
  POST /session/reset    — delete the saved records and start over
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from paper.printing import PaperView
from services.workspace import PaperWorkspace, get_workspace

router = APIRouter(prefix="/session", tags=["session"])


class SessionState(BaseModel):
    restore_pending: bool


@router.get("", response_model=SessionState)
def session_state(workspace: PaperWorkspace = Depends(get_workspace)):
    return SessionState(restore_pending=workspace.restore_pending)


@router.post("/restore", response_model=PaperView)
def restore(workspace: PaperWorkspace = Depends(get_workspace)):
    workspace.restore()
    return workspace.view()


@router.post("/discard", response_model=PaperView)
def discard(workspace: PaperWorkspace = Depends(get_workspace)):
    workspace.discard()
    return workspace.view()


@router.post("/reset", response_model=PaperView)
def reset(workspace: PaperWorkspace = Depends(get_workspace)):
    workspace.reset()
    return workspace.view()
