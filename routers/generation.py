"""
Generation Router — /generation

AI drafting of question content.
Endpoints:
  POST /generation/sections/{id}/fill                      — bulk-fill a section
  POST /generation/sections/{id}/questions/{index}/revise  — rephrase / simplify / intensify
  GET  /generation/status                                  — status per target
"""

import logging
from typing import Dict, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from generation.gemini_client import MalformedBodyError
from generation.sanitizer import MalformedReplyError
from generation.status import GenerationBusyError
from paper.editor import PhaseError, TargetNotFoundError
from paper.printing import PaperView
from paper.schemas import RevisionAction
from services.workspace import PaperWorkspace, get_workspace

router = APIRouter(prefix="/generation", tags=["generation"])

log = logging.getLogger("generation.pipeline")


# ─── Request schemas ───────────────────────────────────────────────────────────

class FillRequest(BaseModel):
    use_knowledge: bool = Field(True, description="Ground questions on the knowledge bank text")
    proceed_without_knowledge: bool = Field(
        False,
        description="Set after the user chose 'Generate Anyway' with an empty knowledge bank",
    )


class ReviseRequest(BaseModel):
    action: RevisionAction


class GenerationStatusResponse(BaseModel):
    busy: bool
    targets: Dict[str, str]


async def _run_generation(coro, target_label: str):
    try:
        return await coro
    except TargetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GenerationBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PhaseError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except MalformedReplyError as e:
        log.error(f"[{target_label}] Malformed reply: {e}")
        raise HTTPException(status_code=502, detail=f"AI reply could not be used: {e}")
    except (httpx.HTTPError, MalformedBodyError) as e:
        log.error(f"[{target_label}] Generation service failed: {e}")
        raise HTTPException(status_code=502, detail=f"Generation service failed: {e}")
    except RuntimeError as e:
        log.error(f"[{target_label}] {e}")
        raise HTTPException(status_code=503, detail=str(e))


# ─── Bulk fill ─────────────────────────────────────────────────────────────────

@router.post("/sections/{section_id}/fill", response_model=PaperView)
async def fill_section(
    section_id: int,
    request: Optional[FillRequest] = None,
    workspace: PaperWorkspace = Depends(get_workspace),
):
    """
    **Generate every question of a section in one call.**

    With an empty knowledge bank the call is refused (409) until the client
    confirms with `proceed_without_knowledge`, mirroring the
    "Add Material / Generate Anyway" choice.
    """
    request = request or FillRequest()
    has_knowledge = bool(workspace.paper.knowledge_context)
    if not has_knowledge and not request.proceed_without_knowledge:
        raise HTTPException(
            status_code=409,
            detail="Knowledge bank is empty. Add material or confirm generation without it.",
        )

    use_knowledge = request.use_knowledge and has_knowledge
    log.info("=" * 60)
    log.info(f"[FILL START] section={section_id} use_knowledge={use_knowledge}")
    section = await _run_generation(workspace.fill_section(section_id, use_knowledge), "FILL")
    if section is None:
        raise HTTPException(status_code=410, detail=f"Section {section_id} was removed during generation")
    return workspace.view()


# ─── Revision ──────────────────────────────────────────────────────────────────

@router.post("/sections/{section_id}/questions/{index}/revise", response_model=PaperView)
async def revise_question(
    section_id: int,
    index: int,
    request: ReviseRequest,
    workspace: PaperWorkspace = Depends(get_workspace),
):
    log.info(f"[REVISE START] section={section_id} index={index} action={request.action.value}")
    question = await _run_generation(
        workspace.revise_question(section_id, index, request.action), "REVISE"
    )
    if question is None:
        raise HTTPException(status_code=410, detail="Question was removed during generation")
    return workspace.view()


@router.get("/status", response_model=GenerationStatusResponse)
def generation_status(workspace: PaperWorkspace = Depends(get_workspace)):
    return GenerationStatusResponse(busy=workspace.tracker.busy, targets=workspace.tracker.snapshot())
