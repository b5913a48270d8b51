"""
Paper Router — /paper

Blueprint and builder editing. Every endpoint returns the read-only
PaperView so the renderer always redraws from reconciled data.

Endpoints:
  GET    /paper                                         — current view
  GET    /paper/options                                 — exam types, semesters, presets
  PATCH  /paper/metadata                                — set metadata fields
  POST   /paper/metadata/duration                       — end time from a preset
  PUT    /paper/knowledge                               — knowledge bank text
  PUT    /paper/difficulty                              — global AI difficulty
  PATCH  /paper/preview                                 — preview toggles
  POST   /paper/sections                                — add section
  PATCH  /paper/sections/{id}                           — set section fields
  DELETE /paper/sections/{id}                           — delete section
  PATCH  /paper/sections/{id}/questions/{index}         — set question fields
  DELETE /paper/sections/{id}/questions/{index}/image   — remove image
  POST   /paper/builder                                 — blueprint → builder
  POST   /paper/blueprint | /paper/preview-mode         — other phase changes
  PUT    /paper/active-section                          — select a section
  POST   /paper/navigate/{direction}                    — previous / next
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from paper.editor import LastSectionError, PaperEditError, TargetNotFoundError
from paper.printing import PaperView
from paper.schemas import (
    DURATION_PRESETS,
    EXAM_TYPES,
    SEMESTERS,
    BloomLevel,
    CourseOutcome,
    Difficulty,
    SectionType,
)
from paper.sync import MissingMetadataError
from services.workspace import PaperWorkspace, get_workspace

router = APIRouter(prefix="/paper", tags=["paper"])

log = logging.getLogger(__name__)


# ─── Request schemas ───────────────────────────────────────────────────────────

class FieldUpdates(BaseModel):
    """Field name → new value, applied in order; rejected as a whole if any field fails."""
    updates: Dict[str, Any] = Field(..., min_length=1)


class DurationRequest(BaseModel):
    minutes: int = Field(..., ge=1, le=24 * 60)


class KnowledgeRequest(BaseModel):
    text: str = ""


class DifficultyRequest(BaseModel):
    difficulty: Difficulty


class PreviewRequest(BaseModel):
    show_co: Optional[bool] = None
    show_bloom: Optional[bool] = None
    show_watermark: Optional[bool] = None
    font_size: Optional[str] = None


class ActiveSectionRequest(BaseModel):
    section_id: int


class PaperOptions(BaseModel):
    exam_types: List[str]
    semesters: List[int]
    duration_presets: Dict[str, int]
    difficulties: List[str]
    section_types: List[str]
    course_outcomes: List[str]
    bloom_levels: Dict[str, str]


# ─── Error mapping ─────────────────────────────────────────────────────────────

@contextmanager
def edit_errors():
    """Translate model errors into HTTP responses."""
    try:
        yield
    except TargetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LastSectionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except MissingMetadataError as e:
        raise HTTPException(status_code=422, detail={"message": str(e), "missing": e.missing})
    except PaperEditError as e:
        raise HTTPException(status_code=422, detail=str(e))


# ─── Read side ─────────────────────────────────────────────────────────────────

@router.get("", response_model=PaperView)
def get_paper(workspace: PaperWorkspace = Depends(get_workspace)):
    return workspace.view()


@router.get("/options", response_model=PaperOptions)
def get_options():
    return PaperOptions(
        exam_types=EXAM_TYPES,
        semesters=SEMESTERS,
        duration_presets=DURATION_PRESETS,
        difficulties=[d.value for d in Difficulty],
        section_types=[t.value for t in SectionType],
        course_outcomes=[c.value for c in CourseOutcome],
        bloom_levels={b.value: b.code for b in BloomLevel},
    )


# ─── Metadata & settings ───────────────────────────────────────────────────────

@router.patch("/metadata", response_model=PaperView)
def update_metadata(request: FieldUpdates, workspace: PaperWorkspace = Depends(get_workspace)):
    with edit_errors():
        workspace.update_metadata_fields(request.updates)
    return workspace.view()


@router.post("/metadata/duration", response_model=PaperView)
def set_duration(request: DurationRequest, workspace: PaperWorkspace = Depends(get_workspace)):
    with edit_errors():
        workspace.set_duration(request.minutes)
    return workspace.view()


@router.put("/knowledge", response_model=PaperView)
def set_knowledge(request: KnowledgeRequest, workspace: PaperWorkspace = Depends(get_workspace)):
    workspace.set_knowledge_context(request.text)
    log.info(f"[KNOWLEDGE] {len(request.text)} chars")
    return workspace.view()


@router.put("/difficulty", response_model=PaperView)
def set_difficulty(request: DifficultyRequest, workspace: PaperWorkspace = Depends(get_workspace)):
    with edit_errors():
        workspace.set_difficulty(request.difficulty.value)
    return workspace.view()


@router.patch("/preview", response_model=PaperView)
def update_preview(request: PreviewRequest, workspace: PaperWorkspace = Depends(get_workspace)):
    with edit_errors():
        workspace.update_preview(**request.model_dump(exclude_none=True))
    return workspace.view()


# ─── Sections ──────────────────────────────────────────────────────────────────

@router.post("/sections", response_model=PaperView, status_code=201)
def add_section(workspace: PaperWorkspace = Depends(get_workspace)):
    section = workspace.add_section()
    log.info(f"[SECTION] added id={section.id}")
    return workspace.view()


@router.patch("/sections/{section_id}", response_model=PaperView)
def update_section(
    section_id: int,
    request: FieldUpdates,
    workspace: PaperWorkspace = Depends(get_workspace),
):
    with edit_errors():
        workspace.update_section_fields(section_id, request.updates)
    return workspace.view()


@router.delete("/sections/{section_id}", response_model=PaperView)
def delete_section(section_id: int, workspace: PaperWorkspace = Depends(get_workspace)):
    with edit_errors():
        workspace.delete_section(section_id)
    log.info(f"[SECTION] deleted id={section_id}")
    return workspace.view()


# ─── Questions ─────────────────────────────────────────────────────────────────

@router.patch("/sections/{section_id}/questions/{index}", response_model=PaperView)
def update_question(
    section_id: int,
    index: int,
    request: FieldUpdates,
    workspace: PaperWorkspace = Depends(get_workspace),
):
    with edit_errors():
        workspace.update_question_fields(section_id, index, request.updates)
    return workspace.view()


@router.delete("/sections/{section_id}/questions/{index}/image", response_model=PaperView)
def clear_image(section_id: int, index: int, workspace: PaperWorkspace = Depends(get_workspace)):
    with edit_errors():
        workspace.clear_image(section_id, index)
    return workspace.view()


# ─── Phases & navigation ───────────────────────────────────────────────────────

@router.post("/builder", response_model=PaperView)
def enter_builder(workspace: PaperWorkspace = Depends(get_workspace)):
    """
    **Blueprint → builder.**

    Blocked with 422 while any required metadata field is empty; on success
    every section's question list is grown or truncated to its question count.
    """
    with edit_errors():
        workspace.enter_builder()
    return workspace.view()


@router.post("/blueprint", response_model=PaperView)
def return_to_blueprint(workspace: PaperWorkspace = Depends(get_workspace)):
    workspace.return_to_blueprint()
    return workspace.view()


@router.post("/preview-mode", response_model=PaperView)
def open_preview(workspace: PaperWorkspace = Depends(get_workspace)):
    workspace.open_preview()
    return workspace.view()


@router.put("/active-section", response_model=PaperView)
def select_section(request: ActiveSectionRequest, workspace: PaperWorkspace = Depends(get_workspace)):
    with edit_errors():
        workspace.select_section(request.section_id)
    return workspace.view()


@router.post("/navigate/{direction}", response_model=PaperView)
def navigate(direction: str, workspace: PaperWorkspace = Depends(get_workspace)):
    if direction == "previous":
        workspace.previous_section()
    elif direction == "next":
        workspace.next_section()
    else:
        raise HTTPException(status_code=404, detail=f"Unknown direction: {direction}")
    return workspace.view()
