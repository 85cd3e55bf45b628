from __future__ import annotations

from datetime import datetime
import threading

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from studio.db.session import get_db_session
from studio.models import ModuleRecorder
from studio.services import module_recorder
from studio.services.meta_registry import list_meta_views

router = APIRouter(prefix="/api/recorders", tags=["recorders"])

# one pipeline run per process; the services do no locking of their own
_PIPELINE_LOCK = threading.Lock()


class RecorderResponse(BaseModel):
    id: int
    name: str
    last_run_ok: bool
    log_text: str | None
    auto_create: bool
    all_view_update: bool
    updated_at: datetime | None


class PipelineResultResponse(BaseModel):
    ok: bool
    message: str
    code: str | None = None
    stage: str | None = None
    detail: str | None = None


class ResetRequest(BaseModel):
    confirm: bool = False


class MetaViewResponse(BaseModel):
    id: int
    name: str
    type: str
    xml_id: str | None
    model: str | None
    module: str | None
    priority: int
    title: str | None


def _to_recorder_response(item: ModuleRecorder) -> RecorderResponse:
    return RecorderResponse(
        id=item.id,
        name=item.name,
        last_run_ok=item.last_run_ok,
        log_text=item.log_text,
        auto_create=item.auto_create,
        all_view_update=item.all_view_update,
        updated_at=item.updated_at,
    )


def _get_recorder_or_404(db: Session, recorder_id: int) -> ModuleRecorder:
    recorder = module_recorder.get_recorder(db=db, recorder_id=recorder_id)
    if recorder is None:
        raise HTTPException(status_code=404, detail="Recorder not found")
    return recorder


def _acquire_pipeline_or_409() -> None:
    if not _PIPELINE_LOCK.acquire(blocking=False):
        raise HTTPException(status_code=409, detail="A pipeline run is already in progress")


@router.get("", response_model=list[RecorderResponse])
def get_recorders(
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db_session),
) -> list[RecorderResponse]:
    return [_to_recorder_response(item) for item in module_recorder.list_recorders(db=db, limit=limit)]


@router.get("/{recorder_id}", response_model=RecorderResponse)
def get_recorder(recorder_id: int, db: Session = Depends(get_db_session)) -> RecorderResponse:
    return _to_recorder_response(_get_recorder_or_404(db, recorder_id))


@router.post("/{recorder_id}/update", response_model=PipelineResultResponse)
def update_recorder(recorder_id: int, db: Session = Depends(get_db_session)) -> PipelineResultResponse:
    recorder = _get_recorder_or_404(db, recorder_id)
    _acquire_pipeline_or_409()
    try:
        result = module_recorder.update(db=db, recorder=recorder)
    finally:
        _PIPELINE_LOCK.release()
    return PipelineResultResponse(**result.as_payload())


@router.post("/{recorder_id}/reset", response_model=PipelineResultResponse)
def reset_recorder(
    recorder_id: int,
    payload: ResetRequest,
    db: Session = Depends(get_db_session),
) -> PipelineResultResponse:
    if not payload.confirm:
        raise HTTPException(status_code=400, detail="Reset drops the metadata schema; pass confirm=true")
    recorder = _get_recorder_or_404(db, recorder_id)
    _acquire_pipeline_or_409()
    try:
        result = module_recorder.reset(db=db, recorder=recorder)
    finally:
        _PIPELINE_LOCK.release()
    return PipelineResultResponse(**result.as_payload())


@router.get("/{recorder_id}/meta-views", response_model=list[MetaViewResponse])
def get_meta_views(
    recorder_id: int,
    name: str | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db_session),
) -> list[MetaViewResponse]:
    _get_recorder_or_404(db, recorder_id)
    return [
        MetaViewResponse(
            id=item.id,
            name=item.name,
            type=item.type,
            xml_id=item.xml_id,
            model=item.model,
            module=item.module,
            priority=item.priority,
            title=item.title,
        )
        for item in list_meta_views(db=db, name=name, limit=limit)
    ]
