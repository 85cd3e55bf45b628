from __future__ import annotations

import logging
from pathlib import Path
import shutil
import subprocess
from typing import Callable

from sqlalchemy.orm import Session

from studio.core.config import Settings, configured_view_dir, get_settings, resolve_studio_paths
from studio.domain.pipeline_result import (
    ConfigurationError,
    FailureCode,
    PipelineResult,
    PipelineStage,
)
from studio.models import MetaModel, ModuleRecorder
from studio.services.audit_log import append_audit_log
from studio.services.build_runner import build_app, update_module_recorder
from studio.services.collaborators import StudioCollaborators
from studio.services.deploy_runner import RESET_ERROR_MESSAGE, update_app
from studio.services.observability import emit_structured_log
from studio.services.view_builder import build_views
from studio.services.view_generators import ViewGenerator

WORKFLOW_ERROR_MESSAGE = "Error in workflow processing: \n{detail}"
MODEL_ERROR_MESSAGE = "Error in model recording. Please check the log"
BUILD_ERROR_MESSAGE = "Error in build. Please check the log"
VIEW_ERROR_MESSAGE = "Error in view update. Please check the log"
VIEWS_UPDATED_MESSAGE = "Views updated successfully"


def get_recorder(*, db: Session, recorder_id: int) -> ModuleRecorder | None:
    return db.get(ModuleRecorder, recorder_id)


def list_recorders(*, db: Session, limit: int = 100) -> list[ModuleRecorder]:
    return db.query(ModuleRecorder).order_by(ModuleRecorder.id.asc()).limit(limit).all()


def needs_full_rebuild(*, db: Session, recorder: ModuleRecorder) -> bool:
    edited_model = (
        db.query(MetaModel.id)
        .filter(MetaModel.edited.is_(True), MetaModel.customised.is_(True))
        .first()
    )
    return edited_model is not None or not recorder.last_run_ok


def _append_log(existing: str | None, addition: str) -> str:
    if not existing:
        return addition
    return f"{existing.rstrip()}\n{addition}"


def _finish(db: Session, recorder: ModuleRecorder, action: str, result: PipelineResult) -> PipelineResult:
    emit_structured_log(
        component="pipeline",
        event="pipeline_finished",
        level=logging.INFO if result.ok else logging.WARNING,
        recorder_id=recorder.id,
        stage=result.stage.value if result.stage else None,
        ok=result.ok,
        code=result.code.value if result.code else None,
    )
    append_audit_log(db, action=action, payload=result.as_payload(), recorder_id=recorder.id)
    db.commit()
    return result


def update(
    *,
    db: Session,
    recorder: ModuleRecorder,
    settings: Settings | None = None,
    collaborators: StudioCollaborators | None = None,
    generators: dict[str, ViewGenerator] | None = None,
    popen_factory: Callable[..., subprocess.Popen[str]] = subprocess.Popen,
) -> PipelineResult:
    """Rebuild and redeploy when models changed or the last build failed, otherwise refresh views only."""
    settings = settings or get_settings()
    collaborators = collaborators or StudioCollaborators()
    action = "recorder.update"

    workflow_error = collaborators.process_workflows()
    if workflow_error is not None:
        return _finish(
            db,
            recorder,
            action,
            PipelineResult.failed(
                FailureCode.WORKFLOW_FAILED,
                WORKFLOW_ERROR_MESSAGE.format(detail=workflow_error),
                stage=PipelineStage.WORKFLOW,
                detail=workflow_error,
            ),
        )

    record = needs_full_rebuild(db=db, recorder=recorder)
    emit_structured_log(component="pipeline", event="pipeline_started", recorder_id=recorder.id, full_rebuild=record)

    view_dir: Path | None = configured_view_dir(settings)
    if record:
        try:
            paths = resolve_studio_paths(settings)
        except ConfigurationError as exc:
            return _finish(
                db,
                recorder,
                action,
                PipelineResult.failed(exc.code, str(exc), stage=PipelineStage.CONFIGURATION, detail=str(exc)),
            )
        view_dir = paths.view_dir

        if not collaborators.generate_models(paths.domain_dir):
            return _finish(
                db,
                recorder,
                action,
                PipelineResult.failed(
                    FailureCode.MODEL_GENERATION_FAILED,
                    MODEL_ERROR_MESSAGE,
                    stage=PipelineStage.MODEL_GENERATION,
                ),
            )

        if not build_app(db=db, recorder=recorder, settings=settings, popen_factory=popen_factory):
            return _finish(
                db,
                recorder,
                action,
                PipelineResult.failed(FailureCode.BUILD_FAILED, BUILD_ERROR_MESSAGE, stage=PipelineStage.BUILD),
            )

    view_error = build_views(
        db=db,
        view_dir=view_dir,
        update_meta_views=not record,
        auto_create=recorder.auto_create,
        update_all=recorder.all_view_update,
        settings=settings,
        collaborators=collaborators,
        generators=generators,
    )
    if view_error is not None:
        update_module_recorder(
            db=db,
            recorder=recorder,
            log_text=_append_log(recorder.log_text, f"View update failed: {view_error}"),
            ok=True,
        )
        return _finish(
            db,
            recorder,
            action,
            PipelineResult.failed(
                FailureCode.VIEW_UPDATE_FAILED,
                VIEW_ERROR_MESSAGE,
                stage=PipelineStage.VIEW_GENERATION,
                detail=view_error,
            ),
        )

    if record:
        return _finish(db, recorder, action, update_app(db=db, reset=False, settings=settings))

    update_module_recorder(db=db, recorder=recorder, log_text=recorder.log_text, ok=True)
    return _finish(db, recorder, action, PipelineResult.succeeded(VIEWS_UPDATED_MESSAGE, stage=PipelineStage.VIEW_GENERATION))


def reset(
    *,
    db: Session,
    recorder: ModuleRecorder,
    settings: Settings | None = None,
    popen_factory: Callable[..., subprocess.Popen[str]] = subprocess.Popen,
) -> PipelineResult:
    """Wipe the generated module, rebuild, redeploy and recreate the metadata schema."""
    settings = settings or get_settings()
    action = "recorder.reset"

    try:
        paths = resolve_studio_paths(settings, prepare=False)
    except ConfigurationError as exc:
        return _finish(
            db,
            recorder,
            action,
            PipelineResult.failed(exc.code, str(exc), stage=PipelineStage.CONFIGURATION, detail=str(exc)),
        )

    emit_structured_log(
        component="pipeline",
        event="reset_started",
        level=logging.WARNING,
        recorder_id=recorder.id,
        module_dir=str(paths.module_dir),
    )
    try:
        if paths.module_dir.exists():
            shutil.rmtree(paths.module_dir)
    except OSError as exc:
        return _finish(
            db,
            recorder,
            action,
            PipelineResult.failed(
                FailureCode.DEPLOY_FAILED,
                RESET_ERROR_MESSAGE + str(exc),
                stage=PipelineStage.CONFIGURATION,
                detail=str(exc),
            ),
        )

    if not build_app(db=db, recorder=recorder, settings=settings, popen_factory=popen_factory):
        return _finish(
            db,
            recorder,
            action,
            PipelineResult.failed(FailureCode.BUILD_FAILED, BUILD_ERROR_MESSAGE, stage=PipelineStage.BUILD),
        )

    recorder_id = recorder.id
    result = update_app(db=db, reset=True, settings=settings)
    if result.ok:
        # the audit table went away with the schema
        emit_structured_log(component="pipeline", event="reset_finished", level=logging.WARNING, recorder_id=recorder_id)
        return result
    return _finish(db, recorder, action, result)
