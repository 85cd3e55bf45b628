from __future__ import annotations

import logging
from pathlib import Path
import shutil
import zipfile

from sqlalchemy import text
from sqlalchemy.orm import Session

from studio.core.config import Settings, get_settings, require_setting
from studio.db.base import Base
from studio.domain.pipeline_result import (
    ConfigurationError,
    DeployFailure,
    FailureCode,
    PipelineResult,
    PipelineStage,
)
from studio.services.observability import emit_structured_log

NO_BUILD_DIR_MESSAGE = "Error in application build. No build directory found"
NO_ARCHIVE_MESSAGE = "Error in application build. No war file generated."
UPDATE_ERROR_MESSAGE = "Error in update, please check the log."
RESET_ERROR_MESSAGE = "Error in reset, please check the log."
UPDATED_MESSAGE = "App updated successfully"
RESET_MESSAGE = "App reset successfully"


def build_libs_dir(build_dir: Path) -> Path:
    return Path(build_dir) / "build" / "libs"


def find_build_archive(libs_dir: Path, extension: str) -> Path | None:
    for candidate in sorted(libs_dir.iterdir()):
        if candidate.is_file() and candidate.name.endswith(extension):
            return candidate
    return None


def deploy_artifact(*, build_dir: Path, webapp_path: Path, extension: str = ".war") -> Path:
    """Unpack the build archive into ``webapp_path/<unit name>`` replacing any previous deployment."""
    libs_dir = build_libs_dir(build_dir)
    emit_structured_log(component="deploy", event="deploy_started", libs_dir=str(libs_dir))
    if not libs_dir.is_dir():
        raise DeployFailure(NO_BUILD_DIR_MESSAGE, code=FailureCode.DEPLOY_NO_BUILD_DIR)

    archive = find_build_archive(libs_dir, extension)
    if archive is None:
        raise DeployFailure(NO_ARCHIVE_MESSAGE, code=FailureCode.DEPLOY_NO_ARCHIVE)

    unit_name = archive.name[: -len(extension)]
    app_dir = Path(webapp_path) / unit_name
    try:
        if app_dir.exists():
            shutil.rmtree(app_dir)
        app_dir.mkdir(parents=True)
        with zipfile.ZipFile(archive, "r") as bundle:
            bundle.extractall(app_dir)
    except (OSError, zipfile.BadZipFile) as exc:
        raise DeployFailure(f"Unable to deploy {archive.name}: {exc}") from exc

    emit_structured_log(component="deploy", event="deploy_finished", archive=str(archive), app_dir=str(app_dir))
    return app_dir


def clear_database(*, db: Session) -> None:
    """Drop and recreate the metadata schema. Irreversible."""
    bind = db.get_bind()
    db.close()
    if bind.dialect.name == "postgresql":
        with bind.begin() as connection:
            connection.execute(text("drop schema public cascade"))
            connection.execute(text("create schema public"))
    else:
        Base.metadata.drop_all(bind)
        Base.metadata.create_all(bind)
    emit_structured_log(component="deploy", event="schema_cleared", level=logging.WARNING, dialect=bind.dialect.name)


def update_app(*, db: Session, reset: bool, settings: Settings | None = None) -> PipelineResult:
    settings = settings or get_settings()
    error_message = RESET_ERROR_MESSAGE if reset else UPDATE_ERROR_MESSAGE
    try:
        build_dir = require_setting("Build directory", settings.build_dir)
        webapp_path = require_setting("Webapp server path", settings.webapp_path)
        deploy_artifact(
            build_dir=Path(build_dir).expanduser(),
            webapp_path=Path(webapp_path).expanduser(),
            extension=settings.archive_extension,
        )
    except DeployFailure as exc:
        emit_structured_log(component="deploy", event="deploy_failed", level=logging.ERROR, code=exc.code.value, error=str(exc))
        if exc.code in {FailureCode.DEPLOY_NO_BUILD_DIR, FailureCode.DEPLOY_NO_ARCHIVE}:
            return PipelineResult.failed(exc.code, str(exc), stage=PipelineStage.DEPLOY)
        return PipelineResult.failed(exc.code, error_message + str(exc), stage=PipelineStage.DEPLOY, detail=str(exc))
    except ConfigurationError as exc:
        emit_structured_log(component="deploy", event="deploy_failed", level=logging.ERROR, code=exc.code.value, error=str(exc))
        return PipelineResult.failed(exc.code, error_message + str(exc), stage=PipelineStage.CONFIGURATION, detail=str(exc))

    if reset:
        clear_database(db=db)
        return PipelineResult.succeeded(RESET_MESSAGE, stage=PipelineStage.SCHEMA_RESET)
    return PipelineResult.succeeded(UPDATED_MESSAGE, stage=PipelineStage.DEPLOY)
