from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PipelineStage(str, Enum):
    WORKFLOW = "workflow"
    CONFIGURATION = "configuration"
    MODEL_GENERATION = "model_generation"
    BUILD = "build"
    VIEW_GENERATION = "view_generation"
    DEPLOY = "deploy"
    SCHEMA_RESET = "schema_reset"


class FailureCode(str, Enum):
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    WORKFLOW_FAILED = "WORKFLOW_FAILED"
    MODEL_GENERATION_FAILED = "MODEL_GENERATION_FAILED"
    BUILD_FAILED = "BUILD_FAILED"
    VIEW_UPDATE_FAILED = "VIEW_UPDATE_FAILED"
    DEPLOY_NO_BUILD_DIR = "DEPLOY_NO_BUILD_DIR"
    DEPLOY_NO_ARCHIVE = "DEPLOY_NO_ARCHIVE"
    DEPLOY_FAILED = "DEPLOY_FAILED"


class PipelineError(Exception):
    code: FailureCode = FailureCode.DEPLOY_FAILED

    def __init__(self, message: str, *, code: FailureCode | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class ConfigurationError(PipelineError, ValueError):
    """Raised when a required setting is empty or points to a missing path."""

    code = FailureCode.CONFIGURATION_ERROR


class ProcessFailure(PipelineError):
    code = FailureCode.BUILD_FAILED


class MergeFailure(PipelineError):
    """Raised when an existing view file cannot be parsed or rewritten."""

    code = FailureCode.VIEW_UPDATE_FAILED


class ViewGenerationFailure(PipelineError):
    """Raised when a view builder cannot be turned into a view."""

    code = FailureCode.VIEW_UPDATE_FAILED


class DeployFailure(PipelineError):
    code = FailureCode.DEPLOY_FAILED


@dataclass(frozen=True)
class PipelineResult:
    ok: bool
    message: str
    code: FailureCode | None = None
    stage: PipelineStage | None = None
    detail: str | None = None

    @classmethod
    def succeeded(cls, message: str, *, stage: PipelineStage | None = None) -> PipelineResult:
        return cls(ok=True, message=message, stage=stage)

    @classmethod
    def failed(
        cls,
        code: FailureCode,
        message: str,
        *,
        stage: PipelineStage | None = None,
        detail: str | None = None,
    ) -> PipelineResult:
        return cls(ok=False, message=message, code=code, stage=stage, detail=detail)

    def as_payload(self) -> dict[str, str | bool | None]:
        return {
            "ok": self.ok,
            "message": self.message,
            "code": self.code.value if self.code else None,
            "stage": self.stage.value if self.stage else None,
            "detail": self.detail,
        }
