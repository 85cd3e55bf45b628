"""SQLAlchemy model package for the studio recorder."""

from studio.models.audit_log import AuditLog
from studio.models.meta_action import MetaAction
from studio.models.meta_model import MetaModel
from studio.models.meta_view import MetaView
from studio.models.module_recorder import ModuleRecorder
from studio.models.studio_configuration import StudioConfiguration
from studio.models.view_builder import ViewBuilder

__all__ = [
    "AuditLog",
    "MetaAction",
    "MetaModel",
    "MetaView",
    "ModuleRecorder",
    "StudioConfiguration",
    "ViewBuilder",
]
