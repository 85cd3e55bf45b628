from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Iterable

from sqlalchemy import or_
from sqlalchemy.orm import Session

from studio.core.config import Settings, get_settings
from studio.domain.pipeline_result import PipelineError, ViewGenerationFailure
from studio.models import ViewBuilder
from studio.services.collaborators import StudioCollaborators
from studio.services.meta_registry import upsert_meta_actions, upsert_meta_view
from studio.services.observability import emit_structured_log
from studio.services.view_elements import GeneratedAction, GeneratedView
from studio.services.view_file_merge import merge_actions_by_name, write_views
from studio.services.view_generators import DEFAULT_GENERATORS, ViewGenerator

DASHBOARD_MODEL = "Dashboard"
DASHBOARD_VIEW_TYPE = "dashboard"
VIEW_DIR_MISSING_MESSAGE = "View directory not found please check the configuration"


@dataclass(frozen=True)
class ViewBuildContext:
    view_dir: Path | None
    update_meta_views: bool
    auto_create: bool
    module_name: str
    namespace: str
    schema_version: str


def select_view_builders(*, db: Session, update_all: bool, update_meta_views: bool) -> list[ViewBuilder]:
    query = db.query(ViewBuilder)
    if not update_all:
        if update_meta_views:
            query = query.filter(ViewBuilder.edited.is_(True))
        else:
            query = query.filter(or_(ViewBuilder.edited.is_(True), ViewBuilder.recorded.is_(False)))
    return query.order_by(ViewBuilder.id.asc()).all()


def split_by_model(builders: Iterable[ViewBuilder]) -> dict[str, list[ViewBuilder]]:
    """Group builders by short model name, keeping input order inside each group."""
    groups: dict[str, list[ViewBuilder]] = {}
    for builder in builders:
        if builder.model is None:
            if builder.view_type != DASHBOARD_VIEW_TYPE:
                emit_structured_log(
                    component="views",
                    event="view_builder_rejected",
                    level=logging.DEBUG,
                    view_builder=builder.name,
                    view_type=builder.view_type,
                )
                continue
            model = DASHBOARD_MODEL
        else:
            model = builder.model.rsplit(".", 1)[-1]
        groups.setdefault(model, []).append(builder)
    return groups


def process_views(
    *,
    db: Session,
    ctx: ViewBuildContext,
    model: str,
    builders: list[ViewBuilder],
    generators: dict[str, ViewGenerator],
) -> None:
    pending_views: list[GeneratedView] = []
    pending_actions: list[GeneratedAction] = []

    for builder in builders:
        generator = generators.get(builder.view_type or "")
        if generator is None:
            continue
        try:
            output = generator(builder, ctx.auto_create)
        except (TypeError, AttributeError, KeyError, ValueError) as exc:
            raise ViewGenerationFailure(f"Unable to generate view {builder.name}: {exc}") from exc

        if output.view is not None:
            meta_view, created = upsert_meta_view(db=db, view=output.view, module_name=ctx.module_name)
            builder.meta_view_generated_id = meta_view.id
            upsert_meta_actions(db=db, actions=output.actions, module_name=ctx.module_name)
            emit_structured_log(
                component="views",
                event="meta_view_upserted",
                model=model,
                view_name=meta_view.name,
                created=created,
                priority=meta_view.priority,
            )

        if not ctx.update_meta_views and (output.view is not None or output.actions):
            if output.view is not None:
                pending_views.append(output.view)
            pending_actions = merge_actions_by_name(pending_actions, output.actions)

    if pending_views or pending_actions:
        path = write_views(
            ctx.view_dir,
            model,
            pending_views,
            pending_actions,
            namespace=ctx.namespace,
            version=ctx.schema_version,
        )
        emit_structured_log(
            component="views",
            event="view_file_written",
            model=model,
            path=str(path),
            views=len(pending_views),
            actions=len(pending_actions),
        )


def mark_processed(*, db: Session, builders: list[ViewBuilder], update_meta_views: bool) -> None:
    for builder in builders:
        if not update_meta_views:
            builder.recorded = True
        builder.edited = False
    db.commit()


def build_views(
    *,
    db: Session,
    view_dir: Path | None,
    update_meta_views: bool,
    auto_create: bool,
    update_all: bool,
    settings: Settings | None = None,
    collaborators: StudioCollaborators | None = None,
    generators: dict[str, ViewGenerator] | None = None,
) -> str | None:
    """Generate views for pending builders; returns an error message or ``None``."""
    settings = settings or get_settings()
    collaborators = collaborators or StudioCollaborators()
    generators = DEFAULT_GENERATORS if generators is None else generators

    emit_structured_log(
        component="views",
        event="view_build_started",
        update_all=update_all,
        update_meta_views=update_meta_views,
    )
    if not update_meta_views and view_dir is None:
        return VIEW_DIR_MISSING_MESSAGE

    ctx = ViewBuildContext(
        view_dir=view_dir,
        update_meta_views=update_meta_views,
        auto_create=auto_create,
        module_name=settings.module_name,
        namespace=settings.view_namespace,
        schema_version=settings.view_schema_version,
    )

    collaborators.remove_deleted(view_dir)

    try:
        collaborators.process_reports()
        error = collaborators.build_actions(view_dir, update_meta_views)
        if error is not None:
            return error

        builders = select_view_builders(db=db, update_all=update_all, update_meta_views=update_meta_views)
        for model, model_builders in split_by_model(builders).items():
            process_views(db=db, ctx=ctx, model=model, builders=model_builders, generators=generators)

        collaborators.update_rights()
        collaborators.build_menus(view_dir, update_meta_views)

        mark_processed(db=db, builders=builders, update_meta_views=update_meta_views)
    except (PipelineError, OSError, ValueError) as exc:
        db.rollback()
        emit_structured_log(component="views", event="view_build_failed", level=logging.ERROR, error=str(exc))
        return str(exc)

    emit_structured_log(component="views", event="view_build_completed", builders=len(builders))
    return None
