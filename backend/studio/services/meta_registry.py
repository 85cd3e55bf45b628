from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session

from studio.models import MetaAction, MetaView
from studio.services.view_elements import GeneratedAction, GeneratedView

DEFAULT_VIEW_PRIORITY = 20


def list_meta_views(*, db: Session, name: str | None = None, limit: int = 100) -> list[MetaView]:
    query = db.query(MetaView)
    if name:
        query = query.filter(MetaView.name == name)
    return query.order_by(MetaView.name.asc(), MetaView.priority.desc()).limit(limit).all()


def find_meta_view(*, db: Session, name: str, view_type: str, xml_id: str | None = None) -> MetaView | None:
    query = db.query(MetaView).filter(MetaView.name == name, MetaView.type == view_type)
    if xml_id is not None:
        query = query.filter(MetaView.xml_id == xml_id)
    return query.order_by(MetaView.id.asc()).first()


def max_view_priority(*, db: Session, name: str, view_type: str) -> int | None:
    return (
        db.query(func.max(MetaView.priority))
        .filter(MetaView.name == name, MetaView.type == view_type)
        .scalar()
    )


def next_view_priority(max_priority: int | None) -> int:
    if max_priority is None:
        return DEFAULT_VIEW_PRIORITY
    return max_priority + 1


def upsert_meta_view(*, db: Session, view: GeneratedView, module_name: str) -> tuple[MetaView, bool]:
    meta_view = find_meta_view(db=db, name=view.name, view_type=view.type, xml_id=view.xml_id)
    created = meta_view is None
    if meta_view is None:
        priority = next_view_priority(max_view_priority(db=db, name=view.name, view_type=view.type))
        meta_view = MetaView(
            name=view.name,
            type=view.type,
            xml_id=view.xml_id,
            model=view.model,
            module=module_name,
            priority=priority,
            title=view.title,
        )
        db.add(meta_view)

    meta_view.xml = view.to_xml()
    db.commit()
    db.refresh(meta_view)
    return meta_view, created


def find_meta_action(*, db: Session, name: str) -> MetaAction | None:
    return db.query(MetaAction).filter(MetaAction.name == name).order_by(MetaAction.id.asc()).first()


def upsert_meta_action(*, db: Session, action: GeneratedAction, module_name: str) -> tuple[MetaAction, bool]:
    meta_action = find_meta_action(db=db, name=action.name)
    created = meta_action is None
    if meta_action is None:
        meta_action = MetaAction(
            name=action.name,
            type=action.type_tag,
            model=action.model,
            module=module_name,
        )
        db.add(meta_action)

    meta_action.xml = action.to_xml()
    db.commit()
    db.refresh(meta_action)
    return meta_action, created


def upsert_meta_actions(*, db: Session, actions: list[GeneratedAction], module_name: str) -> list[MetaAction]:
    return [upsert_meta_action(db=db, action=action, module_name=module_name)[0] for action in actions]
