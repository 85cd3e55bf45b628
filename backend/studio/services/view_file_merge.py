from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from xml.etree import ElementTree as ET

from studio.domain.pipeline_result import MergeFailure
from studio.services.view_elements import (
    GeneratedAction,
    GeneratedView,
    is_action_element,
    strip_namespaces,
)

XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
XML_DECLARATION = "<?xml version='1.0' encoding='UTF-8'?>"


@dataclass
class ViewDocument:
    views: list[GeneratedView] = field(default_factory=list)
    actions: list[GeneratedAction] = field(default_factory=list)


def view_file_path(view_dir: Path, model_name: str) -> Path:
    return Path(view_dir) / f"{model_name}.xml"


def parse_view_document(xml: str) -> ViewDocument:
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as exc:
        raise MergeFailure(f"Invalid view file: {exc}") from exc

    document = ViewDocument()
    for child in strip_namespaces(root):
        if not isinstance(child.tag, str):
            continue
        if is_action_element(child):
            document.actions.append(GeneratedAction.from_element(child))
        else:
            document.views.append(GeneratedView.from_element(child))
    return document


def read_view_file(path: Path) -> ViewDocument:
    if not path.exists():
        return ViewDocument()
    try:
        xml = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise MergeFailure(f"Unable to read view file {path}: {exc}") from exc
    if not xml.strip():
        return ViewDocument()
    return parse_view_document(xml)


def merge_views_by_name(existing: list[GeneratedView], view: GeneratedView) -> list[GeneratedView]:
    merged = list(existing)
    for index, old_view in enumerate(merged):
        if old_view.name == view.name:
            del merged[index]
            break
    merged.append(view)
    return merged


def merge_actions_by_name(existing: list[GeneratedAction], actions: list[GeneratedAction]) -> list[GeneratedAction]:
    """Replace same-named actions, later entries winning, so each name appears once."""
    merged = list(existing)
    for action in actions:
        merged = [item for item in merged if item.name != action.name]
        merged.append(action)
    return merged


def schema_location(namespace: str, version: str) -> str:
    return f"{namespace} {namespace}/object-views_{version}.xsd"


def render_view_file(
    views: list[GeneratedView],
    actions: list[GeneratedAction],
    *,
    namespace: str,
    version: str,
) -> str:
    body = "\n".join([view.to_xml() for view in views] + [action.to_xml() for action in actions])
    return (
        f"{XML_DECLARATION}\n"
        f"<object-views xmlns='{namespace}' xmlns:xsi='{XSI_NAMESPACE}'"
        f" xsi:schemaLocation='{schema_location(namespace, version)}'>\n"
        f"{body}\n"
        "</object-views>"
    )


def write_views(
    view_dir: Path,
    model_name: str,
    views: list[GeneratedView],
    actions: list[GeneratedAction],
    *,
    namespace: str,
    version: str,
) -> Path:
    """Merge ``views`` and ``actions`` by name into the model's view file and rewrite it."""
    path = view_file_path(view_dir, model_name)
    document = read_view_file(path)

    merged_views = document.views
    for view in views:
        merged_views = merge_views_by_name(merged_views, view)
    merged_actions = merge_actions_by_name(document.actions, actions) if actions else document.actions

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            render_view_file(merged_views, merged_actions, namespace=namespace, version=version),
            encoding="utf-8",
        )
    except OSError as exc:
        raise MergeFailure(f"Unable to write view file {path}: {exc}") from exc
    return path


def write_view(
    view_dir: Path,
    model_name: str,
    view: GeneratedView | None,
    actions: list[GeneratedAction],
    *,
    namespace: str,
    version: str,
) -> Path:
    return write_views(
        view_dir,
        model_name,
        [view] if view is not None else [],
        actions,
        namespace=namespace,
        version=version,
    )
