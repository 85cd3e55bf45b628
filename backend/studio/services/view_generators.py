"""Default generators turning a view builder record into a view tree and actions.

Each generator reads the free-form ``params`` of the builder. Deployments with
richer widget support register their own generators in place of these.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable
from xml.etree import ElementTree as ET

from studio.models import ViewBuilder
from studio.services.view_elements import GeneratedAction, GeneratedView, action_type_tag, make_element


@dataclass
class GeneratorOutput:
    view: GeneratedView | None = None
    actions: list[GeneratedAction] = field(default_factory=list)


ViewGenerator = Callable[[ViewBuilder, bool], GeneratorOutput]


def _params(builder: ViewBuilder) -> dict[str, Any]:
    params = builder.params or {}
    if not isinstance(params, dict):
        raise ValueError(f"params must be an object, got {type(params).__name__}")
    return dict(params)


def _mapping(params: dict[str, Any], key: str) -> dict[str, Any]:
    value = params.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"{key} must be an object, got {type(value).__name__}")
    return value


def _sequence(params: dict[str, Any], key: str) -> list[Any]:
    value = params.get(key) or []
    if not isinstance(value, list):
        raise ValueError(f"{key} must be a list, got {type(value).__name__}")
    return value


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _field_elements(fields: list[Any], *, auto_create: bool) -> list[ET.Element]:
    elements = []
    for item in fields:
        if isinstance(item, str):
            attrs = {"name": item}
        elif isinstance(item, dict):
            attrs = dict(item)
        else:
            raise ValueError(f"invalid field entry: {item!r}")
        if attrs.pop("auto", False) and not auto_create:
            continue
        elements.append(make_element("field", attrs))
    return elements


def _view(builder: ViewBuilder, view_type: str, children: list[ET.Element], **extra_attrs: Any) -> GeneratedView:
    params = _params(builder)
    name = str(params.get("view_name") or builder.name)
    title = _optional_str(params.get("title"))
    xml_id = _optional_str(params.get("xml_id"))
    attrs = {"name": name, "title": title, "model": builder.model, "id": xml_id, **extra_attrs}
    return GeneratedView(
        name=name,
        type=view_type,
        element=make_element(view_type, attrs, children),
        model=builder.model,
        title=title,
        xml_id=xml_id,
    )


def _action_record(name: str, model: str | None, defaults: dict[str, Any]) -> GeneratedAction:
    kind = "ActionRecord"
    children = [make_element("field", {"name": key, "expr": value}) for key, value in defaults.items()]
    return GeneratedAction(
        name=name,
        kind=kind,
        element=make_element(action_type_tag(kind), {"name": name, "model": model}, children),
        model=model,
    )


def generate_form(builder: ViewBuilder, auto_create: bool) -> GeneratorOutput:
    params = _params(builder)
    actions = []
    on_new = None
    defaults = _mapping(params, "defaults")
    if defaults:
        on_new = f"action-{builder.name}-defaults"
        actions.append(_action_record(on_new, builder.model, defaults))

    panel = make_element("panel", {"title": params.get("panel_title")}, _field_elements(_sequence(params, "fields"), auto_create=auto_create))
    return GeneratorOutput(view=_view(builder, "form", [panel], onNew=on_new), actions=actions)


def generate_grid(builder: ViewBuilder, auto_create: bool) -> GeneratorOutput:
    params = _params(builder)
    return GeneratorOutput(view=_view(builder, "grid", _field_elements(_sequence(params, "fields"), auto_create=auto_create)))


def generate_chart(builder: ViewBuilder, auto_create: bool) -> GeneratorOutput:
    params = _params(builder)
    dataset = make_element("dataset", {"type": params.get("dataset_type", "jpql")})
    dataset.text = str(params.get("query") or "")
    children = [dataset]
    if params.get("category"):
        children.append(make_element("category", {"key": params["category"]}))
    if params.get("series"):
        children.append(make_element("series", {"key": params["series"], "type": params.get("chart_type", "bar")}))

    actions = []
    on_new = _mapping(params, "on_new")
    on_new_name = None
    if on_new:
        on_new_name = f"action-{builder.name}-on-new"
        actions.append(_action_record(on_new_name, builder.model, on_new))
    return GeneratorOutput(view=_view(builder, "chart", children, onInit=on_new_name), actions=actions)


def generate_dashboard(builder: ViewBuilder, auto_create: bool) -> GeneratorOutput:
    params = _params(builder)
    dashlets = []
    actions = []
    for index, dashlet in enumerate(_sequence(params, "dashlets")):
        if not isinstance(dashlet, dict):
            raise ValueError(f"invalid dashlet entry: {dashlet!r}")
        action_name = str(dashlet.get("action") or "") or f"action-{builder.name}-dashlet-{index}"
        view_ref = make_element("view", {"type": dashlet.get("view_type", "grid"), "name": dashlet.get("view")})
        kind = "ActionView"
        actions.append(
            GeneratedAction(
                name=action_name,
                kind=kind,
                element=make_element(
                    action_type_tag(kind),
                    {"name": action_name, "title": dashlet.get("title"), "model": dashlet.get("model")},
                    [view_ref],
                ),
                model=dashlet.get("model"),
            )
        )
        dashlets.append(make_element("dashlet", {"action": action_name, "colSpan": dashlet.get("col_span")}))
    return GeneratorOutput(view=_view(builder, "dashboard", dashlets), actions=actions)


DEFAULT_GENERATORS: dict[str, ViewGenerator] = {
    "form": generate_form,
    "grid": generate_grid,
    "chart": generate_chart,
    "dashboard": generate_dashboard,
}
