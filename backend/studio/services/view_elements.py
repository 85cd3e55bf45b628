"""In-memory view and action trees produced by the view generators.

Views and actions are kept as ``xml.etree.ElementTree`` elements so they can be
serialized into metadata records and merged into per-model view files without
an intermediate representation.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
import re
from typing import Any
from xml.etree import ElementTree as ET

ACTION_TAG_PREFIX = "action-"

_CAMEL_BOUNDARY = re.compile(r"([a-z\d])([A-Z]+)")


def action_type_tag(kind: str) -> str:
    """``ActionRecord`` -> ``action-record``."""
    return _CAMEL_BOUNDARY.sub(r"\1-\2", kind).lower()


def action_kind_from_tag(tag: str) -> str:
    return "".join(part.capitalize() for part in tag.split("-"))


def make_element(tag: str, attrs: dict[str, Any] | None = None, children: list[ET.Element] | None = None) -> ET.Element:
    element = ET.Element(tag, {key: str(value) for key, value in (attrs or {}).items() if value is not None})
    for child in children or []:
        element.append(child)
    return element


def element_to_xml(element: ET.Element) -> str:
    rendered = copy.deepcopy(element)
    ET.indent(rendered, space="  ")
    return ET.tostring(rendered, encoding="unicode")


def strip_namespaces(element: ET.Element) -> ET.Element:
    for node in element.iter():
        if isinstance(node.tag, str) and node.tag.startswith("{"):
            node.tag = node.tag.split("}", 1)[1]
    return element


@dataclass
class GeneratedView:
    name: str
    type: str
    element: ET.Element
    model: str | None = None
    title: str | None = None
    xml_id: str | None = None

    def to_xml(self) -> str:
        return element_to_xml(self.element)

    @classmethod
    def from_element(cls, element: ET.Element) -> GeneratedView:
        return cls(
            name=element.get("name", ""),
            type=element.tag,
            element=element,
            model=element.get("model"),
            title=element.get("title"),
            xml_id=element.get("id"),
        )


@dataclass
class GeneratedAction:
    name: str
    kind: str
    element: ET.Element
    model: str | None = None

    @property
    def type_tag(self) -> str:
        return action_type_tag(self.kind)

    def to_xml(self) -> str:
        return element_to_xml(self.element)

    @classmethod
    def from_element(cls, element: ET.Element) -> GeneratedAction:
        return cls(
            name=element.get("name", ""),
            kind=action_kind_from_tag(element.tag),
            element=element,
            model=element.get("model"),
        )


def is_action_element(element: ET.Element) -> bool:
    return isinstance(element.tag, str) and element.tag.startswith(ACTION_TAG_PREFIX)
