"""Structured summary of the references in a where-used hit.

Opt-in companion to the verbatim response body: the entries of a
usageReferences result (or the object references of a search) are listed
with name, type and URI, and each is flagged ``relevant`` when it is a real
usage rather than package or class-internal structure.
"""

import json
import xml.etree.ElementTree as ET
from dataclasses import asdict, dataclass, replace

from loguru import logger

from ..results import ContentItem
from .classify import OutcomeStatus

ENTRY_TAGS = ("referencedObject", "objectReference", "textSearchObject")
PACKAGE_TYPE = "DEVC/K"
ENHANCEMENT_TYPE = "ENHO/XHH"
FUNCTION_MODULE_TYPE = "FUGR/FF"


@dataclass(frozen=True)
class Reference:
    name: str
    type: str
    uri: str
    parent_uri: str | None = None
    is_result: bool | None = None
    usage_information: str | None = None
    object_identifier: str | None = None

    @property
    def relevant(self):
        """Enhancements, marked results and direct function module calls."""
        if self.type == ENHANCEMENT_TYPE:
            return True
        if self.is_result and self.type != PACKAGE_TYPE:
            return True
        return self.type == FUNCTION_MODULE_TYPE and "gradeDirect" in (self.usage_information or "")

    def to_dict(self):
        data = {k: v for k, v in asdict(self).items() if v is not None}
        data["relevant"] = self.relevant
        return data


def _local(name):
    return name.rsplit("}", 1)[-1]


def _attr(element, name):
    for key, value in element.attrib.items():
        if _local(key) == name:
            return value
    return None


def _flag(value):
    return None if value is None else value == "true"


def _reference(element):
    source = element
    for child in element:
        if _local(child.tag) == "adtObject":
            source = child
            break
    identifier = None
    for child in element.iter():
        if _local(child.tag) == "objectIdentifier":
            identifier = (child.text or "").strip() or None
    return Reference(
        name=_attr(source, "name") or "",
        type=_attr(source, "type") or "",
        uri=_attr(element, "uri") or _attr(source, "uri") or "",
        parent_uri=_attr(element, "parentUri"),
        is_result=_flag(_attr(element, "isResult")),
        usage_information=_attr(element, "usageInformation"),
        object_identifier=identifier,
    )


def parse_references(body):
    """Return the Reference entries of an XML where-used or search body."""
    try:
        root = ET.fromstring(body)
    except ET.ParseError as exc:
        logger.debug("Where-used body is not XML, no reference summary: {}", exc)
        return []
    return [_reference(e) for e in root.iter() if _local(e.tag) in ENTRY_TAGS]


def reference_summary(query, outcome):
    """JSON text describing the references found by a HIT ``outcome``."""
    references = parse_references(outcome.raw_body or "")
    relevant = sum(1 for r in references if r.relevant)
    summary = {
        "object_name": query.name,
        "object_type": query.declared_type.value,
        "strategy": outcome.strategy.label,
        "remote_object_type": outcome.strategy.remote_object_type,
        "total_found": len(references),
        "total_relevant": relevant,
        "filtered_out": len(references) - relevant,
        "references": [r.to_dict() for r in references],
    }
    return json.dumps(summary, indent=2)


def with_reference_summary(query, resolution):
    """Append the reference summary to a hit; anything else is unchanged."""
    result = resolution.result
    if result.is_error or not resolution.outcomes:
        return result
    last = resolution.outcomes[-1]
    if last.status is not OutcomeStatus.HIT:
        return result
    item = ContentItem(text=reference_summary(query, last))
    return replace(result, content=tuple(result.content) + (item,))
