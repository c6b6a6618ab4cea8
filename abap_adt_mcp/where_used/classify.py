"""Hit/empty classification of successful where-used responses.

ADT publishes no schema for what a usage "hit" looks like across the
usageReferences, quick search and text search services, so a body counts as
a hit only when it is long enough and matches one of a set of marker
patterns for its response kind. The marker set is data and can be extended.
"""

import re
from dataclasses import dataclass, replace
from enum import Enum

from ..errors import ConfigurationError
from .strategies import ResponseKind

MIN_BODY_LENGTH = 32

# Object names carried by result entries, per response kind.
NAME_PATTERNS = {
    ResponseKind.XML: r'\s(?:\w+:)?name="([^"]*)"',
    ResponseKind.JSON: r'"(?:name|objectName)"\s*:\s*"([^"]*)"',
    ResponseKind.PLAIN: r"(?m)^\s*\d+\.\s+([^\s(]+)",
}


class OutcomeStatus(str, Enum):
    HIT = "HIT"
    EMPTY = "EMPTY"
    ERROR = "ERROR"


@dataclass(frozen=True)
class MarkerSet:
    min_length: int = MIN_BODY_LENGTH
    xml: tuple = (
        # usageReferences result entries
        r"<(?:\w+:)?referencedObject[\s>/]",
        # quickSearch result entries
        r"<adtcore:objectReference[\s>/]",
        # text search matches
        r"<(?:\w+:)?textSearchObject[\s>/]",
    )
    json: tuple = (
        r'"(?:references|referencedObjects|results|objects)"\s*:\s*\[\s*[{"]',
    )
    plain: tuple = (
        r"(?m)^\s*\d+\.\s+\S",
    )

    def patterns_for(self, kind):
        return getattr(self, ResponseKind(kind).value.lower())

    def extend(self, kind, *patterns):
        """Return a copy with ``patterns`` appended for ``kind``."""
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ConfigurationError(f"Invalid where-used marker {pattern!r}: {exc}") from exc
        attr = ResponseKind(kind).value.lower()
        return replace(self, **{attr: getattr(self, attr) + tuple(patterns)})

    def extended(self, patterns_by_kind):
        """Apply :meth:`extend` for every ``{kind: patterns}`` entry."""
        markers = self
        for kind, patterns in sorted(patterns_by_kind.items()):
            markers = markers.extend(kind, *patterns)
        return markers


DEFAULT_MARKERS = MarkerSet()


def classify(body, kind, markers=DEFAULT_MARKERS, exclude_name=None):
    """Classify a successful response body as HIT or EMPTY.

    Bodies that are non-empty but carry no recognizable marker are EMPTY.
    With ``exclude_name`` the body must also name some object other than
    that one: a search that only finds the queried object is not a usage.
    """
    if not body:
        return OutcomeStatus.EMPTY
    text = body.strip()
    if len(text) < markers.min_length:
        return OutcomeStatus.EMPTY
    for pattern in markers.patterns_for(kind):
        if re.search(pattern, text):
            if exclude_name and not _names_other_object(text, kind, exclude_name):
                return OutcomeStatus.EMPTY
            return OutcomeStatus.HIT
    return OutcomeStatus.EMPTY


def _names_other_object(text, kind, name):
    name = name.strip().upper()
    found = re.findall(NAME_PATTERNS[ResponseKind(kind)], text)
    return any(n.strip() and n.strip().upper() != name for n in found)
