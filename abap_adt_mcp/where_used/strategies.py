"""Candidate remote queries for a where-used lookup.

A declared type contributes one primary usageReferences query against that
type's ADT object URI. A fixed fallback chain follows, from most to least
specific: the name as a structure, as a generic dictionary object, a
repository name search and finally a source code text search. The two
searches find the queried object itself, so only entries naming some other
object count for them.
"""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

from .query import ObjectType

MAX_STRATEGIES = 5

USAGE_REFERENCES_PATH = "/sap/bc/adt/repository/informationsystem/usageReferences"
QUICK_SEARCH_PATH = "/sap/bc/adt/repository/informationsystem/search"
TEXT_SEARCH_PATH = "/sap/bc/adt/repository/informationsystem/textsearch"

USAGE_REQUEST_BODY = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<usagereferences:usageReferenceRequest '
    'xmlns:usagereferences="http://www.sap.com/adt/ris/usageReferences">'
    "<usagereferences:affectedObjects/>"
    "</usagereferences:usageReferenceRequest>"
)
USAGE_REQUEST_TYPE = "application/vnd.sap.adt.repository.usagereferences.request.v1+xml"
USAGE_RESULT_TYPE = "application/vnd.sap.adt.repository.usagereferences.result.v1+xml"

USAGE_TIMEOUT = 30
SEARCH_TIMEOUT = 15


class ResponseKind(str, Enum):
    XML = "XML"
    JSON = "JSON"
    PLAIN = "PLAIN"


@dataclass(frozen=True)
class QueryStrategy:
    label: str
    remote_object_type: str
    endpoint_template: str
    http_method: str = "GET"
    response_kind: ResponseKind = ResponseKind.XML
    timeout: int = SEARCH_TIMEOUT
    body_template: str | None = None
    content_type: str | None = None
    accept: str | None = None
    exclude_self: bool = False

    def render(self, query):
        """Return ``(url, body)`` for ``query``; body is None for GET."""
        values = {
            "name": quote(query.name, safe=""),
            "name_lower": quote(query.name.lower(), safe=""),
            # object name inside an object URI that is itself a query value
            "uri_name": quote(quote(query.name.lower(), safe=""), safe=""),
            "max_results": query.max_results,
        }
        url = self.endpoint_template.format(**values)
        body = self.body_template.format(**values) if self.body_template else None
        return url, body

    def headers(self):
        headers = {}
        if self.accept:
            headers["Accept"] = self.accept
        if self.content_type:
            headers["Content-Type"] = self.content_type
        return headers


def usage_strategy(label, remote_object_type, object_path):
    """A usageReferences POST for the object at ``object_path``.

    ``object_path`` may contain the ``{uri_name}`` placeholder. The object
    name is encoded inside the object URI, and the URI is encoded again as
    the ``uri`` query value, so namespaced names like ``/BIC/AZSALES`` keep
    their slashes escaped after the server decodes ``uri``.
    """
    encoded_uri = quote(object_path, safe="{}")
    return QueryStrategy(
        label=label,
        remote_object_type=remote_object_type,
        endpoint_template=(
            f"{USAGE_REFERENCES_PATH}?uri={encoded_uri}"
            "&maxResults={max_results}"
        ),
        http_method="POST",
        response_kind=ResponseKind.XML,
        timeout=USAGE_TIMEOUT,
        body_template=USAGE_REQUEST_BODY,
        content_type=USAGE_REQUEST_TYPE,
        accept=USAGE_RESULT_TYPE,
    )


TABLE_USAGE = usage_strategy("table", "TABL/DT", "/sap/bc/adt/ddic/tables/{uri_name}")
STRUCTURE_USAGE = usage_strategy("structure", "TABL/DS", "/sap/bc/adt/ddic/structures/{uri_name}")

PRIMARY_STRATEGIES = {
    ObjectType.CLASS: usage_strategy("class", "CLAS/OC", "/sap/bc/adt/oo/classes/{uri_name}"),
    ObjectType.INTERFACE: usage_strategy("interface", "INTF/OI", "/sap/bc/adt/oo/interfaces/{uri_name}"),
    ObjectType.PROGRAM: usage_strategy("program", "PROG/P", "/sap/bc/adt/programs/programs/{uri_name}"),
    ObjectType.FUNCTION: usage_strategy("function_group", "FUGR/F", "/sap/bc/adt/functions/groups/{uri_name}"),
    ObjectType.TABLE: TABLE_USAGE,
    ObjectType.STRUCTURE: STRUCTURE_USAGE,
}

FALLBACK_STRATEGIES = (
    STRUCTURE_USAGE,
    usage_strategy(
        "dictionary_object", "TABL",
        "/sap/bc/adt/vit/wb/object_type/tabl/object_name/{uri_name}",
    ),
    QueryStrategy(
        label="repository_search",
        remote_object_type="quickSearch",
        endpoint_template=(
            f"{QUICK_SEARCH_PATH}?operation=quickSearch"
            "&query={name}&maxResults={max_results}"
        ),
        response_kind=ResponseKind.XML,
        timeout=SEARCH_TIMEOUT,
        accept="application/xml",
        exclude_self=True,
    ),
    QueryStrategy(
        label="code_search",
        remote_object_type="textSearch",
        endpoint_template=(
            f"{TEXT_SEARCH_PATH}?searchString={{name}}"
            "&searchFromIndex=1&searchToIndex={max_results}&maxResults={max_results}"
        ),
        response_kind=ResponseKind.XML,
        timeout=SEARCH_TIMEOUT,
        accept="application/xml",
        exclude_self=True,
    ),
)


def select_strategies(query):
    """Return the ordered, bounded strategy sequence for ``query``."""
    strategies = []
    primary = PRIMARY_STRATEGIES.get(query.declared_type)
    if primary is not None:
        strategies.append(primary)
    for strategy in FALLBACK_STRATEGIES:
        if strategy not in strategies:
            strategies.append(strategy)
    return tuple(strategies[:MAX_STRATEGIES])
