"""Single-request retrieval handlers.

Each handler takes the gateway and the tool arguments, issues one ADT
request (GetTypeInfo: at most two) and returns the normalized result.
Validation errors and TransportError propagate to the dispatcher, which
turns them into error results.
"""

from urllib.parse import quote

from .errors import TransportError
from .results import normalize
from .where_used import DEFAULT_MARKERS, DEFAULT_MAX_RESULTS, ObjectQuery, WhereUsedResolver
from .where_used.references import with_reference_summary

SOURCE_TIMEOUT = 30

_TRUE_VALUES = {"1", "true", "yes", "on"}


class MissingArgumentError(ValueError):
    pass


def _arg(arguments, key):
    """Return the stripped, URL-encoded value of a required argument."""
    value = str(arguments.get(key) or "").strip()
    if not value:
        raise MissingArgumentError(f"{key} is required")
    return quote(value, safe="")


def _is_true(value):
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in _TRUE_VALUES


def _source(gateway, path):
    return normalize(gateway.send(path, "GET", timeout=SOURCE_TIMEOUT))


def get_program(gateway, arguments):
    name = _arg(arguments, "program_name")
    return _source(gateway, f"/sap/bc/adt/programs/programs/{name}/source/main")


def get_class(gateway, arguments):
    name = _arg(arguments, "class_name")
    return _source(gateway, f"/sap/bc/adt/oo/classes/{name}/source/main")


def get_interface(gateway, arguments):
    name = _arg(arguments, "interface_name")
    return _source(gateway, f"/sap/bc/adt/oo/interfaces/{name}/source/main")


def get_include(gateway, arguments):
    name = _arg(arguments, "include_name")
    return _source(gateway, f"/sap/bc/adt/programs/includes/{name}/source/main")


def get_function_group(gateway, arguments):
    group = _arg(arguments, "function_group")
    return _source(gateway, f"/sap/bc/adt/functions/groups/{group}/source/main")


def get_function(gateway, arguments):
    name = _arg(arguments, "function_name")
    group = _arg(arguments, "function_group")
    return _source(gateway, f"/sap/bc/adt/functions/groups/{group}/fmodules/{name}/source/main")


def get_table(gateway, arguments):
    name = _arg(arguments, "table_name")
    return _source(gateway, f"/sap/bc/adt/ddic/tables/{name}/source/main")


def get_structure(gateway, arguments):
    name = _arg(arguments, "structure_name")
    return _source(gateway, f"/sap/bc/adt/ddic/structures/{name}/source/main")


def get_package(gateway, arguments):
    name = _arg(arguments, "package_name")
    path = (
        "/sap/bc/adt/repository/nodestructure"
        f"?parent_type=DEVC%2FK&parent_name={name}&withShortDescriptions=true"
    )
    return normalize(gateway.send(path, "POST", timeout=SOURCE_TIMEOUT))


def get_transaction(gateway, arguments):
    name = _arg(arguments, "transaction_name")
    uri = quote(f"/sap/bc/adt/vit/wb/object_type/trant/object_name/{name}", safe="")
    path = (
        "/sap/bc/adt/repository/informationsystem/objectproperties/values"
        f"?uri={uri}&facet=package&facet=appl"
    )
    return _source(gateway, path)


def get_type_info(gateway, arguments):
    """Domain source, or the data element when no domain has that name."""
    name = _arg(arguments, "type_name")
    try:
        return _source(gateway, f"/sap/bc/adt/ddic/domains/{name}/source/main")
    except TransportError:
        return _source(gateway, f"/sap/bc/adt/ddic/dataelements/{name}")


def search_object(gateway, arguments):
    query = _arg(arguments, "query")
    max_results = arguments.get("max_results") or DEFAULT_MAX_RESULTS
    path = (
        "/sap/bc/adt/repository/informationsystem/search"
        f"?operation=quickSearch&query={query}*&maxResults={int(max_results)}"
    )
    return _source(gateway, path)


def get_where_used(gateway, arguments):
    _arg(arguments, "object_name")
    query = ObjectQuery.from_arguments(arguments)
    markers = DEFAULT_MARKERS
    config = getattr(gateway, "config", None)
    if config is not None and config.marker_patterns:
        markers = markers.extended(config.marker_patterns)
    resolver = WhereUsedResolver(gateway, markers=markers)
    if not _is_true(arguments.get("detailed")):
        return resolver.resolve(query)
    return with_reference_summary(query, resolver.resolve_with_outcomes(query))
