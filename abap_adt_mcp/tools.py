"""Tool catalogue and dispatch."""

from dataclasses import dataclass
from typing import Callable

from loguru import logger

from . import handlers
from .errors import AdtError, ConfigurationError, UnknownToolError
from .results import ResolutionResult, normalize_error
from .where_used import RETRY_TYPE_NAMES


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    input_schema: dict
    handler: Callable


def _string(description, **extra):
    return {"type": "string", "description": description, **extra}


def _schema(properties, required):
    return {"type": "object", "properties": properties, "required": list(required)}


def _single(name, description, arg, arg_description, handler):
    return Tool(name, description, _schema({arg: _string(arg_description)}, [arg]), handler)


TOOLS = (
    _single(
        "GetProgram",
        "Retrieve ABAP program source code. Returns only the main program "
        "source code without includes or enhancements.",
        "program_name", "Name of the ABAP program", handlers.get_program,
    ),
    _single("GetClass", "Retrieve ABAP class source code.",
            "class_name", "Name of the ABAP class", handlers.get_class),
    _single("GetInterface", "Retrieve ABAP interface source code.",
            "interface_name", "Name of the ABAP interface", handlers.get_interface),
    _single("GetInclude", "Retrieve source code of an ABAP include.",
            "include_name", "Name of the ABAP include", handlers.get_include),
    _single("GetFunctionGroup", "Retrieve ABAP function group source code.",
            "function_group", "Name of the function group", handlers.get_function_group),
    Tool(
        "GetFunction",
        "Retrieve ABAP function module source code.",
        _schema(
            {
                "function_name": _string("Name of the function module"),
                "function_group": _string("Name of the function group"),
            },
            ["function_name", "function_group"],
        ),
        handlers.get_function,
    ),
    _single("GetTable", "Retrieve ABAP table structure.",
            "table_name", "Name of the ABAP table", handlers.get_table),
    _single("GetStructure", "Retrieve ABAP structure definition.",
            "structure_name", "Name of the ABAP structure", handlers.get_structure),
    _single("GetPackage", "Retrieve the objects contained in an ABAP package.",
            "package_name", "Name of the ABAP package", handlers.get_package),
    _single("GetTransaction", "Retrieve ABAP transaction details.",
            "transaction_name", "Name of the ABAP transaction", handlers.get_transaction),
    _single("GetTypeInfo", "Retrieve ABAP type information (domain or data element).",
            "type_name", "Name of the ABAP type", handlers.get_type_info),
    Tool(
        "SearchObject",
        "Search for ABAP objects by name prefix using quick search.",
        _schema(
            {
                "query": _string("Search query string"),
                "max_results": {"type": "integer", "description": "Maximum number of results", "default": 100},
            },
            ["query"],
        ),
        handlers.search_object,
    ),
    Tool(
        "GetWhereUsed",
        "Find where an ABAP object is used. Tries the ADT usage index for the "
        "declared type, then structure, dictionary, repository and code search "
        "fallbacks. Returns manual lookup instructions when nothing is found.",
        _schema(
            {
                "object_name": _string("Name of the ABAP object"),
                "object_type": _string("Type of the object (optional hint)", enum=list(RETRY_TYPE_NAMES)),
                "max_results": {"type": "integer", "description": "Maximum number of results", "default": 100},
                "detailed": {
                    "type": "boolean",
                    "description": "Also return a JSON summary of the references found",
                    "default": False,
                },
            },
            ["object_name"],
        ),
        handlers.get_where_used,
    ),
)

TOOLS_BY_NAME = {tool.name: tool for tool in TOOLS}


def dispatch(name, arguments, gateway) -> ResolutionResult:
    """Run tool ``name`` and return its result.

    Raises UnknownToolError for names outside the catalogue. Missing
    arguments and ADT failures come back as error results.
    """
    tool = TOOLS_BY_NAME.get(name)
    if tool is None:
        raise UnknownToolError(f"Unknown tool: {name}")
    if gateway is None:
        return normalize_error(ConfigurationError("ADT connection settings are missing"))
    logger.debug("Calling {} with {}", name, arguments)
    try:
        return tool.handler(gateway, dict(arguments or {}))
    except (ValueError, AdtError) as exc:
        logger.warning("{} failed: {}", name, exc)
        return normalize_error(exc)
