"""Command-line entry point: ``abap-adt-mcp`` / ``python -m abap_adt_mcp``."""

import argparse
import json
import sys

from . import __version__
from .config import load_config
from .errors import ConfigurationError, UnknownToolError
from .gateway import AdtGateway
from .log import setup_logging
from .tools import TOOLS, dispatch
from .where_used import RETRY_TYPE_NAMES

EXIT_OK = 0
EXIT_TOOL_ERROR = 1
EXIT_CONFIG_ERROR = 2


def build_parser():
    parser = argparse.ArgumentParser(
        prog="abap-adt-mcp",
        description="Read-only ABAP repository tools over MCP (SAP ADT).",
    )
    parser.add_argument("--version", action="version", version=f"abap-adt-mcp {__version__}")
    parser.add_argument("--env-file", help="Load SAP_* settings from this .env file")
    parser.add_argument("--log-level", help="Log level for stderr output (default: WARNING)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Run the MCP server over stdio")
    sub.add_parser("tools", help="List available tools")

    where = sub.add_parser("where-used", help="Find where an ABAP object is used")
    where.add_argument("object_name")
    where.add_argument("--type", dest="object_type", type=str.upper, choices=RETRY_TYPE_NAMES)
    where.add_argument("--max", dest="max_results", type=int, default=None)
    where.add_argument("--detailed", action="store_true", help="Append a JSON summary of the references")
    where.add_argument("--json", action="store_true", help="Print the raw tool result as JSON")

    call = sub.add_parser("call", help="Call any tool with key=value arguments")
    call.add_argument("tool")
    call.add_argument("arguments", nargs="*", metavar="KEY=VALUE")
    call.add_argument("--json", action="store_true", help="Print the raw tool result as JSON")
    return parser


def _parse_pairs(parser, pairs):
    arguments = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            parser.error(f"argument must be KEY=VALUE, got: {pair}")
        arguments[key] = value
    return arguments


def _print_result(result, as_json):
    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(result.text)
    return EXIT_TOOL_ERROR if result.is_error else EXIT_OK


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "tools":
        for tool in TOOLS:
            print(f"{tool.name}: {tool.description}")
        return EXIT_OK

    try:
        config = load_config(env_file=args.env_file)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if args.command == "serve":
        from .server import run_stdio

        run_stdio(config)
        return EXIT_OK

    if args.command == "where-used":
        name, arguments = "GetWhereUsed", {"object_name": args.object_name}
        if args.object_type:
            arguments["object_type"] = args.object_type
        if args.max_results is not None:
            arguments["max_results"] = args.max_results
        if args.detailed:
            arguments["detailed"] = True
    else:
        name, arguments = args.tool, _parse_pairs(parser, args.arguments)

    with AdtGateway(config) as gateway:
        try:
            result = dispatch(name, arguments, gateway)
        except UnknownToolError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return EXIT_TOOL_ERROR
    return _print_result(result, args.json)


if __name__ == "__main__":
    sys.exit(main())
