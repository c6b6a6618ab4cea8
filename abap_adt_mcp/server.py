"""MCP server exposing the tool catalogue over stdio."""

import anyio
import anyio.to_thread
import mcp.types as types
from loguru import logger
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from . import __version__
from .errors import AdtToolError
from .gateway import AdtGateway
from .tools import TOOLS, dispatch

SERVER_NAME = "abap-adt-mcp"


def list_tool_definitions():
    return [
        types.Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
        for tool in TOOLS
    ]


def call(name, arguments, gateway):
    """Dispatch a tool call and convert the result to MCP content.

    Error results are raised as AdtToolError; the SDK reports them with
    ``isError: true`` and the error text as content.
    """
    result = dispatch(name, arguments, gateway)
    if result.is_error:
        raise AdtToolError(result.text)
    return [types.TextContent(type="text", text=item.text) for item in result.content]


async def call_async(name, arguments, gateway):
    """Run :func:`call` in a worker thread so the event loop stays free."""
    return await anyio.to_thread.run_sync(call, name, arguments, gateway)


def build_server(gateway):
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def handle_list_tools():
        return list_tool_definitions()

    @server.call_tool()
    async def handle_call_tool(name, arguments):
        return await call_async(name, arguments, gateway)

    return server


async def _serve(server):
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run_stdio(config):
    """Serve MCP over stdio until the client disconnects."""
    with AdtGateway(config) as gateway:
        logger.info("Starting {} {} for {}", SERVER_NAME, __version__, config.base_url)
        anyio.run(_serve, build_server(gateway))
