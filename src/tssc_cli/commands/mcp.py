"""MCP server command - serve the tssc tools over stdio.

Lets Claude Desktop, Cursor and other stdio MCP clients check and deploy
the components. stdout carries the protocol, so logs go to stderr or a file.
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys

import click

from ..mcp.server import JSONRPC_PARSE_ERROR, MCPServer
from ..mcp.tools import build_tools
from ..shared.logging import LOG_LEVELS, configure_logging
from ..shared.paths import ensure_dirs, get_log_file
from ..utils import get_deployer

logger = logging.getLogger(__name__)


@click.command("mcp-server")
@click.option(
    "--log-file",
    default=None,
    help="Log file path (default: stderr); use 'default' for ~/.tssc/logs/mcp-server.log",
)
@click.option(
    "--log-level",
    "mcp_log_level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Log level (default: the global --log-level)",
)
@click.pass_context
def mcp_server(ctx: click.Context, log_file: str | None, mcp_log_level: str | None) -> None:
    """Start the MCP server on stdio.

    \b
    Example client configuration:
      {"mcpServers": {"tssc": {"command": "tssc", "args": ["mcp-server"]}}}
    """
    if log_file == "default":
        ensure_dirs()
        log_file = str(get_log_file())
    configure_logging(mcp_log_level or ctx.obj["log_level"], log_file=log_file, json_output=True)

    server = MCPServer(build_tools(get_deployer(ctx)))
    logger.info(f"Starting MCP server with {len(server.tools)} tools")

    try:
        asyncio.run(run_server(server))
    except KeyboardInterrupt:
        logger.info("MCP server interrupted by user")


async def run_server(server: MCPServer) -> None:
    """Run the server until stdin closes or a shutdown signal arrives."""
    shutdown_event = asyncio.Event()

    def signal_handler() -> None:
        logger.info("Received shutdown signal")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, signal_handler)

    try:
        await stdio_loop(server, shutdown_event)
    finally:
        logger.info("MCP server shutting down")


async def stdio_loop(server: MCPServer, shutdown_event: asyncio.Event) -> None:
    """Main stdio loop - read JSON-RPC from stdin, write responses to stdout."""
    reader = asyncio.StreamReader()
    protocol = asyncio.StreamReaderProtocol(reader)

    loop = asyncio.get_running_loop()
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)

    while not shutdown_event.is_set():
        try:
            # JSON-RPC messages are newline-delimited
            line = await asyncio.wait_for(reader.readline(), timeout=1.0)
        except asyncio.TimeoutError:
            # No input, check shutdown and continue
            continue

        if not line:
            logger.info("stdin closed")
            break

        response = await handle_line(server, line)
        if response is not None:
            write_message(response)


async def handle_line(server: MCPServer, line: bytes) -> dict | None:
    """Decode one input line and dispatch it.

    Returns:
        The response to write, or None for blank lines and notifications
    """
    line = line.strip()
    if not line:
        return None

    try:
        request = json.loads(line.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"Invalid JSON: {e}")
        return {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": JSONRPC_PARSE_ERROR, "message": f"Parse error: {e}"},
        }

    return await server.handle_request(request)


def write_message(message: dict) -> None:
    """Write one JSON-RPC message to stdout."""
    sys.stdout.write(json.dumps(message) + "\n")
    sys.stdout.flush()
