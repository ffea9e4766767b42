#!/usr/bin/env python3
"""
xAI MCP Server
Model Context Protocol server for xAI's Grok APIs.

Provides tools for:
  - Chat completions
  - Image generation and editing (Grok Imagine)
  - Vision / image analysis
  - Live web and X search
  - Video generation and editing

Setup:
  1. pip install xai-mcp-server   (or: pip install -e . from a checkout)
  2. Get an API key at https://console.x.ai/
  3. Set XAI_API_KEY in the MCP client config, e.g. claude_desktop_config.json:
       "xai": {"command": "xai-mcp-server", "env": {"XAI_API_KEY": "..."}}
"""

import asyncio
import logging
import sys
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from . import LOGGER_NAME, __version__
from .client import ProgressCallback, XAIClient
from .config import Settings, load_settings
from .dispatcher import Dispatcher
from .errors import ConfigurationError

SERVER_NAME = "xai-mcp-server"

logger = logging.getLogger(LOGGER_NAME)


def configure_logging(level: str = "INFO") -> None:
    """Log to stderr; stdout belongs to the MCP protocol."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _progress_reporter(server: Server) -> Optional[ProgressCallback]:
    """Build a progress callback if the caller asked for progress notifications."""
    try:
        ctx = server.request_context
    except LookupError:
        # invoked outside a live MCP request
        return None
    token = ctx.meta.progressToken if ctx.meta else None
    if token is None:
        return None

    async def report(attempt: int, total: int) -> None:
        await ctx.session.send_progress_notification(token, attempt, total=total)

    return report


def create_server(dispatcher: Dispatcher) -> Server:
    """Wire the dispatcher into a low-level MCP server."""
    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [
            types.Tool(
                name=tool.name,
                title=tool.title,
                description=tool.description,
                inputSchema=tool.input_schema,
                annotations=types.ToolAnnotations(**tool.annotations),
            )
            for tool in dispatcher.list_tools()
        ]

    # Input validation runs in the tool models so bad arguments come back as
    # the same {"success": false, "error": ...} envelope as every other failure.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Dict[str, Any]) -> types.CallToolResult:
        result = await dispatcher.invoke(name, arguments, progress=_progress_reporter(server))
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=result.to_json())],
            isError=result.is_error,
        )

    return server


async def serve(settings: Settings) -> None:
    """Run the MCP server on stdio until the host closes the streams."""
    async with XAIClient(settings) as client:
        server = create_server(Dispatcher(client))
        async with stdio_server() as (read_stream, write_stream):
            logger.info("xAI MCP Server %s running on stdio", __version__)
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )


def main() -> None:
    """Console entry point."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        configure_logging()
        logger.error("%s", e)
        sys.exit(1)

    configure_logging(settings.log_level)
    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        pass


# ─── Entry Point ─────────────────────────────────────────────────────────────

if __name__ == "__main__":
    main()
