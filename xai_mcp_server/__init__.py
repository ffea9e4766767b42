"""
xAI MCP Server
Exposes xAI's Grok APIs (chat, images, vision, live search, video) as MCP tools.
"""

__version__ = "1.0.0"

LOGGER_NAME = "xai_mcp_server"
