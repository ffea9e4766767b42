"""Tool registry and routing. Every call yields exactly one ToolResult."""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import httpx

from .client import ProgressCallback, XAIClient
from .errors import UnknownToolError, XAIMCPError
from .tools import TOOLS, ToolDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolResult:
    """Normalized tool outcome: the JSON payload plus the out-of-band error flag."""

    payload: Dict[str, Any]
    is_error: bool = False

    @property
    def success(self) -> bool:
        return bool(self.payload.get("success"))

    @classmethod
    def failure(cls, message: str) -> "ToolResult":
        return cls({"success": False, "error": message}, is_error=True)

    def to_json(self) -> str:
        return json.dumps(self.payload, indent=2, ensure_ascii=False)


def _format_error(e: Exception) -> str:
    """Consistent error message for a failed tool call."""
    if isinstance(e, XAIMCPError):
        return str(e)
    if isinstance(e, httpx.TimeoutException):
        return "Request to xAI timed out. Try again."
    if isinstance(e, httpx.HTTPError):
        return f"Could not reach xAI: {type(e).__name__}: {e}"
    return f"{type(e).__name__}: {e}"


class Dispatcher:
    """Routes tool calls by name to their handlers.

    The registry is fixed at construction; the client is injected so tests
    (and alternative transports) can supply their own.
    """

    def __init__(self, client: XAIClient, tools: Iterable[ToolDescriptor] = TOOLS):
        self.client = client
        self._tools: Dict[str, ToolDescriptor] = {tool.name: tool for tool in tools}

    def list_tools(self) -> List[ToolDescriptor]:
        return list(self._tools.values())

    def get(self, name: str) -> ToolDescriptor:
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name, list(self._tools))
        return tool

    async def invoke(
        self,
        name: str,
        raw_args: Optional[Dict[str, Any]] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ToolResult:
        """Validate arguments, run the handler and normalize the outcome.

        Failures of any kind (unknown tool, bad input, upstream status,
        polling timeout, transport errors) come back as a failed ToolResult
        instead of raising. Cancellation is propagated.
        """
        started = time.monotonic()
        try:
            tool = self.get(name)
            params = tool.validate(raw_args)
            logger.info("Using tool: %s", name)
            payload = await tool.handler(self.client, params, progress)
        except asyncio.CancelledError:
            logger.info("Tool %s cancelled after %.1fs", name, time.monotonic() - started)
            raise
        except XAIMCPError as e:
            logger.warning("Tool %s failed: %s", name, e)
            return ToolResult.failure(_format_error(e))
        except httpx.HTTPError as e:
            logger.warning("Tool %s transport error: %s", name, e)
            return ToolResult.failure(_format_error(e))
        except Exception as e:
            logger.exception("Tool %s raised unexpectedly", name)
            return ToolResult.failure(_format_error(e))

        logger.info("Tool %s finished in %.1fs", name, time.monotonic() - started)
        return ToolResult(payload, is_error=not payload.get("success", False))
