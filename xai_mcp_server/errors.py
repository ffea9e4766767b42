"""Error taxonomy shared by the client, the tool handlers and the dispatcher."""

from typing import List, Optional

from pydantic import ValidationError


class XAIMCPError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(XAIMCPError):
    """Required configuration is missing or malformed. Fatal at startup only."""


class UpstreamError(XAIMCPError):
    """The xAI API answered with a non-success HTTP status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"xAI API error ({status_code}): {body}")


class VideoTimeoutError(XAIMCPError):
    """Video polling exhausted its attempt budget."""

    def __init__(self, request_id: str, attempts: int):
        self.request_id = request_id
        self.attempts = attempts
        super().__init__(
            f"Video generation timed out after {attempts} attempts (request_id: {request_id})"
        )


class UnknownToolError(XAIMCPError):
    """Dispatch miss: no tool registered under the requested name."""

    def __init__(self, name: str, available: Optional[List[str]] = None):
        self.name = name
        self.available = available or []
        message = f"Unknown tool: {name}"
        if self.available:
            message += f". Available tools: {', '.join(self.available)}"
        super().__init__(message)


class ToolValidationError(XAIMCPError):
    """Caller arguments failed the tool's input model. Never reaches the network."""

    def __init__(self, tool_name: str, error: ValidationError):
        self.tool_name = tool_name
        self.errors = error.errors()
        super().__init__(
            f"Invalid arguments for tool '{tool_name}': {_summarize(self.errors)}"
        )


def _summarize(errors: List[dict]) -> str:
    """Flatten pydantic error dicts into 'field: message; field: message'."""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        # model_validator errors carry an empty loc and a "Value error, " prefix
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)
