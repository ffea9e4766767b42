"""
Tool handlers.

Each tool pairs an input model (see models.py) with an async handler that maps
the validated input onto one or more XAIClient calls and normalizes the
upstream response into a JSON-serializable result dict with a ``success`` key.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from .client import ProgressCallback, XAIClient, video_url_of
from .errors import ToolValidationError
from .models import (
    AnalyzeImageInput,
    ChatInput,
    GenerateImageInput,
    GenerateVideoInput,
    ImageResponseFormat,
    LiveSearchInput,
)

logger = logging.getLogger(__name__)

B64_PREVIEW_CHARS = 100

Handler = Callable[[XAIClient, Any, Optional[ProgressCallback]], Awaitable[Dict[str, Any]]]


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


# ─── Chat ────────────────────────────────────────────────────────────────────


async def handle_chat(
    client: XAIClient, params: ChatInput, progress: Optional[ProgressCallback] = None
) -> Dict[str, Any]:
    """Send one user turn (plus optional system prompt) to a Grok chat model.

    Args:
        client: Upstream client.
        params: Validated chat input.

    Returns:
        dict: Assistant reply, token usage and finish reason.
    """
    messages: List[Dict[str, Any]] = []
    # the system message must be first and singular
    if params.system_prompt:
        messages.append({"role": "system", "content": params.system_prompt})
    messages.append({"role": "user", "content": params.message})

    response = await client.chat_completion(
        {
            "model": params.model,
            "messages": messages,
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
            "top_p": params.top_p,
            "frequency_penalty": params.frequency_penalty,
            "presence_penalty": params.presence_penalty,
        }
    )

    choice = (response.get("choices") or [{}])[0]
    return {
        "success": True,
        "model": response.get("model", params.model),
        "response": (choice.get("message") or {}).get("content") or "No response",
        "usage": response.get("usage"),
        "finish_reason": choice.get("finish_reason"),
    }


# ─── Images ──────────────────────────────────────────────────────────────────


async def handle_generate_image(
    client: XAIClient, params: GenerateImageInput, progress: Optional[ProgressCallback] = None
) -> Dict[str, Any]:
    """Generate images from a prompt, or edit ``image_url`` when given.

    Base64 payloads are cut to a short preview; a full image would flood the
    assistant's context.
    """
    request = {
        "model": params.model,
        "prompt": params.prompt,
        "n": params.n,
        "response_format": params.response_format.value,
    }
    if params.image_url:
        operation = "image_edit"
        request["image"] = params.image_url
        response = await client.edit_image(request)
    else:
        operation = "image_generation"
        request["aspect_ratio"] = _enum_value(params.aspect_ratio)
        response = await client.generate_image(request)

    data = response.get("data") or []
    result: Dict[str, Any] = {"success": True, "operation": operation}

    if params.response_format is ImageResponseFormat.B64_JSON:
        result["images"] = [
            {
                "index": i + 1,
                "base64": f"{(img.get('b64_json') or '')[:B64_PREVIEW_CHARS]}...",
                "revised_prompt": img.get("revised_prompt"),
            }
            for i, img in enumerate(data)
        ]
        result["note"] = "Base64 data truncated for display. Request response_format='url' for full images."
    else:
        result["images"] = [
            {"index": i + 1, "url": img.get("url"), "revised_prompt": img.get("revised_prompt")}
            for i, img in enumerate(data)
        ]

    result["count"] = len(result["images"])
    return result


async def handle_analyze_image(
    client: XAIClient, params: AnalyzeImageInput, progress: Optional[ProgressCallback] = None
) -> Dict[str, Any]:
    analysis = await client.analyze_image(
        params.image_url, params.prompt, params.model, params.detail.value
    )
    return {
        "success": True,
        "analysis": analysis,
        "image_url": params.image_url,
        "prompt": params.prompt,
        "model": params.model,
    }


# ─── Live Search ─────────────────────────────────────────────────────────────

# Tool argument name -> Responses API name. Unlisted fields keep their name.
_WEB_FILTER_NAMES = {
    "country": "user_location_country",
    "region": "user_location_region",
    "city": "user_location_city",
    "timezone": "user_location_timezone",
}
_X_FILTER_NAMES = {
    "allowed_handles": "allowed_x_handles",
    "excluded_handles": "excluded_x_handles",
}


def _upstream_filters(filters: BaseModel, names: Dict[str, str]) -> Dict[str, Any]:
    return {names.get(k, k): v for k, v in filters.model_dump(exclude_none=True).items()}


async def handle_live_search(
    client: XAIClient, params: LiveSearchInput, progress: Optional[ProgressCallback] = None
) -> Dict[str, Any]:
    """Search the web and/or X and return an answer with citations.

    Filter names are translated to the upstream vocabulary here
    (``country`` -> ``user_location_country``, ``allowed_handles`` ->
    ``allowed_x_handles``). Conflicting allow/deny lists never get this far;
    the input model rejects them.
    """
    sources = [s.value for s in params.sources]
    request: Dict[str, Any] = {
        "query": params.query,
        "sources": sources,
        "max_results": params.max_results,
        "model": params.model,
    }

    if params.web_filters and "web" in sources:
        request["web_filters"] = _upstream_filters(params.web_filters, _WEB_FILTER_NAMES)

    if params.x_filters and "x" in sources:
        request["x_filters"] = _upstream_filters(params.x_filters, _X_FILTER_NAMES)

    results = await client.live_search(request)
    return {
        "success": True,
        "query": params.query,
        "sources": sources,
        "content": results["content"],
        "citations": results.get("citations") or [],
        "tool_usage": results.get("tool_usage") or {},
    }


# ─── Video ───────────────────────────────────────────────────────────────────


async def handle_generate_video(
    client: XAIClient, params: GenerateVideoInput, progress: Optional[ProgressCallback] = None
) -> Dict[str, Any]:
    """Start a video job and optionally wait for it.

    A ``video_url`` routes to the edit endpoint, which takes no duration,
    aspect ratio or resolution. Without one the generation endpoint is used,
    animating ``image_url`` when provided.
    """
    if params.is_edit:
        operation = "video_edit"
        job = await client.edit_video(
            {"model": params.model, "prompt": params.prompt, "video_url": params.video_url}
        )
    else:
        operation = "image_to_video" if params.image_url else "video_generation"
        job = await client.generate_video(
            {
                "model": params.model,
                "prompt": params.prompt,
                "image_url": params.image_url,
                "duration": params.duration,
                "aspect_ratio": _enum_value(params.aspect_ratio),
                "resolution": _enum_value(params.resolution),
            }
        )

    request_id = job.get("request_id")
    if not request_id:
        logger.error("%s response carried no request_id: %s", operation, job)
        return {
            "success": False,
            "status": "failed",
            "operation": operation,
            "error": "xAI did not return a request_id for the video job",
        }

    if not params.wait_for_completion:
        return {
            "success": True,
            "status": "pending",
            "operation": operation,
            "request_id": request_id,
            "message": "Video generation started. Use the request_id to check status.",
        }

    final = await client.poll_video_completion(request_id, progress=progress)

    if final.get("status") == "failed":
        return {
            "success": False,
            "status": "failed",
            "operation": operation,
            "request_id": request_id,
            "error": final.get("error") or "Video generation failed",
        }

    result = {
        "success": True,
        "status": "completed",
        "operation": operation,
        "request_id": request_id,
        "video_url": video_url_of(final),
    }
    if final.get("duration") is not None:
        result["duration"] = final["duration"]
    return result


# ─── Registry ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ToolDescriptor:
    """Static description of one MCP tool plus the handler that runs it."""

    name: str
    title: str
    description: str
    input_model: Type[BaseModel]
    handler: Handler
    annotations: Dict[str, Any] = field(default_factory=dict)

    @property
    def input_schema(self) -> Dict[str, Any]:
        return self.input_model.model_json_schema()

    def validate(self, raw_args: Optional[Dict[str, Any]]) -> BaseModel:
        """Validate untyped caller arguments against this tool's input model.

        Raises:
            ToolValidationError: The arguments violate the model.
        """
        try:
            return self.input_model.model_validate(raw_args or {})
        except ValidationError as e:
            raise ToolValidationError(self.name, e) from e


def _annotations(title: str, read_only: bool, idempotent: bool) -> Dict[str, Any]:
    return {
        "title": title,
        "readOnlyHint": read_only,
        "destructiveHint": False,
        "idempotentHint": idempotent,
        "openWorldHint": True,
    }


TOOLS = (
    ToolDescriptor(
        name="chat",
        title="Chat with Grok",
        description=(
            "Chat with xAI's Grok models. Send messages and receive AI-generated responses. "
            "Supports summarizing, creative writing, Q&A, coding assistance, and more."
        ),
        input_model=ChatInput,
        handler=handle_chat,
        annotations=_annotations("Chat with Grok", read_only=True, idempotent=False),
    ),
    ToolDescriptor(
        name="generate_image",
        title="Generate Image",
        description=(
            "Generate images from text descriptions using xAI's Grok Imagine model, or edit an "
            "existing image by passing image_url. Returns image URLs or truncated base64 previews."
        ),
        input_model=GenerateImageInput,
        handler=handle_generate_image,
        annotations=_annotations("Generate Image", read_only=False, idempotent=False),
    ),
    ToolDescriptor(
        name="analyze_image",
        title="Analyze Image",
        description=(
            "Analyze images using xAI's vision-capable Grok models. Describe, extract text, "
            "or answer questions about images."
        ),
        input_model=AnalyzeImageInput,
        handler=handle_analyze_image,
        annotations=_annotations("Analyze Image", read_only=True, idempotent=True),
    ),
    ToolDescriptor(
        name="live_search",
        title="Live Search",
        description=(
            "Perform real-time search using xAI's Grok. Search the web and/or X (Twitter) for "
            "current information, with optional domain, handle, location and date filters. "
            "Returns an answer with citations."
        ),
        input_model=LiveSearchInput,
        handler=handle_live_search,
        annotations=_annotations("Live Search", read_only=True, idempotent=False),
    ),
    ToolDescriptor(
        name="generate_video",
        title="Generate Video",
        description=(
            "Generate videos from text descriptions using xAI. Can also animate an image "
            "(image_url) or edit an existing video (video_url)."
        ),
        input_model=GenerateVideoInput,
        handler=handle_generate_video,
        annotations=_annotations("Generate Video", read_only=False, idempotent=False),
    ),
)
