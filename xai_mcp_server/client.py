"""
xAI API Client
Async client for xAI's Grok REST API (https://docs.x.ai/docs/api-reference).
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from .config import Settings
from .errors import UpstreamError, VideoTimeoutError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], Awaitable[None]]

# ─── Defaults ────────────────────────────────────────────────────────────────

SEARCH_MODEL = "grok-4-0709"
VISION_MODEL = "grok-2-vision-1212"
VIDEO_TERMINAL_STATUSES = ("completed", "failed")


def video_url_of(status: Dict[str, Any]) -> Optional[str]:
    """Return the finished video URL from a status payload, if any."""
    return status.get("url") or status.get("video_url")


def _drop_none(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Remove unset optional fields so they are not sent upstream."""
    return {k: v for k, v in payload.items() if v is not None}


class XAIClient:
    """Thin async wrapper around the xAI REST API.

    One method per endpoint. Every call carries the bearer credential and
    returns the parsed JSON body; any non-2xx status raises ``UpstreamError``
    with the status code and raw body. There are no retries.

    Args:
        settings: Process settings (credential, base URL, timeouts).
        http_client: Optional pre-built ``httpx.AsyncClient``. Tests inject one
            backed by ``httpx.MockTransport``. When omitted the client builds
            and owns its own.
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=settings.request_timeout)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "XAIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ─── HTTP ────────────────────────────────────────────────────────────────

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _request(
        self, method: str, path: str, data: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Make an authenticated request and return the decoded JSON body."""
        url = f"{self.settings.base_url}{path}"
        logger.debug("%s %s", method, url)
        response = await self._http.request(
            method,
            url,
            headers=self._headers(),
            json=data,
        )
        if not response.is_success:
            logger.debug("%s %s -> %d", method, url, response.status_code)
            raise UpstreamError(response.status_code, response.text)
        return response.json()

    # ─── Models & Account ────────────────────────────────────────────────────

    async def list_models(self) -> Dict[str, Any]:
        return await self._request("GET", "/models")

    async def get_model(self, model_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/models/{model_id}")

    async def list_language_models(self) -> Dict[str, Any]:
        return await self._request("GET", "/language-models")

    async def list_image_generation_models(self) -> Dict[str, Any]:
        return await self._request("GET", "/image-generation-models")

    async def get_api_key_info(self) -> Dict[str, Any]:
        return await self._request("GET", "/api-key")

    async def tokenize_text(self, text: str, model: str) -> Dict[str, Any]:
        return await self._request("POST", "/tokenize-text", {"text": text, "model": model})

    # ─── Chat ────────────────────────────────────────────────────────────────

    async def chat_completion(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """POST /chat/completions. ``None`` fields are omitted from the body."""
        return await self._request("POST", "/chat/completions", _drop_none(request))

    async def get_deferred_completion(self, request_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/chat/deferred-completion/{request_id}")

    async def completion(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """Legacy text completion endpoint."""
        return await self._request("POST", "/completions", _drop_none(request))

    # ─── Responses API ───────────────────────────────────────────────────────

    async def create_response(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/responses", _drop_none(request))

    async def get_response(self, response_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/responses/{response_id}")

    async def delete_response(self, response_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/responses/{response_id}")

    # ─── Images ──────────────────────────────────────────────────────────────

    async def generate_image(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/images/generations", _drop_none(request))

    async def edit_image(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/images/edits", _drop_none(request))

    # ─── Video ───────────────────────────────────────────────────────────────

    async def generate_video(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/videos/generations", _drop_none(request))

    async def edit_video(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/videos/edits", _drop_none(request))

    async def get_video_status(self, request_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/videos/{request_id}")

    async def poll_video_completion(
        self,
        request_id: str,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, Any]:
        """Poll a video job until it finishes.

        A status payload is terminal when ``status`` is ``completed`` or
        ``failed``, or when it carries a result URL. The upstream returns
        ``{"url": ..., "duration": ...}`` without any ``status`` once a job is
        done, so a URL alone counts as completion.

        The wait between polls is an ordinary ``asyncio.sleep``; cancelling the
        calling task stops the loop at the next suspension point.

        Args:
            request_id: Job identifier from generate_video/edit_video.
            max_attempts: Maximum number of status polls (default from settings).
            interval: Seconds between polls (default from settings).
            progress: Optional ``await progress(attempt, max_attempts)`` hook
                called after each non-terminal poll.

        Returns:
            dict: The terminal status payload.

        Raises:
            VideoTimeoutError: No terminal status within ``max_attempts`` polls.
        """
        if max_attempts is None:
            max_attempts = self.settings.video_poll_attempts
        if interval is None:
            interval = self.settings.video_poll_interval

        try:
            for attempt in range(1, max_attempts + 1):
                status = await self.get_video_status(request_id)
                state = status.get("status")
                if state in VIDEO_TERMINAL_STATUSES or video_url_of(status):
                    logger.debug(
                        "Video %s finished on attempt %d (status=%s)", request_id, attempt, state
                    )
                    return status

                logger.debug(
                    "Video %s still %s (attempt %d/%d)", request_id, state, attempt, max_attempts
                )
                if progress is not None:
                    await progress(attempt, max_attempts)
                if attempt < max_attempts:
                    await asyncio.sleep(interval)
        except asyncio.CancelledError:
            logger.info("Polling for video %s cancelled", request_id)
            raise

        raise VideoTimeoutError(request_id, max_attempts)

    # ─── Live Search (Responses API with server-side tools) ─────────────────

    async def live_search(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """Run a search-augmented response.

        Args:
            request: ``query`` plus optional ``sources`` (``web``/``x``),
                ``web_filters``, ``x_filters``, ``max_results`` and ``model``.
                Filter keys use the upstream names (``allowed_x_handles``,
                ``user_location_country``...).

        Returns:
            dict: ``content``, ``citations``, ``tool_usage`` and ``response_id``.
        """
        sources = request.get("sources") or ["web"]
        tools: List[Dict[str, Any]] = []
        if "web" in sources:
            tools.append(_search_tool("web_search", request.get("web_filters") or {}))
        if "x" in sources:
            tools.append(_search_tool("x_search", request.get("x_filters") or {}))

        prompt = request["query"]
        if request.get("max_results"):
            prompt += f"\n\nCite at most {request['max_results']} sources."

        response = await self.create_response(
            {
                "model": request.get("model") or SEARCH_MODEL,
                "input": [{"role": "user", "content": prompt}],
                "tools": tools,
                "store": False,
            }
        )

        return {
            "content": _response_text(response) or "No results found",
            "citations": response.get("citations") or [],
            "tool_usage": response.get("server_side_tool_usage") or {},
            "response_id": response.get("id"),
        }

    # ─── Vision ──────────────────────────────────────────────────────────────

    async def analyze_image(
        self,
        image_url: str,
        prompt: str,
        model: str = VISION_MODEL,
        detail: str = "auto",
    ) -> str:
        """Ask a vision model about one image and return its answer text."""
        response = await self.chat_completion(
            {
                "model": model,
                "messages": [
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt},
                            {"type": "image_url", "image_url": {"url": image_url, "detail": detail}},
                        ],
                    }
                ],
            }
        )
        choices = response.get("choices") or [{}]
        return (choices[0].get("message") or {}).get("content") or "No analysis available"


# ─── Request / Response Shaping ──────────────────────────────────────────────


# Keys the Responses API expects under a search tool's "filters" object.
# Every other option sits on the tool itself.
_NESTED_FILTER_KEYS = {
    "web_search": ("allowed_domains", "excluded_domains"),
    "x_search": ("allowed_x_handles", "excluded_x_handles", "from_date", "to_date"),
}


def _search_tool(tool_type: str, options: Dict[str, Any]) -> Dict[str, Any]:
    tool: Dict[str, Any] = {"type": tool_type}
    nested = _NESTED_FILTER_KEYS[tool_type]
    filters = {k: v for k, v in options.items() if k in nested and v is not None}
    if filters:
        tool["filters"] = filters
    for key, value in options.items():
        if key not in nested and value is not None:
            tool[key] = value
    return tool


def _response_text(response: Dict[str, Any]) -> str:
    """Collect assistant text from a Responses API payload."""
    if response.get("output_text"):
        return response["output_text"]

    chunks: List[str] = []
    for item in response.get("output") or []:
        if item.get("role") not in (None, "assistant"):
            continue
        content = item.get("content")
        if isinstance(content, str):
            chunks.append(content)
        elif isinstance(content, list):
            for part in content:
                if isinstance(part, dict) and part.get("text"):
                    chunks.append(part["text"])
    return "\n".join(chunks)
