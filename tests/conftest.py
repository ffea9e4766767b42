import json
from typing import Any, List, Tuple, Union

import httpx
import pytest

from xai_mcp_server.client import XAIClient
from xai_mcp_server.config import Settings


class FakeUpstream:
    """Records outgoing requests and replays queued responses in order."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._queue: List[Tuple[int, Union[dict, str]]] = []

    def queue(self, body: Union[dict, list, str], status: int = 200, times: int = 1) -> None:
        for _ in range(times):
            self._queue.append((status, body))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._queue:
            return httpx.Response(599, text=f"no response queued for {request.method} {request.url}")
        status, body = self._queue.pop(0)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def body(self, index: int = 0) -> Any:
        return json.loads(self.requests[index].content)

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_key="test-key",
        base_url="https://api.x.ai/v1",
        video_poll_interval=0,
        video_poll_attempts=5,
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
async def client(settings: Settings, upstream: FakeUpstream):
    http = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    xai = XAIClient(settings, http_client=http)
    yield xai
    await http.aclose()


def chat_response(content: Any = "Hello!", model: str = "grok-3", finish_reason: str = "stop") -> dict:
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1234567890,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": finish_reason,
            }
        ],
        "usage": {"prompt_tokens": 5, "completion_tokens": 3, "total_tokens": 8},
    }
