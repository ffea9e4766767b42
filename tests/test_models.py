import pytest
from pydantic import ValidationError

from xai_mcp_server.models import (
    AnalyzeImageInput,
    ChatInput,
    GenerateImageInput,
    GenerateVideoInput,
    ImageDetail,
    LiveSearchInput,
    SearchSource,
)


def test_chat_defaults():
    parsed = ChatInput.model_validate({"message": "Hello"})
    assert parsed.model == "grok-3"
    assert parsed.temperature == 0.7
    assert parsed.system_prompt is None


@pytest.mark.parametrize(
    "field, value",
    [("temperature", 3), ("temperature", -0.1), ("top_p", 1.5), ("frequency_penalty", 2.5), ("presence_penalty", -3)],
)
def test_chat_rejects_out_of_range(field, value):
    with pytest.raises(ValidationError):
        ChatInput.model_validate({"message": "Hello", field: value})


def test_chat_requires_message_and_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        ChatInput.model_validate({})
    with pytest.raises(ValidationError):
        ChatInput.model_validate({"message": "Hi", "stream": True})


def test_image_count_bounds():
    assert GenerateImageInput.model_validate({"prompt": "A cat", "n": 10}).n == 10
    with pytest.raises(ValidationError):
        GenerateImageInput.model_validate({"prompt": "A cat", "n": 11})
    with pytest.raises(ValidationError):
        GenerateImageInput.model_validate({"prompt": "A cat", "n": 0})


def test_image_aspect_ratio_enum():
    assert GenerateImageInput.model_validate({"prompt": "A cat", "aspect_ratio": "16:9"}).aspect_ratio.value == "16:9"
    with pytest.raises(ValidationError):
        GenerateImageInput.model_validate({"prompt": "A cat", "aspect_ratio": "invalid"})


def test_vision_requires_image_url_and_validates_detail():
    with pytest.raises(ValidationError):
        AnalyzeImageInput.model_validate({})
    parsed = AnalyzeImageInput.model_validate({"image_url": "https://example.com/img.jpg", "detail": "low"})
    assert parsed.detail is ImageDetail.LOW
    assert parsed.prompt == "Describe this image in detail."
    with pytest.raises(ValidationError):
        AnalyzeImageInput.model_validate({"image_url": "https://example.com/img.jpg", "detail": "invalid"})


def test_live_search_defaults_to_web():
    parsed = LiveSearchInput.model_validate({"query": "test"})
    assert parsed.sources == [SearchSource.WEB]
    assert parsed.max_results == 10


def test_live_search_sources_enum_and_max_results():
    LiveSearchInput.model_validate({"query": "test", "sources": ["web", "x"]})
    with pytest.raises(ValidationError):
        LiveSearchInput.model_validate({"query": "test", "sources": ["invalid"]})
    with pytest.raises(ValidationError):
        LiveSearchInput.model_validate({"query": "test", "max_results": 25})


def test_live_search_rejects_conflicting_domains():
    with pytest.raises(ValidationError, match="Cannot use both allowed_domains and excluded_domains together"):
        LiveSearchInput.model_validate(
            {"query": "test", "web_filters": {"allowed_domains": ["a.com"], "excluded_domains": ["b.com"]}}
        )


def test_live_search_rejects_conflicting_handles():
    with pytest.raises(ValidationError, match="Cannot use both allowed_handles and excluded_handles together"):
        LiveSearchInput.model_validate(
            {"query": "test", "sources": ["x"], "x_filters": {"allowed_handles": ["u1"], "excluded_handles": ["u2"]}}
        )


def test_empty_allow_list_counts_as_set():
    with pytest.raises(ValidationError, match="Cannot use both allowed_domains and excluded_domains together"):
        LiveSearchInput.model_validate(
            {"query": "test", "web_filters": {"allowed_domains": [], "excluded_domains": ["b.com"]}}
        )
    with pytest.raises(ValidationError, match="Cannot use both allowed_handles and excluded_handles together"):
        LiveSearchInput.model_validate(
            {"query": "test", "sources": ["x"], "x_filters": {"allowed_handles": [], "excluded_handles": ["u2"]}}
        )


def test_live_search_caps_domain_list():
    with pytest.raises(ValidationError):
        LiveSearchInput.model_validate(
            {"query": "test", "web_filters": {"allowed_domains": [f"d{i}.com" for i in range(6)]}}
        )


def test_video_duration_and_resolution():
    assert GenerateVideoInput.model_validate({"prompt": "A cat"}).duration == 5
    with pytest.raises(ValidationError):
        GenerateVideoInput.model_validate({"prompt": "A cat", "duration": 20})
    GenerateVideoInput.model_validate({"prompt": "A cat", "resolution": "720p"})
    with pytest.raises(ValidationError):
        GenerateVideoInput.model_validate({"prompt": "A cat", "resolution": "1080p"})


def test_video_edit_branch_flag():
    assert GenerateVideoInput.model_validate({"prompt": "p", "video_url": "https://x/v.mp4"}).is_edit
    assert not GenerateVideoInput.model_validate({"prompt": "p", "image_url": "https://x/i.png"}).is_edit
