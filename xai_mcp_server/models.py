"""Input models for the five MCP tools. One model per tool kind."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_CHAT_MODEL = "grok-3"
DEFAULT_IMAGE_MODEL = "grok-2-image-1212"
DEFAULT_VISION_MODEL = "grok-2-vision-1212"
DEFAULT_VIDEO_MODEL = "grok-imagine-video"
DEFAULT_VISION_PROMPT = "Describe this image in detail."

MAX_DOMAINS = 5
MAX_HANDLES = 10


class AspectRatio(str, Enum):
    WIDE = "16:9"
    STANDARD = "4:3"
    SQUARE = "1:1"
    TALL = "9:16"
    PORTRAIT = "3:4"
    PHOTO = "3:2"
    PHOTO_PORTRAIT = "2:3"


class ImageResponseFormat(str, Enum):
    URL = "url"
    B64_JSON = "b64_json"


class ImageDetail(str, Enum):
    LOW = "low"
    HIGH = "high"
    AUTO = "auto"


class SearchSource(str, Enum):
    WEB = "web"
    X = "x"


class VideoResolution(str, Enum):
    SD = "480p"
    HD = "720p"


# ─── Chat ────────────────────────────────────────────────────────────────────


class ChatInput(BaseModel):
    """Input for chatting with a Grok model."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    message: str = Field(..., description="The user message to send to Grok", min_length=1)
    model: str = Field(
        default=DEFAULT_CHAT_MODEL,
        description="Chat model: grok-4, grok-3, grok-3-mini, grok-3-fast",
        min_length=1,
    )
    system_prompt: Optional[str] = Field(
        default=None,
        description="Optional system prompt to set context (sent as the first message)",
    )
    temperature: float = Field(
        default=0.7,
        description="Sampling temperature (0-2). Lower = more focused, higher = more creative",
        ge=0,
        le=2,
    )
    max_tokens: Optional[int] = Field(default=None, description="Maximum tokens in response", ge=1)
    top_p: Optional[float] = Field(default=None, description="Nucleus sampling parameter (0-1)", ge=0, le=1)
    frequency_penalty: Optional[float] = Field(
        default=None, description="Penalty for token frequency (-2 to 2)", ge=-2, le=2
    )
    presence_penalty: Optional[float] = Field(
        default=None, description="Penalty for token presence (-2 to 2)", ge=-2, le=2
    )


# ─── Images ──────────────────────────────────────────────────────────────────


class GenerateImageInput(BaseModel):
    """Input for generating (or editing) images."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    prompt: str = Field(..., description="Text description of the image to generate", min_length=1)
    n: int = Field(default=1, description="Number of images to generate (1-10)", ge=1, le=10)
    model: str = Field(
        default=DEFAULT_IMAGE_MODEL,
        description="Image generation model (grok-2-image-1212, grok-imagine-image)",
        min_length=1,
    )
    aspect_ratio: Optional[AspectRatio] = Field(
        default=None, description="Aspect ratio for the generated image"
    )
    response_format: ImageResponseFormat = Field(
        default=ImageResponseFormat.URL,
        description="Response format: 'url' for hosted URL or 'b64_json' for base64",
    )
    image_url: Optional[str] = Field(
        default=None,
        description="Optional source image URL or base64 data URL. When set, the image is edited instead of generated.",
        min_length=1,
    )


class AnalyzeImageInput(BaseModel):
    """Input for analyzing an image with a vision model."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    image_url: str = Field(
        ..., description="URL of the image to analyze (or base64 data URL)", min_length=1
    )
    prompt: str = Field(
        default=DEFAULT_VISION_PROMPT,
        description="Question or instruction about the image",
        min_length=1,
    )
    detail: ImageDetail = Field(default=ImageDetail.AUTO, description="Image detail level for analysis")
    model: str = Field(default=DEFAULT_VISION_MODEL, description="Vision model to use", min_length=1)


# ─── Live Search ─────────────────────────────────────────────────────────────


class WebFilters(BaseModel):
    """Filters for the web source."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    allowed_domains: Optional[List[str]] = Field(
        default=None, description="Only search these domains (max 5)", max_length=MAX_DOMAINS
    )
    excluded_domains: Optional[List[str]] = Field(
        default=None, description="Never search these domains (max 5)", max_length=MAX_DOMAINS
    )
    country: Optional[str] = Field(default=None, description="ISO country code hint, e.g. 'US'")
    region: Optional[str] = Field(default=None, description="Region/state hint")
    city: Optional[str] = Field(default=None, description="City hint")
    timezone: Optional[str] = Field(default=None, description="IANA timezone hint, e.g. 'America/New_York'")
    enable_image_understanding: Optional[bool] = Field(
        default=None, description="Let the search agent look at images on result pages"
    )

    @model_validator(mode="after")
    def check_domains_exclusive(self) -> "WebFilters":
        if self.allowed_domains is not None and self.excluded_domains is not None:
            raise ValueError("Cannot use both allowed_domains and excluded_domains together")
        return self


class XFilters(BaseModel):
    """Filters for the X (Twitter) source."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    allowed_handles: Optional[List[str]] = Field(
        default=None, description="Only include posts from these handles (max 10)", max_length=MAX_HANDLES
    )
    excluded_handles: Optional[List[str]] = Field(
        default=None, description="Exclude posts from these handles (max 10)", max_length=MAX_HANDLES
    )
    from_date: Optional[str] = Field(default=None, description="Start date (YYYY-MM-DD)")
    to_date: Optional[str] = Field(default=None, description="End date (YYYY-MM-DD)")
    enable_image_understanding: Optional[bool] = Field(
        default=None, description="Let the search agent look at images in posts"
    )
    enable_video_understanding: Optional[bool] = Field(
        default=None, description="Let the search agent look at videos in posts"
    )

    @model_validator(mode="after")
    def check_handles_exclusive(self) -> "XFilters":
        if self.allowed_handles is not None and self.excluded_handles is not None:
            raise ValueError("Cannot use both allowed_handles and excluded_handles together")
        return self


class LiveSearchInput(BaseModel):
    """Input for real-time web and X search."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    query: str = Field(..., description="Search query", min_length=1)
    sources: List[SearchSource] = Field(
        default_factory=lambda: [SearchSource.WEB],
        description="Sources to search: web, x (Twitter/X)",
        min_length=1,
    )
    web_filters: Optional[WebFilters] = Field(default=None, description="Filters for web search")
    x_filters: Optional[XFilters] = Field(default=None, description="Filters for X search")
    max_results: int = Field(default=10, description="Maximum number of cited results (1-20)", ge=1, le=20)
    model: Optional[str] = Field(default=None, description="Search-capable model (defaults to grok-4)")


# ─── Video ───────────────────────────────────────────────────────────────────


class GenerateVideoInput(BaseModel):
    """Input for generating, animating or editing a video."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    prompt: str = Field(..., description="Text description of the video to generate", min_length=1)
    model: str = Field(default=DEFAULT_VIDEO_MODEL, description="Video generation model", min_length=1)
    image_url: Optional[str] = Field(
        default=None, description="Optional input image URL to animate", min_length=1
    )
    video_url: Optional[str] = Field(
        default=None,
        description="Optional input video URL to edit. Switches to the video edit endpoint.",
        min_length=1,
    )
    duration: int = Field(
        default=5, description="Video duration in seconds (1-15). Ignored when editing.", ge=1, le=15
    )
    aspect_ratio: Optional[AspectRatio] = Field(
        default=None, description="Aspect ratio (e.g., '16:9', '9:16', '1:1')"
    )
    resolution: Optional[VideoResolution] = Field(default=None, description="Output resolution: 480p or 720p")
    wait_for_completion: bool = Field(
        default=True, description="Wait for video generation to complete (polls status)"
    )

    @property
    def is_edit(self) -> bool:
        return self.video_url is not None
