"""
Thin adapter over the google-genai SDK.

Callers describe a request with plain value objects (GenerationRequest) and get
back raw text, an ImageResult, or grounding URIs. Retry policy lives in
services.retry; this module never retries.
"""
import base64
import binascii
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from google import genai
from google.genai import types

from core.config import Settings
from services.retry import is_rate_limit_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ImagePart:
    data: bytes
    mime_type: str = "image/jpeg"


ContentPart = Union[TextPart, ImagePart]


class ResponseFormat(str, Enum):
    text = "text/plain"
    json = "application/json"


@dataclass(frozen=True)
class GenerationConfig:
    """Per-request generation options"""

    response_format: ResponseFormat = ResponseFormat.text
    response_schema: Optional[types.Schema] = None
    temperature: Optional[float] = None
    system_instruction: Optional[str] = None
    aspect_ratio: Optional[str] = None  # image outputs only
    use_search_grounding: bool = False
    response_modalities: Optional[List[str]] = None


@dataclass(frozen=True)
class GenerationRequest:
    model: str
    parts: List[ContentPart]
    config: GenerationConfig = field(default_factory=GenerationConfig)


class ImageStatus(str, Enum):
    success = "success"
    empty = "empty"  # no image part, e.g. blocked by the safety filter
    failed = "failed"
    rate_limited = "rate_limited"


@dataclass
class ImageResult:
    """Outcome of an image request; only rate_limited should be retried"""

    status: ImageStatus
    image: Optional[str] = None  # base64 data URL
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status == ImageStatus.success


class GenerationClient:
    """Async client for Gemini text, JSON, grounded-search and image requests"""

    def __init__(self, settings: Settings, genai_client: Optional[genai.Client] = None):
        self.settings = settings
        self._genai_client = genai_client
        self.usage_stats = {
            "total_requests": 0,
            "successful_requests": 0,
            "failed_requests": 0,
            "total_processing_time": 0.0,
            "last_reset": datetime.now(),
        }

    def _get_client(self) -> genai.Client:
        # Created lazily so a missing API key surfaces on the first request, not at startup
        if self._genai_client is None:
            self._genai_client = genai.Client(api_key=self.settings.gemini_api_key)
            logger.info("Google GenAI client initialized")
        return self._genai_client

    @staticmethod
    def _build_contents(parts: List[ContentPart]) -> List[types.Content]:
        genai_parts = []
        for part in parts:
            if isinstance(part, ImagePart):
                genai_parts.append(types.Part(inline_data=types.Blob(mime_type=part.mime_type, data=part.data)))
            else:
                genai_parts.append(types.Part.from_text(text=part.text))
        return [types.Content(role="user", parts=genai_parts)]

    @staticmethod
    def _build_config(config: GenerationConfig) -> types.GenerateContentConfig:
        options: Dict[str, Any] = {}
        if config.temperature is not None:
            options["temperature"] = config.temperature
        if config.system_instruction:
            options["system_instruction"] = config.system_instruction
        if config.response_format == ResponseFormat.json:
            options["response_mime_type"] = ResponseFormat.json.value
            if config.response_schema is not None:
                options["response_schema"] = config.response_schema
        if config.aspect_ratio:
            options["image_config"] = types.ImageConfig(aspect_ratio=config.aspect_ratio)
        if config.use_search_grounding:
            options["tools"] = [types.Tool(google_search=types.GoogleSearch())]
        if config.response_modalities:
            options["response_modalities"] = config.response_modalities
        return types.GenerateContentConfig(**options)

    async def invoke(self, request: GenerationRequest) -> types.GenerateContentResponse:
        """Send one request and return the raw SDK response"""
        client = self._get_client()
        start_time = time.time()
        self.usage_stats["total_requests"] += 1

        try:
            response = await client.aio.models.generate_content(
                model=request.model,
                contents=self._build_contents(request.parts),
                config=self._build_config(request.config),
            )
        except Exception as e:
            self.usage_stats["failed_requests"] += 1
            logger.error(f"Gemini request to {request.model} failed: {e}")
            raise

        processing_time = time.time() - start_time
        self.usage_stats["successful_requests"] += 1
        self.usage_stats["total_processing_time"] += processing_time
        logger.info(f"Gemini request to {request.model} successful - Time: {processing_time:.2f}s")
        return response

    async def generate_text(self, request: GenerationRequest) -> str:
        """Raw response text ("" when the model returned none). JSON is not validated here."""
        response = await self.invoke(request)
        return self.extract_text(response)

    async def generate_image(self, request: GenerationRequest) -> ImageResult:
        """Return the first inline image of the response. Never raises."""
        try:
            response = await self.invoke(request)
        except Exception as e:
            if is_rate_limit_error(e):
                return ImageResult(status=ImageStatus.rate_limited, error=e)
            return ImageResult(status=ImageStatus.failed, error=e)

        image = self.extract_image(response)
        if image is None:
            logger.warning(f"Gemini response from {request.model} contained no image")
            return ImageResult(status=ImageStatus.empty)
        return ImageResult(status=ImageStatus.success, image=image)

    @staticmethod
    def _response_parts(response) -> List[Any]:
        # The SDK exposes parts on the response itself or nested under candidates
        candidates = getattr(response, "candidates", None)
        if candidates:
            content = getattr(candidates[0], "content", None)
            if content is not None and getattr(content, "parts", None):
                return list(content.parts)
        parts = getattr(response, "parts", None)
        return list(parts) if parts else []

    @staticmethod
    def extract_text(response) -> str:
        text = getattr(response, "text", None)
        return text or ""

    @classmethod
    def extract_image(cls, response) -> Optional[str]:
        for part in cls._response_parts(response):
            inline_data = getattr(part, "inline_data", None)
            if inline_data is None or not inline_data.data:
                continue
            mime_type = getattr(inline_data, "mime_type", None) or "image/png"
            return f"data:{mime_type};base64,{encode_image_data(inline_data.data)}"
        return None

    @staticmethod
    def grounding_uris(response) -> List[str]:
        """Web URIs from the grounding metadata of the first candidate"""
        candidates = getattr(response, "candidates", None)
        if not candidates:
            return []
        metadata = getattr(candidates[0], "grounding_metadata", None)
        chunks = getattr(metadata, "grounding_chunks", None) if metadata is not None else None

        uris = []
        for chunk in chunks or []:
            web = getattr(chunk, "web", None)
            uri = getattr(web, "uri", None) if web is not None else None
            if uri:
                uris.append(uri)
        return uris

    def get_usage_statistics(self) -> Dict[str, Any]:
        return {
            **self.usage_stats,
            "success_rate": (self.usage_stats["successful_requests"] / max(self.usage_stats["total_requests"], 1) * 100),
            "average_processing_time": (
                self.usage_stats["total_processing_time"] / max(self.usage_stats["successful_requests"], 1)
            ),
        }

    async def close(self):
        if self._genai_client is not None:
            aio_client = getattr(self._genai_client, "aio", None)
            if aio_client is not None and hasattr(aio_client, "aclose"):
                await aio_client.aclose()
            self._genai_client = None


def encode_image_data(image_data: Union[bytes, str]) -> str:
    """Base64 text for inline image data, which the SDK may hand back raw or already encoded"""
    if isinstance(image_data, str):
        return image_data

    # Raw PNG starts with 89504e47, raw JPEG with ffd8ff
    first_hex = image_data[:4].hex()
    if first_hex.startswith("89504e47") or first_hex.startswith("ffd8ff"):
        return base64.b64encode(image_data).decode("utf-8")

    try:
        base64.b64decode(image_data, validate=True)
        return image_data.decode("ascii")
    except (binascii.Error, ValueError):
        return base64.b64encode(image_data).decode("utf-8")
