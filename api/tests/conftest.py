"""
Pytest configuration and fixtures for Homey API tests.
"""
import base64
import io
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

from core.config import Settings
from services.generation_client import GenerationClient

PNG_HEADER = b"\x89PNG\r\n\x1a\n"


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers every requested delay"""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


class RateLimitError(Exception):
    """Shaped like google.genai.errors.APIError for a 429"""

    def __init__(self, message="429 RESOURCE_EXHAUSTED. Quota exceeded."):
        super().__init__(message)
        self.code = 429
        self.status = "RESOURCE_EXHAUSTED"


def text_response(text):
    return SimpleNamespace(text=text, candidates=[])


def image_response(image_bytes=None, mime_type="image/png"):
    """Response whose parts hold a text part and (optionally) one inline image"""
    parts = [SimpleNamespace(text="Here is your image", inline_data=None)]
    if image_bytes is not None:
        parts.append(SimpleNamespace(text=None, inline_data=SimpleNamespace(data=image_bytes, mime_type=mime_type)))
    candidate = SimpleNamespace(content=SimpleNamespace(parts=parts), grounding_metadata=None)
    return SimpleNamespace(text=None, candidates=[candidate])


def grounding_response(uris):
    chunks = [SimpleNamespace(web=SimpleNamespace(uri=uri)) for uri in uris]
    candidate = SimpleNamespace(content=None, grounding_metadata=SimpleNamespace(grounding_chunks=chunks))
    return SimpleNamespace(text="[]", candidates=[candidate])


def png_bytes(tag: str) -> bytes:
    return PNG_HEADER + tag.encode()


def data_url(tag: str) -> str:
    return f"data:image/png;base64,{base64.b64encode(png_bytes(tag)).decode()}"


@pytest.fixture
def test_settings():
    return Settings(
        text_model="test-text-model",
        image_model="test-image-model",
        log_format="console",
    )


@pytest.fixture
def recorded_sleep():
    return RecordingSleep()


@pytest.fixture
def mock_genai_client():
    """Mock google-genai client; set generate_content.side_effect per test"""
    mock = MagicMock()
    mock.aio.models.generate_content = AsyncMock()
    return mock


@pytest.fixture
def generation_client(test_settings, mock_genai_client):
    return GenerationClient(test_settings, genai_client=mock_genai_client)


@pytest.fixture
def sample_plan_data():
    return {
        "styleSummary": "A warm, grounded aesthetic with raw oak and matte black hardware.",
        "steps": [
            "Remove the drawers and hardware using a **TOOL:** Screwdriver (e.g., Stanley 4-in-1).",
            "[Image of: dresser with drawers removed]",
            "Sand all surfaces with **MATERIAL:** 120-grit sandpaper (e.g., 3M Pro Grade).",
        ],
        "costEstimate": "$50 - $100",
        "timeEstimate": "3-4 hours",
        "materials": ["120-grit sandpaper", "Wood stain"],
        "tools": ["Screwdriver", "Orbital sander"],
        "safety": ["Wear a dust mask while sanding."],
        "itemDescription": "A six-drawer pine dresser with tapered legs.",
    }


@pytest.fixture
def sample_plan_json(sample_plan_data):
    return json.dumps(sample_plan_data)


@pytest.fixture
def sample_base64_image():
    """Small JPEG photo as a data URL"""
    img = Image.new("RGB", (64, 48), color="saddlebrown")
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG")
    return f"data:image/jpeg;base64,{base64.b64encode(buffer.getvalue()).decode()}"
