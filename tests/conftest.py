"""
Shared fixtures: small real images and stand-ins for the Gemini service.
"""

import sys
from pathlib import Path
from io import BytesIO
from types import SimpleNamespace
import asyncio
import base64

import pytest
from PIL import Image

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from aspect_gen.schemas import ImageBlob


def make_image_bytes(size=(8, 6), color=(200, 40, 40), fmt="PNG") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def image_response(*parts):
    """Build a generate_content-shaped response with one candidate."""
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


def inline_part(data, mime_type="image/png"):
    return SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type), text=None)


def text_part(text):
    return SimpleNamespace(inline_data=None, text=text)


class FakeModels:
    """Records generate_content calls and replays a response or error."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class FakeGenAIClient:
    def __init__(self, response=None, error=None):
        self.models = FakeModels(response=response, error=error)
        self.aio = SimpleNamespace(models=self.models)


class FakeGenerator:
    """
    Generation client double for session tests.

    Set gate to an asyncio.Event to hold generate() until it is set.
    """

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.gate = None
        self.calls = []

    async def generate(self, source, ratio):
        self.calls.append((source, ratio))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


async def settle():
    """Let pending tasks run up to their next await."""
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.fixture
def png_bytes():
    return make_image_bytes()


@pytest.fixture
def png_blob(png_bytes):
    return ImageBlob.from_bytes(png_bytes, "image/png")


@pytest.fixture
def jpeg_blob():
    return ImageBlob.from_bytes(make_image_bytes(size=(12, 9), fmt="JPEG"), "image/jpeg")


@pytest.fixture
def result_blob():
    data = make_image_bytes(size=(16, 9), color=(10, 120, 220))
    return ImageBlob("data:image/png;base64," + base64.b64encode(data).decode("ascii"))


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def no_api_key(monkeypatch):
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
