"""
Module: aspect_gen.models.gemini
Purpose: Gemini image model client that re-composes an image to a new aspect ratio
Dependencies: google-genai

One call to generate() issues exactly one generate_content request. There is
no retry, caching or streaming; the model is generative, so identical inputs
can yield different pixels on every call.
"""

from google import genai
from google.genai import types
from typing import Any, Dict, Iterable, Optional, Union
import base64
import logging
import time

from aspect_gen.config import get_config
from aspect_gen.errors import (
    GenerationServiceError,
    MissingCredentialError,
    NoImageInResponseError,
)
from aspect_gen.schemas import AspectRatio, ImageBlob
from aspect_gen.utils.image_codec import DEFAULT_MEDIA_TYPE

logger = logging.getLogger(__name__)


class GeminiGenerator:
    """
    Gemini image-to-image client for aspect ratio re-composition.

    The credential is resolved on the first call to generate() and checked
    before any network activity. The SDK client is created lazily from it
    unless one is injected.

    Attributes:
        config: Generation section of the configuration
        model_id: Gemini model identifier
        prompt: Instruction sent alongside the source image

    Example:
        >>> gen = GeminiGenerator()
        >>> blob = ImageBlob("data:image/jpeg;base64,/9j/4AAQ...")
        >>> result = asyncio.run(gen.generate(blob, AspectRatio.LANDSCAPE_16_9))
        >>> result.data_uri[:22]
        'data:image/png;base64,'
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[Any] = None,
        model_id: Optional[str] = None,
    ):
        """
        Initialize the generator.

        Args:
            api_key: Explicit credential. If None, read from the environment
                     on first use (see Config.get_api_key).
            client: Pre-built genai.Client (or compatible object exposing
                    aio.models.generate_content)
            model_id: Override the configured model
        """
        self.config = get_config().get_section("generation")
        self.model_id = model_id or self.config["model_id"]
        self.prompt = self.config["prompt"]
        self.result_media_type = self.config.get("result_media_type") or DEFAULT_MEDIA_TYPE

        self._api_key = api_key
        self._client = client

    def _require_api_key(self) -> str:
        if not self._api_key:
            self._api_key = get_config().get_api_key()
        if not self._api_key:
            raise MissingCredentialError()
        return self._api_key

    @property
    def client(self) -> Any:
        """SDK client, created on first access."""
        if self._client is None:
            http_options = None
            timeout_ms = self.config.get("timeout_ms")
            if timeout_ms:
                http_options = types.HttpOptions(timeout=int(timeout_ms))
            logger.info(f"Creating Gemini client for model {self.model_id}")
            self._client = genai.Client(api_key=self._require_api_key(), http_options=http_options)
        return self._client

    def build_request(self, source: ImageBlob, ratio: Union[AspectRatio, str]) -> Dict[str, Any]:
        """
        Build the keyword arguments for generate_content.

        Args:
            source: Image to re-compose
            ratio: Target aspect ratio

        Returns:
            Dict with model, contents and config keys

        Raises:
            MalformedImageError: If source cannot be decoded
        """
        ratio = AspectRatio.parse(ratio)
        media_type, _ = source.decode()
        image_bytes = source.to_bytes()

        contents = types.Content(
            role="user",
            parts=[
                types.Part.from_bytes(data=image_bytes, mime_type=media_type or DEFAULT_MEDIA_TYPE),
                types.Part.from_text(text=self.prompt),
            ],
        )
        config = types.GenerateContentConfig(
            image_config=types.ImageConfig(aspect_ratio=ratio.value),
        )
        return {"model": self.model_id, "contents": contents, "config": config}

    async def generate(self, source: ImageBlob, ratio: Union[AspectRatio, str]) -> ImageBlob:
        """
        Re-compose an image to the requested aspect ratio.

        Args:
            source: Original image
            ratio: Target aspect ratio

        Returns:
            Generated image as a PNG ImageBlob

        Raises:
            MissingCredentialError: If no API key is configured
            MalformedImageError: If source is not a valid combined image string
            GenerationServiceError: On any transport or service failure
            NoImageInResponseError: If the response carries no inline image
        """
        self._require_api_key()
        ratio = AspectRatio.parse(ratio)
        request = self.build_request(source, ratio)

        logger.info(f"Requesting {ratio.value} re-composition from {self.model_id}")
        start_time = time.time()

        try:
            response = await self.client.aio.models.generate_content(**request)
        except Exception as e:
            logger.error(f"Gemini API error: {e}")
            raise GenerationServiceError(f"Image generation failed: {e}", cause=e) from e

        elapsed = time.time() - start_time
        logger.info(f"Gemini responded in {elapsed:.1f}s")

        return self.extract_image(response, media_type=self.result_media_type)

    @staticmethod
    def _first_candidate_parts(response: Any) -> Iterable[Any]:
        candidates = getattr(response, "candidates", None)
        if not candidates:
            return []
        content = getattr(candidates[0], "content", None)
        return getattr(content, "parts", None) or []

    @classmethod
    def extract_image(cls, response: Any, media_type: str = DEFAULT_MEDIA_TYPE) -> ImageBlob:
        """
        Return the first inline image part of the first candidate.

        Raises:
            NoImageInResponseError: If there are no candidates, no parts,
                or no part with inline data
        """
        for part in cls._first_candidate_parts(response):
            inline_data = getattr(part, "inline_data", None)
            data = getattr(inline_data, "data", None) if inline_data is not None else None
            if not data:
                continue
            if isinstance(data, (bytes, bytearray)):
                payload = base64.b64encode(bytes(data)).decode("ascii")
            else:
                payload = str(data)
            return ImageBlob.from_parts(media_type, payload)

        raise NoImageInResponseError()
