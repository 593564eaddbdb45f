"""
Module: aspect_gen.schemas
Purpose: Value types and session state shared by the client, session and server
Dependencies: dataclasses, enum
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union
import base64
import binascii

from aspect_gen.errors import MalformedImageError
from aspect_gen.utils import image_codec


class AspectRatio(str, Enum):
    """Target aspect ratios accepted by the generation model."""

    SQUARE = "1:1"
    PORTRAIT_3_4 = "3:4"
    LANDSCAPE_4_3 = "4:3"
    PORTRAIT_9_16 = "9:16"
    LANDSCAPE_16_9 = "16:9"

    @classmethod
    def parse(cls, value: Union["AspectRatio", str]) -> "AspectRatio":
        """
        Convert a string such as "16:9" to an AspectRatio.

        Raises:
            ValueError: If value is not one of the supported ratios
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip())
        except ValueError:
            valid = ", ".join(r.value for r in cls)
            raise ValueError(f"Unsupported aspect ratio: {value!r}. Available: {valid}") from None


def available_ratios() -> List[AspectRatio]:
    """Ratios in the order they are offered to the user."""
    return list(AspectRatio)


class AppStatus(str, Enum):
    IDLE = "IDLE"
    LOADING = "LOADING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class ImageView(str, Enum):
    ORIGINAL = "original"
    GENERATED = "generated"


@dataclass(frozen=True)
class ImageBlob:
    """
    An encoded image carried as a combined data URI.

    The string is kept exactly as supplied; it is only split into media type
    and payload when decode() is called, so a malformed upload surfaces as a
    MalformedImageError at generation time rather than at selection time.

    Attributes:
        data_uri: "data:<mediaType>;base64,<payload>"
    """

    data_uri: str

    @classmethod
    def from_parts(cls, media_type: str, payload: str) -> "ImageBlob":
        return cls(image_codec.encode(media_type, payload))

    @classmethod
    def from_bytes(cls, data: bytes, media_type: str = image_codec.DEFAULT_MEDIA_TYPE) -> "ImageBlob":
        return cls.from_parts(media_type, base64.b64encode(data).decode("ascii"))

    def decode(self) -> Tuple[str, str]:
        """Return (media_type, payload) via the image codec."""
        return image_codec.decode(self.data_uri)

    def to_bytes(self) -> bytes:
        """
        Return the raw image bytes.

        Raises:
            MalformedImageError: If the string is malformed or the payload
                is not valid base64
        """
        _, payload = self.decode()
        try:
            return base64.b64decode(payload)
        except (binascii.Error, ValueError) as e:
            raise MalformedImageError(f"Image payload is not valid base64: {e}") from e


@dataclass
class ApplicationState:
    """
    Mutable per-session state.

    Invariants held by AspectSession:
        - active_view is GENERATED only while generated is set
        - error_message is set only while status is ERROR
    """

    original: Optional[ImageBlob] = None
    generated: Optional[ImageBlob] = None
    active_view: ImageView = ImageView.ORIGINAL
    status: AppStatus = AppStatus.IDLE
    error_message: Optional[str] = None

    def blob_for(self, view: ImageView) -> Optional[ImageBlob]:
        return self.original if view == ImageView.ORIGINAL else self.generated
