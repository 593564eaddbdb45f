"""
Module: aspect_gen.utils.uploads
Purpose: Turn user-supplied files and data URIs into ImageBlobs
Dependencies: Pillow

Only image media types are accepted; anything else is rejected here, before
the session ever sees it.
"""

from PIL import Image, UnidentifiedImageError
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple, Union
import mimetypes

from aspect_gen.errors import UploadRejectedError
from aspect_gen.schemas import ImageBlob
from aspect_gen.utils import image_codec


def is_image_media_type(media_type: Optional[str]) -> bool:
    return bool(media_type) and media_type.lower().startswith("image/")


def blob_from_bytes(data: bytes, media_type: Optional[str] = None) -> ImageBlob:
    """
    Wrap raw file bytes as an ImageBlob.

    When media_type is missing, Pillow is asked to identify the format.

    Args:
        data: Raw file contents
        media_type: Declared MIME type, if known

    Raises:
        UploadRejectedError: If the data is not an image
    """
    if not media_type:
        try:
            with Image.open(BytesIO(data)) as img:
                media_type = Image.MIME.get(img.format or "")
        except UnidentifiedImageError:
            media_type = None

    if not is_image_media_type(media_type):
        raise UploadRejectedError("Please upload an image file.")

    return ImageBlob.from_bytes(data, media_type)


def load_image_file(path: Union[str, Path]) -> ImageBlob:
    """
    Read an image file from disk.

    Example:
        >>> blob = load_image_file("photo.jpg")
        >>> blob.decode()[0]
        'image/jpeg'
    """
    path = Path(path)
    media_type, _ = mimetypes.guess_type(path.name)
    return blob_from_bytes(path.read_bytes(), media_type)


def blob_from_data_uri(data_uri: str) -> ImageBlob:
    """
    Accept a combined image string from a browser upload.

    Raises:
        MalformedImageError: If the string cannot be split or the payload
            is not valid base64
        UploadRejectedError: If the declared type is not an image type
    """
    media_type, _ = image_codec.decode(data_uri)
    if not is_image_media_type(media_type):
        raise UploadRejectedError("Please upload an image file.")
    blob = ImageBlob(data_uri)
    blob.to_bytes()
    return blob


def image_size(blob: ImageBlob) -> Optional[Tuple[int, int]]:
    """Pixel (width, height) of a blob, or None if Pillow cannot read it."""
    try:
        with Image.open(BytesIO(blob.to_bytes())) as img:
            return img.size
    except (UnidentifiedImageError, ValueError, OSError):
        return None
