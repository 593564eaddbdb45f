"""
Module: aspect_gen.utils.image_codec
Purpose: Split and build combined image strings ("data:<type>;base64,<payload>")
Dependencies: none

Both functions are pure. decode() is deliberately lenient about the media
type: an empty type ("data:;base64,...") is returned as "" and left for the
caller to default.
"""

from typing import Tuple

from aspect_gen.errors import MalformedImageError

DEFAULT_MEDIA_TYPE = "image/png"


def decode(image: str) -> Tuple[str, str]:
    """
    Extract the media type and payload from a combined image string.

    The payload is not base64-checked here; ImageBlob.to_bytes() does that,
    both at upload (uploads.blob_from_data_uri) and before generation.

    Args:
        image: String of the form "data:<mediaType>;base64,<payload>"

    Returns:
        Tuple of (media_type, payload). media_type may be empty.

    Raises:
        MalformedImageError: If ':', ';' and ',' are not present in that
            order, or the payload after the first ',' is empty

    Example:
        >>> decode("data:image/jpeg;base64,/9j/4AAQ")
        ('image/jpeg', '/9j/4AAQ')
    """
    if not isinstance(image, str):
        raise MalformedImageError(f"Expected a string, got {type(image).__name__}")

    colon = image.find(":")
    semicolon = image.find(";")
    comma = image.find(",")

    if colon < 0 or semicolon < 0 or comma < 0:
        raise MalformedImageError("Image string is missing a ':', ';' or ',' delimiter")
    if not colon < semicolon < comma:
        raise MalformedImageError("Image string delimiters are out of order")

    payload = image[comma + 1:]
    if not payload:
        raise MalformedImageError("Image string has an empty payload")

    return image[colon + 1:semicolon], payload


def encode(media_type: str, payload: str) -> str:
    """
    Build a combined image string from a media type and base64 payload.

    Args:
        media_type: MIME type, e.g. "image/png"
        payload: Base64 text

    Returns:
        "data:<media_type>;base64,<payload>"
    """
    return f"data:{media_type};base64,{payload}"
