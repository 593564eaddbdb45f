"""
Module: aspect_gen.errors
Purpose: Error taxonomy for image decoding, upload handling and generation
"""

from typing import Optional


class AspectGenError(Exception):
    """Base class for every error raised by aspect_gen."""


class MalformedImageError(AspectGenError, ValueError):
    """The combined image string is missing its delimiters or payload."""


class UploadRejectedError(AspectGenError, ValueError):
    """An upload did not carry an image media type."""


class MissingCredentialError(AspectGenError):
    """No API key is configured for the generation service."""

    def __init__(self, message: str = "API Key is missing. Please check your environment configuration."):
        super().__init__(message)


class GenerationServiceError(AspectGenError):
    """
    Transport or service level failure while calling the generation model.

    Attributes:
        cause: The underlying exception raised by the SDK or transport
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class NoImageInResponseError(AspectGenError):
    """The service answered but returned no inline image data."""

    def __init__(self, message: str = "No image data found in the response."):
        super().__init__(message)


class DownloadError(AspectGenError):
    """The image could not be rendered as a PNG download."""
