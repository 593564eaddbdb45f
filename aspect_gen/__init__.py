"""
AspectRatioAI - Re-compose images to a new aspect ratio with Gemini

Upload an image, pick a target ratio (1:1, 3:4, 4:3, 9:16, 16:9) and let the
Gemini image model recreate it in that ratio, preserving subject, style and
lighting. Compare original and generated results and download either one.

Main Components:
    - AspectSession: upload -> generate -> view/download state machine
    - GeminiGenerator: single-request client for the Gemini image model
    - image_codec: data URI split/build helpers

Example:
    >>> import asyncio
    >>> from aspect_gen import AspectSession
    >>> from aspect_gen.utils.uploads import load_image_file
    >>> session = AspectSession()
    >>> session.select_image(load_image_file("photo.jpg"))
    >>> asyncio.run(session.start_generation("16:9"))
    >>> path = session.download()
"""

__version__ = "0.1.0"

from aspect_gen.core import AspectSession
from aspect_gen.schemas import AppStatus, AspectRatio, ImageBlob, ImageView

__all__ = ["AspectSession", "AppStatus", "AspectRatio", "ImageBlob", "ImageView"]
