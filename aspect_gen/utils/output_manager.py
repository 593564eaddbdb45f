"""
Output management for downloaded images.

Writes the currently viewed image to disk as image-<view>-<timestamp>.png,
where timestamp is epoch milliseconds.
"""

from PIL import Image, UnidentifiedImageError
from io import BytesIO
from pathlib import Path
from typing import Optional, Union
import logging
import time

from aspect_gen.errors import DownloadError
from aspect_gen.schemas import ImageBlob, ImageView

logger = logging.getLogger(__name__)

PNG_MEDIA_TYPE = "image/png"


class OutputManager:
    """
    Manages the download directory and file naming.

    Example:
        mgr = OutputManager(base_dir="downloads")
        path = mgr.save(blob, ImageView.GENERATED)
        # Returns: downloads/image-generated-1760000000000.png
    """

    def __init__(
        self,
        base_dir: Union[str, Path] = "downloads",
        naming_pattern: str = "image-{view}-{timestamp}.png",
    ):
        """
        Initialize output manager.

        Args:
            base_dir: Directory downloads are written to (created on first save)
            naming_pattern: Format string with {view} and {timestamp} fields
        """
        self.base_dir = Path(base_dir)
        self.naming_pattern = naming_pattern

    def filename_for(self, view: ImageView, timestamp_ms: Optional[int] = None) -> str:
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        return self.naming_pattern.format(view=ImageView(view).value, timestamp=timestamp_ms)

    def to_png(self, blob: ImageBlob) -> bytes:
        """
        PNG bytes for a blob, transcoding other formats with Pillow.

        Raises:
            MalformedImageError: If the blob cannot be decoded
            DownloadError: If Pillow cannot read the image (e.g. SVG)
        """
        media_type, _ = blob.decode()
        data = blob.to_bytes()
        if media_type.lower() == PNG_MEDIA_TYPE:
            return data

        try:
            with Image.open(BytesIO(data)) as img:
                if img.mode == "CMYK":
                    img = img.convert("RGB")
                buffer = BytesIO()
                img.save(buffer, format="PNG")
                return buffer.getvalue()
        except (UnidentifiedImageError, OSError) as e:
            raise DownloadError(f"Cannot convert {media_type or 'image'} to PNG: {e}") from e

    def save(
        self,
        blob: ImageBlob,
        view: ImageView,
        timestamp_ms: Optional[int] = None,
    ) -> Path:
        """
        Write a blob to the download directory as PNG.

        Non-PNG sources are transcoded with Pillow so the file content
        matches its extension.

        Args:
            blob: Image to write
            view: Which view the image came from (used in the filename)
            timestamp_ms: Override the timestamp (epoch milliseconds)

        Returns:
            Path of the written file

        Raises:
            MalformedImageError: If the blob cannot be decoded
            DownloadError: If the image cannot be converted to PNG
        """
        data = self.to_png(blob)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        path = self.base_dir / self.filename_for(view, timestamp_ms)
        path.write_bytes(data)
        logger.info(f"Saved {ImageView(view).value} image to: {path}")
        return path

    def __str__(self) -> str:
        return str(self.base_dir)

    def __repr__(self) -> str:
        return f"OutputManager(base_dir='{self.base_dir}')"
