"""
Module: aspect_gen.core
Purpose: Session state machine driving upload, generation, view and download
Dependencies: asyncio (caller's event loop)

AspectSession owns one ApplicationState and is the only writer to it.
Status moves Idle -> Loading -> Success | Error, and back to Idle on a new
upload or reset. Every generation request carries a token; a result whose
token is no longer current (because the image was replaced or the session
reset while the request was in flight) is discarded.
"""

from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, List, Optional, Union
import asyncio
import logging

from aspect_gen.config import get_config
from aspect_gen.schemas import (
    AppStatus,
    ApplicationState,
    AspectRatio,
    ImageBlob,
    ImageView,
)
from aspect_gen.utils.output_manager import OutputManager

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to generate image."
CANCELLED_MESSAGE = "Generation was cancelled."

StateListener = Callable[[ApplicationState], None]


class AspectSession:
    """
    Single-user session for re-composing one image at a time.

    Attributes:
        state: Current ApplicationState (read it, don't mutate it)
        selected_ratio: Ratio used when start_generation() gets no argument
        generator: Object with an async generate(source, ratio) method

    Example:
        >>> session = AspectSession()
        >>> session.select_image(load_image_file("photo.jpg"))
        >>> await session.start_generation("16:9")
        >>> session.state.status
        <AppStatus.SUCCESS: 'SUCCESS'>
        >>> session.download("downloads/")
    """

    def __init__(
        self,
        generator: Optional[Any] = None,
        output_manager: Optional[OutputManager] = None,
    ):
        """
        Initialize session.

        Args:
            generator: Generation client (default: GeminiGenerator, created on first use)
            output_manager: Download writer (default: configured download directory)
        """
        self.config = get_config()
        self.state = ApplicationState()
        self.selected_ratio = AspectRatio.parse(self.config.generation["default_ratio"])

        self._generator = generator
        self._output_manager = output_manager
        self._listeners: List[StateListener] = []
        self._token = 0

    @property
    def generator(self) -> Any:
        if self._generator is None:
            from aspect_gen.models.gemini import GeminiGenerator
            self._generator = GeminiGenerator()
        return self._generator

    @property
    def output_manager(self) -> OutputManager:
        if self._output_manager is None:
            self._output_manager = OutputManager(
                base_dir=self.config.output["directory"],
                naming_pattern=self.config.output["naming_pattern"],
            )
        return self._output_manager

    @property
    def is_loading(self) -> bool:
        return self.state.status == AppStatus.LOADING

    # Observation

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called with a state snapshot after every change.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = replace(self.state)
        for listener in list(self._listeners):
            listener(snapshot)

    # Operations

    def select_image(self, blob: Union[ImageBlob, str]) -> None:
        """
        Make blob the new original and drop everything derived from the old one.

        Any generation still in flight is orphaned; its result is ignored.
        """
        if isinstance(blob, str):
            blob = ImageBlob(blob)

        self._token += 1
        self.state.original = blob
        self.state.generated = None
        self.state.active_view = ImageView.ORIGINAL
        self.state.status = AppStatus.IDLE
        self.state.error_message = None
        logger.info("New source image selected")
        self._notify()

    def select_ratio(self, ratio: Union[AspectRatio, str]) -> bool:
        """
        Change the ratio used by the next generation.

        Returns:
            False (and no change) while a generation is in flight

        Raises:
            ValueError: If ratio is not a supported aspect ratio
        """
        ratio = AspectRatio.parse(ratio)
        if self.is_loading:
            logger.warning("Ratio change ignored while generating")
            return False
        self.selected_ratio = ratio
        return True

    async def start_generation(self, ratio: Optional[Union[AspectRatio, str]] = None) -> bool:
        """
        Generate a re-composed version of the original image.

        Failures never propagate: they leave status ERROR with a message.
        Cancelling the awaiting task also leaves status ERROR, so a new
        generation can start; the CancelledError is re-raised.

        Args:
            ratio: Target ratio (default: selected_ratio)

        Returns:
            True if a request was issued, False if skipped because there is
            no original image or a generation is already in flight

        Raises:
            ValueError: If ratio is not a supported aspect ratio
        """
        ratio = AspectRatio.parse(ratio) if ratio is not None else self.selected_ratio

        if self.state.original is None:
            logger.warning("Generation requested without a source image")
            return False
        if self.is_loading:
            logger.warning("Generation already in progress, ignoring request")
            return False

        self._token += 1
        token = self._token
        source = self.state.original

        self.selected_ratio = ratio
        self.state.status = AppStatus.LOADING
        self.state.error_message = None
        self._notify()

        try:
            result = await self.generator.generate(source, ratio)
        except asyncio.CancelledError:
            if token == self._token:
                logger.warning("Generation cancelled")
                self.state.status = AppStatus.ERROR
                self.state.error_message = CANCELLED_MESSAGE
                self._notify()
            raise
        except Exception as e:
            if token != self._token:
                logger.warning(f"Discarding failure from superseded request: {e}")
                return True
            logger.error(f"Generation failed: {e}")
            self.state.status = AppStatus.ERROR
            self.state.error_message = str(e) or GENERIC_FAILURE_MESSAGE
            self._notify()
            return True

        if token != self._token:
            logger.warning("Discarding result from superseded request")
            return True

        self.state.generated = result
        self.state.active_view = ImageView.GENERATED
        self.state.status = AppStatus.SUCCESS
        logger.info(f"Generated {ratio.value} image")
        self._notify()
        return True

    def set_active_view(self, view: Union[ImageView, str]) -> bool:
        """
        Switch between the original and generated image.

        Returns:
            False (and no change) if the requested image does not exist
        """
        view = ImageView(view)
        if self.state.blob_for(view) is None:
            return False
        if self.state.active_view != view:
            self.state.active_view = view
            self._notify()
        return True

    def reset(self, confirm: Union[bool, Callable[[], bool]] = False) -> bool:
        """
        Discard all images and return to the initial state.

        Args:
            confirm: True, or a callable asked for confirmation (e.g. click.confirm)

        Returns:
            True if the session was reset
        """
        confirmed = confirm() if callable(confirm) else bool(confirm)
        if not confirmed:
            return False

        self._token += 1
        self.state = ApplicationState()
        logger.info("Session reset")
        self._notify()
        return True

    def select_download_target(self) -> Optional[ImageBlob]:
        """Image matching the active view, or None."""
        return self.state.blob_for(self.state.active_view)

    def download(self, directory: Optional[Union[str, Path]] = None) -> Optional[Path]:
        """
        Save the active image as image-<view>-<timestamp>.png.

        Args:
            directory: Target directory (default: configured download directory)

        Returns:
            Path of the written file, or None when there is nothing to save
        """
        blob = self.select_download_target()
        if blob is None:
            return None
        manager = OutputManager(directory, self.output_manager.naming_pattern) if directory else self.output_manager
        return manager.save(blob, self.state.active_view)
