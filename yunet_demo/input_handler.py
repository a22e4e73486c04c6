"""
Input handling for the face detection demo.

Responsibility:
    Acquire frames from a still image or a video stream (file or camera),
    resize them by the configured scale factor, and expose them through
    a uniform iterator yielding (frame_id, frame) tuples.

Modes:
    - image: the image is decoded once at construction and the same
      resized frame is yielded forever (frame_id stays 0). The caller
      stops the iteration, which lets the demo measure detection speed
      on a static input.
    - video: frames are read until the stream is exhausted.

Non-goals:
    - No detection, drawing, or output writing.
    - No retries on bad sources.
"""

import logging
from typing import Iterator, Optional, Tuple, Union

import cv2
import numpy as np

from yunet_demo.config import InputConfig

logger = logging.getLogger(__name__)


class ImageReadError(IOError):
    """Raised when the still input image cannot be decoded."""


def scaled_size(width: float, height: float, scale: float) -> Tuple[int, int]:
    """Return (width, height) multiplied by `scale`, truncated toward zero.

    An unknown size (0x0) stays 0x0.

    Raises:
        ValueError: If a known size shrinks to an empty frame.
    """
    size = int(width * scale), int(height * scale)
    if width > 0 and height > 0 and min(size) <= 0:
        raise ValueError(
            f"input.scale={scale} yields an empty frame from a "
            f"{int(width)}x{int(height)} source. Use a larger --scale."
        )
    return size


class InputHandler:
    """Uniform frame iterator for a still image or a video stream.

    The mode follows the configuration: `image` wins over `video` when
    both are set. A digit-only video source opens the camera with that
    device index.

    Usage:
        handler = InputHandler(config.input)
        for frame_id, frame in handler:
            # process frame
        handler.release()
    """

    def __init__(self, config: InputConfig) -> None:
        """Initialize the input handler and open the source.

        Raises:
            ImageReadError: If the still image cannot be decoded.
            ValueError: If no source is configured, or the scale factor
                        shrinks the source to an empty frame.
        """
        self._scale = config.scale
        self._cap: Optional[cv2.VideoCapture] = None
        self._image: Optional[np.ndarray] = None
        self._frame_size: Tuple[int, int] = (0, 0)

        if config.image is not None:
            if config.video is not None:
                logger.warning(
                    "Both an input image and an input video were given; using the image."
                )
            self._mode = "image"
            self._source = config.image
            self._open_image(config.image)
        elif config.video is not None:
            self._mode = "video"
            self._source = config.video
            self._open_video(config.video)
        else:
            raise ValueError(
                "No input source configured. Pass --input_image or --input_video."
            )

        logger.info(
            "InputHandler initialized: mode=%s, source=%s, frame_size=%dx%d",
            self._mode, self._source, *self._frame_size,
        )

    @property
    def mode(self) -> str:
        """Either 'image' or 'video'."""
        return self._mode

    @property
    def frame_size(self) -> Tuple[int, int]:
        """(width, height) of the frames this handler yields.

        (0, 0) when a video stream does not report its size.
        """
        return self._frame_size

    @property
    def source_fps(self) -> float:
        """Frame rate reported by the video stream, or 0.0 if unknown."""
        if self._cap is None:
            return 0.0
        return float(self._cap.get(cv2.CAP_PROP_FPS) or 0.0)

    def _open_image(self, path: str) -> None:
        image = cv2.imread(path)
        if image is None or image.size == 0:
            raise ImageReadError(f"Cannot read image: {path}")

        h, w = image.shape[:2]
        self._frame_size = scaled_size(w, h, self._scale)
        self._image = self._resize(image)

    def _open_video(self, source: Union[str, int]) -> None:
        source_str = str(source).strip()
        if source_str.isdigit():
            self._cap = cv2.VideoCapture(int(source_str))
        else:
            self._cap = cv2.VideoCapture(source_str, cv2.CAP_ANY)

        if not self._cap.isOpened():
            logger.warning("Failed to open video source '%s'.", source_str)

        self._frame_size = scaled_size(
            self._cap.get(cv2.CAP_PROP_FRAME_WIDTH),
            self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT),
            self._scale,
        )

    def __iter__(self) -> Iterator[Tuple[int, np.ndarray]]:
        """Iterate over frames from the configured source.

        Yields:
            Tuples of (frame_id, frame) where frame is a BGR numpy array
            already resized to `frame_size`.
        """
        if self._mode == "image":
            yield from self._iterate_image()
        else:
            yield from self._iterate_video()

    def _iterate_image(self) -> Iterator[Tuple[int, np.ndarray]]:
        """Yield the same still frame until the caller stops."""
        while True:
            yield 0, self._image

    def _iterate_video(self) -> Iterator[Tuple[int, np.ndarray]]:
        """Yield frames from a video file or camera until it runs dry."""
        frame_id = 0
        while self._cap is not None:
            ret, frame = self._cap.read()
            if not ret or frame is None:
                logger.error("No frames grabbed!")
                break

            yield frame_id, self._resize(frame)
            frame_id += 1

    def _resize(self, frame: np.ndarray) -> np.ndarray:
        """Resize a frame to `frame_size` (the stream's size times scale)."""
        width, height = self._frame_size
        if width <= 0 or height <= 0:
            # Stream reported no size: scale from the frame itself
            h, w = frame.shape[:2]
            width, height = scaled_size(w, h, self._scale)
        if (width, height) == (frame.shape[1], frame.shape[0]):
            return frame
        return cv2.resize(frame, (width, height))

    def release(self) -> None:
        """Release any held resources (video capture handles)."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.debug("VideoCapture released.")

    def __del__(self) -> None:
        """Safety net: release resources if not explicitly released."""
        self.release()
