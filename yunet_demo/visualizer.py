"""
Visualization for the face detection demo.

Responsibility:
    Draw bounding boxes, the five facial landmarks, confidence scores
    and an optional FPS counter onto a copy of a frame.

Non-goals:
    - No file writing.
    - No detection or model logic.
"""

import logging
from typing import Sequence

import cv2
import numpy as np

from yunet_demo.detection import Detection

logger = logging.getLogger(__name__)

# Rendering constants (BGR colors)
_FONT = cv2.FONT_HERSHEY_SIMPLEX
_FONT_SCALE = 0.5
_TEXT_COLOR = (0, 255, 0)
_BOX_COLOR = (0, 255, 0)
_FPS_ORIGIN = (0, 15)
_SCORE_OFFSET_Y = 15
_LANDMARK_RADIUS = 2
# right eye, left eye, nose tip, right mouth corner, left mouth corner
_LANDMARK_COLORS = (
    (255, 0, 0),
    (0, 0, 255),
    (0, 255, 0),
    (255, 0, 255),
    (0, 255, 255),
)


def visualize(
    frame: np.ndarray,
    detections: Sequence[Detection],
    verbose: bool = False,
    fps: float = -1,
    thickness: int = 2,
) -> np.ndarray:
    """Return an annotated copy of `frame`.

    Args:
        frame: Input BGR image (not modified).
        detections: Faces to draw, in the order given.
        verbose: Log one line per face.
        fps: Frames per second to overlay; values <= 0 omit the overlay.
        thickness: Line thickness for boxes and landmarks.
    """
    output = frame.copy()

    if fps > 0:
        cv2.putText(output, f"FPS: {fps:.2f}", _FPS_ORIGIN, _FONT, _FONT_SCALE, _TEXT_COLOR)

    for i, det in enumerate(detections):
        if verbose:
            logger.info(
                "Face %d, top-left coordinates: (%g, %g), box width: %g, "
                "box height: %g, score: %g",
                i, det.x, det.y, det.width, det.height, det.score,
            )

        x, y = int(det.x), int(det.y)
        cv2.rectangle(
            output,
            (x, y, int(det.width), int(det.height)),
            _BOX_COLOR,
            thickness,
        )

        for (lx, ly), color in zip(det.landmarks, _LANDMARK_COLORS):
            cv2.circle(output, (int(lx), int(ly)), _LANDMARK_RADIUS, color, thickness)

        cv2.putText(
            output,
            format_score(det.score),
            (x, y + _SCORE_OFFSET_Y),
            _FONT,
            _FONT_SCALE,
            _TEXT_COLOR,
        )

    return output


def format_score(score: float) -> str:
    """Format a confidence score with exactly four decimals."""
    return f"{score:.4f}"


def show_frame(window_name: str, frame: np.ndarray) -> int:
    """Show a frame in a window and poll the keyboard once.

    Returns:
        The key code pressed during waitKey, or -1 if no key.
    """
    cv2.imshow(window_name, frame)
    return cv2.waitKey(1)
