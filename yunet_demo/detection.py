"""
Detection data transfer object.

This module defines the Detection dataclass — the single output type
returned by FaceDetector.detect(). It is a frozen container with no
behavior beyond data access and conversion from the raw detector row.

Raw row layout (as produced by cv2.FaceDetectorYN):
    [x, y, w, h,
     right_eye_x, right_eye_y, left_eye_x, left_eye_y,
     nose_x, nose_y, mouth_right_x, mouth_right_y,
     mouth_left_x, mouth_left_y,
     score]
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

Point = Tuple[float, float]

NUM_LANDMARKS = 5
SCORE_INDEX = 14


@dataclass(frozen=True, slots=True)
class Detection:
    """A single detected face.

    Attributes:
        x: Top-left x coordinate of the bounding box.
        y: Top-left y coordinate of the bounding box.
        width: Bounding box width.
        height: Bounding box height.
        landmarks: Five (x, y) points: right eye, left eye, nose tip,
                   right mouth corner, left mouth corner.
        score: Detection confidence in [0.0, 1.0].

    Coordinates are in pixels of the frame passed to the detector.
    """

    x: float
    y: float
    width: float
    height: float
    landmarks: Tuple[Point, Point, Point, Point, Point]
    score: float

    @classmethod
    def from_row(cls, row: Sequence[float]) -> "Detection":
        """Build a Detection from one row of the detector output.

        Raises:
            ValueError: If the row has fewer than 15 values.
        """
        if len(row) <= SCORE_INDEX:
            raise ValueError(
                f"Detection row needs at least {SCORE_INDEX + 1} values, "
                f"got {len(row)}."
            )

        landmarks = tuple(
            (float(row[4 + 2 * i]), float(row[5 + 2 * i]))
            for i in range(NUM_LANDMARKS)
        )
        return cls(
            x=float(row[0]),
            y=float(row[1]),
            width=float(row[2]),
            height=float(row[3]),
            landmarks=landmarks,
            score=float(row[SCORE_INDEX]),
        )

    def to_dict(self) -> dict:
        """Return a plain dict suitable for JSON serialization."""
        return {
            "x": round(self.x, 2),
            "y": round(self.y, 2),
            "width": round(self.width, 2),
            "height": round(self.height, 2),
            "landmarks": [[round(px, 2), round(py, 2)] for px, py in self.landmarks],
            "score": round(self.score, 4),
        }
