"""
FaceDetector — facade over cv2.FaceDetectorYN.

Public contract:
    FaceDetector(config)
    FaceDetector.set_input_size((width, height)) -> None
    FaceDetector.detect(frame: np.ndarray) -> list[Detection]

Constraints:
    - Input must be a BGR numpy array (as returned by OpenCV).
    - set_input_size() must be called whenever the processed frame
      size changes; the detector does not track it for you.
    - Thread-safety is not guaranteed (single-threaded design).

Non-goals:
    - No file reading, camera access, or I/O of any kind.
    - No visualization.
    - No tracking or temporal state.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from yunet_demo.config import AppConfig, load_config
from yunet_demo.detection import Detection
from yunet_demo.model_loader import load_model

logger = logging.getLogger(__name__)


class FaceDetector:
    """Face detector using YuNet via cv2.FaceDetectorYN.

    Usage:
        detector = FaceDetector()                    # Uses safe defaults
        detector = FaceDetector(config=my_config)    # Custom config
        detector.set_input_size((640, 480))
        detections = detector.detect(frame)          # BGR numpy array

    The constructor creates the OpenCV handle once. Model loading,
    NMS and backend dispatch are all done by OpenCV.
    """

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        """Initialize the detector and load the model.

        Raises:
            FileNotFoundError: If the model file is missing.
            RuntimeError: If OpenCV cannot create the detector.
        """
        if config is None:
            config = load_config()

        self._config = config
        self._handle = load_model(config)
        self._input_size: Tuple[int, int] = tuple(config.model.input_size)

        logger.info(
            "FaceDetector initialized (score_threshold=%.2f, nms_threshold=%.2f, top_k=%d)",
            config.detection.score_threshold,
            config.detection.nms_threshold,
            config.detection.top_k,
        )

    @property
    def input_size(self) -> Tuple[int, int]:
        """The (width, height) the detector currently expects."""
        return self._input_size

    def set_input_size(self, size: Tuple[int, int]) -> None:
        """Reconfigure the expected input resolution as (width, height)."""
        width, height = int(size[0]), int(size[1])
        self._handle.setInputSize((width, height))
        self._input_size = (width, height)
        logger.debug("Detector input size set to %dx%d", width, height)

    def detect(self, frame: np.ndarray) -> List[Detection]:
        """Detect faces in a single BGR frame.

        Returns:
            Detections in the order produced by OpenCV. Empty list if
            no face is found.

        Raises:
            TypeError: If frame is not a numpy ndarray.
            ValueError: If frame has incorrect shape or is empty.
        """
        self._validate_frame(frame)

        _, faces = self._handle.detect(frame)
        if faces is None:
            return []

        return [Detection.from_row(row) for row in faces]

    @property
    def config(self) -> AppConfig:
        """Return the active configuration (read-only)."""
        return self._config

    @staticmethod
    def _validate_frame(frame: np.ndarray) -> None:
        """Validate that the input frame meets the API contract."""
        if not isinstance(frame, np.ndarray):
            raise TypeError(
                f"Expected frame to be a numpy ndarray, "
                f"got {type(frame).__name__}. "
                f"Use cv2.imread() or VideoCapture.read() to obtain frames."
            )

        if frame.size == 0:
            raise ValueError(
                "Frame is empty (zero size). "
                "Ensure the input source is providing valid frames."
            )

        if frame.ndim != 3 or frame.shape[2] != 3:
            raise ValueError(
                f"Expected a 3-channel BGR frame (H, W, 3), got shape {frame.shape}. "
                f"Grayscale or BGRA images must be converted to BGR first."
            )
