"""
Output handling for the face detection demo.

Responsibility:
    Route annotated frames to the display window and, optionally, to
    saved results (annotated image or video, detections JSON). Polls
    the keyboard when displaying: any key stops the demo.

Non-goals:
    - No detection or drawing logic.
    - No input acquisition.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import cv2
import numpy as np

from yunet_demo.config import AppConfig
from yunet_demo.detection import Detection
from yunet_demo.serializer import save_json
from yunet_demo.visualizer import show_frame

logger = logging.getLogger(__name__)

_DEFAULT_VIDEO_FPS = 20.0


class OutputHandler:
    """Routes annotated frames to the configured sinks.

    Usage:
        handler = OutputHandler(config, still=True)
        handler.process_frame(frame_id, annotated, detections)
        ...
        handler.finalize()  # Flush any buffered output

    In still mode the same frame is processed repeatedly, so the
    annotated image is written once and the JSON buffer keeps a
    single entry.
    """

    def __init__(
        self,
        config: AppConfig,
        still: bool = False,
        video_fps: float = 0.0,
    ) -> None:
        self._config = config
        self._still = still
        self._video_fps = video_fps if video_fps > 0 else _DEFAULT_VIDEO_FPS
        self._video_writer: Optional[cv2.VideoWriter] = None
        self._still_saved = False
        self._detections_buffer: Dict[int, List[Detection]] = {}

        self._save_path: Optional[Path] = None
        if config.output.save_path is not None:
            self._save_path = Path(config.output.save_path)
            self._save_path.mkdir(parents=True, exist_ok=True)

        logger.info(
            "OutputHandler initialized: display=%s, save_path=%s, save_json=%s",
            config.visualization.display, self._save_path, config.output.save_json,
        )

    def process_frame(
        self,
        frame_id: int,
        annotated: np.ndarray,
        detections: List[Detection],
    ) -> bool:
        """Send one annotated frame to every active sink.

        Returns:
            True to continue processing, False when a key was pressed
            in the display window.
        """
        if self._save_path is not None:
            self._save(annotated)

        if self._config.output.save_json:
            self._detections_buffer[frame_id] = list(detections)

        if self._config.visualization.display:
            key = show_frame(self._config.visualization.window_name, annotated)
            if key >= 0:
                logger.info("Key pressed (code %d), stopping.", key)
                return False

        return True

    def _save(self, annotated: np.ndarray) -> None:
        if self._still:
            if not self._still_saved:
                output_file = self._save_path / "result.jpg"
                cv2.imwrite(str(output_file), annotated)
                self._still_saved = True
                logger.info("Result saved to %s", output_file)
            return

        if self._video_writer is None:
            output_file = str(self._save_path / "result.avi")
            h, w = annotated.shape[:2]
            fourcc = cv2.VideoWriter_fourcc(*"XVID")
            self._video_writer = cv2.VideoWriter(output_file, fourcc, self._video_fps, (w, h))
            logger.info("Video writer opened: %s (%dx%d)", output_file, w, h)

        self._video_writer.write(annotated)

    def finalize(self) -> None:
        """Flush buffered output and release resources."""
        if self._config.output.save_json and self._detections_buffer:
            save_json(self._detections_buffer, str(self._save_path / "detections.json"))

        if self._video_writer is not None:
            self._video_writer.release()
            self._video_writer = None
            logger.info("Video writer released.")

        if self._config.visualization.display:
            cv2.destroyAllWindows()

        self._detections_buffer.clear()
        logger.debug("OutputHandler finalized.")
