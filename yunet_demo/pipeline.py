"""
Acquisition loop for the face detection demo.

Responsibility:
    Pull frames from an InputHandler, run the detector on each one,
    time the detection call, draw the results with an FPS overlay and
    hand the annotated frame to the OutputHandler.

Termination is cooperative and only happens between iterations:
the output handler reports a key press, the source runs dry, or
`max_frames` frames have been processed.
"""

import logging
import time
from typing import Optional

from yunet_demo.config import VisualizationConfig
from yunet_demo.detector import FaceDetector
from yunet_demo.input_handler import InputHandler
from yunet_demo.output_handler import OutputHandler
from yunet_demo.visualizer import visualize

logger = logging.getLogger(__name__)


def run(
    detector: FaceDetector,
    input_handler: InputHandler,
    output_handler: OutputHandler,
    visualization: VisualizationConfig,
    max_frames: Optional[int] = None,
) -> int:
    """Run the detect/visualize/display loop.

    Returns:
        The number of frames processed.
    """
    width, height = input_handler.frame_size
    if width > 0 and height > 0:
        detector.set_input_size((width, height))

    frame_count = 0
    for frame_id, frame in input_handler:
        h, w = frame.shape[:2]
        if detector.input_size != (w, h):
            detector.set_input_size((w, h))

        start = time.perf_counter()
        detections = detector.detect(frame)
        elapsed = time.perf_counter() - start

        logger.debug("time = %.3fms", elapsed * 1000.0)
        fps = 1.0 / elapsed if elapsed > 0 else -1

        annotated = visualize(
            frame,
            detections,
            verbose=visualization.verbose,
            fps=fps,
            thickness=visualization.thickness,
        )
        frame_count += 1

        if not output_handler.process_frame(frame_id, annotated, detections):
            break

        if max_frames is not None and frame_count >= max_frames:
            logger.info("Reached max_frames=%d.", max_frames)
            break

    return frame_count
