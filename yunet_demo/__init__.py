"""
YuNet face detection demo built on OpenCV's cv2.FaceDetectorYN.

Public API:
    - FaceDetector: facade over the OpenCV detector.
    - Detection: data transfer object representing a detected face.
    - visualize: draws detections onto a copy of a frame.

Usage:
    from yunet_demo import FaceDetector, visualize

    detector = FaceDetector()
    detector.set_input_size((width, height))
    annotated = visualize(frame, detector.detect(frame))
"""

from yunet_demo.detection import Detection
from yunet_demo.detector import FaceDetector
from yunet_demo.visualizer import visualize

__all__ = ["FaceDetector", "Detection", "visualize"]
