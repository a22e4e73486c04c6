"""
Tests for the acquisition loop.
"""

import itertools

import numpy as np

from yunet_demo.config import VisualizationConfig
from yunet_demo.detection import Detection
from yunet_demo.pipeline import run


class FakeDetector:
    def __init__(self, detections=None):
        self.input_size = (320, 320)
        self.input_size_calls = []
        self.frames = []
        self._detections = detections or []

    def set_input_size(self, size):
        self.input_size = size
        self.input_size_calls.append(size)

    def detect(self, frame):
        self.frames.append(frame)
        return list(self._detections)


class FakeInput:
    def __init__(self, frames, frame_size):
        self._frames = frames
        self.frame_size = frame_size

    def __iter__(self):
        return iter(self._frames)


class FakeOutput:
    def __init__(self, keep_going=True):
        self.keep_going = keep_going
        self.calls = []

    def process_frame(self, frame_id, annotated, detections):
        self.calls.append((frame_id, annotated, detections))
        return self.keep_going


def _frame():
    return np.zeros((48, 64, 3), dtype=np.uint8)


def test_input_size_configured_once():
    detector = FakeDetector()
    frames = [(i, _frame()) for i in range(3)]

    count = run(detector, FakeInput(frames, (64, 48)), FakeOutput(), VisualizationConfig())

    assert count == 3
    assert detector.input_size_calls == [(64, 48)]
    assert len(detector.frames) == 3


def test_still_frame_loop_stops_at_max_frames():
    detector = FakeDetector()
    frames = itertools.repeat((0, _frame()))
    output = FakeOutput()

    count = run(detector, FakeInput(frames, (64, 48)), output, VisualizationConfig(), max_frames=4)

    assert count == 4
    assert len(output.calls) == 4


def test_key_press_stops_loop():
    detector = FakeDetector()
    frames = itertools.repeat((0, _frame()))

    count = run(detector, FakeInput(frames, (64, 48)), FakeOutput(keep_going=False),
                VisualizationConfig())

    assert count == 1


def test_empty_stream():
    detector = FakeDetector()

    count = run(detector, FakeInput([], (0, 0)), FakeOutput(), VisualizationConfig())

    assert count == 0
    assert detector.frames == []
    assert detector.input_size_calls == []


def test_unknown_stream_size_uses_frame_size():
    detector = FakeDetector()

    run(detector, FakeInput([(0, _frame())], (0, 0)), FakeOutput(), VisualizationConfig())

    assert detector.input_size_calls == [(64, 48)]


def test_annotated_frame_and_detections_are_forwarded():
    det = Detection(x=5.0, y=5.0, width=20.0, height=20.0,
                    landmarks=((10.0, 10.0),) * 5, score=0.9)
    detector = FakeDetector([det])
    frame = _frame()
    output = FakeOutput()

    run(detector, FakeInput([(7, frame)], (64, 48)), output, VisualizationConfig())

    frame_id, annotated, detections = output.calls[0]
    assert frame_id == 7
    assert detections == [det]
    assert annotated is not frame
    assert annotated.any()
    assert not frame.any()
