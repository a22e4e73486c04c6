"""
Tests for the input handler.
"""

import itertools
import logging
from unittest.mock import MagicMock, patch

import cv2
import numpy as np
import pytest

from yunet_demo.config import InputConfig
from yunet_demo.input_handler import ImageReadError, InputHandler, scaled_size


def _fake_capture(width=64, height=48, frames=0):
    cap = MagicMock()
    cap.isOpened.return_value = True
    sizes = {cv2.CAP_PROP_FRAME_WIDTH: float(width), cv2.CAP_PROP_FRAME_HEIGHT: float(height)}
    cap.get.side_effect = lambda prop: sizes.get(prop, 0.0)
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    cap.read.side_effect = [(True, frame)] * frames + [(False, None)]
    return cap


def test_scaled_size():
    assert scaled_size(640, 480, 1.0) == (640, 480)
    assert scaled_size(641, 481, 0.5) == (320, 240)
    assert scaled_size(99.9, 10.0, 1.0) == (99, 10)


def test_still_image_is_yielded_repeatedly(tmp_path):
    path = tmp_path / "face.png"
    cv2.imwrite(str(path), np.zeros((40, 60, 3), dtype=np.uint8))

    handler = InputHandler(InputConfig(image=str(path), scale=0.5))
    frames = list(itertools.islice(handler, 3))

    assert handler.mode == "image"
    assert handler.frame_size == (30, 20)
    assert [frame_id for frame_id, _ in frames] == [0, 0, 0]
    assert all(frame.shape == (20, 30, 3) for _, frame in frames)


def test_scale_one_keeps_image_size(tmp_path):
    path = tmp_path / "face.png"
    cv2.imwrite(str(path), np.zeros((40, 60, 3), dtype=np.uint8))

    handler = InputHandler(InputConfig(image=str(path)))
    _, frame = next(iter(handler))

    assert frame.shape == (40, 60, 3)


def test_unreadable_image(tmp_path):
    path = tmp_path / "broken.jpg"
    path.write_bytes(b"not an image")

    with pytest.raises(ImageReadError, match="Cannot read image"):
        InputHandler(InputConfig(image=str(path)))


def test_missing_image(tmp_path):
    with pytest.raises(ImageReadError):
        InputHandler(InputConfig(image=str(tmp_path / "missing.jpg")))


def test_no_source():
    with pytest.raises(ValueError, match="No input source"):
        InputHandler(InputConfig())


def test_video_frames_are_resized():
    cap = _fake_capture(width=64, height=48, frames=2)
    with patch("yunet_demo.input_handler.cv2.VideoCapture", return_value=cap) as mock_open:
        handler = InputHandler(InputConfig(video="clip.mp4", scale=0.5))
        frames = list(handler)

    mock_open.assert_called_once_with("clip.mp4", cv2.CAP_ANY)
    assert handler.frame_size == (32, 24)
    assert [frame_id for frame_id, _ in frames] == [0, 1]
    assert all(frame.shape == (24, 32, 3) for _, frame in frames)


def test_video_without_frames(caplog):
    cap = _fake_capture(frames=0)
    with patch("yunet_demo.input_handler.cv2.VideoCapture", return_value=cap):
        handler = InputHandler(InputConfig(video="empty.mp4"))
        with caplog.at_level(logging.ERROR, logger="yunet_demo.input_handler"):
            frames = list(handler)

    assert frames == []
    assert "No frames grabbed!" in caplog.text


def test_digit_source_opens_camera():
    cap = _fake_capture()
    with patch("yunet_demo.input_handler.cv2.VideoCapture", return_value=cap) as mock_open:
        InputHandler(InputConfig(video="0"))

    mock_open.assert_called_once_with(0)


def test_image_wins_over_video(tmp_path):
    path = tmp_path / "face.png"
    cv2.imwrite(str(path), np.zeros((10, 10, 3), dtype=np.uint8))

    with patch("yunet_demo.input_handler.cv2.VideoCapture") as mock_open:
        handler = InputHandler(InputConfig(image=str(path), video="clip.mp4"))

    assert handler.mode == "image"
    mock_open.assert_not_called()


def test_release():
    cap = _fake_capture()
    with patch("yunet_demo.input_handler.cv2.VideoCapture", return_value=cap):
        handler = InputHandler(InputConfig(video="clip.mp4"))
        handler.release()

    cap.release.assert_called_once()
    assert list(handler) == []


def test_scaled_size_rejects_empty_frame():
    with pytest.raises(ValueError, match="empty frame"):
        scaled_size(60, 40, 0.01)


def test_scaled_size_keeps_unknown_size():
    assert scaled_size(0.0, 0.0, 0.5) == (0, 0)


def test_image_scaled_to_nothing(tmp_path):
    path = tmp_path / "face.png"
    cv2.imwrite(str(path), np.zeros((40, 60, 3), dtype=np.uint8))

    with pytest.raises(ValueError, match="empty frame"):
        InputHandler(InputConfig(image=str(path), scale=0.01))


def test_video_scaled_to_nothing():
    cap = _fake_capture(width=64, height=48)
    with patch("yunet_demo.input_handler.cv2.VideoCapture", return_value=cap):
        with pytest.raises(ValueError, match="empty frame"):
            InputHandler(InputConfig(video="clip.mp4", scale=0.01))
