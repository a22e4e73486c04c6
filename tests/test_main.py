"""
Tests for the CLI entry point.
"""

from unittest.mock import MagicMock, patch

import cv2
import numpy as np
import pytest

import main


@pytest.fixture
def image_path(tmp_path):
    path = tmp_path / "face.png"
    cv2.imwrite(str(path), np.zeros((40, 60, 3), dtype=np.uint8))
    return path


@pytest.fixture
def fake_detector():
    with patch("main.FaceDetector") as mock_cls:
        detector = MagicMock()
        detector.detect.return_value = []
        mock_cls.return_value = detector
        yield mock_cls


def test_help_exit_code(capsys):
    assert main.main(["--help"]) == -1
    assert "--input_image" in capsys.readouterr().out


def test_no_input_is_not_an_error(fake_detector):
    assert main.main([]) == 0
    fake_detector.assert_not_called()


def test_unreadable_image_exit_code(tmp_path, fake_detector):
    bad = tmp_path / "broken.jpg"
    bad.write_bytes(b"not an image")

    assert main.main(["--input_image", str(bad)]) == 2
    fake_detector.assert_not_called()


def test_missing_image_exit_code(tmp_path, fake_detector):
    assert main.main(["--input_image", str(tmp_path / "missing.jpg")]) == 2
    fake_detector.assert_not_called()


def test_invalid_threshold_exit_code(fake_detector):
    assert main.main(["--score_threshold", "1.5", "--input_image", "x.jpg"]) == 1
    fake_detector.assert_not_called()


def test_missing_model_exit_code(image_path, tmp_path):
    argv = ["--input_image", str(image_path), "--model", str(tmp_path / "nope.onnx"),
            "--no_display"]
    assert main.main(argv) == 1


def test_headless_still_image_runs_once(image_path, fake_detector):
    argv = ["--input_image", str(image_path), "-sc", "0.5", "--no_display",
            "--top_k", "100"]

    assert main.main(argv) == 0

    config = fake_detector.call_args.args[0]
    assert config.detection.top_k == 100
    assert config.input.scale == 0.5
    detector = fake_detector.return_value
    detector.set_input_size.assert_any_call((30, 20))
    assert detector.detect.call_count == 1


def test_video_without_frames(fake_detector):
    cap = MagicMock()
    cap.isOpened.return_value = False
    cap.get.return_value = 0.0
    cap.read.return_value = (False, None)

    with patch("yunet_demo.input_handler.cv2.VideoCapture", return_value=cap):
        assert main.main(["--input_video", "missing.mp4", "--no_display"]) == 0

    fake_detector.return_value.detect.assert_not_called()
    cap.release.assert_called_once()


def test_scale_too_small_for_image(image_path, fake_detector):
    argv = ["--input_image", str(image_path), "--scale", "0.01", "--no_display"]

    assert main.main(argv) == 1
    fake_detector.assert_not_called()


def test_scale_too_small_for_video(fake_detector):
    cap = MagicMock()
    cap.isOpened.return_value = True
    sizes = {cv2.CAP_PROP_FRAME_WIDTH: 64.0, cv2.CAP_PROP_FRAME_HEIGHT: 48.0}
    cap.get.side_effect = lambda prop: sizes.get(prop, 0.0)

    with patch("yunet_demo.input_handler.cv2.VideoCapture", return_value=cap):
        assert main.main(["--input_video", "clip.mp4", "--scale", "0.01",
                          "--no_display"]) == 1

    fake_detector.assert_not_called()
