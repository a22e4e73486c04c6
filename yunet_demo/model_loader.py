"""
Model loading for the YuNet face detection demo.

Responsibility:
    Locate the YuNet .onnx model on disk and create a configured
    cv2.FaceDetectorYN handle.

Non-goals:
    - No inference or frame-level logic.
    - No automatic model downloading.
    - No fallback to alternative models or backends.

Failure behavior:
    - A missing model file raises FileNotFoundError listing the paths tried.
    - Anything OpenCV rejects (unsupported backend/target pair, corrupt
      model) raises RuntimeError wrapping the cv2.error.
"""

import logging
from pathlib import Path

import cv2

from yunet_demo.config import AppConfig, get_project_root

logger = logging.getLogger(__name__)


def resolve_model_path(model_path: str) -> Path:
    """Resolve a model path against the working directory, then the project root.

    Raises:
        FileNotFoundError: If the model cannot be found in either place.
    """
    path = Path(model_path)
    candidates = [path] if path.is_absolute() else [path, get_project_root() / path]

    for candidate in candidates:
        if candidate.is_file():
            return candidate

    tried = "\n".join(f"  Tried: {c}" for c in candidates)
    raise FileNotFoundError(
        f"Model file not found: {model_path}\n{tried}\n"
        f"  Download yunet.onnx from "
        f"https://github.com/ShiqiYu/libfacedetection.train/tree/master/tasks/task1/onnx "
        f"or pass --model."
    )


def load_model(config: AppConfig) -> cv2.FaceDetectorYN:
    """Create the YuNet detector handle.

    Args:
        config: Application configuration (model and detection sections).

    Returns:
        A cv2.FaceDetectorYN ready for setInputSize()/detect().

    Raises:
        FileNotFoundError: If the model file does not exist.
        RuntimeError: If OpenCV fails to create the detector.
    """
    model_path = resolve_model_path(config.model.path)

    logger.info(
        "Loading model: %s (backend_id=%d, target_id=%d)",
        model_path, config.model.backend_id, config.model.target_id,
    )

    try:
        detector = cv2.FaceDetectorYN.create(
            str(model_path),
            "",
            tuple(config.model.input_size),
            config.detection.score_threshold,
            config.detection.nms_threshold,
            config.detection.top_k,
            config.model.backend_id,
            config.model.target_id,
        )
    except cv2.error as e:
        raise RuntimeError(
            f"Failed to create the face detector from {model_path}. "
            f"Check that the model is a valid YuNet .onnx file and that "
            f"OpenCV supports backend_id={config.model.backend_id} with "
            f"target_id={config.model.target_id}.\n"
            f"  OpenCV error: {e}"
        ) from e

    logger.info("Model loaded successfully.")
    return detector
