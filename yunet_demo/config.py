"""
Configuration management for the YuNet face detection demo.

Provides a layered configuration system with the following precedence
(highest to lowest):

    CLI arguments > Environment variables > YAML config file > Defaults

Design constraints:
    - The demo MUST run with zero configuration (safe defaults only).
    - Missing or invalid values fail early and loudly.
    - No detection logic, I/O, or model loading belongs here.

Non-goals:
    - No dynamic reloading.
    - No remote configuration.
"""

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Project root resolution
# ---------------------------------------------------------------------------
# Resolved relative to this file's location: yunet_demo/config.py → project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def get_project_root() -> Path:
    """Return the resolved project root directory."""
    return _PROJECT_ROOT


# ---------------------------------------------------------------------------
# Configuration dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ModelConfig:
    """Model-related configuration.

    Attributes:
        path: Path to the YuNet .onnx model. Relative paths are looked up
              in the working directory first, then in the project root.
        backend_id: cv2.dnn backend id. 0: default, 1: Halide,
                    2: Intel's Inference Engine, 3: OpenCV, 4: VKCOM, 5: CUDA.
        target_id: cv2.dnn target id. 0: CPU, 1: OpenCL, 2: OpenCL FP16,
                   3: Myriad, 4: Vulkan, 5: FPGA, 6: CUDA, 7: CUDA FP16, 8: HDDL.
        input_size: Initial (width, height) the detector is created with.
                    Replaced by the real frame size before the first frame.
    """

    path: str = "yunet.onnx"
    backend_id: int = 0
    target_id: int = 0
    input_size: Tuple[int, int] = (320, 320)


@dataclass(frozen=True)
class DetectionConfig:
    """Detection thresholds.

    Attributes:
        score_threshold: Filter out faces with score below this value.
        nms_threshold: Suppress bounding boxes with IoU >= this value.
        top_k: Keep top_k bounding boxes before NMS.
    """

    score_threshold: float = 0.7
    nms_threshold: float = 0.3
    top_k: int = 5000


@dataclass(frozen=True)
class InputConfig:
    """Input source configuration.

    Attributes:
        image: Path to a still image. Takes precedence over `video`.
        video: Path to a video file, or a digit string for a camera index.
        scale: Factor applied to the source width and height.
    """

    image: Optional[str] = None
    video: Optional[str] = None
    scale: float = 1.0


@dataclass(frozen=True)
class VisualizationConfig:
    """Visualization and display parameters.

    Attributes:
        thickness: Line thickness for boxes and landmarks.
        verbose: Log one line per detected face.
        display: Show annotated frames in a window and poll the keyboard.
        window_name: Title of the display window.
    """

    thickness: int = 2
    verbose: bool = False
    display: bool = True
    window_name: str = "libfacedetection demo"


@dataclass(frozen=True)
class OutputConfig:
    """Optional result saving.

    Attributes:
        save_path: Directory for annotated results. None disables saving.
        save_json: Also export detections to detections.json.
    """

    save_path: Optional[str] = None
    save_json: bool = False


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration.

    Aggregates all sub-configurations into a single, frozen object.
    `max_frames` bounds the processing loop (None runs until a key press
    or the end of the stream).
    """

    model: ModelConfig = field(default_factory=ModelConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    input: InputConfig = field(default_factory=InputConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    max_frames: Optional[int] = None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _validate(config: AppConfig) -> None:
    """Validate configuration values. Raises ValueError on invalid state."""

    if not (0.0 <= config.detection.score_threshold <= 1.0):
        raise ValueError(
            f"detection.score_threshold must be in [0.0, 1.0], "
            f"got {config.detection.score_threshold}."
        )

    if not (0.0 <= config.detection.nms_threshold <= 1.0):
        raise ValueError(
            f"detection.nms_threshold must be in [0.0, 1.0], "
            f"got {config.detection.nms_threshold}."
        )

    if config.detection.top_k <= 0:
        raise ValueError(
            f"detection.top_k must be positive, got {config.detection.top_k}."
        )

    if config.model.backend_id < 0 or config.model.target_id < 0:
        raise ValueError(
            f"model.backend_id and model.target_id must be non-negative, "
            f"got backend_id={config.model.backend_id}, "
            f"target_id={config.model.target_id}."
        )

    if len(config.model.input_size) != 2 or any(d <= 0 for d in config.model.input_size):
        raise ValueError(
            f"model.input_size must be a positive (width, height) tuple, "
            f"got {config.model.input_size}."
        )

    if config.input.scale <= 0:
        raise ValueError(
            f"input.scale must be positive, got {config.input.scale}."
        )

    if config.visualization.thickness <= 0:
        raise ValueError(
            f"visualization.thickness must be positive, "
            f"got {config.visualization.thickness}."
        )

    if config.max_frames is not None and config.max_frames <= 0:
        raise ValueError(
            f"max_frames must be positive or None, got {config.max_frames}."
        )

    if config.output.save_json and config.output.save_path is None:
        raise ValueError(
            "output.save_json requires output.save_path to be set."
        )


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------

def _parse_tuple(value, expected_len: int, cast_type=float):
    """Convert a list from YAML into a tuple of the expected type and length."""
    if isinstance(value, (list, tuple)):
        if len(value) != expected_len:
            raise ValueError(
                f"Expected {expected_len} values, got {len(value)}: {value}"
            )
        return tuple(cast_type(v) for v in value)
    return value


def _parse_bool(value) -> bool:
    """Interpret YAML booleans and environment strings alike."""
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _optional_str(value) -> Optional[str]:
    return str(value) if value is not None else None


def _build_model_config(raw: dict) -> ModelConfig:
    """Build ModelConfig from a raw YAML dict."""
    kwargs = {}
    if "path" in raw:
        kwargs["path"] = str(raw["path"])
    if "backend_id" in raw:
        kwargs["backend_id"] = int(raw["backend_id"])
    if "target_id" in raw:
        kwargs["target_id"] = int(raw["target_id"])
    if "input_size" in raw:
        kwargs["input_size"] = _parse_tuple(raw["input_size"], 2, int)
    return ModelConfig(**kwargs)


def _build_detection_config(raw: dict) -> DetectionConfig:
    """Build DetectionConfig from a raw YAML dict."""
    kwargs = {}
    if "score_threshold" in raw:
        kwargs["score_threshold"] = float(raw["score_threshold"])
    if "nms_threshold" in raw:
        kwargs["nms_threshold"] = float(raw["nms_threshold"])
    if "top_k" in raw:
        kwargs["top_k"] = int(raw["top_k"])
    return DetectionConfig(**kwargs)


def _build_input_config(raw: dict) -> InputConfig:
    """Build InputConfig from a raw YAML dict."""
    kwargs = {}
    if "image" in raw:
        kwargs["image"] = _optional_str(raw["image"])
    if "video" in raw:
        kwargs["video"] = _optional_str(raw["video"])
    if "scale" in raw:
        kwargs["scale"] = float(raw["scale"])
    return InputConfig(**kwargs)


def _build_visualization_config(raw: dict) -> VisualizationConfig:
    """Build VisualizationConfig from a raw YAML dict."""
    kwargs = {}
    if "thickness" in raw:
        kwargs["thickness"] = int(raw["thickness"])
    if "verbose" in raw:
        kwargs["verbose"] = _parse_bool(raw["verbose"])
    if "display" in raw:
        kwargs["display"] = _parse_bool(raw["display"])
    if "window_name" in raw:
        kwargs["window_name"] = str(raw["window_name"])
    return VisualizationConfig(**kwargs)


def _build_output_config(raw: dict) -> OutputConfig:
    """Build OutputConfig from a raw YAML dict."""
    kwargs = {}
    if "save_path" in raw:
        kwargs["save_path"] = _optional_str(raw["save_path"])
    if "save_json" in raw:
        kwargs["save_json"] = _parse_bool(raw["save_json"])
    return OutputConfig(**kwargs)


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

_ENV_PREFIX = "YUNET_DEMO_"


def _apply_env_overrides(raw: dict) -> dict:
    """Apply environment variable overrides to the raw config dict.

    Environment variables follow the pattern:
        YUNET_DEMO_MODEL_PATH=/models/yunet.onnx
        YUNET_DEMO_DETECTION_SCORE_THRESHOLD=0.9
    """
    env_map = {
        f"{_ENV_PREFIX}MODEL_PATH": ("model", "path"),
        f"{_ENV_PREFIX}MODEL_BACKEND_ID": ("model", "backend_id"),
        f"{_ENV_PREFIX}MODEL_TARGET_ID": ("model", "target_id"),
        f"{_ENV_PREFIX}DETECTION_SCORE_THRESHOLD": ("detection", "score_threshold"),
        f"{_ENV_PREFIX}DETECTION_NMS_THRESHOLD": ("detection", "nms_threshold"),
        f"{_ENV_PREFIX}DETECTION_TOP_K": ("detection", "top_k"),
        f"{_ENV_PREFIX}INPUT_SCALE": ("input", "scale"),
        f"{_ENV_PREFIX}VISUALIZATION_DISPLAY": ("visualization", "display"),
        f"{_ENV_PREFIX}OUTPUT_SAVE_PATH": ("output", "save_path"),
    }

    for env_var, (section, key) in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            if not raw.get(section):
                raw[section] = {}
            raw[section][key] = value
            logger.debug("Config override from env: %s=%s", env_var, value)

    return raw


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load and validate application configuration.

    Precedence (highest → lowest):
        Environment variables > YAML file > Hard-coded defaults

    Args:
        config_path: Path to a YAML configuration file. If None,
                     the demo runs entirely on defaults.

    Returns:
        A validated, frozen AppConfig instance.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ValueError: If any configuration value is invalid.
        yaml.YAMLError: If the YAML file is malformed.
    """
    raw: dict = {}

    # --- Layer 1: YAML file ---
    if config_path is not None:
        resolved = Path(config_path)
        if not resolved.is_absolute() and not resolved.is_file():
            resolved = _PROJECT_ROOT / resolved

        if not resolved.is_file():
            raise FileNotFoundError(
                f"Configuration file not found: {resolved}. "
                f"Provide a valid path or omit to use defaults."
            )

        logger.info("Loading config from: %s", resolved)
        with open(resolved, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    # --- Layer 2: Environment variable overrides ---
    raw = _apply_env_overrides(raw)

    # --- Build typed configs ---
    max_frames = raw.get("max_frames")
    config = AppConfig(
        model=_build_model_config(raw.get("model") or {}),
        detection=_build_detection_config(raw.get("detection") or {}),
        input=_build_input_config(raw.get("input") or {}),
        visualization=_build_visualization_config(raw.get("visualization") or {}),
        output=_build_output_config(raw.get("output") or {}),
        max_frames=int(max_frames) if max_frames is not None else None,
    )

    # --- Validate ---
    _validate(config)

    logger.debug("Configuration loaded: %s", config)
    return config


def with_overrides(config: AppConfig, overrides: Dict[str, Dict[str, Any]]) -> AppConfig:
    """Return a validated copy of `config` with per-section overrides applied.

    `overrides` maps a section name to the fields to replace, e.g.
    ``{"detection": {"top_k": 100}}``. The empty section name "" targets
    top-level fields such as `max_frames`. None values are ignored so that
    unset CLI flags fall through to the lower layers.
    """
    top_level = {k: v for k, v in overrides.get("", {}).items() if v is not None}

    for section, values in overrides.items():
        if not section:
            continue
        values = {k: v for k, v in values.items() if v is not None}
        if values:
            top_level[section] = dataclasses.replace(getattr(config, section), **values)

    updated = dataclasses.replace(config, **top_level)
    _validate(updated)
    return updated
