"""
YuNet Face Detection Demo CLI Entrypoint.

Responsibility:
    Parse command-line arguments, configure the application, wire together
    the detector and I/O handlers, and run the processing loop.

Usage:
    python main.py --input_image face.jpg --model yunet.onnx
    python main.py --input_video clip.mp4 --scale 0.5
    python main.py --input_video 0                 # Camera 0
    python main.py --config configs/default.yaml

Exit codes:
    -1  help requested
     0  loop finished (key press, end of stream, max_frames)
     1  configuration or initialization failure
     2  input image cannot be read
"""

import argparse
import logging
import sys
from typing import List, Optional

# Configure logging before importing local modules
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("main")

import yaml

from yunet_demo.config import load_config, with_overrides
from yunet_demo.detector import FaceDetector
from yunet_demo.input_handler import ImageReadError, InputHandler
from yunet_demo.output_handler import OutputHandler
from yunet_demo.pipeline import run

EXIT_HELP = -1
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BAD_IMAGE = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser. Unset flags stay None."""
    parser = argparse.ArgumentParser(
        description="YuNet face detection demo (OpenCV FaceDetectorYN).",
        add_help=False,
    )

    parser.add_argument("-h", "--help", action="store_true",
                        help="Print this message.")
    parser.add_argument("--input_image", type=str,
                        help="Path to the input image.")
    parser.add_argument("--input_video", type=str,
                        help="Path to the input video, or a camera index.")
    parser.add_argument("-sc", "--scale", type=float,
                        help="Scale factor used to resize input frames (default: 1.0).")
    parser.add_argument("--backend_id", type=int,
                        help="Backend to run on. 0: default, 1: Halide, "
                             "2: Intel's Inference Engine, 3: OpenCV, 4: VKCOM, "
                             "5: CUDA (default: 0).")
    parser.add_argument("--target_id", type=int,
                        help="Target to run on. 0: CPU, 1: OpenCL, 2: OpenCL FP16, "
                             "3: Myriad, 4: Vulkan, 5: FPGA, 6: CUDA, 7: CUDA FP16, "
                             "8: HDDL (default: 0).")
    parser.add_argument("-m", "--model", type=str,
                        help="Path to the model (default: yunet.onnx). Download "
                             "yunet.onnx from https://github.com/ShiqiYu/"
                             "libfacedetection.train/tree/master/tasks/task1/onnx.")
    parser.add_argument("--score_threshold", type=float,
                        help="Filter out faces of score < score_threshold (default: 0.7).")
    parser.add_argument("--nms_threshold", type=float,
                        help="Suppress bounding boxes of iou >= nms_threshold (default: 0.3).")
    parser.add_argument("--top_k", type=int,
                        help="Keep top_k bounding boxes before NMS (default: 5000).")
    parser.add_argument("--config", type=str,
                        help="Path to YAML configuration file.")
    parser.add_argument("-v", "--verbose", action="store_true", default=None,
                        help="Log every detected face.")
    parser.add_argument("--no_display", action="store_false", dest="display", default=None,
                        help="Do not open a window; a still image is processed once.")
    parser.add_argument("--max_frames", type=int,
                        help="Stop after this many frames.")
    parser.add_argument("--save_path", type=str,
                        help="Directory for the annotated result (result.jpg / result.avi).")
    parser.add_argument("--save_json", action="store_true", default=None,
                        help="Also write detections.json to --save_path.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the demo and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.help:
        parser.print_help()
        return EXIT_HELP

    # 1. Load Configuration (CLI args > ENV > YAML > Defaults)
    try:
        config = load_config(args.config)
        config = with_overrides(config, {
            "model": {
                "path": args.model,
                "backend_id": args.backend_id,
                "target_id": args.target_id,
            },
            "detection": {
                "score_threshold": args.score_threshold,
                "nms_threshold": args.nms_threshold,
                "top_k": args.top_k,
            },
            "input": {
                "image": args.input_image,
                "video": args.input_video,
                "scale": args.scale,
            },
            "visualization": {
                "verbose": args.verbose,
                "display": args.display,
            },
            "output": {
                "save_path": args.save_path,
                "save_json": args.save_json,
            },
            "": {"max_frames": args.max_frames},
        })
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        logger.error("Configuration error: %s", e)
        return EXIT_FAILURE

    if config.input.image is None and config.input.video is None:
        logger.warning("No input given. Pass --input_image or --input_video (see --help).")
        return EXIT_OK

    # 2. Open the source first: an unreadable image never reaches the detector
    try:
        input_handler = InputHandler(config.input)
    except ImageReadError as e:
        logger.error("%s", e)
        return EXIT_BAD_IMAGE
    except ValueError as e:
        logger.error("Input error: %s", e)
        return EXIT_FAILURE

    max_frames = config.max_frames
    if input_handler.mode == "image" and not config.visualization.display and max_frames is None:
        # Without a window there is no key to stop the still-image loop
        max_frames = 1

    # 3. Initialize the detector and output sinks
    try:
        detector = FaceDetector(config)
        output_handler = OutputHandler(
            config,
            still=input_handler.mode == "image",
            video_fps=input_handler.source_fps,
        )
    except (FileNotFoundError, RuntimeError, OSError) as e:
        logger.error("Initialization failed: %s", e)
        input_handler.release()
        return EXIT_FAILURE

    # 4. Processing Loop
    if config.visualization.display:
        logger.info("Starting processing loop. Press any key in the window to quit.")

    frame_count = 0
    try:
        frame_count = run(
            detector,
            input_handler,
            output_handler,
            config.visualization,
            max_frames=max_frames,
        )
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
    except Exception as e:
        logger.exception("Runtime error during processing: %s", e)
        return EXIT_FAILURE
    finally:
        input_handler.release()
        output_handler.finalize()

    logger.info("Processing finished. Total frames: %d.", frame_count)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
