"""
Serialization for the face detection demo.

Responsibility:
    Export detection results to JSON for offline inspection.

Non-goals:
    - No rendering, display, or detection logic.
    - No streaming output — writes a complete file on finalize.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List

from yunet_demo.detection import Detection

logger = logging.getLogger(__name__)


def save_json(
    detections_by_frame: Dict[int, List[Detection]],
    output_path: str,
) -> None:
    """Export all detections to a JSON file.

    Output schema:
        {
            "frames": [
                {
                    "frame_id": 0,
                    "detections": [
                        {"x": ..., "y": ..., "width": ..., "height": ...,
                         "landmarks": [[x, y], ...], "score": ...}
                    ]
                }
            ],
            "total_frames": N,
            "total_detections": M
        }

    Raises:
        OSError: If the output path is not writable.
    """
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    frames = []
    total_detections = 0

    for frame_id in sorted(detections_by_frame):
        dets = detections_by_frame[frame_id]
        total_detections += len(dets)
        frames.append({
            "frame_id": frame_id,
            "detections": [d.to_dict() for d in dets],
        })

    payload = {
        "frames": frames,
        "total_frames": len(frames),
        "total_detections": total_detections,
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    logger.info(
        "JSON output saved: %s (%d frames, %d detections)",
        output_path, len(frames), total_detections,
    )
