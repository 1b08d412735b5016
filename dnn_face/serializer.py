"""
Serialization of detection results.

Responsibility:
    Export faces to structured file formats (JSON, CSV) for downstream
    consumption or offline analysis.

Non-goals:
    - No rendering, display, or detection logic.
    - No streaming output: complete files are written in one call.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Dict, List

from dnn_face.face import ARRAY_COLUMNS, Face

logger = logging.getLogger(__name__)


def save_json(faces_by_source: Dict[str, List[Face]], output_path: str) -> None:
    """Export all faces to a JSON file.

    Output schema:
        {
            "images": [
                {
                    "source": "photos/a.jpg",
                    "faces": [
                        {"box": [x, y, w, h], "landmarks": {...}, "score": ...}
                    ]
                }
            ],
            "total_images": N,
            "total_faces": M
        }

    Sources are written in insertion order.

    Raises:
        OSError: If the output path is not writable.
    """
    _ensure_parent_dir(output_path)

    images = []
    total_faces = 0

    for source, faces in faces_by_source.items():
        total_faces += len(faces)
        images.append({
            "source": source,
            "faces": [f.to_dict() for f in faces],
        })

    payload = {
        "images": images,
        "total_images": len(images),
        "total_faces": total_faces,
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    logger.info(
        "JSON output saved: %s (%d images, %d faces)",
        output_path, len(images), total_faces,
    )


def save_csv(faces_by_source: Dict[str, List[Face]], output_path: str) -> None:
    """Export all faces to a CSV file, one row per face.

    Columns: source, x, y, w, h, the ten landmark coordinates, score

    Raises:
        OSError: If the output path is not writable.
    """
    _ensure_parent_dir(output_path)

    fieldnames = ["source", *ARRAY_COLUMNS]

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(fieldnames)

        total = 0
        for source, faces in faces_by_source.items():
            for face in faces:
                writer.writerow([source, *(round(float(v), 4) for v in face.to_array())])
                total += 1

    logger.info("CSV output saved: %s (%d rows)", output_path, total)


def _ensure_parent_dir(path: str) -> None:
    """Create parent directories if they don't exist."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
