"""
Face Detection CLI Entrypoint.

Responsibility:
    Parse command-line arguments, configure the application, run the
    detector over the given images, and print or save the results.

Usage:
    python main.py photo.jpg --model models/face_detection_yunet_2022mar.onnx
    python main.py images/ --output-mode print,save_json
    python main.py photo.jpg --config my_config.yaml --score-threshold 0.8

Each image is detected at its own resolution: the detector input size
is switched to the image size before running it.

This module is the executable entry point. It should not be imported
by other modules.
"""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Dict, List

# Configure logging before importing local modules
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("main")

import cv2

from dnn_face.config import VALID_BACKENDS, VALID_TARGETS, AppConfig, load_config
from dnn_face.detector import FaceDetector
from dnn_face.face import Face
from dnn_face.serializer import save_csv, save_json

_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp"}


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="DNN face detector: boxes, five landmarks and scores per face.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "sources",
        nargs="+",
        help="Image files or directories of images.",
    )
    parser.add_argument("--config", type=str, help="Path to YAML configuration file.")
    parser.add_argument("--model", type=str, help="Path to the ONNX model. Overrides config.")
    parser.add_argument(
        "--score-threshold",
        type=float,
        help="Minimum face score (0.0 - 1.0). Overrides config.",
    )
    parser.add_argument(
        "--nms-threshold",
        type=float,
        help="IoU threshold for non-maximum suppression. Overrides config.",
    )
    parser.add_argument(
        "--top-k",
        type=int,
        help="Maximum candidates entering NMS, 0 for no cap. Overrides config.",
    )
    parser.add_argument("--backend", type=str, choices=VALID_BACKENDS, help="DNN backend.")
    parser.add_argument("--target", type=str, choices=VALID_TARGETS, help="DNN target device.")
    parser.add_argument(
        "--output-mode",
        type=str,
        help="Output mode(s), comma-separated: print, save_json, save_csv. "
             "Overrides config.",
    )
    parser.add_argument(
        "--output-path",
        type=str,
        help="Directory for output files. Overrides config.",
    )

    return parser.parse_args()


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Return config with any CLI arguments applied on top."""
    model_kwargs = {}
    if args.model is not None:
        model_kwargs["model_path"] = args.model
    if args.backend is not None:
        model_kwargs["backend"] = args.backend
    if args.target is not None:
        model_kwargs["target"] = args.target

    detection_kwargs = {}
    if args.score_threshold is not None:
        detection_kwargs["score_threshold"] = args.score_threshold
    if args.nms_threshold is not None:
        detection_kwargs["nms_threshold"] = args.nms_threshold
    if args.top_k is not None:
        detection_kwargs["top_k"] = args.top_k

    output_kwargs = {}
    if args.output_mode is not None:
        output_kwargs["mode"] = args.output_mode
    if args.output_path is not None:
        output_kwargs["save_path"] = args.output_path

    return dataclasses.replace(
        config,
        model=dataclasses.replace(config.model, **model_kwargs),
        detection=dataclasses.replace(config.detection, **detection_kwargs),
        output=dataclasses.replace(config.output, **output_kwargs),
    )


def collect_images(sources: List[str]) -> List[Path]:
    """Expand files and directories into a list of image paths."""
    images = []
    for source in sources:
        path = Path(source)
        if path.is_dir():
            images.extend(
                p for p in sorted(path.iterdir())
                if p.suffix.lower() in _IMAGE_EXTENSIONS
            )
        elif path.is_file():
            images.append(path)
        else:
            logger.warning("Skipping missing source: %s", path)
    return images


def print_faces(source: str, faces: List[Face]) -> None:
    print(f"{source}: {len(faces)} face(s)")
    for i, face in enumerate(faces):
        x, y, w, h = face.box
        print(f"  Face {i} [{w:.0f} x {h:.0f} from ({x:.0f}, {y:.0f})] score={face.score:.4f}")


def main() -> int:
    """Main execution loop."""
    args = parse_args()

    # 1. Load Configuration (CLI args > ENV > YAML > Defaults)
    try:
        config = apply_overrides(load_config(args.config), args)
    except Exception as e:
        logger.error("Configuration error: %s", e)
        return 1

    images = collect_images(args.sources)
    if not images:
        logger.error("No images found in: %s", ", ".join(args.sources))
        return 1

    # 2. Initialize the detector
    try:
        detector = FaceDetector(config)
    except (FileNotFoundError, ValueError, RuntimeError) as e:
        logger.error("Initialization failed: %s", e)
        return 1

    modes = set(m.strip() for m in config.output.mode.split(","))

    # 3. Processing Loop
    results: Dict[str, List[Face]] = {}
    for path in images:
        frame = cv2.imread(str(path))
        if frame is None:
            logger.warning("Unreadable image, skipping: %s", path)
            continue

        height, width = frame.shape[:2]
        try:
            detector.set_input_size(width, height)
            faces = detector.detect(frame)
        except (cv2.error, ValueError) as e:
            logger.error("Detection failed, skipping %s: %s", path, e)
            continue
        results[str(path)] = faces

        if "print" in modes:
            print_faces(str(path), faces)

    # 4. Write outputs
    save_dir = Path(config.output.save_path)
    try:
        if "save_json" in modes:
            save_json(results, str(save_dir / "detections.json"))
        if "save_csv" in modes:
            save_csv(results, str(save_dir / "detections.csv"))
    except OSError as e:
        logger.error("Failed to write output: %s", e)
        return 1

    logger.info(
        "Processing finished. Images: %d. Faces: %d.",
        len(results), sum(len(f) for f in results.values()),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
