"""
Model loading for the face detector.

Responsibility:
    Load the ONNX face detection network with OpenCV DNN, configure the
    compute backend and target, and return a ready-to-infer
    cv2.dnn.Net object.

Non-goals:
    - No preprocessing, inference, or decoding logic.
    - No automatic model downloading.
    - No fallback to alternative models or backends.

Failure behavior:
    - A missing model file raises FileNotFoundError with the exact
      missing path.
    - A model OpenCV cannot parse, or a backend/target OpenCV rejects,
      raises RuntimeError.
"""

import logging
from pathlib import Path

import cv2

from dnn_face.config import ModelConfig, get_project_root

logger = logging.getLogger(__name__)

# 'default' is absent on purpose: the net keeps whatever OpenCV picks.
_BACKENDS = {
    "opencv": "DNN_BACKEND_OPENCV",
    "inference_engine": "DNN_BACKEND_INFERENCE_ENGINE",
    "cuda": "DNN_BACKEND_CUDA",
    "vkcom": "DNN_BACKEND_VKCOM",
    "halide": "DNN_BACKEND_HALIDE",
}

_TARGETS = {
    "cpu": "DNN_TARGET_CPU",
    "opencl": "DNN_TARGET_OPENCL",
    "opencl_fp16": "DNN_TARGET_OPENCL_FP16",
    "myriad": "DNN_TARGET_MYRIAD",
    "vulkan": "DNN_TARGET_VULKAN",
    "cuda": "DNN_TARGET_CUDA",
    "cuda_fp16": "DNN_TARGET_CUDA_FP16",
}


def resolve_model_path(model_path: str) -> Path:
    """Resolve a model path against the project root if relative."""
    path = Path(model_path)
    if not path.is_absolute():
        path = get_project_root() / path
    return path


def _dnn_constant(table: dict, name: str, kind: str) -> int:
    """Look up a cv2.dnn enum value by our config name."""
    try:
        return getattr(cv2.dnn, table[name])
    except KeyError:
        raise ValueError(f"Unknown DNN {kind}: '{name}'.") from None
    except AttributeError as e:
        raise RuntimeError(
            f"DNN {kind} '{name}' is not available in this OpenCV build "
            f"({cv2.__version__})."
        ) from e


def load_model(config: ModelConfig) -> cv2.dnn.Net:
    """Load and configure the face detection network.

    Args:
        config: ModelConfig containing the model path and backend/target.

    Returns:
        A configured cv2.dnn.Net ready for inference.

    Raises:
        FileNotFoundError: If the model file does not exist.
        RuntimeError: If OpenCV cannot read the model or apply the
            requested backend/target.
    """
    model = resolve_model_path(config.model_path)

    if not model.is_file():
        raise FileNotFoundError(
            f"Face detection model not found.\n"
            f"  Expected: {model}\n"
            f"  Download the ONNX model and place it at the path above,\n"
            f"  or update 'model.model_path' in your config."
        )

    logger.info("Loading model: %s", model)
    try:
        net = cv2.dnn.readNet(str(model))
    except cv2.error as e:
        raise RuntimeError(f"OpenCV failed to read model {model}: {e}") from e

    if net.empty():
        raise RuntimeError(f"OpenCV returned an empty network for {model}.")

    try:
        if config.backend != "default":
            logger.info("Setting DNN backend: %s", config.backend)
            net.setPreferableBackend(_dnn_constant(_BACKENDS, config.backend, "backend"))
        if config.target != "default":
            logger.info("Setting DNN target: %s", config.target)
            net.setPreferableTarget(_dnn_constant(_TARGETS, config.target, "target"))
    except cv2.error as e:
        raise RuntimeError(
            f"Failed to set backend '{config.backend}' / target '{config.target}'. "
            f"Ensure OpenCV was built with support for it.\n"
            f"  OpenCV error: {e}"
        ) from e

    logger.info("Model loaded successfully.")
    return net
