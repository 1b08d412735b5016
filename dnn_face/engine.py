"""
Inference engines for the face detector.

FaceDetector only needs something with a forward(blob) method that
returns the (loc, conf, iou) output tensors. OpenCVEngine is the
default, backed by cv2.dnn; tests and other runtimes can pass any
object satisfying InferenceEngine.
"""

import logging
from typing import Protocol, Tuple

import cv2
import numpy as np

from dnn_face.config import ModelConfig
from dnn_face.model_loader import load_model

logger = logging.getLogger(__name__)

RawOutputs = Tuple[np.ndarray, np.ndarray, np.ndarray]


class InferenceEngine(Protocol):
    """Runs the network on one input blob."""

    def forward(self, blob: np.ndarray) -> RawOutputs:
        """Return (loc, conf, iou), row-aligned to the priors."""
        ...


class OpenCVEngine:
    """InferenceEngine backed by a cv2.dnn.Net."""

    OUTPUT_NAMES = ("loc", "conf", "iou")

    def __init__(self, net: cv2.dnn.Net) -> None:
        self._net = net

    @classmethod
    def from_config(cls, config: ModelConfig) -> "OpenCVEngine":
        """Load the model described by config.

        Raises:
            FileNotFoundError: If the model file is missing.
            RuntimeError: If OpenCV cannot load or configure the model.
        """
        return cls(load_model(config))

    def forward(self, blob: np.ndarray) -> RawOutputs:
        self._net.setInput(blob)
        loc, conf, iou = self._net.forward(list(self.OUTPUT_NAMES))
        return loc, conf, iou
