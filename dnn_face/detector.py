"""
FaceDetector — the single public API for face detection.

Public contract:
    FaceDetector.detect(frame: np.ndarray) -> list[Face]

Pipeline:
    frame -> blob (preprocessor) -> engine.forward -> decode against
    priors -> NMS -> Face list

Constraints:
    - Input must be a BGR numpy array whose size equals the configured
      input size.
    - Priors are generated once at construction (and again only on
      set_input_size). They are read-only, so concurrent detect() calls
      on one instance are safe as long as set_input_size() is not called
      at the same time.

Non-goals:
    - No file reading, camera access, or I/O of any kind.
    - No visualization or output writing.
    - No tracking or temporal state.
"""

import dataclasses
import logging
from typing import List, Optional, Tuple

import numpy as np

from dnn_face.config import AppConfig, DetectionConfig, ModelConfig, load_config, validate_config
from dnn_face.decoder import decode
from dnn_face.engine import InferenceEngine, OpenCVEngine
from dnn_face.face import Face, faces_from_arrays
from dnn_face.preprocessor import preprocess
from dnn_face.priors import generate_priors
from dnn_face.suppressor import suppress

logger = logging.getLogger(__name__)


class FaceDetector:
    """Anchor-based face detector with landmark output.

    Usage:
        detector = FaceDetector()                          # Defaults / env
        detector = FaceDetector(config=my_config)          # Custom config
        detector = FaceDetector.create("yunet.onnx", 640, 480)
        faces = detector.detect(frame)                     # BGR numpy array

    The constructor loads the model and generates priors once. Each
    detect() call only runs preprocessing, inference and post-processing.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        engine: Optional[InferenceEngine] = None,
    ) -> None:
        """Initialize the detector.

        Args:
            config: Application configuration. If None, defaults plus
                    environment overrides are used.
            engine: Inference engine. If None, the model in config.model
                    is loaded with OpenCV DNN.

        Raises:
            FileNotFoundError: If the model file is missing.
            RuntimeError: If OpenCV cannot load or configure the model.
            ValueError: If configuration values are invalid.
        """
        if config is None:
            config = load_config()
        else:
            validate_config(config)

        self._config = config
        self._engine = engine if engine is not None else OpenCVEngine.from_config(config.model)
        self._input_size = tuple(config.model.input_size)
        self._priors = generate_priors(*self._input_size)

        logger.info(
            "FaceDetector initialized (input=%dx%d, priors=%d, score_threshold=%.2f, "
            "nms_threshold=%.2f, top_k=%d)",
            self._input_size[0],
            self._input_size[1],
            len(self._priors),
            config.detection.score_threshold,
            config.detection.nms_threshold,
            config.detection.top_k,
        )

    @classmethod
    def create(
        cls,
        model_path: str,
        input_width: int,
        input_height: int,
        score_threshold: float = 0.9,
        nms_threshold: float = 0.3,
        top_k: int = 5000,
        backend: str = "default",
        target: str = "default",
        engine: Optional[InferenceEngine] = None,
    ) -> "FaceDetector":
        """Build a detector from explicit parameters instead of a config file."""
        config = AppConfig(
            model=ModelConfig(
                model_path=model_path,
                input_size=(input_width, input_height),
                backend=backend,
                target=target,
            ),
            detection=DetectionConfig(
                score_threshold=score_threshold,
                nms_threshold=nms_threshold,
                top_k=top_k,
            ),
        )
        return cls(config=config, engine=engine)

    def detect(self, frame: np.ndarray) -> List[Face]:
        """Detect faces in a single BGR frame.

        Args:
            frame: A BGR image with shape (H, W, 3) matching input_size.

        Returns:
            Faces sorted by score (descending). Empty if none survive.

        Raises:
            TypeError: If frame is not a numpy ndarray.
            ValueError: If frame is empty or of the wrong size.
            ShapeMismatchError: If the network outputs do not match the priors.
        """
        blob = preprocess(frame, self._input_size)
        loc, conf, iou = self._engine.forward(blob)
        return self.postprocess(loc, conf, iou)

    def postprocess(self, loc: np.ndarray, conf: np.ndarray, iou: np.ndarray) -> List[Face]:
        """Turn raw network outputs into faces.

        Raises:
            ShapeMismatchError: If the outputs do not have one row per prior.
        """
        width, height = self._input_size
        candidates = decode(self._priors, loc, conf, iou, width, height)

        detection = self._config.detection
        kept = suppress(
            candidates,
            score_threshold=detection.score_threshold,
            iou_threshold=detection.nms_threshold,
            top_k=detection.top_k,
        )

        return faces_from_arrays(kept.boxes, kept.landmarks, kept.scores)

    def set_input_size(self, width: int, height: int) -> None:
        """Change the network input size and regenerate priors.

        Not safe to call while other threads are inside detect().
        """
        input_size = (int(width), int(height))
        if input_size == self._input_size:
            return

        model = dataclasses.replace(self._config.model, input_size=input_size)
        config = validate_config(dataclasses.replace(self._config, model=model))

        self._priors = generate_priors(*input_size)
        self._input_size = input_size
        self._config = config
        logger.info(
            "Input size set to %dx%d (%d priors)", width, height, len(self._priors)
        )

    @property
    def config(self) -> AppConfig:
        """Return the active configuration (read-only)."""
        return self._config

    @property
    def input_size(self) -> Tuple[int, int]:
        return self._input_size

    @property
    def priors(self) -> np.ndarray:
        """The read-only (N, 4) prior array for the current input size."""
        return self._priors
