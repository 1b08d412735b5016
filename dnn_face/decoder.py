"""
Decoding of raw network output into face candidates.

Responsibility:
    Combine each anchor prior with its row of regression deltas to get
    an absolute bounding box and five landmarks, and fuse the
    classification and IoU-quality heads into one score.

Non-goals:
    - No score thresholding (the suppressor does that).
    - No inference or prior generation.

Hard-coded:
    - Output tensor layout: loc (N, 14), conf (N, 2), iou (N, 1).
      loc columns are [dx, dy, dw, dh] followed by five (x, y) landmark
      deltas: right eye, left eye, nose tip, right mouth corner, left
      mouth corner. conf columns are [background, face].
    - Variances (0.1, 0.2). Box height uses the second variance while
      width uses the first; the trained weights depend on this.
"""

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

VARIANCES = (0.1, 0.2)

LOC_COLUMNS = 14
CONF_COLUMNS = 2
NUM_LANDMARKS = 5


class ShapeMismatchError(ValueError):
    """Raised when output tensor rows do not line up with the priors.

    This means the priors were generated for a different input size
    than the network ran at, or the model has a different head layout.
    """


@dataclass(frozen=True)
class Candidates:
    """Row-aligned decoded candidates.

    Attributes:
        boxes: (N, 4) array of [x, y, w, h] in pixels.
        landmarks: (N, 5, 2) array of landmark points in pixels.
        scores: (N,) array of combined scores.
    """

    boxes: np.ndarray
    landmarks: np.ndarray
    scores: np.ndarray

    def __len__(self) -> int:
        return int(self.boxes.shape[0])

    def take(self, indices) -> "Candidates":
        """Return the candidates at the given indices, in that order."""
        indices = np.asarray(indices, dtype=np.intp)
        return Candidates(
            boxes=self.boxes[indices],
            landmarks=self.landmarks[indices],
            scores=self.scores[indices],
        )


def _as_rows(tensor: np.ndarray, name: str, num_priors: int, columns: int) -> np.ndarray:
    """Flatten a network output to (num_priors, columns), checking its size."""
    tensor = np.asarray(tensor, dtype=np.float32)
    expected = num_priors * columns
    if tensor.size != expected:
        raise ShapeMismatchError(
            f"Output '{name}' has {tensor.size} values (shape {tensor.shape}), "
            f"expected {num_priors} rows x {columns} = {expected}. "
            f"Priors and network input size are out of sync."
        )
    return tensor.reshape(num_priors, columns)


def compute_scores(conf: np.ndarray, iou: np.ndarray) -> np.ndarray:
    """Fuse face probability and IoU quality: sqrt(p_face * clip(iou, 0, 1)).

    Args:
        conf: (N, 2) class scores, column 1 is the face probability.
        iou: (N,) or (N, 1) IoU-quality estimates.
    """
    iou = np.clip(np.asarray(iou, dtype=np.float32).reshape(-1), 0.0, 1.0)
    return np.sqrt(np.asarray(conf, dtype=np.float32)[:, 1] * iou)


def decode(
    priors: np.ndarray,
    loc: np.ndarray,
    conf: np.ndarray,
    iou: np.ndarray,
    width: int,
    height: int,
) -> Candidates:
    """Decode raw network outputs against their priors.

    Args:
        priors: (N, 4) priors as [cx, cy, sx, sy], normalized.
        loc: Regression output with N * 14 values.
        conf: Classification output with N * 2 values.
        iou: IoU-quality output with N values.
        width: Network input width in pixels.
        height: Network input height in pixels.

    Returns:
        Candidates with one entry per prior, unfiltered.

    Raises:
        ShapeMismatchError: If any output does not have exactly one row
            per prior.
    """
    num_priors = priors.shape[0]
    loc = _as_rows(loc, "loc", num_priors, LOC_COLUMNS)
    conf = _as_rows(conf, "conf", num_priors, CONF_COLUMNS)
    iou = _as_rows(iou, "iou", num_priors, 1)

    scores = compute_scores(conf, iou)

    centers = priors[:, 0:2]
    extents = priors[:, 2:4]
    scale = np.array([width, height], dtype=np.float32)

    cxcy = (centers + loc[:, 0:2] * VARIANCES[0] * extents) * scale
    w = extents[:, 0] * np.exp(loc[:, 2] * VARIANCES[0]) * width
    h = extents[:, 1] * np.exp(loc[:, 3] * VARIANCES[1]) * height

    boxes = np.stack([cxcy[:, 0] - w / 2, cxcy[:, 1] - h / 2, w, h], axis=1)

    deltas = loc[:, 4:].reshape(num_priors, NUM_LANDMARKS, 2)
    landmarks = (
        centers[:, np.newaxis, :] + deltas * VARIANCES[0] * extents[:, np.newaxis, :]
    ) * scale

    logger.debug("Decoded %d candidates", num_priors)
    return Candidates(
        boxes=boxes.astype(np.float32, copy=False),
        landmarks=landmarks.astype(np.float32, copy=False),
        scores=scores,
    )
