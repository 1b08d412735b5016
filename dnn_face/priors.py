"""
Anchor prior generation for the face detection network.

Responsibility:
    Build the fixed list of reference boxes the network's regression
    output is expressed against, from the network input size alone.

Layout:
    The network has four detection heads on feature maps with strides
    8, 16, 32 and 64. Each cell of a head's feature map hosts one prior
    per minimum anchor size of that head. Priors are emitted head by
    head, cells in row-major order, sizes in ascending order. Row i of
    every network output tensor corresponds to prior i, so this order
    must never change.

Hard-coded:
    - Minimum anchor sizes and strides (tied to the trained weights).
"""

import logging
from typing import List, Tuple

import numpy as np

logger = logging.getLogger(__name__)

MIN_SIZES: Tuple[Tuple[float, ...], ...] = (
    (10.0, 16.0, 24.0),
    (32.0, 48.0),
    (64.0, 96.0),
    (128.0, 192.0, 256.0),
)
STEPS: Tuple[int, ...] = (8, 16, 32, 64)


def feature_map_sizes(width: int, height: int) -> List[Tuple[int, int]]:
    """Return (width, height) of the four detection feature maps.

    The backbone halves the resolution with ceiling on the first
    downsampling and floor on every later one. The first two maps
    carry no detection head.
    """
    if width <= 0 or height <= 0:
        raise ValueError(
            f"Input size must be positive, got ({width}, {height})."
        )

    w = (width + 1) // 2 // 2
    h = (height + 1) // 2 // 2

    sizes = []
    for _ in STEPS:
        w, h = w // 2, h // 2
        sizes.append((w, h))
    return sizes


def prior_count(width: int, height: int) -> int:
    """Number of priors generate_priors() returns for this input size."""
    return sum(
        w * h * len(min_sizes)
        for (w, h), min_sizes in zip(feature_map_sizes(width, height), MIN_SIZES)
    )


def generate_priors(width: int, height: int) -> np.ndarray:
    """Generate anchor priors for a network input of the given size.

    Args:
        width: Network input width in pixels.
        height: Network input height in pixels.

    Returns:
        A read-only float32 array of shape (N, 4). Each row is
        [cx, cy, sx, sy], all normalized by the input size.

    Raises:
        ValueError: If width or height is not positive.
    """
    stages = []
    for (fw, fh), min_sizes, step in zip(feature_map_sizes(width, height), MIN_SIZES, STEPS):
        rows, cols = np.meshgrid(np.arange(fh), np.arange(fw), indexing="ij")
        sizes = np.asarray(min_sizes, dtype=np.float64)

        stage = np.empty((fh, fw, len(sizes), 4), dtype=np.float32)
        stage[..., 0] = ((cols + 0.5) * step / width)[..., np.newaxis]
        stage[..., 1] = ((rows + 0.5) * step / height)[..., np.newaxis]
        stage[..., 2] = sizes / width
        stage[..., 3] = sizes / height
        stages.append(stage.reshape(-1, 4))

    priors = np.concatenate(stages, axis=0)
    priors.setflags(write=False)

    logger.debug("Generated %d priors for input size %dx%d", len(priors), width, height)
    return priors
